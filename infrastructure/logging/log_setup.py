# infrastructure/logging/log_setup.py
import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <7}</level> | "
    "<cyan>{message}</cyan> {extra}"
)


def setup_console_logging(level: str = "INFO", serialize: bool = False) -> None:
    logger.remove()
    if serialize:
        logger.add(sys.stderr, level=level.upper(), serialize=True)
        return
    logger.add(sys.stderr, level=level.upper(), format=CONSOLE_FORMAT)
