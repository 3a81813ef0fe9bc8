from __future__ import annotations

import sys

import pytest
from loguru import logger as loguru_logger

from infrastructure.logging.log_setup import setup_console_logging
from infrastructure.logging.loguru_logger import LoguruLogger


@pytest.fixture
def records():
    captured = []
    sink_id = loguru_logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    loguru_logger.remove(sink_id)


def test_event_and_fields_reach_loguru(records):
    LoguruLogger().info("dispatch.completed", status=200)

    [record] = records
    assert record["message"] == "dispatch.completed"
    assert record["level"].name == "INFO"
    assert record["extra"]["status"] == 200
    assert record["extra"]["type"] == "dispatch.completed"


def test_bind_attaches_fields_to_every_event(records):
    logger = LoguruLogger().bind(dispatch_id="d-1")

    logger.debug("a")
    logger.bind(location_id="l-1").warning("b", extra_field=1)

    assert [r["extra"]["dispatch_id"] for r in records] == ["d-1", "d-1"]
    assert records[1]["extra"]["location_id"] == "l-1"
    assert records[1]["level"].name == "WARNING"


def test_bind_does_not_mutate_parent():
    parent = LoguruLogger()
    parent.bind(x=1)
    assert parent.bound == {}


def test_setup_console_logging_applies_level(capsys):
    # Arrange
    setup_console_logging(level="warning")

    # Act
    LoguruLogger().info("hidden")
    LoguruLogger().warning("shown", code=7)

    # Assert
    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err
    loguru_logger.remove()
    loguru_logger.add(sys.stderr)
