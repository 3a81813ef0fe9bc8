# infrastructure/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

from domain.exceptions import ValidationError

# project root .env, same place the launcher scripts run from
DEFAULT_ENV_PATH = Path(__file__).parent.parent.parent / ".env"

ENV_PREFIX = "RESTORIENT_"


@dataclass(frozen=True)
class Settings:
    workspace_path: Path = Path("workspace.json")
    http_timeout_sec: float = 30.0
    log_level: str = "INFO"
    log_json: bool = False
    user_agent: str = "RestOrient/0.1"
    verify_tls: bool = True

    @property
    def base_headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent} if self.user_agent else {}


def _as_bool(key: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValidationError(f"{key} must be a boolean, got: {raw!r}")


def _as_float(key: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise ValidationError(f"{key} must be a number, got: {raw!r}") from e
    if value <= 0:
        raise ValidationError(f"{key} must be positive, got: {raw!r}")
    return value


def load_settings(
    env_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Read RESTORIENT_* values. Process environment wins over the .env file.
    """
    path = env_path or DEFAULT_ENV_PATH
    values: Dict[str, str] = {}
    if path.exists():
        values.update({k: v for k, v in dotenv_values(path).items() if v is not None})
    values.update(environ if environ is not None else os.environ)

    def get(name: str) -> Optional[str]:
        raw = values.get(ENV_PREFIX + name)
        if raw is None or not raw.strip():
            return None
        return raw.strip()

    defaults = Settings()
    workspace = get("WORKSPACE")
    timeout = get("HTTP_TIMEOUT_SEC")
    log_level = get("LOG_LEVEL")
    log_json = get("LOG_JSON")
    user_agent = values.get(ENV_PREFIX + "USER_AGENT")
    verify = get("VERIFY_TLS")

    return Settings(
        workspace_path=Path(workspace) if workspace else defaults.workspace_path,
        http_timeout_sec=_as_float("RESTORIENT_HTTP_TIMEOUT_SEC", timeout) if timeout else defaults.http_timeout_sec,
        log_level=log_level.upper() if log_level else defaults.log_level,
        log_json=_as_bool("RESTORIENT_LOG_JSON", log_json) if log_json else defaults.log_json,
        user_agent=user_agent if user_agent is not None else defaults.user_agent,
        verify_tls=_as_bool("RESTORIENT_VERIFY_TLS", verify) if verify else defaults.verify_tls,
    )
