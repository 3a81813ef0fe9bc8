from __future__ import annotations

from pathlib import Path

import pytest

from domain.exceptions import ValidationError
from infrastructure.config.settings import Settings, load_settings


def test_defaults_without_env(tmp_path: Path):
    settings = load_settings(env_path=tmp_path / ".env", environ={})
    assert settings == Settings()
    assert settings.base_headers == {"User-Agent": "RestOrient/0.1"}


def test_env_file_values(tmp_path: Path):
    env = tmp_path / ".env"
    env.write_text(
        "RESTORIENT_WORKSPACE=data/ws.yaml\n"
        "RESTORIENT_HTTP_TIMEOUT_SEC=2.5\n"
        "RESTORIENT_LOG_LEVEL=debug\n"
        "RESTORIENT_VERIFY_TLS=false\n",
        encoding="utf-8",
    )

    settings = load_settings(env_path=env, environ={})

    assert settings.workspace_path == Path("data/ws.yaml")
    assert settings.http_timeout_sec == 2.5
    assert settings.log_level == "DEBUG"
    assert settings.verify_tls is False


def test_process_env_wins_over_file(tmp_path: Path):
    env = tmp_path / ".env"
    env.write_text("RESTORIENT_HTTP_TIMEOUT_SEC=2\n", encoding="utf-8")

    settings = load_settings(env_path=env, environ={"RESTORIENT_HTTP_TIMEOUT_SEC": "9"})

    assert settings.http_timeout_sec == 9.0


def test_empty_user_agent_disables_header(tmp_path: Path):
    settings = load_settings(env_path=tmp_path / ".env", environ={"RESTORIENT_USER_AGENT": ""})
    assert settings.base_headers == {}


@pytest.mark.parametrize(
    "key, value",
    [
        ("RESTORIENT_HTTP_TIMEOUT_SEC", "soon"),
        ("RESTORIENT_HTTP_TIMEOUT_SEC", "0"),
        ("RESTORIENT_VERIFY_TLS", "maybe"),
    ],
)
def test_invalid_values_raise(tmp_path: Path, key, value):
    with pytest.raises(ValidationError):
        load_settings(env_path=tmp_path / ".env", environ={key: value})
