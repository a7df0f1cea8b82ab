"""
Tests for environment config accessors, ClientConfig and logger setup.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from exactrest.utils import config
from exactrest.utils.config import ClientConfig
from exactrest.utils.logger import get_logger, setup_logger

_load_config = config.load_config


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "load_config", lambda: None)
    for key in ("EXACT_BASE_URL", "EXACT_USER_AGENT", "EXACT_DEBUG", "EXACT_TIMEOUT_SECONDS", "EXACT_LOG_FILE"):
        monkeypatch.delenv(key, raising=False)


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXACT_BASE_URL", "https://start.exactonline.nl/api/v1/1")
    cfg = ClientConfig.from_env()
    assert cfg.base_url == "https://start.exactonline.nl/api/v1/1"
    assert cfg.user_agent == config.DEFAULT_USER_AGENT
    assert cfg.debug is False
    assert cfg.timeout == config.DEFAULT_TIMEOUT_SECONDS
    assert cfg.on_request_completed is None


def test_from_env_reads_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXACT_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("EXACT_USER_AGENT", "agent/9")
    monkeypatch.setenv("EXACT_DEBUG", "yes")
    monkeypatch.setenv("EXACT_TIMEOUT_SECONDS", "4.5")
    cfg = ClientConfig.from_env()
    assert (cfg.user_agent, cfg.debug, cfg.timeout) == ("agent/9", True, 4.5)


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXACT_DEBUG", "true")
    cfg = ClientConfig.from_env(base_url="https://other.example.com", debug=False)
    assert cfg.base_url == "https://other.example.com"
    assert cfg.debug is False


def test_from_env_requires_base_url() -> None:
    with pytest.raises(ValueError, match="EXACT_BASE_URL"):
        ClientConfig.from_env()


@pytest.mark.parametrize("raw, expected", [("1", True), ("ON", True), ("off", False), ("maybe", False), ("", False)])
def test_debug_flag_parsing(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("EXACT_DEBUG", raw)
    assert config.debug_enabled() is expected


@pytest.mark.parametrize("raw", ["abc", "-3", "0"])
def test_timeout_falls_back_on_bad_value(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("EXACT_TIMEOUT_SECONDS", raw)
    assert config.timeout_seconds() == config.DEFAULT_TIMEOUT_SECONDS


def test_log_file(monkeypatch: pytest.MonkeyPatch) -> None:
    assert config.log_file() is None
    monkeypatch.setenv("EXACT_LOG_FILE", "/tmp/exactrest.log")
    assert config.log_file() == Path("/tmp/exactrest.log")


def test_load_config_reads_dotenv_at_project_root(monkeypatch: pytest.MonkeyPatch) -> None:
    loader = MagicMock()
    monkeypatch.setattr(config, "load_dotenv", loader)
    _load_config()
    loader.assert_called_once_with(Path(config.__file__).resolve().parents[2] / ".env", override=True)


def test_config_is_immutable() -> None:
    cfg = ClientConfig(base_url="https://api.example.com")
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.debug = True  # type: ignore[misc]
    loud = cfg.with_options(debug=True)
    assert loud.debug is True
    assert cfg.debug is False
    assert loud.base_url == cfg.base_url


def test_setup_logger_idempotent(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "rest.log"
    log = setup_logger("exactrest.test_setup", level=logging.DEBUG, log_file=log_path)
    again = setup_logger("exactrest.test_setup", level=logging.DEBUG, log_file=log_path)
    assert log is again
    assert len(log.handlers) == 2
    log.debug("hello from test")
    for h in log.handlers:
        h.flush()
    assert "hello from test" in log_path.read_text(encoding="utf-8")
    assert get_logger("exactrest.test_setup") is log
    for h in list(log.handlers):
        h.close()
        log.removeHandler(h)


def test_setup_logger_reads_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    log_path = tmp_path / "env.log"
    monkeypatch.setenv("EXACT_DEBUG", "true")
    monkeypatch.setenv("EXACT_LOG_FILE", str(log_path))
    log = setup_logger("exactrest.test_env")
    try:
        assert log.level == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in log.handlers)
    finally:
        for h in list(log.handlers):
            h.close()
            log.removeHandler(h)


def test_setup_logger_defaults_to_info() -> None:
    log = setup_logger("exactrest.test_info")
    try:
        assert log.level == logging.INFO
        assert len(log.handlers) == 1
    finally:
        for h in list(log.handlers):
            log.removeHandler(h)
