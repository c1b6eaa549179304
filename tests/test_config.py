from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from dealer_credit.config import Settings, load_settings
from dealer_credit.logging_config import configure_logging


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("LOG_LEVEL", "LOG_FILE", "HOST", "PORT"):
        monkeypatch.delenv(f"DEALER_CREDIT_{name}", raising=False)


def test_defaults():
    assert load_settings() == Settings()


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DEALER_CREDIT_LOG_LEVEL", "debug")
    monkeypatch.setenv("DEALER_CREDIT_HOST", "0.0.0.0")
    monkeypatch.setenv("DEALER_CREDIT_PORT", "9100")
    monkeypatch.setenv("DEALER_CREDIT_LOG_FILE", "  ")
    s = load_settings()
    assert s.log_level == "DEBUG"
    assert s.host == "0.0.0.0"
    assert s.port == 9100
    assert s.log_file is None


@pytest.mark.parametrize("raw", ["eighty", "70000"])
def test_bad_port(monkeypatch, raw):
    monkeypatch.setenv("DEALER_CREDIT_PORT", raw)
    with pytest.raises(ValidationError, match="port"):
        load_settings()


def test_configure_logging_writes_file(tmp_path):
    log_path = tmp_path / "logs" / "credit.log"
    configure_logging("debug", str(log_path))
    logging.getLogger("dealer_credit.test").debug("hello")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "hello" in log_path.read_text(encoding="utf-8")
    configure_logging("INFO")


def test_blank_values_keep_defaults(monkeypatch):
    monkeypatch.setenv("DEALER_CREDIT_HOST", "   ")
    monkeypatch.setenv("DEALER_CREDIT_PORT", "")
    s = load_settings()
    assert s.host == "127.0.0.1"
    assert s.port == 8000


def test_validation_error_is_a_value_error():
    assert issubclass(ValidationError, ValueError)
