"""Tests for logging configuration."""

import logging

import pytest
import structlog

from snowday.logging import NOISY_LOGGERS, configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root_level = logging.getLogger().level
    noisy = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    structlog.reset_defaults()
    logging.getLogger().setLevel(root_level)
    for name, level in noisy.items():
        logging.getLogger(name).setLevel(level)


def renderer():
    return structlog.get_config()["processors"][-1]


def test_json_output():
    configure_logging("DEBUG", json=True)
    assert isinstance(renderer(), structlog.processors.JSONRenderer)
    assert logging.getLogger().level == logging.DEBUG


def test_console_output_by_default(monkeypatch):
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    configure_logging("INFO")
    assert isinstance(renderer(), structlog.dev.ConsoleRenderer)


def test_log_format_env(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "json")
    configure_logging("INFO")
    assert isinstance(renderer(), structlog.processors.JSONRenderer)


def test_noisy_loggers_held_at_warning():
    configure_logging("DEBUG", json=True)
    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING

    configure_logging("ERROR", json=True)
    assert logging.getLogger("httpx").level == logging.ERROR


def test_unknown_level_falls_back_to_info(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    configure_logging("LOUD", json=True)
    assert logging.getLogger().level == logging.INFO
