"""Tests for environment-driven logging configuration."""

import logging

import pytest

from neo_sessions.config import LoggingConfig, get_logger
from neo_sessions.config.logging_config import get_log_level_from_verbosity


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch):
    for name in ("LOG_LEVEL", "LOG_VERBOSITY", "LOG_FORMAT", "ENABLE_SQL_LOGGING", "ENABLE_STORE_LOGGING"):
        monkeypatch.delenv(name, raising=False)
    yield
    LoggingConfig.configure()


@pytest.mark.parametrize("verbosity,level", [
    ("quiet", "ERROR"),
    ("NORMAL", "WARNING"),
    ("verbose", "INFO"),
    ("debug", "DEBUG"),
    ("chatty", "WARNING"),
])
def test_verbosity_mapping(verbosity, level):
    assert get_log_level_from_verbosity(verbosity) == level


def test_explicit_level_wins_over_verbosity(monkeypatch):
    monkeypatch.setenv("LOG_VERBOSITY", "QUIET")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    LoggingConfig.configure()

    assert logging.getLogger().level == logging.DEBUG


def test_noisy_libraries_are_quieted(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    LoggingConfig.configure()

    assert logging.getLogger("httpx").level == logging.ERROR
    assert logging.getLogger("asyncpg").level == logging.WARNING


def test_sql_logging_leaves_asyncpg_alone(monkeypatch):
    logging.getLogger("asyncpg").setLevel(logging.NOTSET)
    monkeypatch.setenv("ENABLE_SQL_LOGGING", "true")

    LoggingConfig.configure()

    assert logging.getLogger("asyncpg").level == logging.NOTSET


def test_store_adapters_are_quiet_by_default(monkeypatch):
    monkeypatch.setenv("LOG_VERBOSITY", "VERBOSE")

    config = LoggingConfig.build()

    assert config["root"]["level"] == "INFO"
    assert config["loggers"]["neo_sessions.sessions.adapters"]["level"] == "WARNING"

    monkeypatch.setenv("ENABLE_STORE_LOGGING", "true")

    assert "neo_sessions.sessions.adapters" not in LoggingConfig.build()["loggers"]


def test_unknown_format_falls_back_to_simple(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "xml")

    config = LoggingConfig.build()

    assert config["formatters"]["default"]["format"] == "%(asctime)s - %(levelname)s - %(message)s"


def test_set_module_level():
    LoggingConfig.set_module_level("neo_sessions.sessions", "debug")

    assert get_logger("neo_sessions.sessions").level == logging.DEBUG
    LoggingConfig.set_module_level("neo_sessions.sessions", "notset")
