"""Configuration module for neo-sessions."""

from .logging_config import (
    LogFormat,
    LoggingConfig,
    LogVerbosity,
    get_logger,
    setup_logging,
)
from .settings import SessionSettings, get_settings

__all__ = [
    "LogFormat",
    "LoggingConfig",
    "LogVerbosity",
    "get_logger",
    "setup_logging",
    "SessionSettings",
    "get_settings",
]
