"""Logging setup for neo-sessions.

Levels and formats come from environment variables so services embedding the
session manager control its output without code changes:

- ``LOG_LEVEL``: explicit level, overrides ``LOG_VERBOSITY``
- ``LOG_VERBOSITY``: QUIET, NORMAL, VERBOSE or DEBUG
- ``LOG_FORMAT``: simple, detailed or json
- ``ENABLE_SQL_LOGGING``: let asyncpg log below WARNING
- ``ENABLE_STORE_LOGGING``: let the Redis/PostgreSQL adapters log below WARNING
"""

import logging
import logging.config
import os
from enum import Enum
from typing import Any, Dict


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogVerbosity(str, Enum):
    """Log verbosity modes."""
    QUIET = "QUIET"      # errors only
    NORMAL = "NORMAL"    # warnings and above
    VERBOSE = "VERBOSE"  # info
    DEBUG = "DEBUG"


class LogFormat(str, Enum):
    """Log format options."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


_FORMATS = {
    LogFormat.SIMPLE: "%(asctime)s - %(levelname)s - %(message)s",
    LogFormat.DETAILED: "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
    LogFormat.JSON: '{"time":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}',
}

_VERBOSITY_LEVELS = {
    LogVerbosity.QUIET: LogLevel.ERROR,
    LogVerbosity.NORMAL: LogLevel.WARNING,
    LogVerbosity.VERBOSE: LogLevel.INFO,
    LogVerbosity.DEBUG: LogLevel.DEBUG,
}


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


def get_log_level_from_verbosity(verbosity: str) -> str:
    """Map verbosity mode to log level. Unknown modes map to WARNING."""
    try:
        return _VERBOSITY_LEVELS[LogVerbosity(verbosity.upper())].value
    except ValueError:
        return LogLevel.WARNING.value


class LoggingConfig:
    """Builds and applies the package logging configuration."""

    # Chatty dependencies kept at ERROR
    ERROR_ONLY_MODULES = ["asyncio", "httpx", "httpcore"]

    # Per-call adapter logging, quiet unless ENABLE_STORE_LOGGING is set
    STORE_MODULES = ["neo_sessions.sessions.adapters"]

    @staticmethod
    def _resolve_level() -> str:
        explicit = (os.getenv("LOG_LEVEL") or "").upper()
        if explicit in LogLevel.__members__:
            return explicit
        return get_log_level_from_verbosity(os.getenv("LOG_VERBOSITY", "NORMAL"))

    @staticmethod
    def _resolve_format() -> str:
        try:
            return _FORMATS[LogFormat(os.getenv("LOG_FORMAT", LogFormat.SIMPLE.value).lower())]
        except ValueError:
            return _FORMATS[LogFormat.SIMPLE]

    @staticmethod
    def _logger_entry(level: str) -> Dict[str, Any]:
        return {"level": level, "handlers": ["console"], "propagate": False}

    @classmethod
    def build(cls) -> Dict[str, Any]:
        """Build a ``dictConfig`` mapping from the environment."""
        level = cls._resolve_level()
        loggers = {module: cls._logger_entry("ERROR") for module in cls.ERROR_ONLY_MODULES}

        if not _env_flag("ENABLE_SQL_LOGGING"):
            loggers["asyncpg"] = cls._logger_entry("WARNING")

        if not _env_flag("ENABLE_STORE_LOGGING") and level != LogLevel.DEBUG.value:
            for module in cls.STORE_MODULES:
                loggers[module] = cls._logger_entry("WARNING")

        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": cls._resolve_format(), "datefmt": "%Y-%m-%d %H:%M:%S"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": loggers,
        }

    @classmethod
    def configure(cls) -> None:
        """Apply the configuration built from the environment."""
        config = cls.build()
        logging.config.dictConfig(config)
        logging.getLogger(__name__).debug(f"Logging configured: level={config['root']['level']}")

    @classmethod
    def set_module_level(cls, module_name: str, level: str) -> None:
        """Set log level for a specific module."""
        logging.getLogger(module_name).setLevel(getattr(logging, level.upper()))


def setup_logging() -> None:
    """Configure logging from environment variables. Runs on package import."""
    LoggingConfig.configure()


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module (usually ``__name__``)."""
    return logging.getLogger(name)
