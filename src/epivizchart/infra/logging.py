"""Structured logging for epivizchart.

Log entries are emitted as JSON objects carrying the logger name, level,
message and any keyword fields passed by the caller, so composer events
(datasource registered, chart appended) can be filtered by field.
"""

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

__all__ = ["StructuredFormatter", "StructuredLogger", "configure_logging", "get_logger"]

ROOT_LOGGER_NAME = "epivizchart"
LOG_LEVEL_ENV = "EPIVIZCHART_LOG_LEVEL"

_RESERVED_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs JSON-structured log entries."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted log string.
        """
        log_entry: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update({key: value for key, value in record.__dict__.items() if key not in _RESERVED_FIELDS})
        if record.exc_info:
            log_entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class StructuredLogger:
    """Wrapper around standard logger with keyword field support."""

    def __init__(self, logger: logging.Logger) -> None:
        """Initialize structured logger.

        Args:
            logger: The underlying Python logger instance.
        """
        self._logger = logger

    @property
    def name(self) -> str:
        """Name of the underlying logger."""
        return self._logger.name

    def _log(self, level: int, msg: str, **kwargs: Any) -> None:
        self._logger.log(level, msg, extra=dict(kwargs))

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, msg, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log error message with the active exception attached."""
        self._logger.exception(msg, extra=dict(kwargs))


def _level_from_env(default: str = "INFO") -> int:
    log_level = os.getenv(LOG_LEVEL_ENV, default).upper()
    return getattr(logging, log_level, logging.INFO)


def configure_logging(level: int | None = None, stream: TextIO | None = None) -> logging.Logger:
    """Attach a JSON handler to the package root logger.

    Calling it again replaces the previously installed handler.

    Args:
        level: Log level; defaults to EPIVIZCHART_LOG_LEVEL or INFO.
        stream: Output stream; defaults to stdout.

    Returns:
        The configured package root logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)
    root.propagate = False
    root.setLevel(level if level is not None else _level_from_env())
    return root


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        Configured StructuredLogger instance.
    """
    logger = logging.getLogger(name)

    # Loggers under the package root inherit its handler
    in_package = name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + ".")
    if not in_package and not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(_level_from_env())
    elif in_package and not logging.getLogger(ROOT_LOGGER_NAME).handlers:
        configure_logging()

    return StructuredLogger(logger)
