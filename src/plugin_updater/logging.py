"""
Structured logging for the plugin updater.

This module provides JSON-formatted structured logging for the
plugin_updater package.

Log lines go to a console stream, an optional append-only file, or both.
The file is meant for unattended runs (cron, start scripts) where console
output is discarded.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from plugin_updater.config import LoggingConfig

ROOT_LOGGER_NAME = "plugin_updater"

# Default log format for plain text output
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_RECORD_KEYS = frozenset(
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
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


class JSONFormatter(logging.Formatter):
    """
    A logging formatter that outputs log records as JSON objects.

    Each log record is formatted as a JSON object with consistent fields:
    - timestamp: ISO 8601 formatted timestamp in UTC
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - logger: Logger name
    - message: Log message
    - Additional fields from the record's extra dict
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted string representation of the log record.
        """
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in set(record.__dict__.keys()) - _RESERVED_RECORD_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


_STREAMS = {"stdout": lambda: sys.stdout, "stderr": lambda: sys.stderr}


def setup_logging(
    config: LoggingConfig | None = None,
    *,
    level: str = "INFO",
    json_format: bool = True,
    stream: str = "stdout",
    file: str | Path | None = None,
) -> logging.Logger:
    """
    Configure the plugin_updater logger.

    Args:
        config: Optional LoggingConfig object with logging settings.
            If provided, overrides the keyword parameters.
        level: Log level if no config is provided.
        json_format: Whether to use JSON formatting (default: True).
        stream: "stdout", "stderr" or "none".
        file: Optional path of a log file to append to.

    Returns:
        The package logger.

    Example:
        >>> from plugin_updater.logging import setup_logging
        >>> logger = setup_logging(level="DEBUG", json_format=False)
        >>> logger.info("Updater ready", extra={"resource_id": 12345})
    """
    if config is not None:
        level = config.level
        json_format = config.json_format
        stream = config.stream
        file = config.file

    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    handlers: list[logging.Handler] = []
    if stream in _STREAMS:
        handlers.append(logging.StreamHandler(_STREAMS[stream]()))
    if file:
        handlers.append(logging.FileHandler(file, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(log_level)
        if json_format:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        logger.addHandler(handler)

    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: The name for the logger, typically __name__ of the calling module.
            The "plugin_updater." prefix is added automatically if not present.

    Returns:
        A logger that is a child of the package logger.
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
