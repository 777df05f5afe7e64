# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Logger implementation for armature.

This module provides the default logger implementation based on Python's
standard logging module, enhanced with structured logging capabilities.
"""

from __future__ import annotations

import datetime
import enum
import json
import logging
import sys
import threading
import uuid
from collections.abc import MutableMapping
from logging import StreamHandler
from typing import Any

from armature.logging.config import LoggingSettings
from armature.logging.level import LogLevel

ROOT_LOGGER_NAME = "armature"

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

_configure_lock = threading.Lock()
_configured = False


class StructuredFormatter(logging.Formatter):
    """Formatter that supports structured logging with context data."""

    def __init__(
        self,
        json_format: bool = False,
        include_timestamp: bool = True,
        include_level: bool = True,
    ) -> None:
        """Initialize a structured formatter.

        Args:
            json_format: Whether to format logs as JSON
            include_timestamp: Whether to include timestamps in logs
            include_level: Whether to include log level in logs
        """
        self.json_format = json_format
        self.include_timestamp = include_timestamp
        self.include_level = include_level

        fmt = "%(name)s: %(message)s"
        if include_timestamp:
            fmt = "%(asctime)s " + fmt
        if include_level and not json_format:
            fmt = fmt + " [%(levelname)s]"

        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record with structured data.

        Args:
            record: The log record to format

        Returns:
            Formatted log string
        """
        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }

        if self.json_format:
            return self._format_json(record, extra)
        message = super().format(record)
        return self._format_text(message, extra)

    def _format_json(self, record: logging.LogRecord, extra: dict[str, Any]) -> str:
        log_data: dict[str, Any] = {
            "message": record.getMessage(),
            "logger": record.name,
            **extra,
        }
        if self.include_level:
            log_data["level"] = record.levelname
        if self.include_timestamp:
            log_data["timestamp"] = self.formatTime(record, self.datefmt)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
            log_data["error"] = str(record.exc_info[1])
        return json.dumps(log_data, cls=ArmatureJsonEncoder, ensure_ascii=False)

    def _format_text(self, message: str, extra: dict[str, Any]) -> str:
        if not extra:
            return message
        ctx_str = " ".join(f"{k}={self._format_value(v)}" for k, v in extra.items())
        return f"{message} {ctx_str}"

    def _format_value(self, value: Any) -> str:
        """Format a value for text output."""
        if isinstance(value, str):
            # Quote strings that contain spaces
            if " " in value:
                return f'"{value}"'
            return value
        if isinstance(value, datetime.datetime | datetime.date):
            return value.isoformat()
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, enum.Enum):
            return value.name
        if isinstance(value, BaseException):
            return str(value)
        try:
            return json.dumps(value, cls=ArmatureJsonEncoder)
        except (TypeError, ValueError):
            return str(value)


class ArmatureJsonEncoder(json.JSONEncoder):
    """JSON encoder with string fallbacks for values that are not serializable."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime.datetime, datetime.date)):
            return obj.isoformat()
        if isinstance(obj, uuid.UUID):
            return str(obj)
        if isinstance(obj, enum.Enum):
            return obj.value
        if isinstance(obj, type):
            return f"{obj.__module__}.{obj.__qualname__}"
        if hasattr(obj, "model_dump"):  # Pydantic v2 models
            return obj.model_dump()
        return str(obj)


class StructuredLogger(logging.LoggerAdapter):
    """Logger adapter that carries bound context into every record."""

    def __init__(
        self, logger: logging.Logger, extra: dict[str, Any] | None = None
    ) -> None:
        super().__init__(logger, extra or {})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def bind(self, **context: Any) -> StructuredLogger:
        """Create a new logger with additional bound context values."""
        return StructuredLogger(self.logger, {**self.extra, **context})

    def set_level(self, level: LogLevel) -> None:
        self.logger.setLevel(level.to_stdlib_level())


def configure_logging(
    settings: LoggingSettings | None = None, *, force: bool = False
) -> logging.Logger:
    """Attach handlers to the package root logger.

    Idempotent unless ``force`` is set; every armature module logger is a
    child of the root logger configured here.

    Args:
        settings: Logging settings, loaded from the environment when omitted
        force: Reconfigure even if configuration already happened

    Returns:
        The package root logger
    """
    global _configured
    root = logging.getLogger(ROOT_LOGGER_NAME)
    with _configure_lock:
        if _configured and not force:
            return root
        settings = settings or LoggingSettings.load()
        root.setLevel(settings.level)

        for handler in list(root.handlers):
            root.removeHandler(handler)

        formatter = StructuredFormatter(
            json_format=settings.json_format,
            include_timestamp=settings.include_timestamp,
            include_level=settings.include_level,
        )
        if settings.console_enabled:
            console = StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            root.addHandler(console)
        if settings.file_enabled and settings.file_path:
            file_handler = logging.FileHandler(settings.file_path)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        root.propagate = settings.propagate
        _configured = True
    return root


def get_logger(name: str, level: LogLevel | None = None) -> StructuredLogger:
    """Get a logger for the specified name.

    Args:
        name: Logger name (typically __name__)
        level: Optional log level override

    Returns:
        Configured logger instance
    """
    configure_logging()
    logger = StructuredLogger(logging.getLogger(name))
    if level is not None:
        logger.set_level(level)
    return logger
