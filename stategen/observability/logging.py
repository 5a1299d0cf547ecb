"""Logging setup for applications embedding stategen.

stategen itself only emits DEBUG records through ``logging.getLogger``
under the ``stategen`` namespace and never prints. Applications that want
to see those records call :func:`configure_logging`.

Example:
    Basic usage::

        from stategen.observability.logging import configure_logging

        configure_logging(level="DEBUG")
        unit = generate(robot)  # enumeration and assembly are logged

    JSON output::

        configure_logging(level="DEBUG", json_format=True)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from stategen.config.settings import GeneratorConfig
from stategen.errors import StateGenError

ROOT_LOGGER_NAME = "stategen"

# Attributes stategen attaches to records through ``extra=``.
CONTEXT_FIELDS = ("entity", "capability", "permutation")


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Collect the generation context carried by a log record.

    Fields passed through ``extra=`` come first; a StateGenError in
    ``exc_info`` fills in anything they leave out.
    """
    context: dict[str, Any] = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            context[name] = value
    error = record.exc_info[1] if record.exc_info else None
    if isinstance(error, StateGenError):
        context.setdefault("error_code", error.error_code.value)
        if error.context.entity_name:
            context.setdefault("entity", error.context.entity_name)
        if error.context.capability_name:
            context.setdefault("capability", error.context.capability_name)
        if error.context.permutation is not None:
            context.setdefault("permutation", list(error.context.permutation))
        if error.context.states:
            context.setdefault("states", list(error.context.states))
    return context


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Attributes:
        include_location: Whether to include file/line/function in output.
        extra_fields: Additional fields to include in every log record.
    """

    def __init__(
        self,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ) -> None:
        super().__init__()
        self.include_location = include_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "level_num": record.levelno,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if self.include_location:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
                "module": record.module,
            }

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        context = record_context(record)
        if context:
            log_data["context"] = context

        for key, value in self.extra_fields.items():
            if key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and self._supports_color()

    @staticmethod
    def _supports_color() -> bool:
        if os.getenv("NO_COLOR"):
            return False
        return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            level = f"{color}{record.levelname:8}{self.RESET}"
        else:
            level = f"{record.levelname:8}"

        base = f"{timestamp} {level} [{record.name}] {record.getMessage()}"

        context = record_context(record)
        if context:
            base += " (" + " ".join(f"{k}={_plain(v)}" for k, v in context.items()) + ")"

        if record.exc_info:
            base += f"\n{self.formatException(record.exc_info)}"

        return base


def _plain(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(str(v) for v in value) + "]"
    return str(value)


def configure_logging(
    level: int | str = logging.WARNING,
    json_format: bool = False,
    include_location: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the ``stategen`` logger.

    Replaces any handlers previously attached to the ``stategen`` logger.

    Args:
        level: Minimum log level.
        json_format: Use JSON format for output.
        include_location: Include file/line/function in JSON output.
        stream: Output stream (defaults to sys.stderr).

    Returns:
        The configured ``stategen`` logger.

    Example:
        >>> configure_logging(level="DEBUG", json_format=True)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)

    if json_format:
        formatter: logging.Formatter = StructuredFormatter(include_location=include_location)
    else:
        formatter = HumanReadableFormatter()

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return root_logger


def configure_from_settings(config: GeneratorConfig) -> logging.Logger:
    """Apply the logging fields of a GeneratorConfig."""
    return configure_logging(level=config.log_level, json_format=config.log_json)
