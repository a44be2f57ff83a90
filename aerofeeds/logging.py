# aerofeeds/logging.py
"""
Structured logging for aerofeeds.

Pipelines log an event name plus keyword fields. Two fields describe the
upstream call and are promoted to the top level of every record that
carries them:
- service: Upstream source name as reported in ApiError ("OpenAIP", ...)
- endpoint: URL of the request

Everything else lands under "context".

The package never configures logging on its own: the "aerofeeds" logger
carries a NullHandler and propagates to whatever the host application set
up. Call configure_logging() to opt into aerofeeds' own JSON output.

Usage:
    from aerofeeds.logging import get_ingestion_logger
    logger = get_ingestion_logger("aerodrome").bind(service="OpenAIP")
    logger.warning("aerodrome_dropped", endpoint=url, reason="invalid")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .settings import settings

ROOT_LOGGER_NAME = "aerofeeds"

# Promoted to top-level keys in formatted output
STANDARD_FIELDS = ("service", "endpoint")

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def split_fields(record: logging.LogRecord) -> Dict[str, Dict[str, Any]]:
    """Separate a record's structured data into standard and context fields."""
    data = dict(getattr(record, "structured_data", {}))
    standard = {key: data.pop(key) for key in STANDARD_FIELDS if key in data}
    return {"standard": standard, "context": data}


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter emitting one object per record."""

    def format(self, record: logging.LogRecord) -> str:
        fields = split_fields(record)
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        log_data.update(fields["standard"])
        if fields["context"]:
            log_data["context"] = fields["context"]

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class KeyValueFormatter(logging.Formatter):
    """Plain-text formatter: `LEVEL logger event service=... key=value`."""

    def format(self, record: logging.LogRecord) -> str:
        fields = split_fields(record)
        pairs = {**fields["standard"], **fields["context"]}
        line = f"{record.levelname} {record.name} {record.getMessage()}"
        if pairs:
            line += " " + " ".join(f"{key}={value}" for key, value in pairs.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger:
    """
    Wrapper around a stdlib logger that accepts keyword fields.

    Fields bound with bind() are added to every record; fields passed at
    the call site win over bound ones.
    """

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self._logger = logging.getLogger(name)
        self.context = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **kwargs) -> "StructuredLogger":
        return StructuredLogger(self.name, {**self.context, **kwargs})

    def _log(self, level: int, message: str, **kwargs):
        if not self._logger.isEnabledFor(level):
            return
        extra = {"structured_data": {**self.context, **kwargs}}
        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)


def configure_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    log_file: Optional[str] = None,
    stream=None,
):
    """
    Send aerofeeds records to a handler of their own.

    Only the "aerofeeds" logger is touched; handlers installed by a
    previous call are replaced and the root logger is left alone.

    Args:
        level: Log level (defaults to LOG_LEVEL)
        json_output: JSON (True) or key=value text (False); defaults to LOG_JSON
        log_file: Optional file path to also write JSON records to
        stream: Console stream (defaults to stdout)
    """
    level = level or settings.log_level
    if json_output is None:
        json_output = settings.log_json

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(getattr(logging, level.upper()))
    package_logger.propagate = False

    for handler in package_logger.handlers[:]:
        if getattr(handler, "aerofeeds_managed", False):
            package_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(StructuredLogFormatter() if json_output else KeyValueFormatter())
    handlers = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredLogFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.aerofeeds_managed = True
        package_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name, under "aerofeeds" to be covered by configure_logging

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)


def get_ingestion_logger(source: str) -> StructuredLogger:
    """Get logger for an upstream source pipeline."""
    return get_logger(f"{ROOT_LOGGER_NAME}.ingestion.{source}")
