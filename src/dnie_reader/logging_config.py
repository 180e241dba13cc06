"""
Logging setup for applications embedding the extraction core.

The level and format come from ``ExtractionSettings`` (``log_level`` and
``log_format``), which the bundled YAML fills from ``DNIE_LOG_LEVEL`` and
``DNIE_LOG_FORMAT``. ``log_format`` is ``text``, ``json`` or a custom
``%``-style format string.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime

from opentelemetry import trace

from dnie_reader.config import LOG_OFF, ExtractionSettings, get_settings

PACKAGE_LOGGER = "dnie_reader"

TEXT_LOG_FORMAT = (
    "%(asctime)s - %(levelname)s - [%(service_name)s] - [%(component)s] - "
    "[%(module)s.%(funcName)s:%(lineno)d] - %(message)s"
)


def component_name(logger_name: str) -> str:
    """Short component label: ``dnie_reader.rfid.elementary_files`` -> ``rfid.elementary_files``."""
    prefix = PACKAGE_LOGGER + "."
    return logger_name[len(prefix):] if logger_name.startswith(prefix) else logger_name


class RecordContextFilter(logging.Filter):
    """Attach service name, component and the active trace ids to each record."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        record.component = component_name(record.name)

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.trace_id = format(span_context.trace_id, "032x")
            record.span_id = format(span_context.span_id, "016x")
        else:
            record.trace_id = None
            record.span_id = None
        return True


class DnieJSONFormatter(logging.Formatter):
    """One JSON object per record, with trace correlation when a span is active."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service_name", "unknown"),
            "component": getattr(record, "component", record.name),
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        for key in ("trace_id", "span_id"):
            value = getattr(record, key, None)
            if value:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


def build_formatter(log_format: str) -> logging.Formatter:
    """Formatter for a ``log_format`` setting value."""
    if log_format == "json":
        return DnieJSONFormatter()
    if log_format == "text":
        return logging.Formatter(TEXT_LOG_FORMAT)
    return logging.Formatter(log_format)


def setup_logging(
    settings: ExtractionSettings | None = None, service_name: str = "dnie-reader"
) -> None:
    """
    Configure the root logger from the extraction settings.

    Replaces any handler already on the root logger with a single stdout
    handler. A ``log_level`` of ``OFF`` silences logging entirely.

    Args:
        settings: Settings carrying ``log_level`` and ``log_format``;
            the process-wide settings when None
        service_name: Name used to tag every log record
    """
    settings = settings or get_settings()
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if settings.log_level == LOG_OFF:
        root_logger.setLevel(logging.CRITICAL + 1)
        return

    root_logger.setLevel(settings.log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(settings.log_format))
    handler.addFilter(RecordContextFilter(service_name))
    root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(
        "Logging configured for %s: level=%s format=%s",
        service_name,
        settings.log_level,
        settings.log_format,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger under the package namespace (``__name__`` of the caller, typically)."""
    return logging.getLogger(name or PACKAGE_LOGGER)
