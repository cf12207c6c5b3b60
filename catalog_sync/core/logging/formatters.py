"""
Logging formatters for the catalog sync service

Structured context passed to ``StructuredLogger`` reaches the formatters as
the ``extra_fields`` record attribute. The JSON formatters emit it as
top-level keys; the text formatters already carry it in the message.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from catalog_sync.shared.constants import PROJECT_NAME


def _base_entry(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, context fields at the top level"""

    def format(self, record: logging.LogRecord) -> str:
        entry = _base_entry(record)
        entry.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class StructuredFormatter(logging.Formatter):
    """JSON with the context nested under ``context`` and source location"""

    def format(self, record: logging.LogRecord) -> str:
        entry = _base_entry(record)
        entry["service"] = PROJECT_NAME
        entry["context"] = getattr(record, "extra_fields", None) or {}
        entry["source"] = f"{record.module}.{record.funcName}:{record.lineno}"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter with colors"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        formatted = (
            f"{color}[{timestamp}] {record.levelname:8s} "
            f"{record.name}: {record.getMessage()}{self.RESET}"
        )
        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"
        return formatted


class SimpleFormatter(logging.Formatter):
    def __init__(self):
        super().__init__(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "%Y-%m-%d %H:%M:%S",
        )


FORMATTERS = {
    "console": ConsoleFormatter,
    "json": JSONFormatter,
    "structured": StructuredFormatter,
    "simple": SimpleFormatter,
}


def build_formatter(formatter_type: str) -> logging.Formatter:
    """Formatter for a configured format name, ``simple`` when unknown"""
    return FORMATTERS.get(formatter_type, SimpleFormatter)()
