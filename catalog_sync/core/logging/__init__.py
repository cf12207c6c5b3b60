"""
Logging module for the catalog sync service
"""

from .config import LoggingConfig
from .formatters import ConsoleFormatter, JSONFormatter, StructuredFormatter, build_formatter
from .logger import StructuredLogger, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "StructuredLogger",
    "LoggingConfig",
    "build_formatter",
    "ConsoleFormatter",
    "JSONFormatter",
    "StructuredFormatter",
]
