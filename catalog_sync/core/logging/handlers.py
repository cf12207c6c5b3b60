"""
Logging handlers for the catalog sync service
"""

import logging
import logging.handlers
import os
from typing import List

from .config import ConsoleHandlerConfig, FileHandlerConfig
from .formatters import build_formatter

APP_LOG_FILE = "app.log"
ERROR_LOG_FILE = "errors.log"


def _rotating_handler(
    config: FileHandlerConfig, filename: str, level: int, formatter_type: str
) -> logging.handlers.RotatingFileHandler:
    os.makedirs(config.log_dir, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(config.log_dir, filename),
        maxBytes=config.max_file_size,
        backupCount=config.backup_count,
    )
    handler.setLevel(level)
    handler.setFormatter(build_formatter(formatter_type))
    return handler


def build_file_handlers(
    config: FileHandlerConfig, level: int, formatter_type: str
) -> List[logging.Handler]:
    """Application log at ``level`` plus an error-only log, each rotating"""
    if not config.enabled:
        return []
    handlers: List[logging.Handler] = []
    if config.app_log_enabled:
        handlers.append(_rotating_handler(config, APP_LOG_FILE, level, formatter_type))
    if config.error_log_enabled:
        handlers.append(
            _rotating_handler(config, ERROR_LOG_FILE, logging.ERROR, formatter_type)
        )
    return handlers


def build_console_handler(
    config: ConsoleHandlerConfig, formatter_type: str
) -> logging.StreamHandler:
    handler = logging.StreamHandler()
    handler.setLevel(logging.getLevelName(config.level.upper()))
    handler.setFormatter(build_formatter(formatter_type))
    return handler
