"""
Structured logger for the catalog sync service
"""

import logging
from typing import Any, Dict, Optional

from .config import LoggingConfig
from .handlers import build_console_handler, build_file_handlers

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "botocore", "boto3", "s3transfer")

_loggers: Dict[str, "StructuredLogger"] = {}


class StructuredLogger:
    """Wraps a stdlib logger so call sites can pass context as keyword arguments.

    ``logger.info("Planned products", to_create=3)`` renders as
    ``Planned products | to_create=3`` and also attaches the context to the
    record as ``extra_fields`` for the JSON formatters.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    @staticmethod
    def _format_message(message: str, context: Dict[str, Any]) -> str:
        parts = []
        for key, value in context.items():
            if value is None:
                continue
            if isinstance(value, str) and " " in value:
                parts.append(f'{key}="{value}"')
            else:
                parts.append(f"{key}={value}")
        if not parts:
            return message
        return f"{message} | {' | '.join(parts)}"

    def _log(self, level: int, message: str, context: Dict[str, Any], exc_info=None):
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(
            level,
            self._format_message(message, context),
            exc_info=exc_info,
            extra={"extra_fields": context},
            stacklevel=3,
        )

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        self._log(logging.CRITICAL, message, kwargs)

    def exception(self, message: str, **kwargs):
        """Error level with the active exception's traceback"""
        self._log(logging.ERROR, message, kwargs, exc_info=True)


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """Replace the root handlers with the configured file and console handlers"""
    config = config or LoggingConfig()
    level = logging.getLevelName(config.level.upper())

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    for handler in build_file_handlers(config.file, level, config.format):
        root_logger.addHandler(handler)
    if config.console.enabled:
        root_logger.addHandler(build_console_handler(config.console, config.format))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    get_logger(__name__).info(
        "Logging configured", level=config.level, format=config.format
    )


def get_logger(name: str) -> StructuredLogger:
    if name not in _loggers:
        _loggers[name] = StructuredLogger(logging.getLogger(name))
    return _loggers[name]
