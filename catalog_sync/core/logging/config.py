"""
Logging configuration for the catalog sync service
"""

from dataclasses import dataclass
from pydantic import BaseModel


@dataclass
class FileHandlerConfig:
    """File handler configuration"""

    enabled: bool = False
    log_dir: str = "logs"
    max_file_size: int = 10485760  # 10MB
    backup_count: int = 5
    app_log_enabled: bool = True
    error_log_enabled: bool = True


@dataclass
class ConsoleHandlerConfig:
    """Console handler configuration"""

    enabled: bool = True
    level: str = "INFO"


class LoggingConfig(BaseModel):
    """Complete logging configuration"""

    level: str = "INFO"
    format: str = "console"  # console, json, structured or simple

    file: FileHandlerConfig = FileHandlerConfig()
    console: ConsoleHandlerConfig = ConsoleHandlerConfig()

    @classmethod
    def from_settings(cls, logging_settings) -> "LoggingConfig":
        """Build the logging config from LoggingSettings"""
        return cls(
            level=logging_settings.LOG_LEVEL,
            format=logging_settings.LOG_FORMAT,
            file=FileHandlerConfig(
                enabled=logging_settings.LOG_FILE_ENABLED,
                log_dir=logging_settings.LOG_DIR,
                max_file_size=logging_settings.LOG_MAX_FILE_SIZE,
                backup_count=logging_settings.LOG_BACKUP_COUNT,
            ),
            console=ConsoleHandlerConfig(level=logging_settings.LOG_LEVEL),
        )
