"""
Application settings and configuration management
"""

from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from catalog_sync.shared.constants.app import (
    PROJECT_NAME,
    VERSION,
    DEFAULT_PORT,
    ENVIRONMENT_DEVELOPMENT,
)
from catalog_sync.shared.constants.shopify import (
    DEFAULT_SHOPIFY_API_VERSION,
    DEFAULT_BULK_POLL_INTERVAL_MS,
)
from catalog_sync.core.exceptions import ConfigurationError

VALID_LOG_FORMATS = ("console", "json", "structured", "simple")
VALID_MIGRATION_TYPES = ("product", "category", "collection")


class ShopifySettings(BaseSettings):
    """Shopify (source platform) configuration settings"""

    SHOPIFY_STORE_DOMAIN: str = Field(default="")
    SHOPIFY_ACCESS_TOKEN: str = Field(default="")
    SHOPIFY_API_VERSION: str = Field(default=DEFAULT_SHOPIFY_API_VERSION)

    # Bulk operations poll on a fixed interval, no backoff
    SHOPIFY_BULK_POLL_INTERVAL_MS: int = Field(default=DEFAULT_BULK_POLL_INTERVAL_MS)
    SHOPIFY_REQUEST_TIMEOUT_SECONDS: float = Field(default=30.0)

    @field_validator("SHOPIFY_BULK_POLL_INTERVAL_MS")
    @classmethod
    def validate_poll_interval(cls, v):
        if v <= 0:
            raise ValueError("SHOPIFY_BULK_POLL_INTERVAL_MS must be positive")
        return v


class DestinationSettings(BaseSettings):
    """Destination commerce platform settings"""

    DESTINATION_API_URL: str = Field(default="http://localhost:9000/admin/sync")
    DESTINATION_API_TOKEN: str = Field(default="")
    # Metadata key holding the source identity on destination records
    DESTINATION_EXTERNAL_ID_KEY: str = Field(default="external_id")
    DESTINATION_PAGE_SIZE: int = Field(default=200)
    DESTINATION_DEFAULT_CURRENCY: str = Field(default="usd")
    DESTINATION_REQUEST_TIMEOUT_SECONDS: float = Field(default=60.0)


class StorageSettings(BaseSettings):
    """Durable object storage settings used by the asset relocator"""

    S3_BUCKET: str = Field(default="")
    S3_REGION: str = Field(default="")
    S3_ENDPOINT_URL: Optional[str] = Field(default=None)
    S3_KEY_PREFIX: str = Field(default="products")
    AWS_ACCESS_KEY_ID: str = Field(default="")
    AWS_SECRET_ACCESS_KEY: str = Field(default="")

    @property
    def is_configured(self) -> bool:
        return all(
            [
                self.S3_BUCKET,
                self.S3_REGION,
                self.AWS_ACCESS_KEY_ID,
                self.AWS_SECRET_ACCESS_KEY,
            ]
        )


class AssetSettings(BaseSettings):
    """Asset relocation tuning"""

    ASSET_DOWNLOAD_ATTEMPTS: int = Field(default=3)
    ASSET_RETRY_DELAY_SECONDS: float = Field(default=1.0)
    ASSET_RETRY_MAX_DELAY_SECONDS: float = Field(default=5.0)
    ASSET_DOWNLOAD_TIMEOUT_SECONDS: float = Field(default=30.0)
    ASSET_BATCH_SIZE: int = Field(default=5)
    ASSET_BATCH_PAUSE_SECONDS: float = Field(default=1.0)

    @field_validator("ASSET_DOWNLOAD_ATTEMPTS", "ASSET_BATCH_SIZE")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("must be at least 1")
        return v


class MigrationSettings(BaseSettings):
    """Migration trigger and scheduling settings"""

    MIGRATION_SCHEDULE_ENABLED: bool = Field(default=True)
    # Daily run, hour in UTC
    MIGRATION_SCHEDULE_HOUR: int = Field(default=0)
    MIGRATION_DEFAULT_TYPES: List[str] = Field(default=["product", "collection"])
    MIGRATION_RUN_HISTORY_LIMIT: int = Field(default=100)

    @field_validator("MIGRATION_SCHEDULE_HOUR")
    @classmethod
    def validate_hour(cls, v):
        if not 0 <= v <= 23:
            raise ValueError("MIGRATION_SCHEDULE_HOUR must be between 0 and 23")
        return v

    @field_validator("MIGRATION_DEFAULT_TYPES")
    @classmethod
    def validate_types(cls, v):
        unknown = [t for t in v if t not in VALID_MIGRATION_TYPES]
        if unknown:
            raise ValueError(f"Unknown migration types: {unknown}")
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""

    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="console")
    LOG_DIR: str = Field(default="logs")
    LOG_FILE_ENABLED: bool = Field(default=False)
    LOG_MAX_FILE_SIZE: int = Field(default=10485760)  # 10MB
    LOG_BACKUP_COUNT: int = Field(default=5)

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v not in VALID_LOG_FORMATS:
            return "console"
        return v


class Settings(BaseSettings):
    """Main application settings"""

    # App Configuration
    PROJECT_NAME: str = PROJECT_NAME
    VERSION: str = VERSION
    DEBUG: bool = Field(default=False)
    PORT: int = Field(default=DEFAULT_PORT)
    ENVIRONMENT: str = Field(default=ENVIRONMENT_DEVELOPMENT)

    # Sub-settings
    shopify: ShopifySettings = ShopifySettings()
    destination: DestinationSettings = DestinationSettings()
    storage: StorageSettings = StorageSettings()
    assets: AssetSettings = AssetSettings()
    migration: MigrationSettings = MigrationSettings()
    logging: LoggingSettings = LoggingSettings()

    # CORS Configuration
    CORS_ORIGINS: List[str] = Field(default=["*"])

    class Config:
        env_file = [".env.local", ".env"]  # Try .env.local first, then .env
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "allow"

    def validate_configuration(self) -> None:
        """Validate settings that only matter outside development"""
        if self.ENVIRONMENT == ENVIRONMENT_DEVELOPMENT:
            return

        if not self.shopify.SHOPIFY_STORE_DOMAIN:
            raise ConfigurationError(
                "Shopify store domain is not configured",
                config_key="SHOPIFY_STORE_DOMAIN",
            )
        if not self.shopify.SHOPIFY_ACCESS_TOKEN:
            raise ConfigurationError(
                "Shopify access token is not configured",
                config_key="SHOPIFY_ACCESS_TOKEN",
            )


# Create settings instance
settings = Settings()
