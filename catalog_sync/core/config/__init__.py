"""
Configuration module for the catalog sync service
"""

from .settings import settings, Settings
from .settings import (
    ShopifySettings,
    DestinationSettings,
    StorageSettings,
    AssetSettings,
    MigrationSettings,
    LoggingSettings,
)

__all__ = [
    "settings",
    "Settings",
    "ShopifySettings",
    "DestinationSettings",
    "StorageSettings",
    "AssetSettings",
    "MigrationSettings",
    "LoggingSettings",
]
