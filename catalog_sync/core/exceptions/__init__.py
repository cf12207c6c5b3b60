"""
Custom exceptions for the catalog sync service
"""

from .base import CatalogSyncException
from .config import ConfigurationError
from .shopify import ShopifyAPIError, BulkSubmitError, BulkExecutionError
from .assets import AssetDownloadError, AssetUploadError
from .destination import DestinationError

__all__ = [
    "CatalogSyncException",
    "ConfigurationError",
    "ShopifyAPIError",
    "BulkSubmitError",
    "BulkExecutionError",
    "AssetDownloadError",
    "AssetUploadError",
    "DestinationError",
]
