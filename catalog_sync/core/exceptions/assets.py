"""
Asset relocation exceptions
"""

from typing import Optional

from .base import CatalogSyncException


class AssetDownloadError(CatalogSyncException):
    """Raised when an image cannot be downloaded after the configured attempts"""

    def __init__(
        self,
        url: str,
        attempts: int,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            f"Failed to download asset after {attempts} attempts: {url}",
            "ASSET_DOWNLOAD_ERROR",
            {"url": url, "attempts": attempts},
            cause,
        )
        self.url = url
        self.attempts = attempts


class AssetUploadError(CatalogSyncException):
    """Raised when an image cannot be written to durable storage"""

    def __init__(
        self,
        key: str,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            f"Failed to upload asset to storage: {key}",
            "ASSET_UPLOAD_ERROR",
            {"key": key},
            cause,
        )
        self.key = key
