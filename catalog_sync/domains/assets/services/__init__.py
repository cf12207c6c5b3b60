"""
Asset services
"""

from .relocator import AssetRelocator, RelocationResult
from .s3_storage import S3ObjectStorage

__all__ = ["AssetRelocator", "RelocationResult", "S3ObjectStorage"]
