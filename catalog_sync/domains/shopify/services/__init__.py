"""
Shopify services
"""

from .api import BaseShopifyAPIClient
from .bulk_operations import BulkOperationClient
from .queries import COLLECTIONS_BULK_QUERY, PRODUCTS_BULK_QUERY

__all__ = [
    "BaseShopifyAPIClient",
    "BulkOperationClient",
    "PRODUCTS_BULK_QUERY",
    "COLLECTIONS_BULK_QUERY",
]
