"""
Shopify Admin API clients
"""

from .base_client import BaseShopifyAPIClient

__all__ = ["BaseShopifyAPIClient"]
