from .api_client import IShopifyAPIClient

__all__ = ["IShopifyAPIClient"]
