"""
Shopify API client interface
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional


class IShopifyAPIClient(ABC):
    """Interface for Shopify Admin API operations used by the bulk exporter"""

    @abstractmethod
    async def execute_query(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Execute a GraphQL query or mutation against the Admin API

        Args:
            query: GraphQL document
            variables: Query variables

        Returns:
            The ``data`` object of the response
        """
        pass

    @abstractmethod
    async def fetch_text(self, url: str) -> str:
        """Download a plain-text document, such as a bulk operation result"""
        pass
