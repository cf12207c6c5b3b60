"""
Base Shopify API client with common functionality
"""

import asyncio
from typing import Dict, Any, Optional
from urllib.parse import urljoin

import httpx

from catalog_sync.core.config.settings import settings
from catalog_sync.core.exceptions import ConfigurationError, ShopifyAPIError
from catalog_sync.core.logging import get_logger
from catalog_sync.domains.shopify.interfaces import IShopifyAPIClient
from catalog_sync.shared.constants.shopify import GRAPHQL_ENDPOINT_TEMPLATE
from catalog_sync.shared.decorators import async_retry

logger = get_logger(__name__)


class BaseShopifyAPIClient(IShopifyAPIClient):
    """Shopify Admin GraphQL client for a single store"""

    def __init__(
        self,
        store_domain: Optional[str] = None,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.store_domain = store_domain or settings.shopify.SHOPIFY_STORE_DOMAIN
        self.access_token = access_token or settings.shopify.SHOPIFY_ACCESS_TOKEN
        self.api_version = api_version or settings.shopify.SHOPIFY_API_VERSION

        self.max_throttle_retries = 5
        self.timeout = httpx.Timeout(
            timeout_seconds or settings.shopify.SHOPIFY_REQUEST_TIMEOUT_SECONDS,
            connect=10.0,
        )

        self.http_client: Optional[httpx.AsyncClient] = http_client
        self._owns_client = http_client is None

    async def __aenter__(self):
        """Async context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    async def connect(self):
        """Initialize HTTP client"""
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={
                    "Content-Type": "application/json",
                    "User-Agent": "CatalogSync/1.0",
                },
            )
            self._owns_client = True

    async def close(self):
        """Close HTTP client"""
        if self.http_client and self._owns_client:
            await self.http_client.aclose()
            self.http_client = None

    def _get_shop_url(self) -> str:
        """Get full shop URL"""
        if not self.store_domain:
            raise ConfigurationError(
                "Shopify store domain is not configured",
                config_key="SHOPIFY_STORE_DOMAIN",
            )
        shop_name = (
            self.store_domain.replace("https://", "")
            .replace("http://", "")
            .rstrip("/")
        )
        if not shop_name.endswith(".myshopify.com") and "." not in shop_name:
            shop_name = f"{shop_name}.myshopify.com"
        return f"https://{shop_name}"

    def _get_graphql_endpoint(self) -> str:
        """Get GraphQL endpoint URL"""
        return urljoin(
            self._get_shop_url(),
            GRAPHQL_ENDPOINT_TEMPLATE.format(version=self.api_version),
        )

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers with access token"""
        return {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.access_token,
        }

    async def execute_query(
        self, query: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Execute GraphQL query, waiting out 429 throttling"""
        await self.connect()

        endpoint = self._get_graphql_endpoint()
        payload = {"query": query, "variables": variables or {}}

        for attempt in range(self.max_throttle_retries + 1):
            try:
                response = await self.http_client.post(
                    endpoint, json=payload, headers=self._get_headers()
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                if (
                    e.response.status_code == 429
                    and attempt < self.max_throttle_retries
                ):
                    retry_after = float(e.response.headers.get("Retry-After", 1))
                    logger.warning(
                        "Shopify API throttled request",
                        retry_after=retry_after,
                        attempt=attempt + 1,
                    )
                    await asyncio.sleep(retry_after)
                    continue
                logger.error(
                    f"HTTP error {e.response.status_code}",
                    endpoint=endpoint,
                    body=e.response.text[:500],
                )
                raise ShopifyAPIError(
                    f"Shopify API returned HTTP {e.response.status_code}",
                    status_code=e.response.status_code,
                    cause=e,
                ) from e
            except httpx.HTTPError as e:
                logger.error(f"Query execution failed: {e}", endpoint=endpoint)
                raise ShopifyAPIError(
                    f"Shopify API request failed: {e}", cause=e
                ) from e

            data = response.json()

            if data.get("errors"):
                error_messages = [
                    error.get("message", "Unknown error") for error in data["errors"]
                ]
                raise ShopifyAPIError(
                    f"GraphQL errors: {', '.join(error_messages)}",
                    status_code=response.status_code,
                    errors=data["errors"],
                )

            return data.get("data") or {}

        raise ShopifyAPIError("Shopify API throttling did not clear", status_code=429)

    @async_retry(max_attempts=3, delay=1.0, backoff=2.0, exceptions=httpx.TransportError)
    async def _download(self, url: str) -> str:
        response = await self.http_client.get(url, follow_redirects=True)
        response.raise_for_status()
        return response.text

    async def fetch_text(self, url: str) -> str:
        """Download a bulk result document; the signed URL needs no auth header"""
        await self.connect()
        try:
            return await self._download(url)
        except httpx.HTTPError as e:
            raise ShopifyAPIError(
                f"Failed to download bulk operation result: {e}", cause=e
            ) from e
