"""
Re-hosts Shopify product images in durable storage.

Relocation is best effort: any image that cannot be downloaded or uploaded
keeps its original URL and the run carries on.
"""

import asyncio
import hashlib
import io
import posixpath
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Tuple
from urllib.parse import unquote, urlparse

import httpx

from catalog_sync.core.config.settings import settings
from catalog_sync.core.exceptions import AssetDownloadError, AssetUploadError
from catalog_sync.core.logging import get_logger
from catalog_sync.domains.assets.interfaces import IObjectStorage
from catalog_sync.domains.shopify.normalization import SourceProduct
from catalog_sync.shared.helpers import now_utc

logger = get_logger(__name__)

# DNS failures, resets and timeouts; these get the backoff delay
NETWORK_ERRORS: Tuple[type, ...] = (
    httpx.ConnectError,
    httpx.TimeoutException,
    httpx.ReadError,
    httpx.WriteError,
    httpx.RemoteProtocolError,
)


@dataclass
class RelocationResult:
    products: List[SourceProduct] = field(default_factory=list)
    summary: Dict[str, int] = field(
        default_factory=lambda: {"images": 0, "relocated": 0, "skipped": 0, "failed": 0}
    )


class AssetRelocator:
    def __init__(
        self,
        storage: Optional[IObjectStorage],
        http_client: Optional[httpx.AsyncClient] = None,
        key_prefix: Optional[str] = None,
        attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        retry_max_delay: Optional[float] = None,
        batch_size: Optional[int] = None,
        batch_pause: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        asset_settings = settings.assets
        self.storage = storage
        self.http_client = http_client
        self._owns_client = http_client is None
        self.key_prefix = (
            key_prefix if key_prefix is not None else settings.storage.S3_KEY_PREFIX
        ).strip("/")
        self.attempts = attempts or asset_settings.ASSET_DOWNLOAD_ATTEMPTS
        self.retry_delay = (
            retry_delay if retry_delay is not None else asset_settings.ASSET_RETRY_DELAY_SECONDS
        )
        self.retry_max_delay = (
            retry_max_delay
            if retry_max_delay is not None
            else asset_settings.ASSET_RETRY_MAX_DELAY_SECONDS
        )
        self.batch_size = batch_size or asset_settings.ASSET_BATCH_SIZE
        self.batch_pause = (
            batch_pause if batch_pause is not None else asset_settings.ASSET_BATCH_PAUSE_SECONDS
        )
        self._sleep = sleep

    @property
    def enabled(self) -> bool:
        return self.storage is not None

    async def close(self):
        if self.http_client and self._owns_client:
            await self.http_client.aclose()
            self.http_client = None

    def object_key(self, image_url: str) -> str:
        """Storage key derived from the source file name"""
        filename = posixpath.basename(unquote(urlparse(image_url).path))
        if not filename:
            filename = hashlib.sha1(image_url.encode("utf-8")).hexdigest()
        return f"{self.key_prefix}/{filename}" if self.key_prefix else filename

    async def relocate(
        self, image_url: str, owner_id: str, owner_label: Optional[str] = None
    ) -> Optional[str]:
        """Copy one image into storage and return its new URL.

        Returns None when storage is not configured or the URL does not serve
        an image. Raises AssetDownloadError / AssetUploadError on failure.
        """
        if self.storage is None:
            logger.warning("Object storage not configured, skipping image relocation")
            return None

        key = self.object_key(image_url)
        if await self.storage.exists(key):
            logger.debug("Image already relocated", key=key)
            return self.storage.public_url(key)

        response = await self._download(image_url)
        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not content_type.startswith("image/"):
            logger.warning(
                "Skipping non-image asset", url=image_url, content_type=content_type
            )
            return None

        metadata = {
            "original-url": image_url,
            "product-id": owner_id,
            "product-title": owner_label or "",
            "uploaded-at": now_utc().isoformat(),
        }
        try:
            await self.storage.upload(
                key, io.BytesIO(response.content), content_type, metadata
            )
        except Exception as e:
            raise AssetUploadError(key, cause=e) from e

        return self.storage.public_url(key)

    async def _download(self, url: str) -> httpx.Response:
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(
                timeout=settings.assets.ASSET_DOWNLOAD_TIMEOUT_SECONDS
            )
            self._owns_client = True

        last_error: Optional[Exception] = None
        for attempt in range(1, self.attempts + 1):
            try:
                response = await self.http_client.get(url, follow_redirects=True)
                response.raise_for_status()
                return response
            except NETWORK_ERRORS as e:
                last_error = e
                if attempt < self.attempts:
                    delay = min(self.retry_delay * attempt, self.retry_max_delay)
                    logger.warning(
                        f"Image download attempt {attempt} failed, retrying in {delay}s",
                        url=url,
                        error=type(e).__name__,
                    )
                    await self._sleep(delay)
            except httpx.HTTPError as e:
                last_error = e
                logger.warning(
                    f"Image download attempt {attempt} failed",
                    url=url,
                    error=str(e),
                )

        raise AssetDownloadError(url, self.attempts, cause=last_error) from last_error

    async def relocate_product_images(
        self, products: List[SourceProduct]
    ) -> RelocationResult:
        """Relocate the images of every product, a fixed-size batch at a time"""
        result = RelocationResult()
        if self.storage is None:
            logger.warning("Object storage not configured, keeping original image URLs")
            result.products = list(products)
            return result

        for start in range(0, len(products), self.batch_size):
            if start:
                await self._sleep(self.batch_pause)
            batch = products[start : start + self.batch_size]
            relocated = await asyncio.gather(
                *(self._relocate_product(product, result.summary) for product in batch)
            )
            result.products.extend(relocated)

        logger.info("Image relocation finished", **result.summary)
        return result

    async def _relocate_product(
        self, product: SourceProduct, summary: Dict[str, int]
    ) -> SourceProduct:
        images = []
        for image in product.images:
            summary["images"] += 1
            try:
                new_url = await self.relocate(image.url, product.id, product.title)
            except Exception as e:
                summary["failed"] += 1
                logger.warning(
                    "Keeping original image URL",
                    product_id=product.id,
                    url=image.url,
                    error=str(e),
                )
                images.append(image)
                continue

            if new_url is None:
                summary["skipped"] += 1
                images.append(image)
            else:
                summary["relocated"] += 1
                images.append(image.model_copy(update={"url": new_url}))
        return product.model_copy(update={"images": images})
