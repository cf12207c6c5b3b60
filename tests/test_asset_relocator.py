"""
Tests for image relocation into object storage
"""

from typing import BinaryIO, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from botocore.exceptions import ClientError

from catalog_sync.core.exceptions import AssetDownloadError, AssetUploadError
from catalog_sync.domains.assets.interfaces import IObjectStorage
from catalog_sync.domains.assets.services import AssetRelocator, S3ObjectStorage
from catalog_sync.domains.shopify.normalization import SourceImage, SourceProduct

IMAGE_URL = "https://cdn.shopify.com/s/files/1/lamp%20red.jpg?v=123"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"0" * 16


class FakeStorage(IObjectStorage):
    def __init__(self, existing=(), fail_uploads: bool = False):
        self.objects: Dict[str, dict] = {key: {} for key in existing}
        self.fail_uploads = fail_uploads

    async def exists(self, key: str) -> bool:
        return key in self.objects

    async def upload(
        self,
        key: str,
        body: BinaryIO,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        if self.fail_uploads:
            raise OSError("bucket unavailable")
        self.objects[key] = {
            "body": body.read(),
            "content_type": content_type,
            "metadata": metadata,
        }

    def public_url(self, key: str) -> str:
        return f"https://assets.example.com/{key}"


class CountingHandler:
    """MockTransport handler replaying a list of responses or exceptions"""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def image_response():
    return httpx.Response(200, headers={"content-type": "image/png"}, content=PNG_BYTES)


def make_relocator(storage, handler, sleep=None, **kwargs):
    options = dict(
        key_prefix="products",
        attempts=3,
        retry_delay=1.0,
        retry_max_delay=1.5,
        batch_size=5,
        batch_pause=0.5,
    )
    options.update(kwargs)
    return AssetRelocator(
        storage,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        sleep=sleep or AsyncMock(),
        **options,
    )


class TestAssetRelocator:
    @pytest.mark.asyncio
    async def test_without_storage_returns_none(self):
        handler = CountingHandler(image_response())
        relocator = make_relocator(None, handler)

        assert await relocator.relocate(IMAGE_URL, "gid://shopify/Product/1", "Lamp") is None
        assert handler.requests == []

    def test_object_key_comes_from_the_file_name(self):
        relocator = make_relocator(FakeStorage(), CountingHandler(image_response()))
        assert relocator.object_key(IMAGE_URL) == "products/lamp red.jpg"

    @pytest.mark.asyncio
    async def test_uploads_with_provenance_metadata(self):
        storage = FakeStorage()
        relocator = make_relocator(storage, CountingHandler(image_response()))

        url = await relocator.relocate(IMAGE_URL, "gid://shopify/Product/1", "Lamp")

        assert url == "https://assets.example.com/products/lamp red.jpg"
        stored = storage.objects["products/lamp red.jpg"]
        assert stored["body"] == PNG_BYTES
        assert stored["content_type"] == "image/png"
        assert stored["metadata"]["original-url"] == IMAGE_URL
        assert stored["metadata"]["product-id"] == "gid://shopify/Product/1"
        assert stored["metadata"]["product-title"] == "Lamp"
        assert "uploaded-at" in stored["metadata"]

    @pytest.mark.asyncio
    async def test_existing_object_short_circuits(self):
        handler = CountingHandler(image_response())
        relocator = make_relocator(FakeStorage(existing=["products/lamp red.jpg"]), handler)

        url = await relocator.relocate(IMAGE_URL, "gid://shopify/Product/1", "Lamp")

        assert url == "https://assets.example.com/products/lamp red.jpg"
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_non_image_content_is_rejected_without_retry(self):
        storage = FakeStorage()
        handler = CountingHandler(
            httpx.Response(200, headers={"content-type": "text/html"}, content=b"<html>")
        )
        relocator = make_relocator(storage, handler)

        assert await relocator.relocate(IMAGE_URL, "gid://shopify/Product/1", "Lamp") is None
        assert len(handler.requests) == 1
        assert storage.objects == {}

    @pytest.mark.asyncio
    async def test_network_failures_back_off_linearly_with_cap(self):
        sleep = AsyncMock()
        handler = CountingHandler(
            httpx.ConnectError("Name or service not known"),
            httpx.ReadTimeout("timed out"),
            image_response(),
        )
        relocator = make_relocator(FakeStorage(), handler, sleep=sleep)

        url = await relocator.relocate(IMAGE_URL, "gid://shopify/Product/1", "Lamp")

        assert url is not None
        assert len(handler.requests) == 3
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 1.5]

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_download_error(self):
        sleep = AsyncMock()
        handler = CountingHandler(httpx.ConnectError("connection reset"))
        relocator = make_relocator(FakeStorage(), handler, sleep=sleep)

        with pytest.raises(AssetDownloadError) as exc_info:
            await relocator.relocate(IMAGE_URL, "gid://shopify/Product/1", "Lamp")

        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        assert len(handler.requests) == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_http_errors_retry_without_backoff(self):
        sleep = AsyncMock()
        handler = CountingHandler(httpx.Response(503))
        relocator = make_relocator(FakeStorage(), handler, sleep=sleep)

        with pytest.raises(AssetDownloadError):
            await relocator.relocate(IMAGE_URL, "gid://shopify/Product/1", "Lamp")

        assert len(handler.requests) == 3
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upload_failure_raises_upload_error(self):
        relocator = make_relocator(FakeStorage(fail_uploads=True), CountingHandler(image_response()))

        with pytest.raises(AssetUploadError) as exc_info:
            await relocator.relocate(IMAGE_URL, "gid://shopify/Product/1", "Lamp")

        assert exc_info.value.key == "products/lamp red.jpg"

    @pytest.mark.asyncio
    async def test_batches_keep_original_urls_on_failure(self):
        sleep = AsyncMock()

        def handler(request: httpx.Request) -> httpx.Response:
            if "broken" in request.url.path:
                return httpx.Response(404)
            return image_response()

        products = [
            SourceProduct(
                id=f"gid://shopify/Product/{n}",
                title=f"Product {n}",
                images=[SourceImage(url=f"https://cdn.shopify.com/files/p{n}.png")],
            )
            for n in range(6)
        ]
        products.append(
            SourceProduct(
                id="gid://shopify/Product/99",
                title="Broken",
                images=[SourceImage(url="https://cdn.shopify.com/files/broken.png")],
            )
        )
        relocator = make_relocator(FakeStorage(), handler, sleep=sleep)

        result = await relocator.relocate_product_images(products)

        assert [p.id for p in result.products] == [p.id for p in products]
        assert result.products[0].images[0].url == "https://assets.example.com/products/p0.png"
        assert result.products[-1].images[0].url == "https://cdn.shopify.com/files/broken.png"
        assert result.summary == {"images": 7, "relocated": 6, "skipped": 0, "failed": 1}
        # one pause between the two batches, none for the retries of a 404
        sleep.assert_awaited_once_with(0.5)

    @pytest.mark.asyncio
    async def test_batches_pass_through_without_storage(self):
        products = [SourceProduct(id="gid://shopify/Product/1", title="Lamp")]
        relocator = make_relocator(None, CountingHandler(image_response()))

        result = await relocator.relocate_product_images(products)

        assert result.products == products
        assert result.summary["relocated"] == 0


class TestS3ObjectStorage:
    def test_public_url_for_aws(self):
        storage = S3ObjectStorage("catalog", "eu-west-1", client=MagicMock())
        assert (
            storage.public_url("products/lamp.jpg")
            == "https://catalog.s3.eu-west-1.amazonaws.com/products/lamp.jpg"
        )

    def test_public_url_for_custom_endpoint(self):
        storage = S3ObjectStorage(
            "catalog", "auto", endpoint_url="https://minio.local/", client=MagicMock()
        )
        assert storage.public_url("products/lamp.jpg") == "https://minio.local/catalog/products/lamp.jpg"

    @pytest.mark.asyncio
    async def test_missing_object_does_not_exist(self):
        client = MagicMock()
        client.head_object.side_effect = ClientError(
            {"Error": {"Code": "404"}, "ResponseMetadata": {"HTTPStatusCode": 404}},
            "HeadObject",
        )
        storage = S3ObjectStorage("catalog", "eu-west-1", client=client)

        assert await storage.exists("products/lamp.jpg") is False
        client.head_object.assert_called_once_with(Bucket="catalog", Key="products/lamp.jpg")

    @pytest.mark.asyncio
    async def test_other_client_errors_propagate(self):
        client = MagicMock()
        client.head_object.side_effect = ClientError(
            {"Error": {"Code": "403"}, "ResponseMetadata": {"HTTPStatusCode": 403}},
            "HeadObject",
        )
        storage = S3ObjectStorage("catalog", "eu-west-1", client=client)

        with pytest.raises(ClientError):
            await storage.exists("products/lamp.jpg")

    @pytest.mark.asyncio
    async def test_upload_sets_content_type_and_ascii_metadata(self):
        client = MagicMock()
        storage = S3ObjectStorage("catalog", "eu-west-1", client=client)
        body = MagicMock()

        await storage.upload(
            "products/lamp.jpg", body, "image/jpeg", {"product-title": "Lámpara"}
        )

        args, kwargs = client.upload_fileobj.call_args
        assert args == (body, "catalog", "products/lamp.jpg")
        assert kwargs["ExtraArgs"]["ContentType"] == "image/jpeg"
        assert kwargs["ExtraArgs"]["Metadata"] == {"product-title": "L%C3%A1mpara"}

    def test_not_configured_storage_is_none(self):
        from catalog_sync.core.config import StorageSettings

        assert S3ObjectStorage.from_settings(StorageSettings(S3_BUCKET="")) is None
