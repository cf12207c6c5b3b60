"""
HTTP client for the destination platform's admin sync API
"""

from typing import Any, Dict, List, Optional

import httpx
from pydantic_core import to_jsonable_python

from catalog_sync.core.config.settings import settings
from catalog_sync.core.exceptions import DestinationError
from catalog_sync.core.logging import get_logger
from catalog_sync.domains.catalog.interfaces import (
    BatchWriteResult,
    IDestinationStore,
    QueryResult,
    failed_batch,
)

logger = get_logger(__name__)


class DestinationAdminClient(IDestinationStore):
    """IDestinationStore over ``POST {base}/query`` and ``POST {base}/{entity}/batch``"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_token: Optional[str] = None,
        page_size: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.destination.DESTINATION_API_URL).rstrip("/")
        self.api_token = api_token or settings.destination.DESTINATION_API_TOKEN
        self.page_size = page_size or settings.destination.DESTINATION_PAGE_SIZE
        self.timeout = httpx.Timeout(
            timeout_seconds or settings.destination.DESTINATION_REQUEST_TIMEOUT_SECONDS,
            connect=10.0,
        )
        self.http_client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self):
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True

    async def close(self):
        if self.http_client and self._owns_client:
            await self.http_client.aclose()
            self.http_client = None

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    async def _post(
        self, path: str, body: Dict[str, Any], entity: str, operation: str
    ) -> Dict[str, Any]:
        await self.connect()
        url = f"{self.base_url}/{path}"
        try:
            response = await self.http_client.post(
                url, json=to_jsonable_python(body), headers=self._get_headers()
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Destination {operation} failed",
                entity=entity,
                status=e.response.status_code,
                body=e.response.text[:500],
            )
            raise DestinationError(
                f"Destination {operation} on {entity} returned HTTP {e.response.status_code}",
                entity=entity,
                operation=operation,
                status_code=e.response.status_code,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise DestinationError(
                f"Destination {operation} on {entity} failed: {e}",
                entity=entity,
                operation=operation,
                cause=e,
            ) from e

    async def query(
        self,
        entity: str,
        fields: Optional[List[str]] = None,
        filters: Optional[Dict[str, Any]] = None,
        take: Optional[int] = None,
        skip: int = 0,
    ) -> QueryResult:
        body = {
            "entity": entity,
            "fields": fields or ["*"],
            "filters": filters or {},
            "pagination": {"take": take or self.page_size, "skip": skip},
        }
        data = await self._post("query", body, entity, "query")
        records = data.get("data") or []
        return QueryResult(data=records, count=data.get("count", len(records)))

    async def _write(
        self, entity: str, operation: str, payloads: List[Dict[str, Any]]
    ) -> BatchWriteResult:
        result = BatchWriteResult()
        for start in range(0, len(payloads), self.page_size):
            chunk = payloads[start : start + self.page_size]
            try:
                data = await self._post(
                    f"{entity}/batch", {operation: chunk}, entity, operation
                )
            except DestinationError as e:
                # One failed batch fails its items, not the remaining batches
                result = result.merge(failed_batch(chunk, e))
                continue
            result = result.merge(
                BatchWriteResult(
                    succeeded=data.get("data") or [],
                    failed=data.get("failed") or [],
                )
            )
        if result.failed:
            logger.warning(
                f"Destination {operation} reported failed items",
                entity=entity,
                failed=len(result.failed),
            )
        return result

    async def create(
        self, entity: str, payloads: List[Dict[str, Any]]
    ) -> BatchWriteResult:
        if not payloads:
            return BatchWriteResult()
        return await self._write(entity, "create", payloads)

    async def update(
        self, entity: str, payloads: List[Dict[str, Any]]
    ) -> BatchWriteResult:
        if not payloads:
            return BatchWriteResult()
        return await self._write(entity, "update", payloads)
