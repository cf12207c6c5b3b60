"""
Shared fixtures and fakes for the catalog sync test suite
"""

import copy
import json
from itertools import count
from typing import Any, Dict, List, Optional

import pytest

from catalog_sync.domains.catalog.interfaces import (
    BatchWriteResult,
    IDestinationStore,
    QueryResult,
)
from catalog_sync.domains.shopify.interfaces import IShopifyAPIClient

OPERATION_ID = "gid://shopify/BulkOperation/900"
RESULT_URL = "https://storage.googleapis.com/shopify-bulk/result.jsonl"


def bulk_op(
    status: str,
    op_id: str = OPERATION_ID,
    url: Optional[str] = None,
    error_code: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "id": op_id,
        "status": status,
        "errorCode": error_code,
        "url": url,
        "objectCount": "0",
    }


def to_lines(records: List[Dict[str, Any]]) -> List[str]:
    return [json.dumps(record) for record in records]


class ScriptedShopifyClient(IShopifyAPIClient):
    """Answers bulk operation queries from a script of currentBulkOperation payloads.

    Payloads are consumed in order; the last one keeps being returned.
    """

    def __init__(
        self,
        operations: List[Optional[Dict[str, Any]]],
        submit: Optional[Dict[str, Any]] = None,
        results: Optional[Dict[str, str]] = None,
    ):
        self.operations = list(operations)
        self.submit_response = submit or {
            "bulkOperation": {"id": OPERATION_ID, "status": "CREATED"},
            "userErrors": [],
        }
        self.results = results or {}
        self.queries: List[str] = []
        self.cancelled: List[str] = []
        self.fetched: List[str] = []

    @property
    def status_polls(self) -> int:
        return sum(1 for q in self.queries if "currentBulkOperation" in q)

    async def execute_query(
        self, query: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        self.queries.append(query)
        if "bulkOperationCancel" in query:
            self.cancelled.append(variables["id"])
            return {
                "bulkOperationCancel": {
                    "bulkOperation": {"id": variables["id"], "status": "CANCELING"},
                    "userErrors": [],
                }
            }
        if "bulkOperationRunQuery" in query:
            return {"bulkOperationRunQuery": self.submit_response}
        if "currentBulkOperation" in query:
            if len(self.operations) > 1:
                return {"currentBulkOperation": self.operations.pop(0)}
            return {"currentBulkOperation": self.operations[0]}
        raise AssertionError(f"Unexpected query: {query}")

    async def fetch_text(self, url: str) -> str:
        self.fetched.append(url)
        return self.results[url]


class InMemoryDestinationStore(IDestinationStore):
    """Destination fake honouring list (membership) and nested dict filters"""

    def __init__(self, page_size: int = 50):
        self.page_size = page_size
        self.records: Dict[str, List[Dict[str, Any]]] = {}
        self.writes: List[tuple] = []
        self.queries: List[tuple] = []
        self._ids = count(1)

    def seed(self, entity: str, *records: Dict[str, Any]) -> None:
        self.records.setdefault(entity, []).extend(copy.deepcopy(list(records)))

    def all(self, entity: str) -> List[Dict[str, Any]]:
        return self.records.get(entity, [])

    @classmethod
    def _matches(cls, record: Dict[str, Any], filters: Dict[str, Any]) -> bool:
        for key, expected in filters.items():
            value = record.get(key)
            if isinstance(expected, dict):
                if not isinstance(value, dict) or not cls._matches(value, expected):
                    return False
            elif isinstance(expected, list):
                if value not in expected:
                    return False
            elif value != expected:
                return False
        return True

    async def query(
        self,
        entity: str,
        fields: Optional[List[str]] = None,
        filters: Optional[Dict[str, Any]] = None,
        take: Optional[int] = None,
        skip: int = 0,
    ) -> QueryResult:
        self.queries.append((entity, filters))
        matching = [r for r in self.all(entity) if self._matches(r, filters or {})]
        take = take or self.page_size
        page = matching[skip : skip + take]
        return QueryResult(data=copy.deepcopy(page), count=len(matching))

    def _new_id(self, entity: str) -> str:
        return f"{entity}_{next(self._ids)}"

    def _apply(self, record: Dict[str, Any], payload: Dict[str, Any]) -> None:
        for key, value in copy.deepcopy(payload).items():
            if key == "category_ids":
                record["categories"] = [{"id": category_id} for category_id in value]
            elif key == "variants":
                for variant in value:
                    variant.setdefault("id", self._new_id("variant"))
                record["variants"] = value
            else:
                record[key] = value

    async def create(
        self, entity: str, payloads: List[Dict[str, Any]]
    ) -> BatchWriteResult:
        if not payloads:
            return BatchWriteResult()
        self.writes.append(("create", entity, copy.deepcopy(payloads)))
        result = BatchWriteResult()
        for payload in payloads:
            record = {"id": self._new_id(entity)}
            self._apply(record, payload)
            self.records.setdefault(entity, []).append(record)
            result.succeeded.append(copy.deepcopy(record))
        return result

    async def update(
        self, entity: str, payloads: List[Dict[str, Any]]
    ) -> BatchWriteResult:
        if not payloads:
            return BatchWriteResult()
        self.writes.append(("update", entity, copy.deepcopy(payloads)))
        result = BatchWriteResult()
        by_id = {record["id"]: record for record in self.all(entity)}
        for payload in payloads:
            record = by_id.get(payload.get("id"))
            if record is None:
                result.failed.append({"id": payload.get("id"), "error": "not found"})
                continue
            self._apply(record, payload)
            result.succeeded.append(copy.deepcopy(record))
        return result


@pytest.fixture
def destination():
    store = InMemoryDestinationStore()
    store.seed(
        "store",
        {
            "id": "store_main",
            "supported_currencies": [{"currency_code": "usd"}, {"currency_code": "eur"}],
            "default_sales_channel_id": "sc_default",
        },
    )
    return store


@pytest.fixture
def product_records():
    """Bulk export records for three products; the second duplicates the first's title"""
    return [
        {
            "__typename": "Product",
            "id": "gid://shopify/Product/1",
            "title": "Lamp 💡",
            "handle": "lamp",
            "status": "ACTIVE",
            "descriptionHtml": "<p>Desk lamp</p>",
            "tags": ["lighting"],
            "options": [{"name": "Color", "values": ["Red", "Blue"]}],
        },
        {
            "__typename": "Image",
            "id": "gid://shopify/ProductImage/11",
            "url": "https://cdn.shopify.com/s/files/1/lamp.jpg",
            "altText": "Lamp",
            "__parentId": "gid://shopify/Product/1",
        },
        {
            "__typename": "ProductVariant",
            "id": "gid://shopify/ProductVariant/101",
            "title": "Red",
            "sku": "LAMP-RED",
            "price": "19.99",
            "inventoryQuantity": 5,
            "selectedOptions": [{"name": "Color", "value": "Red"}],
            "__parentId": "gid://shopify/Product/1",
        },
        {
            "__typename": "Metafield",
            "id": "gid://shopify/Metafield/1001",
            "namespace": "custom",
            "key": "product_width",
            "value": "12.5",
            "type": "number_decimal",
            "__parentId": "gid://shopify/ProductVariant/101",
        },
        {
            "__typename": "Metafield",
            "id": "gid://shopify/Metafield/2001",
            "namespace": "custom",
            "key": "bx_code",
            "value": " BX-1 ",
            "type": "single_line_text_field",
            "__parentId": "gid://shopify/Product/1",
        },
        {
            "__typename": "Metafield",
            "id": "gid://shopify/Metafield/2002",
            "namespace": "custom",
            "key": "verified",
            "value": "Yes",
            "type": "single_line_text_field",
            "__parentId": "gid://shopify/Product/1",
        },
        {
            "__typename": "Collection",
            "id": "gid://shopify/Collection/501",
            "title": "Lighting",
            "handle": "lighting",
            "__parentId": "gid://shopify/Product/1",
        },
        {
            "__typename": "Product",
            "id": "gid://shopify/Product/2",
            "title": "Lamp",
            "handle": "lamp-1",
            "status": "ACTIVE",
            "options": [{"name": "Color", "values": ["Red"]}],
        },
        {
            "__typename": "ProductVariant",
            "id": "gid://shopify/ProductVariant/201",
            "title": "Red",
            "sku": "LAMP-RED",
            "price": "18.00",
            "selectedOptions": [{"name": "Color", "value": "Red"}],
            "__parentId": "gid://shopify/Product/2",
        },
        # Records without __typename fall back to the id markers
        {
            "id": "gid://shopify/Product/3",
            "title": "Chair",
            "handle": "chair",
            "status": "DRAFT",
            "options": [{"name": "Size", "values": ["M"]}],
        },
        {
            "id": "gid://shopify/ProductVariant/301",
            "title": "M",
            "sku": "LAMP-RED",
            "price": "49.00",
            "selectedOptions": [
                {"name": "Size", "value": "M"},
                {"name": "Material", "value": "Oak"},
            ],
            "__parentId": "gid://shopify/Product/3",
        },
        {
            "id": "gid://shopify/ProductVariant/302",
            "title": "M2",
            "sku": "CHAIR-M",
            "price": "52.00",
            "selectedOptions": [{"name": "Size", "value": "M"}],
            "__parentId": "gid://shopify/Product/3",
        },
        {
            "id": "gid://shopify/Collection/502",
            "title": "Furniture",
            "handle": "furniture",
            "__parentId": "gid://shopify/Product/3",
        },
    ]


@pytest.fixture
def collection_records():
    return [
        {
            "__typename": "Collection",
            "id": "gid://shopify/Collection/501",
            "title": "Lighting ✨",
            "handle": "lighting",
            "description": "Lamps and lights",
        },
        {
            "__typename": "Product",
            "id": "gid://shopify/Product/1",
            "__parentId": "gid://shopify/Collection/501",
        },
        {
            "__typename": "Collection",
            "id": "gid://shopify/Collection/502",
            "title": "Furniture",
            "handle": "furniture",
            "description": "",
        },
        {
            "__typename": "Product",
            "id": "gid://shopify/Product/3",
            "__parentId": "gid://shopify/Collection/502",
        },
    ]
