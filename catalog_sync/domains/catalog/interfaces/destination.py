"""
Destination store interface
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

PRODUCT_ENTITY = "product"
CATEGORY_ENTITY = "product_category"
STORE_ENTITY = "store"


@dataclass
class QueryResult:
    data: List[Dict[str, Any]] = field(default_factory=list)
    count: int = 0


@dataclass
class BatchWriteResult:
    succeeded: List[Dict[str, Any]] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)

    def merge(self, other: "BatchWriteResult") -> "BatchWriteResult":
        return BatchWriteResult(
            succeeded=self.succeeded + other.succeeded,
            failed=self.failed + other.failed,
        )


def failed_batch(payloads: List[Dict[str, Any]], error: Exception) -> BatchWriteResult:
    """Every payload of a batch the destination could not apply"""
    return BatchWriteResult(
        failed=[{"id": payload.get("id"), "error": str(error)} for payload in payloads]
    )


class IDestinationStore(ABC):
    """Queryable store and batch writer of the destination commerce platform"""

    page_size: int = 200

    @abstractmethod
    async def query(
        self,
        entity: str,
        fields: Optional[List[str]] = None,
        filters: Optional[Dict[str, Any]] = None,
        take: Optional[int] = None,
        skip: int = 0,
    ) -> QueryResult:
        """Return records matching ``filters`` plus the total match count.

        A list value filters by membership; a nested dict filters inside a
        JSON field such as ``metadata``.
        """
        pass

    @abstractmethod
    async def create(
        self, entity: str, payloads: List[Dict[str, Any]]
    ) -> BatchWriteResult:
        """Create records in one batch, reporting per-item failures"""
        pass

    @abstractmethod
    async def update(
        self, entity: str, payloads: List[Dict[str, Any]]
    ) -> BatchWriteResult:
        """Update records (each payload carries ``id``) in one batch"""
        pass

    async def query_all(
        self,
        entity: str,
        fields: Optional[List[str]] = None,
        filters: Optional[Dict[str, Any]] = None,
        page_size: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Page through every record matching ``filters``"""
        take = page_size or self.page_size
        skip = 0
        records: List[Dict[str, Any]] = []
        while True:
            page = await self.query(entity, fields, filters, take=take, skip=skip)
            records.extend(page.data)
            skip += len(page.data)
            if len(page.data) < take or skip >= page.count:
                return records
