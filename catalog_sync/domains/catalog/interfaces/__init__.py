"""
Destination catalog interfaces
"""

from .destination import (
    CATEGORY_ENTITY,
    PRODUCT_ENTITY,
    STORE_ENTITY,
    BatchWriteResult,
    IDestinationStore,
    QueryResult,
    failed_batch,
)

__all__ = [
    "CATEGORY_ENTITY",
    "PRODUCT_ENTITY",
    "STORE_ENTITY",
    "BatchWriteResult",
    "IDestinationStore",
    "QueryResult",
    "failed_batch",
]
