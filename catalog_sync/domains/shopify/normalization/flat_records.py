"""
Single records of a bulk export JSONL stream and their type discrimination
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field

from catalog_sync.shared.constants.shopify import (
    BULK_PARENT_ID_FIELD,
    BULK_TYPENAME_FIELD,
)


class RecordKind(str, Enum):
    PRODUCT = "product"
    VARIANT = "variant"
    IMAGE = "image"
    METAFIELD = "metafield"
    COLLECTION = "collection"
    UNKNOWN = "unknown"


_TYPENAME_KINDS: Dict[str, RecordKind] = {
    "Product": RecordKind.PRODUCT,
    "ProductVariant": RecordKind.VARIANT,
    "Image": RecordKind.IMAGE,
    "ProductImage": RecordKind.IMAGE,
    "MediaImage": RecordKind.IMAGE,
    "Metafield": RecordKind.METAFIELD,
    "Collection": RecordKind.COLLECTION,
}

# Checked in order: "ProductVariant" and "ProductImage" both contain "Product"
_ID_MARKERS: Tuple[Tuple[str, RecordKind], ...] = (
    ("ProductVariant", RecordKind.VARIANT),
    ("ProductImage", RecordKind.IMAGE),
    ("MediaImage", RecordKind.IMAGE),
    ("Image", RecordKind.IMAGE),
    ("Metafield", RecordKind.METAFIELD),
    ("Collection", RecordKind.COLLECTION),
    ("Product", RecordKind.PRODUCT),
)


class FlatRecord(BaseModel):
    """One line of a bulk export"""

    id: Optional[str] = None
    parent_id: Optional[str] = None
    typename: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_line(cls, line: str) -> "FlatRecord":
        """Parse a JSONL line; raises ValueError for anything but a JSON object"""
        data = json.loads(line)
        if not isinstance(data, dict):
            raise ValueError("Bulk export line is not a JSON object")
        return cls(
            id=data.get("id"),
            parent_id=data.get(BULK_PARENT_ID_FIELD),
            typename=data.get(BULK_TYPENAME_FIELD),
            payload=data,
        )

    @property
    def is_root(self) -> bool:
        return not self.parent_id

    def to_node(self) -> Dict[str, Any]:
        """Copy of the payload without the bulk bookkeeping fields"""
        return {
            key: value
            for key, value in self.payload.items()
            if key not in (BULK_PARENT_ID_FIELD, BULK_TYPENAME_FIELD)
        }


def classify_record(record: FlatRecord) -> RecordKind:
    """Decide what a record is, preferring the explicit ``__typename``"""
    if record.typename:
        kind = _TYPENAME_KINDS.get(record.typename)
        if kind is not None:
            return kind

    identity = record.id or ""
    for marker, kind in _ID_MARKERS:
        if marker in identity:
            return kind
    return RecordKind.UNKNOWN
