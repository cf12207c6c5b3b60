"""
Rebuilds nested entities from the flat, parent-tagged bulk export stream.

The stream does not guarantee parent-before-child order, so assembly is
done in passes over an id -> node index instead of a single streaming scan:

1. every root record becomes a node with empty child lists
2. direct children are attached to their root
3. metafields are attached to their owning variant, or to the root
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List

from catalog_sync.core.logging import get_logger
from .flat_records import FlatRecord, RecordKind, classify_record

logger = get_logger(__name__)


class EntityKind(str, Enum):
    PRODUCT = "product"
    COLLECTION = "collection"


# Child record kind -> list on the root node it is appended to
CHILD_SLOTS: Dict[EntityKind, Dict[RecordKind, str]] = {
    EntityKind.PRODUCT: {
        RecordKind.IMAGE: "images",
        RecordKind.VARIANT: "variants",
        RecordKind.COLLECTION: "collections",
        RecordKind.METAFIELD: "metafields",
    },
    EntityKind.COLLECTION: {
        RecordKind.PRODUCT: "products",
        RecordKind.METAFIELD: "metafields",
    },
}


@dataclass
class AssemblyResult:
    roots: List[Dict[str, Any]] = field(default_factory=list)
    orphans: List[FlatRecord] = field(default_factory=list)
    unclassified: List[FlatRecord] = field(default_factory=list)
    malformed_lines: int = 0

    def summary(self) -> Dict[str, int]:
        return {
            "roots": len(self.roots),
            "orphans": len(self.orphans),
            "unclassified": len(self.unclassified),
            "malformed_lines": self.malformed_lines,
        }


class FlatRecordTreeBuilder:
    """Assembles product or collection trees from bulk export lines"""

    def assemble(self, lines: Iterable[str], entity_kind: EntityKind) -> AssemblyResult:
        slots = CHILD_SLOTS[entity_kind]
        result = AssemblyResult()
        records: List[FlatRecord] = []

        for line in lines:
            try:
                records.append(FlatRecord.from_line(line))
            except (json.JSONDecodeError, ValueError) as e:
                result.malformed_lines += 1
                logger.warning("Skipping malformed bulk export line", error=str(e))

        # Pass 1: roots
        roots: Dict[str, Dict[str, Any]] = {}
        for record in records:
            if not record.is_root:
                continue
            if not record.id:
                result.unclassified.append(record)
                continue
            if record.id in roots:
                logger.warning("Duplicate root record in bulk export", id=record.id)
                continue
            node = record.to_node()
            for slot in set(slots.values()):
                node[slot] = []
            roots[record.id] = node
            result.roots.append(node)

        # Pass 2: direct children; metafields wait for the variant index
        metafields: List[FlatRecord] = []
        variant_index: Dict[str, Dict[str, Any]] = {}
        for record in records:
            if record.is_root:
                continue
            kind = classify_record(record)
            if kind == RecordKind.METAFIELD:
                metafields.append(record)
                continue

            slot = slots.get(kind)
            if slot is None:
                result.unclassified.append(record)
                continue

            root = roots.get(record.parent_id)
            if root is None:
                result.orphans.append(record)
                continue

            node = record.to_node()
            if kind == RecordKind.VARIANT:
                node.setdefault("metafields", [])
                if record.id:
                    variant_index[record.id] = node
            root[slot].append(node)

        # Pass 3: metafields, which may hang off a variant of any root
        metafield_slot = slots.get(RecordKind.METAFIELD)
        for record in metafields:
            variant = variant_index.get(record.parent_id)
            if variant is not None:
                variant["metafields"].append(record.to_node())
                continue
            root = roots.get(record.parent_id)
            if root is not None and metafield_slot:
                root[metafield_slot].append(record.to_node())
                continue
            result.orphans.append(record)

        if result.orphans:
            logger.warning(
                "Dropped orphaned bulk export records",
                entity_kind=entity_kind.value,
                orphans=len(result.orphans),
                sample_parent_ids=[r.parent_id for r in result.orphans[:5]],
            )
        if result.unclassified:
            logger.warning(
                "Ignored unrecognised bulk export records",
                entity_kind=entity_kind.value,
                count=len(result.unclassified),
            )

        logger.info(
            f"Assembled {len(result.roots)} {entity_kind.value} trees",
            records=len(records),
        )
        return result
