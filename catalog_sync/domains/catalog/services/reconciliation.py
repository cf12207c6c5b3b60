"""
Reconciliation of normalized Shopify entities against the destination.

Planning is pure: every ``plan_*`` method takes source entities plus the
destination records already fetched and returns the payloads to write. The
create and update sets of one plan never share a source entity.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from catalog_sync.core.config.settings import settings
from catalog_sync.core.logging import get_logger
from catalog_sync.domains.shopify.normalization import (
    SourceCollection,
    SourceProduct,
    SourceVariant,
)
from catalog_sync.shared.constants.shopify import PRODUCT_STATUS_DRAFT
from catalog_sync.shared.helpers import extract_numeric_gid, slugify
from .identity import IdentityCorrelation, MetadataIdentityCorrelation
from .metafields import (
    get_boolean_from_metafield,
    get_float_from_metafield,
    get_string_from_metafield,
)

logger = get_logger(__name__)

PRODUCT_STATUS_DRAFT_DEST = "draft"
PRODUCT_STATUS_PUBLISHED_DEST = "published"


@dataclass
class StoreContext:
    """Destination store defaults used to seed new products"""

    currency_codes: List[str] = field(default_factory=list)
    default_sales_channel_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Optional[Dict[str, Any]]) -> "StoreContext":
        if not record:
            return cls(currency_codes=[settings.destination.DESTINATION_DEFAULT_CURRENCY])
        codes = [
            currency.get("currency_code")
            for currency in record.get("supported_currencies") or []
            if currency.get("currency_code")
        ]
        return cls(
            currency_codes=codes or [settings.destination.DESTINATION_DEFAULT_CURRENCY],
            default_sales_channel_id=record.get("default_sales_channel_id"),
        )


@dataclass
class CategoryPlan:
    to_create: List[Dict[str, Any]] = field(default_factory=list)
    # Handle matches that carry no external id yet
    to_stamp: List[Dict[str, Any]] = field(default_factory=list)
    # source external id -> existing destination category
    matched: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    conflicts: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class ProductPlan:
    to_create: List[Dict[str, Any]] = field(default_factory=list)
    to_update: List[Dict[str, Any]] = field(default_factory=list)
    create_source_ids: List[str] = field(default_factory=list)
    update_source_ids: List[str] = field(default_factory=list)

    def summary(self) -> Dict[str, int]:
        return {"to_create": len(self.to_create), "to_update": len(self.to_update)}


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _union(*id_lists: Iterable[str]) -> List[str]:
    """Ordered union, first occurrence wins"""
    merged: Dict[str, None] = {}
    for ids in id_lists:
        for item in ids:
            if item:
                merged.setdefault(item, None)
    return list(merged)


def existing_category_ids(record: Dict[str, Any]) -> List[str]:
    categories = record.get("categories")
    if categories is not None:
        return [c["id"] for c in categories if c.get("id")]
    return list(record.get("category_ids") or [])


def category_handle(collection: SourceCollection) -> str:
    return slugify(collection.title) or (collection.handle or "")


class ReconciliationEngine:
    """Turns source entities and destination state into create and update sets"""

    def __init__(self, identity: Optional[IdentityCorrelation] = None):
        self.identity = identity or MetadataIdentityCorrelation()

    # Categories

    def plan_categories(
        self,
        collections: Iterable[SourceCollection],
        existing: Iterable[Dict[str, Any]],
    ) -> CategoryPlan:
        existing = list(existing)
        by_handle = {record["handle"]: record for record in existing if record.get("handle")}
        by_external_id = self.identity.index(existing)
        plan = CategoryPlan()
        planned_handles: Set[str] = set()

        for collection in collections:
            external_id = collection.external_id
            handle = category_handle(collection)
            match = by_handle.get(handle)

            if match is not None:
                stamped = self.identity.external_id_of(match)
                if stamped is None:
                    plan.to_stamp.append(
                        self.identity.stamp(
                            {"id": match["id"], "metadata": dict(match.get("metadata") or {})},
                            external_id,
                        )
                    )
                elif stamped != external_id:
                    plan.conflicts.append(
                        {
                            "handle": handle,
                            "category_id": match["id"],
                            "stamped_external_id": stamped,
                            "source_external_id": external_id,
                        }
                    )
                    logger.warning(
                        "Category handle matches a different source identity",
                        handle=handle,
                        category_id=match["id"],
                        stamped=stamped,
                        source=external_id,
                    )
                plan.matched[external_id] = match
                continue

            match = by_external_id.get(external_id)
            if match is not None:
                plan.matched[external_id] = match
                continue

            if handle in planned_handles:
                logger.warning("Skipping category with a handle already queued", handle=handle)
                continue
            planned_handles.add(handle)
            plan.to_create.append(
                self.identity.stamp(
                    {
                        "name": collection.title,
                        "handle": handle,
                        "description": collection.description or "",
                        "is_active": True,
                    },
                    external_id,
                )
            )

        logger.info(
            "Planned categories",
            to_create=len(plan.to_create),
            to_stamp=len(plan.to_stamp),
            matched=len(plan.matched),
            conflicts=len(plan.conflicts),
        )
        return plan

    def build_category_map(
        self,
        categories: Iterable[Dict[str, Any]],
        matched: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> Dict[str, str]:
        """source external id -> destination category id"""
        category_map = {
            external_id: record["id"]
            for external_id, record in self.identity.index(categories).items()
        }
        for external_id, record in (matched or {}).items():
            category_map.setdefault(external_id, record["id"])
        return category_map

    def plan_category_links(
        self,
        products: Iterable[SourceProduct],
        category_map: Dict[str, str],
        existing_products: Iterable[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        """Additive category membership updates for products already migrated"""
        by_external_id = self.identity.index(existing_products)
        updates: List[Dict[str, Any]] = []
        for product in products:
            existing = by_external_id.get(product.external_id)
            if existing is None:
                continue
            current = existing_category_ids(existing)
            merged = _union(current, self._source_category_ids(product, category_map))
            if set(merged) == set(current):
                continue
            updates.append({"id": existing["id"], "category_ids": merged})
        return updates

    def _source_category_ids(
        self, product: SourceProduct, category_map: Dict[str, str]
    ) -> List[str]:
        return [
            category_map[ref.external_id]
            for ref in product.collections
            if ref.external_id in category_map
        ]

    # Products

    def plan_products(
        self,
        products: Iterable[SourceProduct],
        existing_products: Iterable[Dict[str, Any]],
        category_map: Dict[str, str],
        store: StoreContext,
    ) -> ProductPlan:
        by_external_id = self.identity.index(existing_products)
        plan = ProductPlan()
        planned: Set[str] = set()

        for product in products:
            external_id = product.external_id
            if external_id in planned:
                logger.warning("Product planned twice, keeping the first", external_id=external_id)
                continue
            planned.add(external_id)

            existing = by_external_id.get(external_id)
            payload = self._product_payload(product, existing, category_map, store)
            if existing is not None:
                plan.to_update.append({"id": existing["id"], **payload})
                plan.update_source_ids.append(product.id)
            else:
                plan.to_create.append(payload)
                plan.create_source_ids.append(product.id)

        logger.info("Planned products", **plan.summary())
        return plan

    def _product_payload(
        self,
        product: SourceProduct,
        existing: Optional[Dict[str, Any]],
        category_map: Dict[str, str],
        store: StoreContext,
    ) -> Dict[str, Any]:
        metafields = product.metafields
        metadata = {
            **((existing or {}).get("metadata") or {}),
            **_compact(
                {
                    "bx_code": get_string_from_metafield(metafields, "bx_code"),
                    "b2box_verified": get_boolean_from_metafield(metafields, "verified"),
                    "verified_video": get_string_from_metafield(metafields, "verified_video"),
                    "product_video": get_string_from_metafield(metafields, "product_video"),
                }
            ),
        }

        matched_variants = self._match_variants(
            product.variants, (existing or {}).get("variants") or []
        )

        payload = {
            "title": product.title,
            "description": product.description or "",
            "options": [
                {"title": option.name, "values": list(option.values)}
                for option in product.options
            ],
            "status": (
                PRODUCT_STATUS_DRAFT_DEST
                if (product.status or "").upper() == PRODUCT_STATUS_DRAFT
                else PRODUCT_STATUS_PUBLISHED_DEST
            ),
            "subtitle": get_string_from_metafield(metafields, "bx_code"),
            "sales_channels": (
                [{"id": store.default_sales_channel_id}]
                if store.default_sales_channel_id
                else []
            ),
            "images": [
                self.identity.stamp({"url": image.url}, extract_numeric_gid(image.id))
                for image in product.images
            ],
            "category_ids": _union(
                existing_category_ids(existing or {}),
                self._source_category_ids(product, category_map),
            ),
            "metadata": metadata,
            "variants": [
                self._variant_payload(variant, existing_variant, store)
                for variant, existing_variant in zip(product.variants, matched_variants)
            ],
        }
        return self.identity.stamp(payload, product.external_id)

    def _match_variants(
        self,
        variants: List[SourceVariant],
        existing_variants: List[Dict[str, Any]],
    ) -> List[Optional[Dict[str, Any]]]:
        """Existing destination variant for each source variant, or None.

        SKU equality wins. A variant whose SKU was cleared as a duplicate falls
        back to the identity stamped on the destination variant. A destination
        variant is matched at most once.
        """
        by_sku: Dict[str, Dict[str, Any]] = {}
        for record in existing_variants:
            if record.get("sku"):
                by_sku.setdefault(record["sku"], record)
        by_external_id = self.identity.index(existing_variants)

        claimed: Set[str] = set()
        matches: List[Optional[Dict[str, Any]]] = []
        for variant in variants:
            if variant.sku:
                match = by_sku.get(variant.sku)
            else:
                match = by_external_id.get(extract_numeric_gid(variant.id) or "")
            if match is not None and match.get("id") in claimed:
                match = None
            if match is not None:
                claimed.add(match.get("id"))
            matches.append(match)
        return matches

    def _variant_payload(
        self,
        variant: SourceVariant,
        existing: Optional[Dict[str, Any]],
        store: StoreContext,
    ) -> Dict[str, Any]:
        metafields = variant.metafields
        metadata = dict((existing or {}).get("metadata") or {})
        if existing is None and variant.inventory_quantity is not None:
            metadata["inventory_quantity"] = variant.inventory_quantity
        metadata.update(
            {
                "product": {
                    "width": get_float_from_metafield(metafields, "product_width"),
                    "length": get_float_from_metafield(metafields, "product_length"),
                    "height": get_float_from_metafield(metafields, "product_height"),
                    "weight": get_float_from_metafield(metafields, "product_weight"),
                },
                "pa_code": get_string_from_metafield(metafields, "pa_code"),
                "has_battery": get_boolean_from_metafield(metafields, "battery"),
                "is_clothing": get_boolean_from_metafield(metafields, "fabric"),
                "box": {
                    "width": get_float_from_metafield(metafields, "box_width"),
                    "height": get_float_from_metafield(metafields, "box_height"),
                    "length": get_float_from_metafield(metafields, "box_length"),
                    "weight": get_float_from_metafield(metafields, "box_weight"),
                },
            }
        )

        if existing is not None and existing.get("prices"):
            prices = existing["prices"]
        else:
            amount = variant.price_amount
            prices = (
                [
                    {"amount": amount, "currency_code": currency_code}
                    for currency_code in store.currency_codes
                ]
                if amount is not None
                else []
            )

        payload = {
            "title": variant.title,
            "sku": variant.sku,
            "manage_inventory": False,
            "prices": prices,
            "material": get_string_from_metafield(metafields, "material"),
            "options": dict(variant.selected_options),
            "metadata": self.identity.stamp(
                {"metadata": metadata}, extract_numeric_gid(variant.id)
            )["metadata"],
        }
        if existing is not None:
            payload["id"] = existing["id"]
        return payload
