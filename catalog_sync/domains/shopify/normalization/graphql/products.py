from __future__ import annotations

from typing import Any, Dict, List, Optional

from catalog_sync.domains.shopify.normalization.base_adapter import (
    BaseAdapter,
    child_nodes,
    flatten_metafields,
    flatten_selected_options,
)
from catalog_sync.domains.shopify.normalization.canonical_models import (
    CollectionRef,
    SourceImage,
    SourceOption,
    SourceProduct,
    SourceVariant,
)


def _to_int(value: Any) -> Optional[int]:
    try:
        if value is None:
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_price(value: Any) -> Optional[str]:
    if value is None:
        return None
    # priceV2-style objects carry the amount separately
    if isinstance(value, dict):
        value = value.get("amount")
    return None if value is None else str(value)


class GraphQLProductAdapter(BaseAdapter):
    def to_canonical(self, node: Dict[str, Any]) -> SourceProduct:
        raw_tags = node.get("tags") or []
        tags: List[str] = list(raw_tags) if isinstance(raw_tags, list) else []

        options = [
            SourceOption(
                name=option.get("name"),
                values=[str(v) for v in option.get("values") or []],
            )
            for option in node.get("options") or []
            if option.get("name")
        ]

        images = [
            SourceImage(id=image.get("id"), url=image["url"], alt=image.get("altText"))
            for image in child_nodes(node.get("images"))
            if image.get("url")
        ]

        variants = [
            SourceVariant(
                id=variant.get("id"),
                title=variant.get("title"),
                sku=variant.get("sku"),
                price=_to_price(variant.get("price")),
                inventory_quantity=_to_int(variant.get("inventoryQuantity")),
                selected_options=flatten_selected_options(
                    variant.get("selectedOptions") or []
                ),
                metafields=flatten_metafields(variant.get("metafields")),
            )
            for variant in child_nodes(node.get("variants"))
            if variant.get("id")
        ]

        collections = [
            CollectionRef(
                id=collection["id"],
                title=collection.get("title"),
                handle=collection.get("handle"),
            )
            for collection in child_nodes(node.get("collections"))
            if collection.get("id")
        ]

        return SourceProduct(
            id=node["id"],
            title=node.get("title") or "",
            handle=node.get("handle"),
            status=node.get("status"),
            description=node.get("descriptionHtml") or node.get("description"),
            options=options,
            tags=tags,
            metafields=flatten_metafields(node.get("metafields")),
            images=images,
            variants=variants,
            collections=collections,
        )
