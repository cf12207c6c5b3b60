from __future__ import annotations

from typing import Any, Dict

from catalog_sync.domains.shopify.normalization.base_adapter import (
    BaseAdapter,
    child_nodes,
)
from catalog_sync.domains.shopify.normalization.canonical_models import (
    SourceCollection,
)


class GraphQLCollectionAdapter(BaseAdapter):
    def to_canonical(self, node: Dict[str, Any]) -> SourceCollection:
        product_ids = [
            product["id"]
            for product in child_nodes(node.get("products"))
            if product.get("id")
        ]
        return SourceCollection(
            id=node["id"],
            title=node.get("title") or "",
            handle=node.get("handle"),
            description=node.get("description") or node.get("descriptionHtml"),
            product_ids=product_ids,
        )
