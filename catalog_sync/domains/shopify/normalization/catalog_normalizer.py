"""
Catalog normalization: cleans titles and removes the duplicates the
destination would reject.

Upstream catalogs pick up duplicate titles and SKUs from manual data entry.
The destination enforces uniqueness where Shopify does not, so duplicates
are resolved here, first occurrence wins, and every discard is listed in
the ``NormalizationReport`` of the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

from catalog_sync.core.logging import get_logger
from catalog_sync.shared.helpers import strip_emoji
from .canonical_models import SourceCollection, SourceProduct, SourceVariant
from .graphql import GraphQLCollectionAdapter, GraphQLProductAdapter

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class NormalizationReport:
    duplicate_titles: Dict[str, List[str]] = field(default_factory=dict)
    cleared_skus: Dict[str, List[str]] = field(default_factory=dict)
    pruned_option_selections: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def duplicates_removed(self) -> int:
        return sum(len(ids) for ids in self.duplicate_titles.values())

    @property
    def skus_cleared(self) -> int:
        return sum(len(ids) for ids in self.cleared_skus.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "duplicates_removed": self.duplicates_removed,
            "duplicate_titles": self.duplicate_titles,
            "skus_cleared": self.skus_cleared,
            "cleared_skus": self.cleared_skus,
            "pruned_option_selections": self.pruned_option_selections,
        }


@dataclass
class NormalizationResult(Generic[T]):
    items: List[T]
    report: NormalizationReport


def clean_title(title: Optional[str]) -> str:
    """Emoji-free trimmed title; an all-emoji title keeps its raw trimmed form"""
    cleaned = strip_emoji(title)
    return cleaned or (title or "").strip()


class CatalogNormalizer:
    """Deduplicates and cleans canonical source entities"""

    def __init__(self):
        self.product_adapter = GraphQLProductAdapter()
        self.collection_adapter = GraphQLCollectionAdapter()

    def normalize_products(
        self, products: Iterable[SourceProduct]
    ) -> NormalizationResult[SourceProduct]:
        report = NormalizationReport()
        kept: List[SourceProduct] = []
        seen_titles: Dict[str, str] = {}

        for product in products:
            title = clean_title(product.title)
            if title in seen_titles:
                report.duplicate_titles.setdefault(title, []).append(product.id)
                logger.info(
                    "Dropping duplicate product",
                    title=title,
                    dropped_id=product.id,
                    kept_id=seen_titles[title],
                )
                continue
            seen_titles[title] = product.id
            kept.append(
                product.model_copy(
                    update={
                        "title": title,
                        "variants": self._prune_option_selections(product, report),
                    }
                )
            )

        self._clear_duplicate_skus(kept, report)

        if report.duplicates_removed:
            logger.warning(
                f"Removed {report.duplicates_removed} duplicate products",
                titles=list(report.duplicate_titles),
            )
        if report.skus_cleared:
            logger.warning(
                f"Cleared {report.skus_cleared} duplicate variant SKUs",
                skus=list(report.cleared_skus),
            )
        return NormalizationResult(items=kept, report=report)

    def normalize_collections(
        self, collections: Iterable[SourceCollection]
    ) -> NormalizationResult[SourceCollection]:
        report = NormalizationReport()
        kept: List[SourceCollection] = []
        seen_titles: Dict[str, str] = {}

        for collection in collections:
            title = clean_title(collection.title)
            if title in seen_titles:
                report.duplicate_titles.setdefault(title, []).append(collection.id)
                continue
            seen_titles[title] = collection.id
            kept.append(collection.model_copy(update={"title": title}))

        if report.duplicates_removed:
            logger.warning(
                f"Removed {report.duplicates_removed} duplicate collections",
                titles=list(report.duplicate_titles),
            )
        return NormalizationResult(items=kept, report=report)

    def normalize_product_nodes(
        self, nodes: Iterable[Dict[str, Any]]
    ) -> NormalizationResult[SourceProduct]:
        return self.normalize_products(
            self.product_adapter.to_canonical(node) for node in nodes
        )

    def normalize_collection_nodes(
        self, nodes: Iterable[Dict[str, Any]]
    ) -> NormalizationResult[SourceCollection]:
        return self.normalize_collections(
            self.collection_adapter.to_canonical(node) for node in nodes
        )

    def _prune_option_selections(
        self, product: SourceProduct, report: NormalizationReport
    ) -> List[SourceVariant]:
        declared = {option.name for option in product.options}
        variants: List[SourceVariant] = []
        for variant in product.variants:
            undeclared = [name for name in variant.selected_options if name not in declared]
            if not undeclared:
                variants.append(variant)
                continue
            report.pruned_option_selections[variant.id] = undeclared
            logger.warning(
                "Pruned undeclared option selections",
                product_id=product.id,
                variant_id=variant.id,
                options=undeclared,
            )
            variants.append(
                variant.model_copy(
                    update={
                        "selected_options": {
                            name: value
                            for name, value in variant.selected_options.items()
                            if name in declared
                        }
                    }
                )
            )
        return variants

    def _clear_duplicate_skus(
        self, products: List[SourceProduct], report: NormalizationReport
    ) -> None:
        seen_skus = set()
        for index, product in enumerate(products):
            variants: List[SourceVariant] = []
            changed = False
            for variant in product.variants:
                sku = (variant.sku or "").strip() or None
                if sku is not None and sku in seen_skus:
                    report.cleared_skus.setdefault(sku, []).append(variant.id)
                    sku = None
                elif sku is not None:
                    seen_skus.add(sku)
                if sku != variant.sku:
                    variant = variant.model_copy(update={"sku": sku})
                    changed = True
                variants.append(variant)
            if changed:
                products[index] = product.model_copy(update={"variants": variants})
