"""
Bulk export assembly and catalog normalization
"""

from .canonical_models import (
    CollectionRef,
    SourceCollection,
    SourceImage,
    SourceOption,
    SourceProduct,
    SourceVariant,
)
from .catalog_normalizer import (
    CatalogNormalizer,
    NormalizationReport,
    NormalizationResult,
    clean_title,
)
from .flat_records import FlatRecord, RecordKind, classify_record
from .graphql import GraphQLCollectionAdapter, GraphQLProductAdapter
from .tree_builder import AssemblyResult, EntityKind, FlatRecordTreeBuilder

__all__ = [
    "CollectionRef",
    "SourceCollection",
    "SourceImage",
    "SourceOption",
    "SourceProduct",
    "SourceVariant",
    "CatalogNormalizer",
    "NormalizationReport",
    "NormalizationResult",
    "clean_title",
    "FlatRecord",
    "RecordKind",
    "classify_record",
    "GraphQLCollectionAdapter",
    "GraphQLProductAdapter",
    "AssemblyResult",
    "EntityKind",
    "FlatRecordTreeBuilder",
]
