"""
Destination catalog services
"""

from .destination_client import DestinationAdminClient
from .identity import IdentityCorrelation, MetadataIdentityCorrelation
from .metafields import (
    get_boolean_from_metafield,
    get_float_from_metafield,
    get_string_from_metafield,
)
from .reconciliation import (
    CategoryPlan,
    ProductPlan,
    ReconciliationEngine,
    StoreContext,
)

__all__ = [
    "DestinationAdminClient",
    "IdentityCorrelation",
    "MetadataIdentityCorrelation",
    "get_boolean_from_metafield",
    "get_float_from_metafield",
    "get_string_from_metafield",
    "CategoryPlan",
    "ProductPlan",
    "ReconciliationEngine",
    "StoreContext",
]
