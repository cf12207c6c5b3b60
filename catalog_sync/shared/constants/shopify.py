"""
Shopify-specific constants
"""

DEFAULT_SHOPIFY_API_VERSION = "2025-01"
GRAPHQL_ENDPOINT_TEMPLATE = "/admin/api/{version}/graphql.json"

# Bulk operations
DEFAULT_BULK_POLL_INTERVAL_MS = 2000
BULK_PARENT_ID_FIELD = "__parentId"
BULK_TYPENAME_FIELD = "__typename"

# Source status values
PRODUCT_STATUS_DRAFT = "DRAFT"

__all__ = [
    "DEFAULT_SHOPIFY_API_VERSION",
    "GRAPHQL_ENDPOINT_TEMPLATE",
    "DEFAULT_BULK_POLL_INTERVAL_MS",
    "BULK_PARENT_ID_FIELD",
    "BULK_TYPENAME_FIELD",
    "PRODUCT_STATUS_DRAFT",
]
