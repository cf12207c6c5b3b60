"""
Application-wide constants
"""

PROJECT_NAME = "Shopify Catalog Sync"
VERSION = "1.0.0"
DEFAULT_PORT = 8001

ENVIRONMENT_DEVELOPMENT = "development"
ENVIRONMENT_PRODUCTION = "production"

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "DEFAULT_PORT",
    "ENVIRONMENT_DEVELOPMENT",
    "ENVIRONMENT_PRODUCTION",
]
