"""
Shopify source-platform exceptions
"""

from typing import Any, Dict, List, Optional

from .base import CatalogSyncException


class ShopifyAPIError(CatalogSyncException):
    """Raised when a request to the Shopify Admin API fails"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            "SHOPIFY_API_ERROR",
            {"status_code": status_code, "errors": errors or []},
            cause,
        )
        self.status_code = status_code


class BulkSubmitError(CatalogSyncException):
    """Raised when Shopify rejects a bulk query at submission time"""

    def __init__(
        self,
        message: str,
        user_errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(
            message,
            "BULK_SUBMIT_ERROR",
            {"user_errors": user_errors or []},
        )
        self.user_errors = user_errors or []


class BulkExecutionError(CatalogSyncException):
    """Raised when a bulk operation fails or its state becomes inconsistent.

    ``error_code`` carries Shopify's own error code (for example
    ``INTERNAL_SERVER_ERROR``) when the platform reported one.
    """

    def __init__(
        self,
        message: str,
        platform_error_code: Optional[str] = None,
        operation_id: Optional[str] = None,
        status: Optional[str] = None,
    ):
        super().__init__(
            message,
            platform_error_code or "BULK_EXECUTION_ERROR",
            {"operation_id": operation_id, "status": status},
        )
        self.platform_error_code = platform_error_code
        self.operation_id = operation_id
        self.status = status
