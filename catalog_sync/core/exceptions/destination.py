"""
Destination platform exceptions
"""

from typing import Optional

from .base import CatalogSyncException


class DestinationError(CatalogSyncException):
    """Raised when the destination platform cannot be queried or written"""

    def __init__(
        self,
        message: str,
        entity: str = "unknown",
        operation: str = "unknown",
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            "DESTINATION_ERROR",
            {"entity": entity, "operation": operation, "status_code": status_code},
            cause,
        )
        self.entity = entity
        self.operation = operation
        self.status_code = status_code
