from .bulk_operation import (
    BulkOperation,
    BulkOperationStatus,
    BulkRunState,
    IN_FLIGHT_STATUSES,
    TERMINAL_STATUSES,
)

__all__ = [
    "BulkOperation",
    "BulkOperationStatus",
    "BulkRunState",
    "IN_FLIGHT_STATUSES",
    "TERMINAL_STATUSES",
]
