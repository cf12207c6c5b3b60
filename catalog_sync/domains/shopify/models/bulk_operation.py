"""
Bulk operation models
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class BulkOperationStatus(str, Enum):
    """Status values reported by Shopify for a bulk operation"""

    CREATED = "CREATED"
    RUNNING = "RUNNING"
    CANCELING = "CANCELING"
    CANCELED = "CANCELED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    EXPIRED = "EXPIRED"


IN_FLIGHT_STATUSES = frozenset(
    {
        BulkOperationStatus.CREATED,
        BulkOperationStatus.RUNNING,
        BulkOperationStatus.CANCELING,
    }
)

TERMINAL_STATUSES = frozenset(
    {
        BulkOperationStatus.CANCELED,
        BulkOperationStatus.COMPLETED,
        BulkOperationStatus.FAILED,
        BulkOperationStatus.EXPIRED,
    }
)


class BulkRunState(str, Enum):
    """Local state of one export run.

    IDLE -> CANCELING -> CANCELED covers clearing a stale operation,
    SUBMITTED -> POLLING -> COMPLETED | FAILED covers our own operation.
    """

    IDLE = "IDLE"
    CANCELING = "CANCELING"
    CANCELED = "CANCELED"
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class BulkOperation(BaseModel):
    """Snapshot of ``currentBulkOperation``"""

    id: Optional[str] = None
    status: BulkOperationStatus
    error_code: Optional[str] = Field(default=None, alias="errorCode")
    url: Optional[str] = None
    object_count: Optional[str] = Field(default=None, alias="objectCount")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> Optional["BulkOperation"]:
        if not payload:
            return None
        return cls.model_validate(payload)

    @property
    def is_in_flight(self) -> bool:
        return self.status in IN_FLIGHT_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
