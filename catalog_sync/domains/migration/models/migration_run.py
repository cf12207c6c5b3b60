"""
Migration run models
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field

from catalog_sync.shared.helpers import now_utc


class MigrationType(str, Enum):
    PRODUCT = "product"
    CATEGORY = "category"
    # Shopify collections become destination categories
    COLLECTION = "collection"

    @property
    def pipeline(self) -> "MigrationType":
        if self == MigrationType.COLLECTION:
            return MigrationType.CATEGORY
        return self


# Pipelines that other pipelines depend on run first
PIPELINE_ORDER = (MigrationType.CATEGORY, MigrationType.PRODUCT)


class RunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class MigrationRun(BaseModel):
    """One execution of one migration pipeline"""

    id: str = Field(default_factory=lambda: uuid4().hex)
    type: MigrationType
    status: RunStatus = RunStatus.PENDING
    trigger: str = "manual"
    created_at: datetime = Field(default_factory=now_utc)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    summary: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[Dict[str, Any]] = None

    @computed_field
    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()
