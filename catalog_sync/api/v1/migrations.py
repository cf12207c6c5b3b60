"""
Shopify migration API

Triggers catalog migrations and lists recent runs. Triggering only queues
the work; outcomes are read back from the run listing.
"""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Request
from pydantic import BaseModel, Field

from catalog_sync.core.logging import get_logger
from catalog_sync.domains.migration.models import MigrationRun, MigrationType
from catalog_sync.domains.migration.services import MigrationService

logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/shopify/migrations", tags=["migrations"])


class MigrationTriggerRequest(BaseModel):
    type: List[MigrationType] = Field(
        ...,
        min_length=1,
        description="Pipelines to run: product, category or collection",
    )


class MigrationTriggerResponse(BaseModel):
    success: bool
    message: str
    run_ids: List[str] = []


class MigrationRunListResponse(BaseModel):
    runs: List[MigrationRun]
    count: int


def get_migration_service(request: Request) -> MigrationService:
    return request.app.state.migration_service


@router.post("", response_model=MigrationTriggerResponse, status_code=202)
async def trigger_migration(
    body: MigrationTriggerRequest, request: Request, background_tasks: BackgroundTasks
):
    """Queue the selected migrations and return immediately"""
    service = get_migration_service(request)
    runs = service.enqueue(body.type, trigger="api")
    background_tasks.add_task(service.execute, runs)

    logger.info(
        "Migration triggered",
        types=[t.value for t in body.type],
        run_ids=[run.id for run in runs],
    )
    return MigrationTriggerResponse(
        success=True,
        message=f"Queued {len(runs)} migration run(s)",
        run_ids=[run.id for run in runs],
    )


@router.get("", response_model=MigrationRunListResponse)
async def list_migrations(request: Request, limit: int = 50):
    """Recent migration runs, most recent first"""
    runs = get_migration_service(request).registry.list(limit=limit)
    return MigrationRunListResponse(runs=runs, count=len(runs))
