"""
Health check endpoints
"""

import asyncio

from fastapi import APIRouter, Request
from pydantic import BaseModel

from catalog_sync.core.config import settings

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model"""

    status: str
    service: str
    version: str
    timestamp: float
    checks: dict


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Basic health check endpoint"""
    service = getattr(request.app.state, "migration_service", None)
    scheduler = getattr(request.app.state, "scheduler", None)
    return HealthResponse(
        status="healthy",
        service=settings.PROJECT_NAME,
        version=settings.VERSION,
        timestamp=asyncio.get_event_loop().time(),
        checks={
            "migration_running": bool(service and service.is_running),
            "scheduler_running": bool(scheduler and scheduler.is_running),
            "asset_storage_configured": settings.storage.is_configured,
        },
    )
