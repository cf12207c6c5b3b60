"""
Main application for the Shopify catalog sync service
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_sync.core.config.settings import settings
from catalog_sync.core.logging import LoggingConfig, get_logger, setup_logging
from catalog_sync.domains.assets.services import AssetRelocator, S3ObjectStorage
from catalog_sync.domains.catalog.services import DestinationAdminClient
from catalog_sync.domains.migration.services import (
    DailyMigrationScheduler,
    MigrationService,
)
from catalog_sync.domains.shopify.services import (
    BaseShopifyAPIClient,
    BulkOperationClient,
)

from catalog_sync.api.v1.health import router as health_router
from catalog_sync.api.v1.migrations import router as migrations_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    setup_logging(LoggingConfig.from_settings(settings.logging))
    settings.validate_configuration()

    shopify_client = BaseShopifyAPIClient()
    destination = DestinationAdminClient()
    storage = S3ObjectStorage.from_settings()
    if storage is None:
        logger.warning("S3 storage not configured, product images keep their Shopify URLs")
    relocator = AssetRelocator(storage)

    service = MigrationService(
        BulkOperationClient(shopify_client),
        destination,
        relocator=relocator,
    )
    app.state.migration_service = service

    scheduler = None
    if settings.migration.MIGRATION_SCHEDULE_ENABLED:
        scheduler = DailyMigrationScheduler(service)
        scheduler.start()
    app.state.scheduler = scheduler

    logger.info(
        "Catalog sync service started",
        environment=settings.ENVIRONMENT,
        store=settings.shopify.SHOPIFY_STORE_DOMAIN,
    )

    yield

    # Shutdown
    if scheduler is not None:
        await scheduler.stop()
    await relocator.close()
    await destination.close()
    await shopify_client.close()
    logger.info("Catalog sync service stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Shopify to destination catalog reconciliation",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    app.include_router(health_router)
    app.include_router(migrations_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
