"""
Migration orchestration.

A migration run is sequential: bulk export, tree assembly, normalization,
image relocation, reconciliation and destination writes. Runs of one
request execute one after another, categories before products, and never
overlap with another request because Shopify only allows one bulk
operation per store.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from catalog_sync.core.exceptions import CatalogSyncException, DestinationError
from catalog_sync.core.logging import get_logger
from catalog_sync.domains.assets.services import AssetRelocator
from catalog_sync.domains.catalog.interfaces import (
    CATEGORY_ENTITY,
    PRODUCT_ENTITY,
    STORE_ENTITY,
    BatchWriteResult,
    IDestinationStore,
    failed_batch,
)
from catalog_sync.domains.catalog.services import ReconciliationEngine, StoreContext
from catalog_sync.domains.catalog.services.reconciliation import category_handle
from catalog_sync.domains.migration.models import (
    PIPELINE_ORDER,
    MigrationRun,
    MigrationType,
    RunStatus,
)
from catalog_sync.domains.shopify.normalization import (
    AssemblyResult,
    CatalogNormalizer,
    EntityKind,
    FlatRecordTreeBuilder,
    NormalizationResult,
    SourceProduct,
)
from catalog_sync.domains.shopify.services import (
    COLLECTIONS_BULK_QUERY,
    PRODUCTS_BULK_QUERY,
    BulkOperationClient,
)
from catalog_sync.shared.decorators import async_timing
from catalog_sync.shared.helpers import now_utc
from .run_registry import MigrationRunRegistry

logger = get_logger(__name__)

CATEGORY_FIELDS = ["id", "handle", "metadata"]
PRODUCT_FIELDS = [
    "id",
    "metadata",
    "categories.id",
    "variants.id",
    "variants.sku",
    "variants.metadata",
    "variants.prices.*",
]
STORE_FIELDS = ["supported_currencies.*", "default_sales_channel_id"]


@dataclass
class ProductExport:
    assembly: AssemblyResult
    normalized: NormalizationResult[SourceProduct]

    @property
    def products(self) -> List[SourceProduct]:
        return self.normalized.items


class ExecutionContext:
    """State shared by the runs of one execution"""

    def __init__(self):
        self.product_export: Optional[ProductExport] = None


class MigrationService:
    """Runs product and category migrations and records their outcome"""

    def __init__(
        self,
        bulk_client: BulkOperationClient,
        destination: IDestinationStore,
        registry: Optional[MigrationRunRegistry] = None,
        relocator: Optional[AssetRelocator] = None,
        engine: Optional[ReconciliationEngine] = None,
        tree_builder: Optional[FlatRecordTreeBuilder] = None,
        normalizer: Optional[CatalogNormalizer] = None,
    ):
        self.bulk_client = bulk_client
        self.destination = destination
        self.registry = registry or MigrationRunRegistry()
        self.relocator = relocator
        self.engine = engine or ReconciliationEngine()
        self.identity = self.engine.identity
        self.tree_builder = tree_builder or FlatRecordTreeBuilder()
        self.normalizer = normalizer or CatalogNormalizer()
        self._lock = asyncio.Lock()
        self._pipelines = {
            MigrationType.CATEGORY: self.migrate_categories,
            MigrationType.PRODUCT: self.migrate_products,
        }

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def enqueue(
        self, types: Iterable[Any], trigger: str = "manual"
    ) -> List[MigrationRun]:
        """Register one pending run per selected pipeline"""
        selected = {MigrationType(t).pipeline for t in types}
        runs = [
            self.registry.add(MigrationRun(type=pipeline, trigger=trigger))
            for pipeline in PIPELINE_ORDER
            if pipeline in selected
        ]
        logger.info(
            "Queued migration runs",
            trigger=trigger,
            runs=[run.type.value for run in runs],
        )
        return runs

    async def execute(self, runs: List[MigrationRun]) -> List[MigrationRun]:
        async with self._lock:
            context = ExecutionContext()
            for run in runs:
                await self._execute_run(run, context)
        return runs

    async def run(
        self, types: Iterable[Any], trigger: str = "manual"
    ) -> List[MigrationRun]:
        return await self.execute(self.enqueue(types, trigger))

    async def _execute_run(self, run: MigrationRun, context: ExecutionContext) -> None:
        run.status = RunStatus.RUNNING
        run.started_at = now_utc()
        logger.info("Migration run started", run_id=run.id, type=run.type.value)
        try:
            run.summary = await self._pipelines[run.type](context)
            run.status = RunStatus.SUCCEEDED
            logger.info(
                "Migration run succeeded",
                run_id=run.id,
                type=run.type.value,
                duration_seconds=round((now_utc() - run.started_at).total_seconds(), 2),
                summary=run.summary,
            )
        except CatalogSyncException as e:
            run.status = RunStatus.FAILED
            run.error = e.to_dict()
            logger.error(
                f"Migration run failed: {e}",
                run_id=run.id,
                type=run.type.value,
            )
        except Exception as e:
            run.status = RunStatus.FAILED
            run.error = {"message": str(e), "exception_type": type(e).__name__}
            logger.exception(
                "Migration run failed unexpectedly", run_id=run.id, type=run.type.value
            )
        finally:
            run.finished_at = now_utc()

    # Source side

    async def _load_products(self, context: ExecutionContext) -> ProductExport:
        if context.product_export is None:
            lines = await self.bulk_client.run_bulk_export(PRODUCTS_BULK_QUERY)
            assembly = self.tree_builder.assemble(lines, EntityKind.PRODUCT)
            normalized = self.normalizer.normalize_product_nodes(assembly.roots)
            context.product_export = ProductExport(assembly=assembly, normalized=normalized)
        return context.product_export

    # Destination side

    async def _query_by_external_ids(
        self, entity: str, fields: List[str], external_ids: Iterable[str]
    ) -> List[Dict[str, Any]]:
        ids = [i for i in dict.fromkeys(external_ids) if i]
        records: List[Dict[str, Any]] = []
        page_size = self.destination.page_size
        for start in range(0, len(ids), page_size):
            records.extend(
                await self.destination.query_all(
                    entity, fields, self.identity.filters_for(ids[start : start + page_size])
                )
            )
        return records

    async def _existing_products(
        self, products: List[SourceProduct]
    ) -> List[Dict[str, Any]]:
        return await self._query_by_external_ids(
            PRODUCT_ENTITY, PRODUCT_FIELDS, (p.external_id for p in products)
        )

    async def _write(
        self, operation: str, entity: str, payloads: List[Dict[str, Any]]
    ) -> BatchWriteResult:
        """Apply a write set; a failed write fails its items, not the run"""
        write = getattr(self.destination, operation)
        try:
            return await write(entity, payloads)
        except DestinationError as e:
            logger.error(
                f"Destination {operation} failed, continuing with the rest of the run",
                entity=entity,
                items=len(payloads),
                error=str(e),
            )
            return failed_batch(payloads, e)

    async def _store_context(self) -> StoreContext:
        result = await self.destination.query(STORE_ENTITY, STORE_FIELDS, take=1)
        return StoreContext.from_record(result.data[0] if result.data else None)

    # Pipelines

    @async_timing(threshold_ms=600_000)
    async def migrate_categories(self, context: ExecutionContext) -> Dict[str, Any]:
        lines = await self.bulk_client.run_bulk_export(COLLECTIONS_BULK_QUERY)
        assembly = self.tree_builder.assemble(lines, EntityKind.COLLECTION)
        normalized = self.normalizer.normalize_collection_nodes(assembly.roots)
        collections = normalized.items
        external_ids = [c.external_id for c in collections]

        existing: Dict[str, Dict[str, Any]] = {}
        handles = [category_handle(c) for c in collections]
        if handles:
            for record in await self.destination.query_all(
                CATEGORY_ENTITY, CATEGORY_FIELDS, {"handle": handles}
            ):
                existing.setdefault(record["id"], record)
        for record in await self._query_by_external_ids(
            CATEGORY_ENTITY, CATEGORY_FIELDS, external_ids
        ):
            existing.setdefault(record["id"], record)

        plan = self.engine.plan_categories(collections, existing.values())
        created = await self._write("create", CATEGORY_ENTITY, plan.to_create)
        stamped = await self._write("update", CATEGORY_ENTITY, plan.to_stamp)

        categories = await self._query_by_external_ids(
            CATEGORY_ENTITY, CATEGORY_FIELDS, external_ids
        )
        category_map = self.engine.build_category_map(categories, plan.matched)

        export = await self._load_products(context)
        existing_products = await self._existing_products(export.products)
        links = self.engine.plan_category_links(
            export.products, category_map, existing_products
        )
        linked = await self._write("update", PRODUCT_ENTITY, links)

        return {
            "collections": len(collections),
            "created": len(created.succeeded),
            "create_failed": len(created.failed),
            "stamped": len(stamped.succeeded),
            "matched": len(plan.matched),
            "conflicts": len(plan.conflicts),
            "product_links": len(linked.succeeded),
            "link_failed": len(linked.failed),
            "assembly": assembly.summary(),
            "normalization": normalized.report.to_dict(),
        }

    @async_timing(threshold_ms=600_000)
    async def migrate_products(self, context: ExecutionContext) -> Dict[str, Any]:
        export = await self._load_products(context)
        products = export.products

        images: Dict[str, int] = {}
        if self.relocator is not None:
            relocation = await self.relocator.relocate_product_images(products)
            products = relocation.products
            images = relocation.summary

        store = await self._store_context()
        category_ids = [
            ref.external_id for product in products for ref in product.collections
        ]
        categories = await self._query_by_external_ids(
            CATEGORY_ENTITY, CATEGORY_FIELDS, category_ids
        )
        category_map = self.engine.build_category_map(categories)
        existing_products = await self._existing_products(products)

        plan = self.engine.plan_products(products, existing_products, category_map, store)
        created = await self._write("create", PRODUCT_ENTITY, plan.to_create)
        updated = await self._write("update", PRODUCT_ENTITY, plan.to_update)

        return {
            "products": len(products),
            "created": len(created.succeeded),
            "create_failed": len(created.failed),
            "updated": len(updated.succeeded),
            "update_failed": len(updated.failed),
            "images": images,
            "assembly": export.assembly.summary(),
            "normalization": export.normalized.report.to_dict(),
        }
