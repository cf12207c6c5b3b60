"""
Bulk export client for the Shopify bulk operation protocol.

Shopify allows one bulk query per store at a time, so every export first
clears whatever operation is still in flight, submits its own query, polls
it to completion and downloads the JSONL result.
"""

import asyncio
import time
from typing import Awaitable, Callable, List, Optional, Tuple

from catalog_sync.core.config.settings import settings
from catalog_sync.core.exceptions import BulkExecutionError, BulkSubmitError
from catalog_sync.core.logging import get_logger
from catalog_sync.domains.shopify.interfaces import IShopifyAPIClient
from catalog_sync.domains.shopify.models import (
    BulkOperation,
    BulkOperationStatus,
    BulkRunState,
)
from .queries import (
    BULK_OPERATION_CANCEL_MUTATION,
    BULK_OPERATION_RUN_MUTATION,
    CURRENT_BULK_OPERATION_QUERY,
)

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]
ClockFn = Callable[[], float]


class BulkOperationClient:
    """Runs one bulk export at a time against a single store"""

    def __init__(
        self,
        api_client: IShopifyAPIClient,
        poll_interval_ms: Optional[int] = None,
        sleep: SleepFn = asyncio.sleep,
        clock: ClockFn = time.monotonic,
    ):
        self.api_client = api_client
        self.poll_interval_ms = (
            poll_interval_ms
            if poll_interval_ms is not None
            else settings.shopify.SHOPIFY_BULK_POLL_INTERVAL_MS
        )
        self._sleep = sleep
        self._clock = clock
        self.state = BulkRunState.IDLE
        self.state_history: List[Tuple[BulkRunState, float]] = []

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000.0

    def _transition(self, new_state: BulkRunState, **context) -> None:
        logger.info(
            f"Bulk operation state {self.state.value} -> {new_state.value}", **context
        )
        self.state = new_state
        self.state_history.append((new_state, self._clock()))

    def _reset(self) -> None:
        self.state = BulkRunState.IDLE
        self.state_history = [(BulkRunState.IDLE, self._clock())]

    async def get_current_operation(self) -> Optional[BulkOperation]:
        data = await self.api_client.execute_query(CURRENT_BULK_OPERATION_QUERY)
        return BulkOperation.from_payload(data.get("currentBulkOperation"))

    async def cancel_stale_operation(self) -> None:
        """Cancel an in-flight operation left by an earlier run and wait it out"""
        current = await self.get_current_operation()
        if current is None or not current.is_in_flight:
            return

        self._transition(
            BulkRunState.CANCELING, operation_id=current.id, status=current.status.value
        )
        if current.status != BulkOperationStatus.CANCELING:
            data = await self.api_client.execute_query(
                BULK_OPERATION_CANCEL_MUTATION, {"id": current.id}
            )
            user_errors = (data.get("bulkOperationCancel") or {}).get("userErrors") or []
            if user_errors:
                # The operation may have finished between the check and the cancel
                logger.warning(
                    "Bulk operation cancel reported errors",
                    operation_id=current.id,
                    errors=user_errors,
                )

        while True:
            await self._sleep(self.poll_interval_seconds)
            current = await self.get_current_operation()
            if current is None or current.is_terminal:
                break
            logger.debug("Waiting for stale bulk operation to cancel", status=current.status.value)

        self._transition(
            BulkRunState.CANCELED,
            final_status=current.status.value if current else None,
        )

    async def submit(self, query: str) -> BulkOperation:
        data = await self.api_client.execute_query(
            BULK_OPERATION_RUN_MUTATION, {"query": query}
        )
        result = data.get("bulkOperationRunQuery") or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            self._transition(BulkRunState.FAILED, errors=user_errors)
            messages = "; ".join(e.get("message", "Unknown error") for e in user_errors)
            raise BulkSubmitError(
                f"Bulk query rejected: {messages}", user_errors=user_errors
            )

        operation = BulkOperation.from_payload(result.get("bulkOperation"))
        if operation is None:
            self._transition(BulkRunState.FAILED)
            raise BulkSubmitError("Bulk query submission returned no operation")

        self._transition(BulkRunState.SUBMITTED, operation_id=operation.id)
        return operation

    async def wait_for_completion(self, operation_id: Optional[str]) -> Optional[str]:
        """Poll until our operation completes and return its result URL"""
        self._transition(BulkRunState.POLLING, operation_id=operation_id)
        first_poll = True

        while True:
            if not first_poll:
                await self._sleep(self.poll_interval_seconds)
            first_poll = False

            current = await self.get_current_operation()
            if current is None:
                self._transition(BulkRunState.FAILED, operation_id=operation_id)
                raise BulkExecutionError(
                    "Bulk operation disappeared while polling",
                    operation_id=operation_id,
                )

            if operation_id and current.id and current.id != operation_id:
                self._transition(BulkRunState.FAILED, operation_id=operation_id)
                raise BulkExecutionError(
                    f"Bulk operation {operation_id} was replaced by {current.id}",
                    operation_id=operation_id,
                    status=current.status.value,
                )

            if current.status == BulkOperationStatus.COMPLETED:
                self._transition(
                    BulkRunState.COMPLETED,
                    operation_id=current.id,
                    object_count=current.object_count,
                )
                return current.url

            if current.status == BulkOperationStatus.FAILED:
                self._transition(
                    BulkRunState.FAILED,
                    operation_id=current.id,
                    error_code=current.error_code,
                )
                raise BulkExecutionError(
                    f"Bulk operation failed with {current.error_code or 'unknown error'}",
                    platform_error_code=current.error_code,
                    operation_id=current.id,
                    status=current.status.value,
                )

            if current.status in (
                BulkOperationStatus.CANCELED,
                BulkOperationStatus.EXPIRED,
            ):
                self._transition(BulkRunState.FAILED, operation_id=current.id)
                raise BulkExecutionError(
                    f"Bulk operation ended as {current.status.value}",
                    platform_error_code=current.error_code,
                    operation_id=current.id,
                    status=current.status.value,
                )

    async def run_bulk_export(self, query: str) -> List[str]:
        """Run a bulk query end to end and return the non-empty JSONL lines"""
        self._reset()
        await self.cancel_stale_operation()
        operation = await self.submit(query)
        url = await self.wait_for_completion(operation.id)

        if not url:
            logger.info("Bulk operation completed without results")
            return []

        body = await self.api_client.fetch_text(url)
        lines = [line for line in body.splitlines() if line.strip()]
        logger.info("Bulk export downloaded", records=len(lines))
        return lines
