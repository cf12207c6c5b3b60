"""
Daily migration schedule
"""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

from catalog_sync.core.config.settings import settings
from catalog_sync.core.logging import get_logger
from catalog_sync.domains.migration.models import MigrationRun
from catalog_sync.shared.helpers import now_utc, seconds_until_next_hour
from .migration_service import MigrationService

logger = get_logger(__name__)


class DailyMigrationScheduler:
    """Fires the default migration selection once a day at a fixed UTC hour"""

    def __init__(
        self,
        service: MigrationService,
        hour: Optional[int] = None,
        types: Optional[List[str]] = None,
        clock: Callable[[], datetime] = now_utc,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.service = service
        self.hour = hour if hour is not None else settings.migration.MIGRATION_SCHEDULE_HOUR
        self.types = types or list(settings.migration.MIGRATION_DEFAULT_TYPES)
        self._clock = clock
        self._sleep = sleep
        self._shutdown_event = asyncio.Event()
        self._scheduler_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._scheduler_task is not None and not self._scheduler_task.done()

    def seconds_until_next_run(self) -> float:
        return seconds_until_next_hour(self._clock(), self.hour)

    def start(self) -> None:
        if self.is_running:
            return
        self._shutdown_event.clear()
        self._scheduler_task = asyncio.create_task(self._run_loop())
        logger.info("Migration scheduler started", hour_utc=self.hour, types=self.types)

    async def stop(self) -> None:
        self._shutdown_event.set()
        if self._scheduler_task is not None:
            self._scheduler_task.cancel()
            try:
                await self._scheduler_task
            except asyncio.CancelledError:
                pass
            self._scheduler_task = None
        logger.info("Migration scheduler stopped")

    async def run_once(self) -> List[MigrationRun]:
        return await self.service.run(self.types, trigger="schedule")

    async def _run_loop(self) -> None:
        while not self._shutdown_event.is_set():
            delay = self.seconds_until_next_run()
            logger.info("Next scheduled migration", in_seconds=round(delay))
            await self._sleep(delay)
            if self._shutdown_event.is_set():
                break
            try:
                await self.run_once()
            except Exception:
                logger.exception("Scheduled migration failed")
