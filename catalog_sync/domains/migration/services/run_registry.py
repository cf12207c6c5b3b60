"""
In-memory history of migration runs
"""

from collections import deque
from typing import Deque, List, Optional

from catalog_sync.core.config.settings import settings
from catalog_sync.domains.migration.models import MigrationRun


class MigrationRunRegistry:
    """Bounded run history; the oldest runs fall off once the limit is reached"""

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit or settings.migration.MIGRATION_RUN_HISTORY_LIMIT
        self._runs: Deque[MigrationRun] = deque(maxlen=self.limit)

    def add(self, run: MigrationRun) -> MigrationRun:
        self._runs.append(run)
        return run

    def get(self, run_id: str) -> Optional[MigrationRun]:
        for run in self._runs:
            if run.id == run_id:
                return run
        return None

    def list(self, limit: Optional[int] = None) -> List[MigrationRun]:
        """Runs, most recent first"""
        runs = list(reversed(self._runs))
        return runs[:limit] if limit else runs

    def __len__(self) -> int:
        return len(self._runs)
