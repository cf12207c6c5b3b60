"""
Migration services
"""

from .migration_service import ExecutionContext, MigrationService
from .run_registry import MigrationRunRegistry
from .scheduler import DailyMigrationScheduler

__all__ = [
    "ExecutionContext",
    "MigrationService",
    "MigrationRunRegistry",
    "DailyMigrationScheduler",
]
