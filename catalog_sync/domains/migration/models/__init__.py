from .migration_run import PIPELINE_ORDER, MigrationRun, MigrationType, RunStatus

__all__ = ["PIPELINE_ORDER", "MigrationRun", "MigrationType", "RunStatus"]
