"""
Tests for the migration HTTP API
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from catalog_sync.domains.migration.models import MigrationRun, MigrationType
from catalog_sync.domains.migration.services import MigrationRunRegistry
from catalog_sync.main import create_app


class TestMigrationsAPI:
    @pytest.fixture
    def registry(self):
        return MigrationRunRegistry(limit=10)

    @pytest.fixture
    def service(self, registry):
        service = MagicMock()
        service.registry = registry
        service.is_running = False
        service.enqueue.side_effect = lambda types, trigger: [
            registry.add(MigrationRun(type=MigrationType(t).pipeline, trigger=trigger))
            for t in types
        ]
        service.execute = AsyncMock(side_effect=lambda runs: runs)
        return service

    @pytest.fixture
    def client(self, service):
        app = create_app()
        app.state.migration_service = service
        app.state.scheduler = None
        return TestClient(app)

    def test_trigger_acknowledges_and_runs_in_background(self, client, service):
        response = client.post("/api/v1/shopify/migrations", json={"type": ["product"]})

        assert response.status_code == 202
        body = response.json()
        assert body["success"] is True
        assert len(body["run_ids"]) == 1
        service.enqueue.assert_called_once_with([MigrationType.PRODUCT], trigger="api")
        service.execute.assert_awaited_once()

    def test_collection_is_accepted_as_category(self, client, service):
        response = client.post("/api/v1/shopify/migrations", json={"type": ["collection"]})

        assert response.status_code == 202
        runs = service.execute.await_args.args[0]
        assert runs[0].type == MigrationType.CATEGORY

    @pytest.mark.parametrize(
        "body", [{"type": []}, {"type": ["orders"]}, {}, {"type": "product"}]
    )
    def test_invalid_selection_is_rejected(self, client, service, body):
        response = client.post("/api/v1/shopify/migrations", json=body)

        assert response.status_code == 422
        service.enqueue.assert_not_called()

    def test_list_returns_recent_runs_first(self, client, registry):
        older = registry.add(MigrationRun(type=MigrationType.CATEGORY))
        newer = registry.add(MigrationRun(type=MigrationType.PRODUCT))

        response = client.get("/api/v1/shopify/migrations")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert [run["id"] for run in body["runs"]] == [newer.id, older.id]
        assert body["runs"][0]["status"] == "pending"
        assert body["runs"][0]["type"] == "product"
        assert body["runs"][0]["duration_seconds"] is None

    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["migration_running"] is False
