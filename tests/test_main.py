"""Tests for application wiring: startup sweep dispatch and health check."""

from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app, dispatch_startup_sweep


def test_startup_sweep_is_queued_when_enabled():
    with (
        patch.object(settings, "ORPHAN_CLEANUP_RUN_ON_STARTUP", True),
        patch("app.main.reconcile_orphaned_files_task") as mock_task,
    ):
        mock_task.delay.return_value = MagicMock(id="task-1")

        dispatch_startup_sweep()

    mock_task.delay.assert_called_once_with(limit=settings.ORPHAN_CLEANUP_BATCH_LIMIT)


def test_startup_sweep_skipped_when_disabled():
    with (
        patch.object(settings, "ORPHAN_CLEANUP_RUN_ON_STARTUP", False),
        patch("app.main.reconcile_orphaned_files_task") as mock_task,
    ):
        dispatch_startup_sweep()

    mock_task.delay.assert_not_called()


def test_startup_sweep_survives_broker_outage():
    with (
        patch.object(settings, "ORPHAN_CLEANUP_RUN_ON_STARTUP", True),
        patch("app.main.reconcile_orphaned_files_task") as mock_task,
    ):
        mock_task.delay.side_effect = ConnectionError("redis unavailable")

        dispatch_startup_sweep()

    mock_task.delay.assert_called_once()


def test_root_and_request_id_echo():
    with TestClient(app) as client:
        response = client.get("/", headers={"X-Request-ID": "req-42"})

    assert response.status_code == 200
    assert response.json()["status"] == "running"
    assert response.headers["X-Request-ID"] == "req-42"


def test_health_reports_database():
    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "healthy"}
