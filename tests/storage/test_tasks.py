"""Tests for the reconciliation Celery task, run eagerly in-process."""

from unittest.mock import MagicMock, patch

import pytest

from app.core.celery_app import celery_app
from app.core.config import settings
from app.storage.services.cleanup_service import CleanupResult
from app.storage.tasks import reconcile_orphaned_files_task


@pytest.fixture
def mock_session():
    session = MagicMock()
    with patch("app.storage.tasks.SessionLocal", return_value=session):
        yield session


def test_runs_sweep_and_closes_session(mock_session):
    result = CleanupResult(processed=3, resolved=1, not_found=1)
    result.add_failure(None, None, "boom")

    with patch("app.storage.tasks.CleanupService") as mock_service:
        mock_service.return_value.process_orphaned_files.return_value = result

        summary = reconcile_orphaned_files_task(limit=7)

    mock_service.assert_called_once_with(mock_session)
    mock_service.return_value.process_orphaned_files.assert_called_once_with(7)
    assert summary["processed"] == 3
    assert summary["resolved"] == 1
    assert summary["not_found"] == 1
    assert summary["failed"] == 1
    assert summary["errors"] == [{"record_id": None, "file_id": None, "error": "boom"}]
    assert summary["execution_time_seconds"] >= 0
    mock_session.close.assert_called_once()


def test_defaults_to_configured_batch_limit(mock_session):
    with patch("app.storage.tasks.CleanupService") as mock_service:
        mock_service.return_value.process_orphaned_files.return_value = CleanupResult()

        reconcile_orphaned_files_task()

    mock_service.return_value.process_orphaned_files.assert_called_once_with(
        settings.ORPHAN_CLEANUP_BATCH_LIMIT
    )


def test_closes_session_on_error(mock_session):
    with patch("app.storage.tasks.CleanupService") as mock_service:
        mock_service.return_value.process_orphaned_files.side_effect = RuntimeError("db down")

        with pytest.raises(RuntimeError):
            reconcile_orphaned_files_task()

    mock_session.close.assert_called_once()


def test_beat_schedule_runs_sweep_periodically():
    entry = celery_app.conf.beat_schedule["reconcile-orphaned-files"]

    assert entry["task"] == reconcile_orphaned_files_task.name
    assert entry["schedule"].total_seconds() == settings.ORPHAN_CLEANUP_INTERVAL_MINUTES * 60
    assert entry["kwargs"] == {"limit": settings.ORPHAN_CLEANUP_BATCH_LIMIT}


def test_celery_uses_utc():
    assert celery_app.conf.timezone == "UTC"
