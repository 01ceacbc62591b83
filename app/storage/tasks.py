"""Celery tasks for orphaned file reconciliation."""

import logging
import time
from typing import Any

from app.core.celery_app import celery_app
from app.core.config import settings
from app.db.session import SessionLocal
from app.storage.services.cleanup_service import CleanupService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=0)
def reconcile_orphaned_files_task(
    self: Any,
    limit: int | None = None,
) -> dict[str, Any]:
    """Run one reconciliation sweep over unresolved orphaned files.

    Scheduled by Celery beat every ORPHAN_CLEANUP_INTERVAL_MINUTES, dispatched
    once when the API starts, and queued on demand from the admin endpoint.

    Args:
        limit: Maximum records to process. Defaults to
            settings.ORPHAN_CLEANUP_BATCH_LIMIT.

    Returns:
        Sweep summary (processed, resolved, failed, not_found, errors) plus
        execution time.
    """
    start_time = time.time()

    if limit is None:
        limit = settings.ORPHAN_CLEANUP_BATCH_LIMIT

    db = SessionLocal()
    try:
        results = CleanupService(db).process_orphaned_files(limit)
        execution_time = time.time() - start_time

        logger.info(
            "Orphaned file reconciliation finished: processed=%d, resolved=%d, "
            "not_found=%d, failed=%d, time=%.2fs",
            results.processed,
            results.resolved,
            results.not_found,
            results.failed,
            execution_time,
        )

        return {**results.as_dict(), "execution_time_seconds": execution_time}
    finally:
        db.close()
