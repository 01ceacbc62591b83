"""Persist orphan records for deletions that could not be confirmed."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.storage.models.orphaned_file import OrphanedFile, StorageKind
from app.storage.repository import OrphanedFileRepository

logger = logging.getLogger(__name__)


def record_orphaned_file(
    db: Session,
    *,
    file_id: str,
    storage_kind: StorageKind,
    entity_type: str,
    reason: str,
    metadata: dict[str, Any] | None = None,
) -> OrphanedFile | None:
    """Insert a new orphan record.

    Every call inserts a row; duplicates for the same file are expected.
    The row is committed through its own session on the caller's engine, so
    the caller's pending work is never flushed, committed or rolled back
    here. Persistence failures are logged and swallowed so the caller's
    delete flow is never interrupted.

    Returns:
        The stored record (detached), or None when it could not be written.
    """
    try:
        with SessionLocal(bind=db.get_bind()) as session:
            record = OrphanedFileRepository(session).add(
                OrphanedFile(
                    file_id=file_id,
                    storage_kind=storage_kind,
                    entity_type=entity_type,
                    reason=reason,
                    details=dict(metadata or {}),
                )
            )
    except Exception as e:
        logger.error(
            "Failed to track orphaned file %s (%s, %s): %s",
            file_id,
            storage_kind,
            entity_type,
            e,
        )
        return None

    logger.info("Tracked orphaned file: %s (%s, %s)", file_id, storage_kind, entity_type)
    return record
