"""Reconciliation sweep over unresolved orphaned file records."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.storage import ContentStore, LocalFileSystem, get_content_store, get_filesystem
from app.storage.models.orphaned_file import OrphanedFile, StorageKind
from app.storage.repository import OrphanedFileRepository
from app.storage.services.storage_probe import content_file_exists, filesystem_file_exists

logger = logging.getLogger(__name__)

MANUAL_RESOLUTION = "Manually resolved"


@dataclass
class CleanupResult:
    """Counters for one sweep invocation."""

    processed: int = 0
    resolved: int = 0
    failed: int = 0
    not_found: int = 0
    errors: list[dict[str, str | None]] = field(default_factory=list)

    def add_failure(self, record_id: str | None, file_id: str | None, error: str) -> None:
        self.failed += 1
        self.errors.append({"record_id": record_id, "file_id": file_id, "error": error})

    def as_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "resolved": self.resolved,
            "failed": self.failed,
            "not_found": self.not_found,
            "errors": list(self.errors),
        }


class CleanupService:
    """Re-attempts deletions that the safe deleter could not finish.

    Collaborators are injected so tests and the task runner can swap the
    content store and filesystem backends.
    """

    def __init__(
        self,
        db: Session,
        content_store_factory: Callable[[], ContentStore] | None = None,
        filesystem: LocalFileSystem | None = None,
    ) -> None:
        self.db = db
        self.repository = OrphanedFileRepository(db)
        self._content_store_factory = content_store_factory or get_content_store
        self._filesystem = filesystem or get_filesystem()

    def process_orphaned_files(self, limit: int | None = None) -> CleanupResult:
        """Run one sweep over at most ``limit`` unresolved records, oldest first.

        Each record is handled in isolation: an error on one is counted as a
        failure and the batch continues. Never raises.
        """
        if limit is None:
            limit = settings.ORPHAN_CLEANUP_BATCH_LIMIT

        results = CleanupResult()

        try:
            records = self.repository.list_unresolved(limit)
            # A rollback expires every loaded record; failure reporting must not reload them.
            batch = [(record, str(record.id), record.file_id) for record in records]
        except Exception as e:
            logger.exception("Failed to query unresolved orphaned files")
            self.db.rollback()
            results.errors.append({"record_id": None, "file_id": None, "error": str(e)})
            return results

        if not batch:
            return results

        logger.info("Processing %d orphaned files", len(batch))

        content_store, store_error = self._acquire_content_store()

        for record, record_id, file_id in batch:
            results.processed += 1
            try:
                if record.storage_kind == StorageKind.CONTENT_STORE:
                    error = self._process_content_store_record(
                        record, content_store, store_error, results
                    )
                else:
                    error = self._process_filesystem_record(record, results)
            except Exception as e:
                logger.exception(
                    "Error processing orphaned file %s (record %s)", file_id, record_id
                )
                self.db.rollback()
                error = str(e)

            if error is not None:
                results.add_failure(record_id, file_id, error)

        logger.info(
            "Orphaned file sweep complete: processed=%d, resolved=%d, not_found=%d, failed=%d",
            results.processed,
            results.resolved,
            results.not_found,
            results.failed,
        )
        return results

    def mark_resolved_manually(
        self,
        record: OrphanedFile,
        resolution: str | None = None,
        resolved_by: str | None = None,
    ) -> OrphanedFile:
        """Operator override for records the sweep cannot resolve.

        An already resolved record keeps its resolved_at; only the narrative
        fields are rewritten.
        """
        narrative: dict[str, Any] = {"resolved_by": resolved_by} if resolved_by else {}
        if record.resolved:
            previous = (record.details or {}).get("resolution")
            resolution = resolution or previous or MANUAL_RESOLUTION
            return self.repository.update_narrative(record, resolution, **narrative)
        logger.info("Orphaned file %s manually resolved by %s", record.id, resolved_by)
        return self.repository.mark_resolved(record, resolution or MANUAL_RESOLUTION, **narrative)

    def _acquire_content_store(self) -> tuple[ContentStore | None, str | None]:
        try:
            return self._content_store_factory(), None
        except Exception as e:
            logger.error("Cannot initialize content store for orphan sweep: %s", e)
            return None, f"content store not initialized: {e}"

    def _process_content_store_record(
        self,
        record: OrphanedFile,
        content_store: ContentStore | None,
        store_error: str | None,
        results: CleanupResult,
    ) -> str | None:
        """Returns the failure message, or None when the record was resolved."""
        if content_store is None:
            return store_error or "content store not initialized"

        if not content_file_exists(content_store, record.file_id):
            self.repository.mark_resolved(record, "File not found in content store")
            results.not_found += 1
            return None

        try:
            content_store.delete(record.file_id)
        except Exception as e:
            logger.error("Failed to delete orphaned content store file %s: %s", record.file_id, e)
            return str(e)

        self.repository.mark_resolved(record, "Successfully deleted from content store")
        results.resolved += 1
        return None

    def _process_filesystem_record(
        self, record: OrphanedFile, results: CleanupResult
    ) -> str | None:
        path = record.path
        exists = filesystem_file_exists(self._filesystem, path)
        if exists is None:
            return "No path information available for filesystem file"

        if not exists:
            self.repository.mark_resolved(record, "File not found in filesystem")
            results.not_found += 1
            return None

        try:
            self._filesystem.unlink(path)  # type: ignore[arg-type]
        except OSError as e:
            logger.error("Failed to delete orphaned filesystem file %s: %s", path, e)
            return str(e)

        self.repository.mark_resolved(record, "Successfully deleted from filesystem")
        results.resolved += 1
        return None
