"""Delete a stored file when its owning entity goes away, without raising."""

import enum
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from app.core.storage import ContentStore, LocalFileSystem, get_filesystem
from app.storage.models.orphaned_file import StorageKind
from app.storage.services.orphan_recorder import record_orphaned_file

logger = logging.getLogger(__name__)


class DeleteStatus(str, enum.Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a safe delete.

    Truthy only when the file was actually removed, so callers can keep
    treating it as a success flag.
    """

    status: DeleteStatus
    reason: str | None = None
    orphan_recorded: bool = False

    @property
    def deleted(self) -> bool:
        return self.status == DeleteStatus.DELETED

    def __bool__(self) -> bool:
        return self.deleted


def _fail(
    db: Session,
    *,
    file_id: str,
    storage_kind: StorageKind,
    entity_type: str,
    reason: str,
    metadata: dict[str, Any],
) -> DeleteResult:
    record = record_orphaned_file(
        db,
        file_id=file_id,
        storage_kind=storage_kind,
        entity_type=entity_type,
        reason=reason,
        metadata=metadata,
    )
    return DeleteResult(DeleteStatus.FAILED, reason=reason, orphan_recorded=record is not None)


def _delete_from_filesystem(
    db: Session,
    filesystem: LocalFileSystem,
    *,
    file_id: str,
    file_path: str | None,
    entity_type: str,
    metadata: dict[str, Any],
) -> DeleteResult:
    if not file_path:
        logger.error("No path information available to delete file %s", file_id)
        return _fail(
            db,
            file_id=file_id,
            storage_kind=StorageKind.FILESYSTEM,
            entity_type=entity_type,
            reason="no path information available",
            metadata=metadata,
        )

    # Kept on the record so the sweep can retry the unlink later.
    metadata = {**metadata, "path": file_path}

    try:
        if not filesystem.exists(file_path):
            logger.warning("File not found in filesystem: %s", file_path)
            return DeleteResult(DeleteStatus.NOT_FOUND, reason="file not found")
        filesystem.unlink(file_path)
    except (OSError, ValueError) as e:
        logger.error("Error deleting file from filesystem %s: %s", file_path, e)
        return _fail(
            db,
            file_id=file_id,
            storage_kind=StorageKind.FILESYSTEM,
            entity_type=entity_type,
            reason=f"delete failed: {e}",
            metadata=metadata,
        )

    logger.info("Deleted file from filesystem: %s", file_path)
    return DeleteResult(DeleteStatus.DELETED)


def _delete_from_content_store(
    db: Session,
    content_store: ContentStore | None,
    *,
    file_id: str,
    entity_type: str,
    metadata: dict[str, Any],
) -> DeleteResult:
    if content_store is None:
        logger.error("Content store not initialized for deletion of %s", file_id)
        return _fail(
            db,
            file_id=file_id,
            storage_kind=StorageKind.CONTENT_STORE,
            entity_type=entity_type,
            reason="content store not initialized",
            metadata=metadata,
        )

    try:
        content_store.delete(file_id)
    except Exception as e:
        logger.error("Error deleting file %s from content store: %s", file_id, e)
        return _fail(
            db,
            file_id=file_id,
            storage_kind=StorageKind.CONTENT_STORE,
            entity_type=entity_type,
            reason=f"delete failed: {e}",
            metadata=metadata,
        )

    logger.info("Deleted file from content store: %s", file_id)
    return DeleteResult(DeleteStatus.DELETED)


def safe_delete_file(
    db: Session,
    *,
    file_id: str,
    storage_kind: StorageKind,
    entity_type: str,
    file_path: str | None = None,
    content_store: ContentStore | None = None,
    entity_id: str | None = None,
    filesystem: LocalFileSystem | None = None,
) -> DeleteResult:
    """Remove a file from its backend, recording an orphan on failure.

    Args:
        db: Database session used to record orphans.
        file_id: Content store key, or the file name for filesystem files.
        storage_kind: Backend holding the file.
        entity_type: Owning entity kind, e.g. "news-attachment".
        file_path: Location on disk (filesystem only).
        content_store: Store handle (content store only). None means the
            store could not be obtained.
        entity_id: Owning entity id, kept on the orphan record for diagnostics.
        filesystem: Filesystem backend; defaults to the upload directory.

    Returns:
        DeleteResult. Never raises.
    """
    metadata: dict[str, Any] = {"entity_id": entity_id} if entity_id else {}

    try:
        if storage_kind == StorageKind.FILESYSTEM:
            return _delete_from_filesystem(
                db,
                filesystem or get_filesystem(),
                file_id=file_id,
                file_path=file_path,
                entity_type=entity_type,
                metadata=metadata,
            )
        return _delete_from_content_store(
            db,
            content_store,
            file_id=file_id,
            entity_type=entity_type,
            metadata=metadata,
        )
    except Exception as e:
        logger.exception(
            "Error in safe_delete_file (file_id=%s, storage_kind=%s, entity_type=%s, entity_id=%s)",
            file_id,
            storage_kind,
            entity_type,
            entity_id,
        )
        if file_path:
            metadata = {**metadata, "path": file_path}
        return _fail(
            db,
            file_id=file_id,
            storage_kind=storage_kind,
            entity_type=entity_type,
            reason=f"exception: {e}",
            metadata=metadata,
        )
