"""Queries against the orphaned_files collection."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy.orm import Session

from app.core.repository import BaseRepository
from app.storage.models.orphaned_file import OrphanedFile


class OrphanedFileRepository(BaseRepository[OrphanedFile]):
    def __init__(self, db: Session):
        super().__init__(db, OrphanedFile)

    def list_unresolved(self, limit: int) -> list[OrphanedFile]:
        """Oldest unresolved records first, capped at ``limit``."""
        return (
            self.db.query(OrphanedFile)
            .filter(OrphanedFile.resolved == False)  # noqa: E712
            .order_by(OrphanedFile.created_at.asc())
            .limit(limit)
            .all()
        )

    def list_page(
        self, resolved: bool | None, skip: int, limit: int
    ) -> tuple[list[OrphanedFile], int]:
        """Newest first; ``resolved=None`` returns both states."""
        query = self.db.query(OrphanedFile)
        if resolved is not None:
            query = query.filter(OrphanedFile.resolved == resolved)
        total = query.count()
        items = query.order_by(OrphanedFile.created_at.desc()).offset(skip).limit(limit).all()
        return items, total

    def mark_resolved(
        self, record: OrphanedFile, resolution: str, **extra: Any
    ) -> OrphanedFile:
        record.resolved = True
        record.resolved_at = datetime.now(UTC)
        record.details = {**(record.details or {}), "resolution": resolution, **extra}
        return self.save(record)

    def update_narrative(
        self, record: OrphanedFile, resolution: str, **extra: Any
    ) -> OrphanedFile:
        record.details = {**(record.details or {}), "resolution": resolution, **extra}
        return self.save(record)
