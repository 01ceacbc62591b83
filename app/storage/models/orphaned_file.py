"""Orphaned file model: durable trail of deletions that could not be confirmed."""

import enum
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base


class StorageKind(str, enum.Enum):
    """Backend that owns a file reference."""

    CONTENT_STORE = "content_store"
    FILESYSTEM = "filesystem"

    def __str__(self) -> str:
        return self.value


class OrphanedFile(Base):
    """A file whose deletion failed or was skipped, pending reconciliation.

    Rows are append-only: the sweep (or an operator) flips ``resolved`` once and
    afterwards only narrative keys inside ``details`` change.
    """

    __tablename__ = "orphaned_files"
    __table_args__ = (
        Index("ix_orphaned_files_resolved_kind", "resolved", "storage_kind"),
        Index("ix_orphaned_files_entity_type", "entity_type"),
        Index("ix_orphaned_files_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    file_id: Mapped[str] = mapped_column(String(1000), nullable=False)
    storage_kind: Mapped[StorageKind] = mapped_column(
        Enum(StorageKind, name="storage_kind"), nullable=False
    )
    entity_type: Mapped[str] = mapped_column(String(100), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # "metadata" is reserved on declarative classes, so the attribute is renamed.
    # Keys: path, entity_id, resolution, resolved_by
    details: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    @property
    def path(self) -> str | None:
        value = (self.details or {}).get("path")
        return str(value) if value else None

    def __repr__(self) -> str:
        return (
            f"<OrphanedFile(id={self.id}, file_id={self.file_id}, "
            f"storage_kind={self.storage_kind}, resolved={self.resolved})>"
        )
