"""Pydantic schemas for orphaned file reconciliation."""

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import ORPHAN_RECONCILE_MAX_LIMIT
from app.core.schemas import UTCDatetime
from app.storage.models.orphaned_file import StorageKind


class OrphanedFileResponse(BaseModel):
    """An orphan record as exposed to operators."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    file_id: str
    storage_kind: StorageKind
    entity_type: str
    reason: str
    resolved: bool
    resolved_at: UTCDatetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="details")
    created_at: UTCDatetime
    updated_at: UTCDatetime


ResolvedFilter = Literal["true", "false", "all"]


class ReconcileRequest(BaseModel):
    limit: int | None = Field(
        default=None,
        ge=1,
        le=ORPHAN_RECONCILE_MAX_LIMIT,
        description="Maximum records to process. Defaults to ORPHAN_CLEANUP_BATCH_LIMIT.",
    )


class ResolveOrphanedFileRequest(BaseModel):
    resolution: str | None = Field(default=None, max_length=1000)


class SweepError(BaseModel):
    record_id: str | None = None
    file_id: str | None = None
    error: str


class CleanupResultResponse(BaseModel):
    """Summary of one reconciliation sweep."""

    processed: int
    resolved: int
    failed: int
    not_found: int
    errors: list[SweepError]
    execution_time_seconds: float


class CleanupTaskResponse(BaseModel):
    """Response when the sweep is queued as an async task."""

    task_id: str
    status: str = "queued"
