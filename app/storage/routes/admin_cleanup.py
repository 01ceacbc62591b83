"""Admin routes for orphaned file reconciliation."""

import time
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.auth.dependencies import AdminIdentity, require_admin
from app.core.config import settings
from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.exceptions import NotFoundError, ValidationError
from app.core.rate_limit import limiter
from app.core.schemas import PaginatedResponse, paginated_response
from app.db.session import get_db
from app.storage.models.orphaned_file import OrphanedFile
from app.storage.repository import OrphanedFileRepository
from app.storage.schemas import (
    CleanupResultResponse,
    CleanupTaskResponse,
    OrphanedFileResponse,
    ReconcileRequest,
    ResolvedFilter,
    ResolveOrphanedFileRequest,
)
from app.storage.services.cleanup_service import CleanupService
from app.storage.tasks import reconcile_orphaned_files_task

router = APIRouter(prefix="/storage", tags=["admin-storage"])

_RESOLVED_FILTERS: dict[str, bool | None] = {"true": True, "false": False, "all": None}


def _get_record_or_404(db: Session, record_id: str) -> OrphanedFile:
    try:
        parsed_id = UUID(record_id)
    except ValueError:
        raise ValidationError("Invalid orphaned file ID", field="id") from None

    record = OrphanedFileRepository(db).get_by_id(parsed_id)
    if record is None:
        raise NotFoundError("Orphaned file not found", resource="orphaned_file")
    return record


@router.get("/orphaned-files", response_model=PaginatedResponse[OrphanedFileResponse])
@limiter.limit("30/minute")
async def list_orphaned_files(
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    resolved: ResolvedFilter = Query(
        default="false",
        description="Filter by resolution state: true, false (default) or all.",
    ),
    db: Session = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> PaginatedResponse[OrphanedFileResponse]:
    """List orphan records, newest first."""
    items, total = OrphanedFileRepository(db).list_page(
        resolved=_RESOLVED_FILTERS[resolved],
        skip=(page - 1) * limit,
        limit=limit,
    )
    return paginated_response(
        [OrphanedFileResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/orphaned-files/{record_id}", response_model=OrphanedFileResponse)
@limiter.limit("30/minute")
async def get_orphaned_file(
    request: Request,
    record_id: str,
    db: Session = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> OrphanedFileResponse:
    return OrphanedFileResponse.model_validate(_get_record_or_404(db, record_id))


@router.post(
    "/orphaned-files/reconcile",
    response_model=CleanupResultResponse | CleanupTaskResponse,
)
@limiter.limit("5/minute")
async def reconcile_orphaned_files(
    request: Request,
    payload: ReconcileRequest | None = None,
    async_mode: bool = Query(
        default=False,
        description="If true, run the sweep as a background Celery task and "
        "return the task id immediately.",
    ),
    db: Session = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> CleanupResultResponse | CleanupTaskResponse:
    """Run a reconciliation sweep now.

    Runs synchronously by default and returns the sweep summary. A sweep
    already running from the scheduler may pick up the same records; every
    backend operation involved is idempotent.
    """
    limit = (payload.limit if payload else None) or settings.ORPHAN_CLEANUP_BATCH_LIMIT

    if async_mode:
        task = reconcile_orphaned_files_task.delay(limit=limit)
        return CleanupTaskResponse(task_id=task.id, status="queued")

    start_time = time.time()
    results = CleanupService(db).process_orphaned_files(limit)

    return CleanupResultResponse(
        **results.as_dict(),
        execution_time_seconds=time.time() - start_time,
    )


@router.patch("/orphaned-files/{record_id}/resolve", response_model=OrphanedFileResponse)
@limiter.limit("30/minute")
async def resolve_orphaned_file(
    request: Request,
    record_id: str,
    payload: ResolveOrphanedFileRequest | None = None,
    db: Session = Depends(get_db),
    admin: AdminIdentity = Depends(require_admin),
) -> OrphanedFileResponse:
    """Mark a record resolved by hand, e.g. after fixing a file the sweep cannot reach."""
    record = _get_record_or_404(db, record_id)
    updated = CleanupService(db).mark_resolved_manually(
        record,
        resolution=payload.resolution if payload else None,
        resolved_by=admin.id,
    )
    return OrphanedFileResponse.model_validate(updated)
