from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.log_config import RequestLoggingMiddleware, setup_logging
from app.core.rate_limit import limiter
from app.db.session import SessionLocal
from app.storage.routes import admin_cleanup
from app.storage.tasks import reconcile_orphaned_files_task

setup_logging()
logger = structlog.get_logger(__name__)


def dispatch_startup_sweep() -> None:
    """Queue one reconciliation sweep; the beat schedule takes over afterwards."""
    if not settings.ORPHAN_CLEANUP_RUN_ON_STARTUP:
        return
    try:
        task = reconcile_orphaned_files_task.delay(limit=settings.ORPHAN_CLEANUP_BATCH_LIMIT)
        logger.info("startup_orphan_sweep_queued", task_id=task.id)
    except Exception as e:
        logger.error("startup_orphan_sweep_failed", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "orphan_sweep_scheduled",
        interval_minutes=settings.ORPHAN_CLEANUP_INTERVAL_MINUTES,
        batch_limit=settings.ORPHAN_CLEANUP_BATCH_LIMIT,
    )
    dispatch_startup_sweep()

    yield

    logger.info("shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="Backend API for the charity CMS: stored file housekeeping",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
register_exception_handlers(app, debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(
    admin_cleanup.router, prefix=f"{settings.API_V1_PREFIX}/admin", tags=["admin-storage"]
)


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": settings.PROJECT_NAME, "version": "1.0.0", "status": "running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    db_status = "unknown"

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            db_status = "healthy"
        finally:
            db.close()
    except Exception:
        db_status = "unhealthy"

    overall = "healthy" if db_status == "healthy" else "degraded"

    return {"status": overall, "database": db_status}
