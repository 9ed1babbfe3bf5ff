"""daily-tasks - Daily task list with recurring routines."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.db_client import close_connection, init_db
from src.core.logging import configure_logfire, instrument_fastapi
from src.core.scheduler import NIGHTLY_JOB_ID, start_scheduler, stop_scheduler
from src.core.scheduler_tracker import job_tracker
from src.interface.categories_router import router as categories_router
from src.interface.error_handlers import register_error_handlers
from src.interface.profile_router import router as profile_router
from src.interface.routines_router import router as routines_router
from src.interface.tasks_router import router as tasks_router
from src.interface.views_router import router as views_router
from src.interface.wishlist_router import router as wishlist_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    configure_logfire()

    await init_db()
    logger.info("Database initialized", extra={"db_path": settings.sqlite_db_path})

    if settings.enable_scheduler:
        start_scheduler()
    yield
    # Shutdown
    stop_scheduler()
    await close_connection()


app = FastAPI(
    title="daily-tasks",
    description="Daily task list with recurring routines, carry-over and a wishlist",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

register_error_handlers(app)

# Register routers
app.include_router(tasks_router)
app.include_router(routines_router)
app.include_router(categories_router)
app.include_router(wishlist_router)
app.include_router(profile_router)
app.include_router(views_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)


@app.get("/health/scheduler")
async def scheduler_health_check() -> JSONResponse:
    """Scheduler health check endpoint with the nightly job status."""
    job_status = job_tracker.get_job_status(NIGHTLY_JOB_ID)
    dlq = job_tracker.get_dead_letter_queue()

    overall_status = "degraded" if job_status["consecutive_failures"] > 0 else "healthy"
    if dlq:
        overall_status = "critical"

    return JSONResponse(
        content={
            "status": overall_status,
            "jobs": {NIGHTLY_JOB_ID: job_status},
            "dead_letter_queue_size": len(dlq),
            "dead_letter_queue": dlq,
        },
        status_code=200 if overall_status == "healthy" else 503,
    )
