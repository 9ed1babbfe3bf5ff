"""Scheduler for the nightly carry-over and routine materialization job."""

import logging
from datetime import date

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from src.core import db_client
from src.core.config import constants, settings
from src.core.dates import today as current_date
from src.core.scheduler_tracker import retry_job_with_backoff
from src.services.carry_over_service import carry_over_incomplete
from src.services.materialization_service import materialize_routines


logger = logging.getLogger(__name__)

NIGHTLY_JOB_ID = "nightly_routines"

# Global scheduler instance
scheduler = AsyncIOScheduler(timezone=settings.timezone)


async def _collect_user_ids(*, collection: str, filter_query: str) -> set[str]:
    user_ids: set[str] = set()
    page = 1
    while True:
        records = await db_client.list_records(
            collection=collection,
            filter_query=filter_query,
            page=page,
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
        )
        user_ids.update(record["user_id"] for record in records)
        if len(records) < constants.DEFAULT_PER_PAGE_LIMIT:
            return user_ids
        page += 1


async def users_needing_preparation(*, today: date) -> set[str]:
    """Users with an active routine or an incomplete task dated before today."""
    with_routines = await _collect_user_ids(collection="routines", filter_query="is_active = true")
    with_overdue = await _collect_user_ids(
        collection="tasks",
        filter_query=f'is_completed = false && task_date < "{today.isoformat()}"',
    )
    return with_routines | with_overdue


async def prepare_today_for_all_users(*, today: date | None = None) -> int:
    """Carry over and materialize today's tasks for every user who needs it.

    A failing user is logged and does not stop the others. Both passes are
    idempotent, so a day view opened later repeats them harmlessly.

    Returns:
        Number of users whose passes both succeeded

    Raises:
        DatabaseError: If the set of users cannot be read
    """
    today = today or current_date()
    user_ids = await users_needing_preparation(today=today)
    logger.info("Preparing %s for %d users", today.isoformat(), len(user_ids))

    prepared = 0
    for user_id in sorted(user_ids):
        carry_over = await carry_over_incomplete(user_id=user_id, today=today)
        materialization = await materialize_routines(user_id=user_id, target_date=today, today=today)
        if carry_over.ok and materialization.ok:
            prepared += 1
        else:
            logger.warning(
                "Nightly preparation incomplete",
                extra={
                    "user_id": user_id,
                    "carry_over_error": carry_over.error,
                    "materialization_error": materialization.error,
                },
            )

    logger.info("Prepared %s for %d/%d users", today.isoformat(), prepared, len(user_ids))
    return prepared


async def run_nightly_job() -> None:
    """Nightly entry point; raises so the retry wrapper can try again."""
    await prepare_today_for_all_users()


def start_scheduler() -> None:
    """Start the scheduler and register the nightly job.

    This should be called during FastAPI app startup.
    """
    logger.info("Starting scheduler")

    scheduler.add_job(
        retry_job_with_backoff,
        args=[run_nightly_job, NIGHTLY_JOB_ID],
        trigger=CronTrigger(
            hour=settings.materialize_job_hour,
            minute=settings.materialize_job_minute,
            timezone=settings.timezone,
        ),
        id=NIGHTLY_JOB_ID,
        name="Carry Over and Materialize Routines",
        replace_existing=True,
    )
    logger.info(
        "Scheduled nightly routine job: daily at %02d:%02d (%s)",
        settings.materialize_job_hour,
        settings.materialize_job_minute,
        settings.timezone,
    )

    scheduler.start()
    logger.info("Scheduler started successfully")


def stop_scheduler() -> None:
    """Stop the scheduler.

    This should be called during FastAPI app shutdown.
    """
    if not scheduler.running:
        return
    logger.info("Stopping scheduler")
    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")
