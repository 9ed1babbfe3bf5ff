"""Routine materialization: turning active routines into dated tasks.

For a user and a target date every applicable active routine ends up with
exactly one generated task on that date. Calling it again for the same date is
a no-op, and the unique (routine_id, task_date) index turns a racing duplicate
insert into "already generated".
"""

import logging
from datetime import date

from src.core import db_client
from src.core.config import constants
from src.core.dates import today as current_date
from src.core.dates import weekday_index
from src.core.db_client import sanitize_param
from src.core.logging import log_with_user_context, span
from src.domain.create_models import TaskCreate
from src.domain.routine import Routine
from src.models.service_models import MaterializationResult, MaterializationStatus
from src.services import routine_service, task_service


logger = logging.getLogger(__name__)


def runs_on(routine: Routine, day: date) -> bool:
    """Return True if the routine is scheduled on ``day`` (no weekdays means every day)."""
    return not routine.days_of_week or weekday_index(day) in routine.days_of_week


async def _generated_routine_ids(*, user_id: str, target_date: date) -> set[str]:
    records = await db_client.list_records(
        collection="tasks",
        filter_query=(
            f'user_id = "{sanitize_param(user_id)}" && task_date = "{target_date.isoformat()}" && routine_id != null'
        ),
        per_page=constants.DEFAULT_PER_PAGE_LIMIT,
    )
    return {record["routine_id"] for record in records}


def _task_from_routine(routine: Routine, target_date: date) -> TaskCreate:
    return TaskCreate(
        title=routine.title,
        memo=routine.memo,
        priority=routine.priority,
        category_id=routine.category_id,
        task_date=target_date,
    )


async def materialize_routines(
    *,
    user_id: str,
    target_date: date,
    today: date | None = None,
) -> MaterializationResult:
    """Ensure each applicable active routine has one task on ``target_date``.

    Past dates are never backfilled. Generated tasks copy title, memo,
    priority and category from the routine and start incomplete at
    sort_order 0.

    Never raises; backend failures are logged and reported as FAILED with
    whatever was created before the failure.
    """
    with span("materialization_service.materialize_routines"):
        today = today or current_date()
        result = MaterializationResult(
            user_id=user_id,
            target_date=target_date,
            status=MaterializationStatus.COMPLETED,
        )

        if target_date < today:
            result.status = MaterializationStatus.SKIPPED_PAST_DATE
            return result

        try:
            routines = await routine_service.list_active_routines(user_id=user_id)
            if not routines:
                result.status = MaterializationStatus.NO_ACTIVE_ROUTINES
                return result

            generated = await _generated_routine_ids(user_id=user_id, target_date=target_date)

            for routine in routines:
                if routine.id in generated:
                    result.already_present.append(routine.id)
                    continue

                if not runs_on(routine, target_date):
                    result.skipped_weekday.append(routine.id)
                    continue

                try:
                    task = await task_service.create_task(
                        user_id=user_id,
                        task=_task_from_routine(routine, target_date),
                        routine_id=routine.id,
                    )
                except db_client.DuplicateRecordError:
                    # Another pass got there first
                    result.already_present.append(routine.id)
                    continue

                result.created_task_ids.append(task.id)

        except Exception as e:
            log_with_user_context(
                logger,
                "error",
                "Routine materialization failed",
                user_id=user_id,
                target_date=target_date.isoformat(),
                error=str(e),
            )
            result.status = MaterializationStatus.FAILED
            result.error = str(e)
            return result

        if result.created_task_ids:
            log_with_user_context(
                logger,
                "info",
                "Materialized routines",
                user_id=user_id,
                target_date=target_date.isoformat(),
                created_count=len(result.created_task_ids),
            )
        return result
