"""Loading the day and week views.

Loading today runs the carry-over sweep first and materialization second, so a
task carried onto today already holds its routine's slot when materialization
checks for existing tasks.
"""

import logging
from datetime import date

from src.core import db_client
from src.core.dates import today as current_date
from src.core.dates import week_dates
from src.core.logging import log_with_user_context, span
from src.core.task_ordering import group_by_date
from src.domain.task import Task
from src.models.service_models import (
    CarryOverResult,
    DayProgress,
    DayView,
    MaterializationResult,
    WeekDay,
    WeekView,
)
from src.services import task_service
from src.services.carry_over_service import carry_over_incomplete
from src.services.materialization_service import materialize_routines


logger = logging.getLogger(__name__)


class ViewSession:
    """Per-session memory of which background passes already succeeded.

    Re-rendering a date within one session does not repeat its carry-over or
    materialization. Failed passes are not remembered, so the next load retries.
    The last successfully loaded list per date is kept to serve when a read fails.
    """

    def __init__(self) -> None:
        self._carried_over: set[tuple[str, date]] = set()
        self._materialized: set[tuple[str, date]] = set()
        self._last_tasks: dict[tuple[str, date], list[Task]] = {}

    def needs_carry_over(self, user_id: str, today: date) -> bool:
        return (user_id, today) not in self._carried_over

    def mark_carried_over(self, user_id: str, today: date) -> None:
        self._carried_over.add((user_id, today))

    def needs_materialization(self, user_id: str, target_date: date) -> bool:
        return (user_id, target_date) not in self._materialized

    def mark_materialized(self, user_id: str, target_date: date) -> None:
        self._materialized.add((user_id, target_date))

    def remember_tasks(self, user_id: str, view_date: date, tasks: list[Task]) -> None:
        self._last_tasks[(user_id, view_date)] = tasks

    def last_tasks(self, user_id: str, view_date: date) -> list[Task]:
        return self._last_tasks.get((user_id, view_date), [])


def summarize_progress(tasks: list[Task]) -> DayProgress:
    """Count completed tasks."""
    return DayProgress(completed=sum(1 for task in tasks if task.is_completed), total=len(tasks))


async def _run_carry_over(
    *, user_id: str, today: date, session: ViewSession | None, warnings: list[str]
) -> CarryOverResult | None:
    if session is not None and not session.needs_carry_over(user_id, today):
        return None

    result = await carry_over_incomplete(user_id=user_id, today=today)
    if not result.ok:
        warnings.append("Unfinished tasks from earlier days could not be carried over")
    elif session is not None:
        session.mark_carried_over(user_id, today)
    return result


async def _run_materialization(
    *, user_id: str, target_date: date, today: date, session: ViewSession | None, warnings: list[str]
) -> MaterializationResult | None:
    if session is not None and not session.needs_materialization(user_id, target_date):
        return None

    result = await materialize_routines(user_id=user_id, target_date=target_date, today=today)
    if not result.ok:
        warnings.append("Routine tasks could not be generated for this date")
    elif session is not None:
        session.mark_materialized(user_id, target_date)
    return result


async def load_day(
    *,
    user_id: str,
    target_date: date,
    session: ViewSession | None = None,
    today: date | None = None,
) -> DayView:
    """Prepare and load one date's tasks in day view order.

    Background pass failures become warnings; a failed read returns the last
    list this session saw (or an empty one) instead of raising.
    """
    with span("day_view_service.load_day"):
        today = today or current_date()
        is_today = target_date == today
        warnings: list[str] = []

        carry_over = None
        if is_today:
            carry_over = await _run_carry_over(user_id=user_id, today=today, session=session, warnings=warnings)

        materialization = await _run_materialization(
            user_id=user_id, target_date=target_date, today=today, session=session, warnings=warnings
        )

        try:
            tasks = await task_service.list_tasks_for_date(user_id=user_id, task_date=target_date)
            if session is not None:
                session.remember_tasks(user_id, target_date, tasks)
        except db_client.DatabaseError as e:
            log_with_user_context(
                logger, "warning", "Day view read failed", user_id=user_id, view_date=target_date.isoformat(), error=str(e)
            )
            warnings.append("Tasks could not be loaded; showing what was loaded before")
            tasks = session.last_tasks(user_id, target_date) if session is not None else []

        return DayView(
            user_id=user_id,
            view_date=target_date,
            is_today=is_today,
            tasks=tasks,
            progress=summarize_progress(tasks),
            carry_over=carry_over,
            materialization=materialization,
            warnings=warnings,
        )


async def load_week(*, user_id: str, base_date: date, today: date | None = None) -> WeekView:
    """Load the Monday-start week containing ``base_date``, each day in manual order."""
    with span("day_view_service.load_week"):
        today = today or current_date()
        dates = week_dates(base_date)
        warnings: list[str] = []

        try:
            tasks = await task_service.list_tasks_between(user_id=user_id, start=dates[0], end=dates[-1])
        except db_client.DatabaseError as e:
            log_with_user_context(
                logger, "warning", "Week view read failed", user_id=user_id, start=dates[0].isoformat(), error=str(e)
            )
            warnings.append("Tasks could not be loaded")
            tasks = []

        buckets = group_by_date(tasks, dates)
        return WeekView(
            user_id=user_id,
            start=dates[0],
            end=dates[-1],
            days=[WeekDay(day=day, is_today=day == today, tasks=buckets[day]) for day in dates],
            warnings=warnings,
        )
