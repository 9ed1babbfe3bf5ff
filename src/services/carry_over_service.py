"""Carry unfinished tasks forward onto today."""

import logging
from datetime import date

from src.core import db_client
from src.core.config import constants
from src.core.dates import now_iso
from src.core.dates import today as current_date
from src.core.db_client import sanitize_param
from src.core.logging import log_with_user_context, span
from src.models.service_models import CarryOverResult


logger = logging.getLogger(__name__)


def _overdue_filter(user_id: str, today: date) -> str:
    return f'user_id = "{sanitize_param(user_id)}" && is_completed = false && task_date < "{today.isoformat()}"'


async def carry_over_incomplete(*, user_id: str, today: date | None = None) -> CarryOverResult:
    """Move every incomplete task dated before today onto today.

    The move is one statement, so it either happens for all matching tasks or
    for none. Task identity, sort_order and routine link are untouched. A
    routine task whose routine already has a task today stays where it is
    (counted in ``left_behind``) rather than breaking the one-per-day rule.

    Never raises; failures are logged and reported on the result.
    """
    with span("carry_over_service.carry_over_incomplete"):
        today = today or current_date()
        overdue = _overdue_filter(user_id, today)

        try:
            moved = await db_client.update_records(
                collection="tasks",
                filter_query=overdue,
                data={"task_date": today, "updated_at": now_iso()},
                skip_conflicts=True,
            )
        except Exception as e:
            log_with_user_context(
                logger, "error", "Carry-over failed", user_id=user_id, today=today.isoformat(), error=str(e)
            )
            return CarryOverResult(user_id=user_id, today=today, error=str(e))

        try:
            left_behind = len(
                await db_client.list_records(
                    collection="tasks", filter_query=overdue, per_page=constants.DEFAULT_PER_PAGE_LIMIT
                )
            )
        except Exception as e:
            logger.warning("Could not count tasks left behind by carry-over: %s", e)
            left_behind = 0

        if moved or left_behind:
            log_with_user_context(
                logger,
                "info",
                "Carried over incomplete tasks",
                user_id=user_id,
                today=today.isoformat(),
                moved=moved,
                left_behind=left_behind,
            )
        return CarryOverResult(user_id=user_id, today=today, moved_count=moved, left_behind=left_behind)
