"""Task service for user-initiated CRUD operations.

Every function here raises on failure so the caller can tell the user their
edit did not go through. Mutations return the stored record; callers merge it
into their in-memory list with ``task_ordering.merge_task``.
"""

import logging
from datetime import date, timedelta
from enum import StrEnum
from typing import Any

from src.core import db_client
from src.core.config import constants, settings
from src.core.dates import now_iso, parse_date
from src.core.dates import today as current_date
from src.core.db_client import sanitize_param
from src.core.logging import span
from src.core.task_ordering import order_tasks
from src.domain.create_models import TaskCreate
from src.domain.task import Task
from src.domain.update_models import TaskUpdate
from src.services import category_service


logger = logging.getLogger(__name__)


class SearchDateFilter(StrEnum):
    """Date window for task search."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


def _to_task(record: dict[str, Any]) -> Task:
    return Task.model_validate(record)


def _user_filter(user_id: str) -> str:
    return f'user_id = "{sanitize_param(user_id)}"'


async def _check_category(*, category_id: str | None, user_id: str) -> None:
    if category_id:
        await category_service.get_category(category_id=category_id, user_id=user_id)


async def create_task(
    *,
    user_id: str,
    task: TaskCreate,
    routine_id: str | None = None,
) -> Task:
    """Create a new task at the front of its date's manual order.

    Args:
        user_id: Owning user ID
        task: Validated task fields
        routine_id: Routine the task was generated from, if any

    Returns:
        Created task

    Raises:
        KeyError: If the category does not exist
        PermissionError: If the category belongs to someone else
        db_client.DuplicateRecordError: If the routine already has a task on that date
        db_client.DatabaseError: If database operation fails
    """
    with span("task_service.create_task"):
        await _check_category(category_id=task.category_id, user_id=user_id)

        now = now_iso()
        task_data: dict[str, Any] = {
            "user_id": user_id,
            "title": task.title,
            "memo": task.memo,
            "priority": task.priority,
            "category_id": task.category_id,
            "task_date": task.task_date,
            "is_completed": False,
            "sort_order": 0,
            "created_at": now,
            "updated_at": now,
        }
        if routine_id:
            task_data["routine_id"] = routine_id

        record = await db_client.create_record(collection="tasks", data=task_data)
        logger.info("Created task '%s' on %s for %s", task.title, task.task_date, user_id)

        return _to_task(record)


async def get_task(*, task_id: str, user_id: str) -> Task:
    """Get a task by ID with ownership validation.

    Raises:
        KeyError: If task not found
        PermissionError: If task doesn't belong to user
    """
    with span("task_service.get_task"):
        record = await db_client.get_record(collection="tasks", record_id=task_id)

        if record["user_id"] != user_id:
            raise PermissionError(f"Task {task_id} does not belong to {user_id}")

        return _to_task(record)


async def list_tasks_for_date(*, user_id: str, task_date: date) -> list[Task]:
    """List a user's tasks for one date in day view order."""
    with span("task_service.list_tasks_for_date"):
        records = await db_client.list_records(
            collection="tasks",
            filter_query=f'{_user_filter(user_id)} && task_date = "{task_date.isoformat()}"',
            sort="+created_at",
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
        )
        return order_tasks(_to_task(record) for record in records)


async def list_tasks_between(*, user_id: str, start: date, end: date) -> list[Task]:
    """List a user's tasks dated within [start, end], unordered beyond date then position."""
    with span("task_service.list_tasks_between"):
        if end < start:
            raise ValueError(f"Invalid date range: {start} is after {end}")

        records = await db_client.list_records(
            collection="tasks",
            filter_query=(
                f'{_user_filter(user_id)} && task_date >= "{start.isoformat()}" && task_date <= "{end.isoformat()}"'
            ),
            sort="+task_date,+sort_order,+created_at",
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
        )
        return [_to_task(record) for record in records]


async def update_task(*, task_id: str, user_id: str, update: TaskUpdate) -> Task:
    """Apply a partial update to a task.

    Raises:
        ValueError: If the update is empty
        KeyError: If task not found
        PermissionError: If task doesn't belong to user
    """
    with span("task_service.update_task"):
        await get_task(task_id=task_id, user_id=user_id)

        data = update.model_dump(exclude_unset=True)
        if not data:
            raise ValueError("Nothing to update")
        if "category_id" in data:
            data["category_id"] = data["category_id"] or None
            await _check_category(category_id=data["category_id"], user_id=user_id)
        data["updated_at"] = now_iso()

        record = await db_client.update_record(collection="tasks", record_id=task_id, data=data)
        logger.info("Updated task %s (%s)", task_id, ", ".join(sorted(set(data) - {"updated_at"})))

        return _to_task(record)


async def toggle_complete(*, task_id: str, user_id: str) -> Task:
    """Flip a task's completion flag."""
    with span("task_service.toggle_complete"):
        task = await get_task(task_id=task_id, user_id=user_id)
        return await update_task(
            task_id=task_id,
            user_id=user_id,
            update=TaskUpdate(is_completed=not task.is_completed),
        )


async def move_task(*, task_id: str, user_id: str, new_date: date | str) -> Task:
    """Reschedule a task onto another date, keeping its identity."""
    with span("task_service.move_task"):
        return await update_task(
            task_id=task_id,
            user_id=user_id,
            update=TaskUpdate(task_date=parse_date(new_date)),
        )


async def move_to_tomorrow(*, task_id: str, user_id: str) -> Task:
    """Push a task to the day after its current date."""
    with span("task_service.move_to_tomorrow"):
        task = await get_task(task_id=task_id, user_id=user_id)
        return await move_task(task_id=task_id, user_id=user_id, new_date=task.task_date + timedelta(days=1))


async def delete_task(*, task_id: str, user_id: str) -> None:
    """Delete a task.

    Raises:
        KeyError: If task not found
        PermissionError: If task doesn't belong to user
    """
    with span("task_service.delete_task"):
        task = await get_task(task_id=task_id, user_id=user_id)
        await db_client.delete_record(collection="tasks", record_id=task_id)
        logger.info("Deleted task '%s' for %s", task.title, user_id)


async def reorder_tasks(*, user_id: str, task_ids: list[str]) -> list[Task]:
    """Persist a manually arranged sequence as sort_order 0..n-1.

    This only stores positions; the day view keeps its priority order.

    Returns:
        The tasks in the given sequence with their new positions
    """
    with span("task_service.reorder_tasks"):
        if len(set(task_ids)) != len(task_ids):
            raise ValueError("Task IDs in a reorder must be unique")

        # Validate everything before writing anything
        tasks = [await get_task(task_id=task_id, user_id=user_id) for task_id in task_ids]

        now = now_iso()
        moved = {
            task.id: {"sort_order": position, "updated_at": now}
            for position, task in enumerate(tasks)
            if task.sort_order != position
        }
        await db_client.update_records_by_id(collection="tasks", updates=moved)

        reordered = [
            _to_task(await db_client.get_record(collection="tasks", record_id=task.id)) if task.id in moved else task
            for task in tasks
        ]
        logger.info("Reordered %d tasks for %s", len(reordered), user_id)
        return reordered


async def search_tasks(
    *,
    user_id: str,
    query: str,
    date_filter: SearchDateFilter = SearchDateFilter.ALL,
    today: date | None = None,
) -> list[Task]:
    """Search a user's tasks by substring of title or memo, newest date first."""
    with span("task_service.search_tasks"):
        query = query.strip()
        if not query:
            return []

        term = sanitize_param(query)
        filters = [_user_filter(user_id), f'(title ~ "{term}" || memo ~ "{term}")']

        today = today or current_date()
        if date_filter == SearchDateFilter.TODAY:
            filters.append(f'task_date = "{today.isoformat()}"')
        elif date_filter == SearchDateFilter.WEEK:
            since = today - timedelta(days=constants.SEARCH_WEEK_DAYS)
            filters.append(f'task_date >= "{since.isoformat()}"')
        elif date_filter == SearchDateFilter.MONTH:
            since = today - timedelta(days=constants.SEARCH_MONTH_DAYS)
            filters.append(f'task_date >= "{since.isoformat()}"')

        records = await db_client.list_records(
            collection="tasks",
            filter_query=" && ".join(filters),
            sort="-task_date,+created_at",
            per_page=settings.search_result_limit,
        )
        return [_to_task(record) for record in records]
