"""Display ordering for tasks.

Two strategies exist and are never mixed:

- PRIORITY: the day view. Incomplete before completed, then high > medium > low
  (unknown priorities last), then oldest first.
- POSITION: the week grid. Manual ``sort_order`` within each date bucket.
"""

from collections.abc import Iterable
from datetime import date
from enum import StrEnum

from src.core.config import constants
from src.domain.task import Task


class OrderingStrategy(StrEnum):
    """Which ordering contract a presentation context uses."""

    PRIORITY = "priority"
    POSITION = "position"


def priority_rank(priority: str) -> int:
    """Rank a priority value; anything unknown ranks after low."""
    return constants.PRIORITY_RANK.get(priority, constants.UNKNOWN_PRIORITY_RANK)


def _priority_key(task: Task) -> tuple[bool, int, float]:
    return (task.is_completed, priority_rank(task.priority), task.created_at.timestamp())


def _position_key(task: Task) -> tuple[int, float]:
    return (task.sort_order, task.created_at.timestamp())


def order_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Order tasks for the day view.

    Pure and stable: ordering an already ordered list returns it unchanged, and
    tasks that compare equal keep their input order.
    """
    return sorted(tasks, key=_priority_key)


def order_by_position(tasks: Iterable[Task]) -> list[Task]:
    """Order tasks by their manual position, oldest first on ties."""
    return sorted(tasks, key=_position_key)


def apply_ordering(tasks: Iterable[Task], strategy: OrderingStrategy) -> list[Task]:
    """Order tasks with the strategy chosen by the presentation context."""
    if strategy == OrderingStrategy.POSITION:
        return order_by_position(tasks)
    return order_tasks(tasks)


def group_by_date(tasks: Iterable[Task], dates: list[date]) -> dict[date, list[Task]]:
    """Bucket tasks into the given dates, each bucket in positional order.

    Tasks dated outside ``dates`` are dropped.
    """
    buckets: dict[date, list[Task]] = {day: [] for day in dates}
    for task in tasks:
        if task.task_date in buckets:
            buckets[task.task_date].append(task)
    return {day: order_by_position(bucket) for day, bucket in buckets.items()}


def merge_task(tasks: Iterable[Task], task: Task, *, view_date: date | None = None) -> list[Task]:
    """Replace (or append) a mutated task and re-derive the day view order.

    When ``view_date`` is given, a task that now lives on another date (e.g. moved
    to tomorrow) leaves the list instead.
    """
    merged = [existing for existing in tasks if existing.id != task.id]
    if view_date is None or task.task_date == view_date:
        merged.append(task)
    return order_tasks(merged)


def remove_task(tasks: Iterable[Task], task_id: str) -> list[Task]:
    """Drop a task from an ordered list, keeping the remaining order."""
    return [task for task in tasks if task.id != task_id]
