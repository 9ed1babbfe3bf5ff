"""Routine service for CRUD operations."""

import logging
from typing import Any

from src.core import db_client
from src.core.config import constants
from src.core.dates import now_iso
from src.core.db_client import sanitize_param
from src.core.logging import span
from src.domain.create_models import RoutineCreate
from src.domain.routine import Routine
from src.domain.update_models import RoutineUpdate
from src.services import category_service


logger = logging.getLogger(__name__)


def _to_routine(record: dict[str, Any]) -> Routine:
    return Routine.model_validate(record)


async def create_routine(*, user_id: str, routine: RoutineCreate) -> Routine:
    """Create a new active routine.

    Args:
        user_id: Owning user ID
        routine: Validated routine fields

    Returns:
        Created routine record

    Raises:
        KeyError: If the category does not exist
        PermissionError: If the category belongs to someone else
        db_client.DatabaseError: If database operation fails
    """
    with span("routine_service.create_routine"):
        if routine.category_id:
            await category_service.get_category(category_id=routine.category_id, user_id=user_id)

        now = now_iso()
        record = await db_client.create_record(
            collection="routines",
            data={
                "user_id": user_id,
                "title": routine.title,
                "memo": routine.memo,
                "priority": routine.priority,
                "category_id": routine.category_id,
                "is_active": True,
                "has_time": routine.has_time,
                "time": routine.time,
                "days_of_week": [int(day) for day in routine.days_of_week or []],
                "created_at": now,
                "updated_at": now,
            },
        )

        logger.info("Created routine '%s' for %s", routine.title, user_id)
        return _to_routine(record)


async def list_routines(*, user_id: str) -> list[Routine]:
    """List all of a user's routines, newest first."""
    with span("routine_service.list_routines"):
        records = await db_client.list_records(
            collection="routines",
            filter_query=f'user_id = "{sanitize_param(user_id)}"',
            sort="-created_at",
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
        )
        return [_to_routine(record) for record in records]


async def list_active_routines(*, user_id: str) -> list[Routine]:
    """List a user's active routines, oldest first."""
    with span("routine_service.list_active_routines"):
        records = await db_client.list_records(
            collection="routines",
            filter_query=f'user_id = "{sanitize_param(user_id)}" && is_active = true',
            sort="+created_at",
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
        )
        return [_to_routine(record) for record in records]


async def get_routine(*, routine_id: str, user_id: str) -> Routine:
    """Get a routine by ID with ownership validation.

    Raises:
        KeyError: If routine not found
        PermissionError: If routine doesn't belong to user
    """
    with span("routine_service.get_routine"):
        record = await db_client.get_record(collection="routines", record_id=routine_id)

        if record["user_id"] != user_id:
            raise PermissionError(f"Routine {routine_id} does not belong to {user_id}")

        return _to_routine(record)


async def update_routine(*, routine_id: str, user_id: str, update: RoutineUpdate) -> Routine:
    """Apply a partial update to a routine.

    Tasks already generated from the routine are left as they are.
    """
    with span("routine_service.update_routine"):
        current = await get_routine(routine_id=routine_id, user_id=user_id)

        data = update.model_dump(exclude_unset=True)
        if not data:
            raise ValueError("Nothing to update")

        if data.get("category_id"):
            await category_service.get_category(category_id=data["category_id"], user_id=user_id)
        elif "category_id" in data:
            data["category_id"] = None

        has_time = data.get("has_time", current.has_time)
        time = data["time"] if "time" in data else current.time
        if has_time and not time:
            raise ValueError("A time is required when has_time is set")
        if "has_time" in data and not has_time:
            data["time"] = None

        if "days_of_week" in data:
            data["days_of_week"] = [int(day) for day in data["days_of_week"]]

        data["updated_at"] = now_iso()
        record = await db_client.update_record(collection="routines", record_id=routine_id, data=data)

        logger.info("Updated routine %s for %s", routine_id, user_id)
        return _to_routine(record)


async def set_routine_active(*, routine_id: str, user_id: str, is_active: bool) -> Routine:
    """Enable or disable a routine without deleting it."""
    with span("routine_service.set_routine_active"):
        await get_routine(routine_id=routine_id, user_id=user_id)

        record = await db_client.update_record(
            collection="routines",
            record_id=routine_id,
            data={"is_active": is_active, "updated_at": now_iso()},
        )

        logger.info("%s routine %s for %s", "Activated" if is_active else "Deactivated", routine_id, user_id)
        return _to_routine(record)


async def delete_routine(*, routine_id: str, user_id: str) -> None:
    """Delete a routine. Generated tasks stay, detached from the routine."""
    with span("routine_service.delete_routine"):
        routine = await get_routine(routine_id=routine_id, user_id=user_id)

        detached = await db_client.update_records(
            collection="tasks",
            filter_query=f'routine_id = "{sanitize_param(routine_id)}"',
            data={"routine_id": None},
        )
        await db_client.delete_record(collection="routines", record_id=routine_id)

        logger.info("Deleted routine '%s' for %s (%d tasks kept)", routine.title, user_id, detached)
