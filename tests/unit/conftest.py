"""Pytest configuration and fixtures for unit tests."""

from datetime import date

import pytest

from src.domain.create_models import RoutineCreate, TaskCreate
from src.services import routine_service, task_service


USER_ID = "user-1"
OTHER_USER_ID = "user-2"

# A Wednesday
TODAY = date(2025, 1, 15)


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def other_user_id() -> str:
    return OTHER_USER_ID


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def freeze_today(monkeypatch):
    """Pin "today" for every service that asks the calendar."""
    monkeypatch.setattr("src.services.task_service.current_date", lambda: TODAY)
    monkeypatch.setattr("src.services.carry_over_service.current_date", lambda: TODAY)
    monkeypatch.setattr("src.services.materialization_service.current_date", lambda: TODAY)
    monkeypatch.setattr("src.services.day_view_service.current_date", lambda: TODAY)
    monkeypatch.setattr("src.core.scheduler.current_date", lambda: TODAY)
    return TODAY


@pytest.fixture
def task_factory(sqlite_db):
    """Factory for creating tasks through the service layer.

    Usage:
        task = await task_factory(title="Buy milk", task_date=date(2025, 1, 15), priority="high")
    """

    async def _create_task(*, user_id: str = USER_ID, routine_id: str | None = None, **kwargs):
        fields = {"title": "Test task", "task_date": TODAY, **kwargs}
        return await task_service.create_task(user_id=user_id, task=TaskCreate(**fields), routine_id=routine_id)

    return _create_task


@pytest.fixture
def routine_factory(sqlite_db):
    """Factory for creating routines through the service layer.

    Usage:
        routine = await routine_factory(title="Stretch", days_of_week=[1, 3, 5])
    """

    async def _create_routine(*, user_id: str = USER_ID, **kwargs):
        fields = {"title": "Test routine", **kwargs}
        return await routine_service.create_routine(user_id=user_id, routine=RoutineCreate(**fields))

    return _create_routine
