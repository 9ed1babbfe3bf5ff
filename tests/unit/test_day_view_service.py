from datetime import date, timedelta

import pytest

from src.core import db_client
from src.models.service_models import CarryOverResult
from src.services import task_service
from src.services.day_view_service import ViewSession, load_day, load_week, summarize_progress
from tests.unit.factories import make_task


def _broken(message: str):
    async def _raise(**kwargs):
        raise db_client.DatabaseError(message)

    return _raise


@pytest.mark.unit
class TestLoadDay:
    async def test_today_carries_over_then_materializes(self, routine_factory, task_factory, user_id, today):
        routine = await routine_factory(title="Journal")
        stale = await task_factory(title="Journal", routine_id=routine.id, task_date=today - timedelta(days=1))

        view = await load_day(user_id=user_id, target_date=today, today=today)

        assert view.is_today
        assert [task.id for task in view.tasks] == [stale.id]
        assert view.carry_over.moved_count == 1
        assert view.materialization.already_present == [routine.id]
        assert view.materialization.created_task_ids == []

    async def test_other_dates_skip_carry_over(self, routine_factory, task_factory, user_id, today):
        await routine_factory(title="Journal")
        late = await task_factory(title="Late", task_date=today - timedelta(days=1))
        tomorrow = today + timedelta(days=1)

        view = await load_day(user_id=user_id, target_date=tomorrow, today=today)

        assert view.is_today is False
        assert view.carry_over is None
        assert len(view.materialization.created_task_ids) == 1
        assert (await task_service.get_task(task_id=late.id, user_id=user_id)).task_date == late.task_date

    async def test_tasks_in_day_view_order_with_progress(self, task_factory, user_id, today):
        low = await task_factory(title="Low", priority="low")
        high = await task_factory(title="High", priority="high")
        done = await task_factory(title="Done", priority="high")
        await task_service.toggle_complete(task_id=done.id, user_id=user_id)

        view = await load_day(user_id=user_id, target_date=today, today=today)

        assert [task.id for task in view.tasks] == [high.id, low.id, done.id]
        assert view.progress.completed == 1
        assert view.progress.total == 3
        assert view.warnings == []

    async def test_session_skips_repeated_passes(self, routine_factory, user_id, today):
        await routine_factory(title="Journal")
        session = ViewSession()

        first = await load_day(user_id=user_id, target_date=today, session=session, today=today)
        second = await load_day(user_id=user_id, target_date=today, session=session, today=today)

        assert first.carry_over is not None
        assert first.materialization is not None
        assert second.carry_over is None
        assert second.materialization is None
        assert len(second.tasks) == 1

    async def test_failed_pass_is_retried_next_load(self, routine_factory, user_id, today, monkeypatch):
        await routine_factory(title="Journal")
        session = ViewSession()

        calls = []

        async def flaky_carry_over(*, user_id, today):
            calls.append(today)
            if len(calls) == 1:
                return CarryOverResult(user_id=user_id, today=today, error="database is locked")
            return CarryOverResult(user_id=user_id, today=today)

        monkeypatch.setattr("src.services.day_view_service.carry_over_incomplete", flaky_carry_over)
        failed = await load_day(user_id=user_id, target_date=today, session=session, today=today)
        retried = await load_day(user_id=user_id, target_date=today, session=session, today=today)

        assert failed.warnings == ["Unfinished tasks from earlier days could not be carried over"]
        assert len(failed.tasks) == 1
        assert retried.carry_over is not None
        assert retried.carry_over.ok
        assert retried.warnings == []

    async def test_read_failure_serves_last_loaded_tasks(self, task_factory, user_id, today, monkeypatch):
        task = await task_factory(title="Keep me")
        session = ViewSession()
        await load_day(user_id=user_id, target_date=today, session=session, today=today)

        monkeypatch.setattr("src.services.task_service.list_tasks_for_date", _broken("disk I/O error"))
        view = await load_day(user_id=user_id, target_date=today, session=session, today=today)

        assert [t.id for t in view.tasks] == [task.id]
        assert "Tasks could not be loaded; showing what was loaded before" in view.warnings

    async def test_read_failure_without_session_is_empty(self, sqlite_db, user_id, today, monkeypatch):
        monkeypatch.setattr("src.services.task_service.list_tasks_for_date", _broken("disk I/O error"))

        view = await load_day(user_id=user_id, target_date=today, today=today)

        assert view.tasks == []
        assert view.progress.total == 0

    async def test_materialization_failure_becomes_warning(self, routine_factory, user_id, today, monkeypatch):
        await routine_factory(title="Journal")
        monkeypatch.setattr("src.services.routine_service.list_active_routines", _broken("database is locked"))

        view = await load_day(user_id=user_id, target_date=today, today=today)

        assert view.materialization.ok is False
        assert "Routine tasks could not be generated for this date" in view.warnings


@pytest.mark.unit
class TestLoadWeek:
    async def test_seven_monday_start_buckets(self, task_factory, user_id, today):
        # today (2025-01-15) is a Wednesday, so the week runs 13th to 19th
        monday = await task_factory(title="Monday", task_date=date(2025, 1, 13))
        sunday = await task_factory(title="Sunday", task_date=date(2025, 1, 19))
        await task_factory(title="Next week", task_date=date(2025, 1, 20))

        week = await load_week(user_id=user_id, base_date=today, today=today)

        assert week.start == date(2025, 1, 13)
        assert week.end == date(2025, 1, 19)
        assert [day.day for day in week.days] == [date(2025, 1, 13) + timedelta(days=i) for i in range(7)]
        assert [task.id for task in week.days[0].tasks] == [monday.id]
        assert [task.id for task in week.days[6].tasks] == [sunday.id]
        assert [day.is_today for day in week.days].index(True) == 2

    async def test_buckets_use_manual_order(self, task_factory, user_id, today):
        high = await task_factory(title="High", priority="high")
        low = await task_factory(title="Low", priority="low")
        await task_service.reorder_tasks(user_id=user_id, task_ids=[low.id, high.id])

        week = await load_week(user_id=user_id, base_date=today, today=today)

        assert [task.id for task in week.days[2].tasks] == [low.id, high.id]

    async def test_sunday_belongs_to_preceding_week(self, sqlite_db, user_id, today):
        week = await load_week(user_id=user_id, base_date=date(2025, 1, 19), today=today)

        assert week.start == date(2025, 1, 13)

    async def test_week_view_does_not_materialize(self, routine_factory, user_id, today):
        await routine_factory(title="Journal")

        week = await load_week(user_id=user_id, base_date=today, today=today)

        assert all(day.tasks == [] for day in week.days)

    async def test_read_failure_gives_empty_buckets(self, sqlite_db, user_id, today, monkeypatch):
        monkeypatch.setattr("src.services.task_service.list_tasks_between", _broken("disk I/O error"))

        week = await load_week(user_id=user_id, base_date=today, today=today)

        assert len(week.days) == 7
        assert all(day.tasks == [] for day in week.days)
        assert week.warnings == ["Tasks could not be loaded"]


@pytest.mark.unit
def test_summarize_progress():
    tasks = [make_task("a", is_completed=True), make_task("b"), make_task("c", is_completed=True)]

    progress = summarize_progress(tasks)

    assert progress.completed == 2
    assert progress.total == 3
