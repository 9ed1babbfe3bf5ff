from datetime import date, timedelta

import pytest

from src.core import db_client
from src.models.service_models import MaterializationStatus
from src.services import routine_service, task_service
from src.services.materialization_service import materialize_routines, runs_on


@pytest.mark.unit
class TestRunsOn:
    async def test_empty_weekdays_means_every_day(self, routine_factory, today):
        routine = await routine_factory()

        assert all(runs_on(routine, today + timedelta(days=offset)) for offset in range(7))

    async def test_weekday_filter_uses_sunday_first_numbering(self, routine_factory):
        # 2025-01-19 is a Sunday, 2025-01-20 a Monday
        routine = await routine_factory(days_of_week=[0])

        assert runs_on(routine, date(2025, 1, 19))
        assert not runs_on(routine, date(2025, 1, 20))


@pytest.mark.unit
class TestMaterializeRoutines:
    async def test_creates_one_task_per_applicable_routine(self, routine_factory, user_id, today):
        routine = await routine_factory(title="Journal", memo="Three lines", priority="high")

        result = await materialize_routines(user_id=user_id, target_date=today, today=today)

        assert result.status == MaterializationStatus.COMPLETED
        assert len(result.created_task_ids) == 1
        tasks = await task_service.list_tasks_for_date(user_id=user_id, task_date=today)
        assert len(tasks) == 1
        task = tasks[0]
        assert task.routine_id == routine.id
        assert task.title == "Journal"
        assert task.memo == "Three lines"
        assert task.priority == "high"
        assert task.is_completed is False
        assert task.sort_order == 0

    @pytest.mark.parametrize("owner", ["007", "true", "1.50"])
    async def test_numeric_looking_user_id(self, routine_factory, owner, today):
        routine = await routine_factory(title="Journal", user_id=owner)

        first = await materialize_routines(user_id=owner, target_date=today, today=today)
        second = await materialize_routines(user_id=owner, target_date=today, today=today)

        assert first.status == MaterializationStatus.COMPLETED
        assert len(first.created_task_ids) == 1
        assert second.created_task_ids == []
        tasks = await task_service.list_tasks_for_date(user_id=owner, task_date=today)
        assert [task.routine_id for task in tasks] == [routine.id]

    async def test_is_idempotent(self, routine_factory, user_id, today):
        routine = await routine_factory(title="Journal")

        await materialize_routines(user_id=user_id, target_date=today, today=today)
        second = await materialize_routines(user_id=user_id, target_date=today, today=today)

        assert second.created_task_ids == []
        assert second.already_present == [routine.id]
        tasks = await task_service.list_tasks_for_date(user_id=user_id, task_date=today)
        assert len(tasks) == 1

    async def test_completed_instance_is_not_recreated(self, routine_factory, user_id, today):
        await routine_factory(title="Journal")
        first = await materialize_routines(user_id=user_id, target_date=today, today=today)
        await task_service.toggle_complete(task_id=first.created_task_ids[0], user_id=user_id)

        second = await materialize_routines(user_id=user_id, target_date=today, today=today)

        assert second.created_task_ids == []

    async def test_weekday_mismatch_is_skipped(self, routine_factory, user_id, today):
        # today is a Wednesday (3)
        weekend = await routine_factory(title="Weekend", days_of_week=[0, 6])
        midweek = await routine_factory(title="Midweek", days_of_week=[3])

        result = await materialize_routines(user_id=user_id, target_date=today, today=today)

        assert result.skipped_weekday == [weekend.id]
        tasks = await task_service.list_tasks_for_date(user_id=user_id, task_date=today)
        assert [task.routine_id for task in tasks] == [midweek.id]

    async def test_inactive_routines_are_ignored(self, routine_factory, user_id, today):
        routine = await routine_factory(title="Paused")
        await routine_service.set_routine_active(routine_id=routine.id, user_id=user_id, is_active=False)

        result = await materialize_routines(user_id=user_id, target_date=today, today=today)

        assert result.status == MaterializationStatus.NO_ACTIVE_ROUTINES
        assert await task_service.list_tasks_for_date(user_id=user_id, task_date=today) == []

    async def test_past_dates_are_never_backfilled(self, routine_factory, user_id, today):
        await routine_factory(title="Journal")
        yesterday = today - timedelta(days=1)

        result = await materialize_routines(user_id=user_id, target_date=yesterday, today=today)

        assert result.status == MaterializationStatus.SKIPPED_PAST_DATE
        assert await task_service.list_tasks_for_date(user_id=user_id, task_date=yesterday) == []

    async def test_future_dates_are_materialized(self, routine_factory, user_id, today):
        await routine_factory(title="Journal")
        next_week = today + timedelta(days=7)

        result = await materialize_routines(user_id=user_id, target_date=next_week, today=today)

        assert result.status == MaterializationStatus.COMPLETED
        assert len(result.created_task_ids) == 1

    async def test_other_users_routines_are_not_materialized(self, routine_factory, user_id, other_user_id, today):
        await routine_factory(title="Theirs", user_id=other_user_id)

        result = await materialize_routines(user_id=user_id, target_date=today, today=today)

        assert result.status == MaterializationStatus.NO_ACTIVE_ROUTINES

    async def test_racing_duplicate_counts_as_present(self, routine_factory, user_id, today, monkeypatch):
        routine = await routine_factory(title="Journal")

        async def no_existing(**kwargs):
            return set()

        # First pass creates it; second pass can't see it and hits the unique index
        await materialize_routines(user_id=user_id, target_date=today, today=today)
        monkeypatch.setattr("src.services.materialization_service._generated_routine_ids", no_existing)
        result = await materialize_routines(user_id=user_id, target_date=today, today=today)

        assert result.status == MaterializationStatus.COMPLETED
        assert result.already_present == [routine.id]
        assert len(await task_service.list_tasks_for_date(user_id=user_id, task_date=today)) == 1

    async def test_backend_failure_is_reported_not_raised(self, routine_factory, user_id, today, monkeypatch):
        await routine_factory(title="Journal")

        async def broken_list_records(**kwargs):
            raise db_client.DatabaseError("disk I/O error")

        monkeypatch.setattr("src.core.db_client.list_records", broken_list_records)

        result = await materialize_routines(user_id=user_id, target_date=today, today=today)

        assert result.status == MaterializationStatus.FAILED
        assert result.ok is False
        assert "disk I/O error" in result.error

    async def test_defaults_to_current_date(self, routine_factory, user_id, freeze_today):
        await routine_factory(title="Journal")

        result = await materialize_routines(user_id=user_id, target_date=freeze_today)

        assert result.status == MaterializationStatus.COMPLETED
        assert len(result.created_task_ids) == 1
