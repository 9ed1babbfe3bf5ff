from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from src.core import db_client
from src.domain.create_models import CategoryCreate, TaskCreate
from src.domain.update_models import TaskUpdate
from src.services import category_service, task_service
from src.services.task_service import SearchDateFilter


@pytest.mark.unit
class TestCreateTask:
    async def test_create_task_defaults(self, task_factory, user_id, today):
        task = await task_factory(title="  Buy milk  ")

        assert task.title == "Buy milk"
        assert task.user_id == user_id
        assert task.task_date == today
        assert task.priority == "medium"
        assert task.is_completed is False
        assert task.sort_order == 0
        assert task.routine_id is None

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError, match="Title cannot be empty"):
            TaskCreate(title="   ", task_date=date(2025, 1, 15))

    async def test_foreign_category_rejected(self, task_factory, other_user_id):
        category = await category_service.create_category(
            user_id=other_user_id, category=CategoryCreate(name="Theirs")
        )

        with pytest.raises(PermissionError):
            await task_factory(title="Sneaky", category_id=category.id)

    async def test_missing_category_rejected(self, task_factory):
        with pytest.raises(KeyError):
            await task_factory(title="Orphan", category_id="999")


@pytest.mark.unit
class TestListTasks:
    async def test_list_for_date_uses_day_view_order(self, task_factory, user_id, today):
        low = await task_factory(title="Low", priority="low")
        high = await task_factory(title="High", priority="high")
        done = await task_factory(title="Done", priority="high")
        await task_service.toggle_complete(task_id=done.id, user_id=user_id)
        await task_factory(title="Tomorrow", task_date=today + timedelta(days=1))

        tasks = await task_service.list_tasks_for_date(user_id=user_id, task_date=today)

        assert [task.id for task in tasks] == [high.id, low.id, done.id]

    async def test_list_only_returns_own_tasks(self, task_factory, user_id, other_user_id, today):
        await task_factory(title="Mine")
        await task_factory(title="Theirs", user_id=other_user_id)

        tasks = await task_service.list_tasks_for_date(user_id=user_id, task_date=today)

        assert [task.title for task in tasks] == ["Mine"]

    @pytest.mark.parametrize("owner", ["007", "true", "1.50"])
    async def test_list_for_numeric_looking_user_id(self, task_factory, owner, today):
        task = await task_factory(title="Mine", user_id=owner)

        tasks = await task_service.list_tasks_for_date(user_id=owner, task_date=today)

        assert [listed.id for listed in tasks] == [task.id]

    async def test_list_between_rejects_inverted_range(self, sqlite_db, user_id, today):
        with pytest.raises(ValueError, match="Invalid date range"):
            await task_service.list_tasks_between(user_id=user_id, start=today, end=today - timedelta(days=1))


@pytest.mark.unit
class TestMutations:
    async def test_toggle_flips_completion(self, task_factory, user_id):
        task = await task_factory()

        done = await task_service.toggle_complete(task_id=task.id, user_id=user_id)
        undone = await task_service.toggle_complete(task_id=task.id, user_id=user_id)

        assert done.is_completed is True
        assert undone.is_completed is False

    async def test_update_applies_only_set_fields(self, task_factory, user_id):
        task = await task_factory(title="Old", memo="keep me", priority="low")

        updated = await task_service.update_task(
            task_id=task.id, user_id=user_id, update=TaskUpdate(title="New")
        )

        assert updated.title == "New"
        assert updated.memo == "keep me"
        assert updated.priority == "low"

    async def test_empty_update_rejected(self, task_factory, user_id):
        task = await task_factory()

        with pytest.raises(ValueError, match="Nothing to update"):
            await task_service.update_task(task_id=task.id, user_id=user_id, update=TaskUpdate())

    async def test_other_users_task_is_forbidden(self, task_factory, other_user_id):
        task = await task_factory()

        with pytest.raises(PermissionError):
            await task_service.toggle_complete(task_id=task.id, user_id=other_user_id)

    async def test_move_task_keeps_identity(self, task_factory, user_id, today):
        task = await task_factory(title="Move me")
        target = today + timedelta(days=3)

        moved = await task_service.move_task(task_id=task.id, user_id=user_id, new_date=target)

        assert moved.id == task.id
        assert moved.task_date == target
        assert await task_service.list_tasks_for_date(user_id=user_id, task_date=today) == []

    async def test_move_task_accepts_iso_string(self, task_factory, user_id):
        task = await task_factory()

        moved = await task_service.move_task(task_id=task.id, user_id=user_id, new_date="2025-02-01")

        assert moved.task_date == date(2025, 2, 1)

    async def test_move_to_tomorrow_is_relative_to_task_date(self, task_factory, user_id, today):
        task = await task_factory(task_date=today + timedelta(days=5))

        moved = await task_service.move_to_tomorrow(task_id=task.id, user_id=user_id)

        assert moved.task_date == today + timedelta(days=6)

    async def test_delete_task(self, task_factory, user_id):
        task = await task_factory()

        await task_service.delete_task(task_id=task.id, user_id=user_id)

        with pytest.raises(KeyError):
            await task_service.get_task(task_id=task.id, user_id=user_id)


@pytest.mark.unit
class TestReorder:
    async def test_reorder_assigns_positions(self, task_factory, user_id, today):
        first = await task_factory(title="First")
        second = await task_factory(title="Second")
        third = await task_factory(title="Third")

        reordered = await task_service.reorder_tasks(user_id=user_id, task_ids=[third.id, first.id, second.id])

        assert [task.sort_order for task in reordered] == [0, 1, 2]
        between = await task_service.list_tasks_between(user_id=user_id, start=today, end=today)
        assert [task.id for task in between] == [third.id, first.id, second.id]

    async def test_reorder_does_not_change_day_view(self, task_factory, user_id, today):
        high = await task_factory(title="High", priority="high")
        low = await task_factory(title="Low", priority="low")

        await task_service.reorder_tasks(user_id=user_id, task_ids=[low.id, high.id])
        tasks = await task_service.list_tasks_for_date(user_id=user_id, task_date=today)

        assert [task.id for task in tasks] == [high.id, low.id]

    async def test_reorder_rejects_duplicates(self, task_factory, user_id):
        task = await task_factory()

        with pytest.raises(ValueError, match="unique"):
            await task_service.reorder_tasks(user_id=user_id, task_ids=[task.id, task.id])

    async def test_reorder_with_foreign_task_writes_nothing(self, task_factory, user_id, other_user_id, today):
        mine = await task_factory(title="Mine")
        second = await task_factory(title="Also mine")
        theirs = await task_factory(title="Theirs", user_id=other_user_id)

        with pytest.raises(PermissionError):
            await task_service.reorder_tasks(user_id=user_id, task_ids=[mine.id, second.id, theirs.id])

        unchanged = await task_service.get_task(task_id=second.id, user_id=user_id)
        assert unchanged.sort_order == 0

    async def test_reorder_failing_midway_keeps_old_positions(self, task_factory, user_id, monkeypatch):
        first = await task_factory(title="First")
        second = await task_factory(title="Second")
        third = await task_factory(title="Third")
        await task_service.reorder_tasks(user_id=user_id, task_ids=[first.id, second.id, third.id])

        original = db_client._update
        writes = []

        async def fail_on_second_write(conn, collection, record_id, data):
            writes.append(record_id)
            if len(writes) == 2:
                raise RuntimeError("database is locked")
            return await original(conn, collection, record_id, data)

        monkeypatch.setattr(db_client, "_update", fail_on_second_write)

        with pytest.raises(db_client.DatabaseError):
            await task_service.reorder_tasks(user_id=user_id, task_ids=[third.id, second.id, first.id])

        assert len(writes) == 2
        for task, position in ((first, 0), (second, 1), (third, 2)):
            stored = await task_service.get_task(task_id=task.id, user_id=user_id)
            assert stored.sort_order == position


@pytest.mark.unit
class TestSearch:
    async def test_blank_query_returns_nothing(self, task_factory, user_id):
        await task_factory(title="Anything")

        assert await task_service.search_tasks(user_id=user_id, query="   ") == []

    async def test_matches_title_or_memo_case_insensitively(self, task_factory, user_id, today):
        by_title = await task_factory(title="Buy MILK")
        by_memo = await task_factory(title="Groceries", memo="oat milk", task_date=today + timedelta(days=1))
        await task_factory(title="Unrelated")

        results = await task_service.search_tasks(user_id=user_id, query="milk", today=today)

        assert [task.id for task in results] == [by_memo.id, by_title.id]

    async def test_wildcards_are_literal(self, task_factory, user_id, today):
        literal = await task_factory(title="100% done")
        await task_factory(title="100 percent")

        results = await task_service.search_tasks(user_id=user_id, query="0%", today=today)

        assert [task.id for task in results] == [literal.id]

    async def test_date_windows(self, task_factory, user_id, today):
        await task_factory(title="Report today", task_date=today)
        await task_factory(title="Report last week", task_date=today - timedelta(days=5))
        await task_factory(title="Report last month", task_date=today - timedelta(days=20))
        await task_factory(title="Report ancient", task_date=today - timedelta(days=90))

        async def titles(date_filter):
            results = await task_service.search_tasks(
                user_id=user_id, query="report", date_filter=date_filter, today=today
            )
            return {task.title for task in results}

        assert await titles(SearchDateFilter.TODAY) == {"Report today"}
        assert await titles(SearchDateFilter.WEEK) == {"Report today", "Report last week"}
        assert await titles(SearchDateFilter.MONTH) == {"Report today", "Report last week", "Report last month"}
        assert len(await titles(SearchDateFilter.ALL)) == 4

    async def test_search_excludes_other_users(self, task_factory, user_id, other_user_id, today):
        await task_factory(title="Shared word", user_id=other_user_id)

        assert await task_service.search_tasks(user_id=user_id, query="shared", today=today) == []
