import pytest
from pydantic import ValidationError

from src.core.config import constants
from src.domain.create_models import CategoryCreate
from src.domain.update_models import CategoryUpdate
from src.services import category_service, routine_service, task_service


@pytest.mark.unit
class TestCategoryService:
    async def test_create_appends_with_default_color(self, sqlite_db, user_id):
        first = await category_service.create_category(user_id=user_id, category=CategoryCreate(name="Home"))
        second = await category_service.create_category(
            user_id=user_id, category=CategoryCreate(name="Work", color="#3b82f6")
        )

        assert first.sort_order == 0
        assert first.color == constants.DEFAULT_CATEGORY_COLOR
        assert second.sort_order == 1
        assert second.color == "#3b82f6"

    def test_invalid_color_rejected(self):
        with pytest.raises(ValidationError, match="hex code"):
            CategoryCreate(name="Home", color="blue")

    async def test_list_in_display_order(self, sqlite_db, user_id, other_user_id):
        await category_service.create_category(user_id=user_id, category=CategoryCreate(name="A"))
        await category_service.create_category(user_id=other_user_id, category=CategoryCreate(name="X"))
        await category_service.create_category(user_id=user_id, category=CategoryCreate(name="B"))

        categories = await category_service.list_categories(user_id=user_id)

        assert [category.name for category in categories] == ["A", "B"]

    async def test_update_renames(self, sqlite_db, user_id):
        category = await category_service.create_category(user_id=user_id, category=CategoryCreate(name="Hom"))

        updated = await category_service.update_category(
            category_id=category.id, user_id=user_id, update=CategoryUpdate(name="Home")
        )

        assert updated.name == "Home"

    async def test_delete_detaches_tasks_and_routines(self, task_factory, routine_factory, user_id):
        category = await category_service.create_category(user_id=user_id, category=CategoryCreate(name="Gym"))
        task = await task_factory(title="Leg day", category_id=category.id)
        routine = await routine_factory(title="Warm up", category_id=category.id)

        await category_service.delete_category(category_id=category.id, user_id=user_id)

        assert (await task_service.get_task(task_id=task.id, user_id=user_id)).category_id is None
        assert (await routine_service.get_routine(routine_id=routine.id, user_id=user_id)).category_id is None
        assert await category_service.list_categories(user_id=user_id) == []

    async def test_delete_other_users_category_forbidden(self, sqlite_db, user_id, other_user_id):
        category = await category_service.create_category(user_id=user_id, category=CategoryCreate(name="Mine"))

        with pytest.raises(PermissionError):
            await category_service.delete_category(category_id=category.id, user_id=other_user_id)
