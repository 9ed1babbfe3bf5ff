"""Category service for CRUD operations."""

import logging

from src.core import db_client
from src.core.config import constants
from src.core.dates import now_iso
from src.core.db_client import sanitize_param
from src.core.logging import span
from src.domain.category import Category
from src.domain.create_models import CategoryCreate
from src.domain.update_models import CategoryUpdate


logger = logging.getLogger(__name__)

# Collections whose rows may point at a category
_TAGGED_COLLECTIONS = ("tasks", "routines")


async def list_categories(*, user_id: str) -> list[Category]:
    """List a user's categories in display order."""
    with span("category_service.list_categories"):
        records = await db_client.list_records(
            collection="categories",
            filter_query=f'user_id = "{sanitize_param(user_id)}"',
            sort="+sort_order",
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
        )
        return [Category.model_validate(record) for record in records]


async def create_category(*, user_id: str, category: CategoryCreate) -> Category:
    """Create a category at the end of the user's list.

    Raises:
        db_client.DatabaseError: If database operation fails
    """
    with span("category_service.create_category"):
        existing = await list_categories(user_id=user_id)
        next_order = max((c.sort_order for c in existing), default=-1) + 1

        now = now_iso()
        record = await db_client.create_record(
            collection="categories",
            data={
                "user_id": user_id,
                "name": category.name,
                "color": category.color or constants.DEFAULT_CATEGORY_COLOR,
                "sort_order": next_order,
                "created_at": now,
                "updated_at": now,
            },
        )

        logger.info("Created category '%s' for %s", category.name, user_id)
        return Category.model_validate(record)


async def get_category(*, category_id: str, user_id: str) -> Category:
    """Get a category by ID with ownership validation.

    Raises:
        KeyError: If category not found
        PermissionError: If category doesn't belong to user
    """
    with span("category_service.get_category"):
        record = await db_client.get_record(collection="categories", record_id=category_id)

        if record["user_id"] != user_id:
            raise PermissionError(f"Category {category_id} does not belong to {user_id}")

        return Category.model_validate(record)


async def update_category(*, category_id: str, user_id: str, update: CategoryUpdate) -> Category:
    """Rename or recolor a category."""
    with span("category_service.update_category"):
        await get_category(category_id=category_id, user_id=user_id)

        data = update.model_dump(exclude_unset=True)
        if not data:
            raise ValueError("Nothing to update")
        data["updated_at"] = now_iso()

        record = await db_client.update_record(collection="categories", record_id=category_id, data=data)
        return Category.model_validate(record)


async def delete_category(*, category_id: str, user_id: str) -> None:
    """Delete a category, leaving tagged tasks and routines uncategorized."""
    with span("category_service.delete_category"):
        category = await get_category(category_id=category_id, user_id=user_id)

        detach_filter = f'category_id = "{sanitize_param(category_id)}"'
        for collection in _TAGGED_COLLECTIONS:
            detached = await db_client.update_records(
                collection=collection,
                filter_query=detach_filter,
                data={"category_id": None},
            )
            if detached:
                logger.info("Detached %d %s from category '%s'", detached, collection, category.name)

        await db_client.delete_record(collection="categories", record_id=category_id)
        logger.info("Deleted category '%s' for %s", category.name, user_id)
