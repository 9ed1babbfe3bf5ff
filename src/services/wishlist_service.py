"""Wishlist service: wish lists, wish items and converting items into tasks."""

import logging
from typing import Any

from src.core import db_client
from src.core.config import constants
from src.core.dates import now_iso
from src.core.db_client import sanitize_param
from src.core.logging import span
from src.domain.create_models import TaskCreate, WishItemConvert, WishItemCreate, WishListCreate
from src.domain.task import Task
from src.domain.update_models import WishItemUpdate, WishListUpdate
from src.domain.wishlist import WishItem, WishList
from src.services import task_service


logger = logging.getLogger(__name__)


def sort_wish_items(items: list[WishItem]) -> list[WishItem]:
    """Incomplete items first, then by manual position."""
    return sorted(items, key=lambda item: (item.is_completed, item.sort_order))


# Wish lists


async def list_wish_lists(*, user_id: str) -> list[WishList]:
    """List a user's wish lists in display order."""
    with span("wishlist_service.list_wish_lists"):
        records = await db_client.list_records(
            collection="wish_lists",
            filter_query=f'user_id = "{sanitize_param(user_id)}"',
            sort="+sort_order",
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
        )
        return [WishList.model_validate(record) for record in records]


async def _insert_wish_list(*, user_id: str, title: str, is_default: bool) -> WishList:
    existing = await list_wish_lists(user_id=user_id)
    next_order = max((wish_list.sort_order for wish_list in existing), default=-1) + 1

    now = now_iso()
    record = await db_client.create_record(
        collection="wish_lists",
        data={
            "user_id": user_id,
            "title": title,
            "is_default": is_default,
            "sort_order": next_order,
            "created_at": now,
            "updated_at": now,
        },
    )
    logger.info("Created wish list '%s' for %s", title, user_id)
    return WishList.model_validate(record)


async def create_wish_list(*, user_id: str, wish_list: WishListCreate) -> WishList:
    """Create a wish list at the end of the user's lists."""
    with span("wishlist_service.create_wish_list"):
        return await _insert_wish_list(user_id=user_id, title=wish_list.title, is_default=False)


async def ensure_default_wish_list(*, user_id: str) -> WishList:
    """Return the user's default wish list, creating it on first use."""
    with span("wishlist_service.ensure_default_wish_list"):
        default_filter = f'user_id = "{sanitize_param(user_id)}" && is_default = true'
        record = await db_client.get_first_record(collection="wish_lists", filter_query=default_filter)
        if record:
            return WishList.model_validate(record)

        try:
            return await _insert_wish_list(user_id=user_id, title=constants.DEFAULT_WISH_LIST_TITLE, is_default=True)
        except db_client.DuplicateRecordError:
            # Created concurrently by another request
            record = await db_client.get_first_record(collection="wish_lists", filter_query=default_filter)
            if record is None:
                raise
            return WishList.model_validate(record)


async def get_wish_list(*, wish_list_id: str, user_id: str) -> WishList:
    """Get a wish list by ID with ownership validation.

    Raises:
        KeyError: If wish list not found
        PermissionError: If wish list doesn't belong to user
    """
    with span("wishlist_service.get_wish_list"):
        record = await db_client.get_record(collection="wish_lists", record_id=wish_list_id)

        if record["user_id"] != user_id:
            raise PermissionError(f"Wish list {wish_list_id} does not belong to {user_id}")

        return WishList.model_validate(record)


async def update_wish_list(*, wish_list_id: str, user_id: str, update: WishListUpdate) -> WishList:
    """Rename a wish list."""
    with span("wishlist_service.update_wish_list"):
        await get_wish_list(wish_list_id=wish_list_id, user_id=user_id)

        data = update.model_dump(exclude_unset=True)
        if not data:
            raise ValueError("Nothing to update")
        data["updated_at"] = now_iso()

        record = await db_client.update_record(collection="wish_lists", record_id=wish_list_id, data=data)
        return WishList.model_validate(record)


async def delete_wish_list(*, wish_list_id: str, user_id: str) -> None:
    """Delete a wish list and its items.

    Raises:
        ValueError: If the list is the user's default list
    """
    with span("wishlist_service.delete_wish_list"):
        wish_list = await get_wish_list(wish_list_id=wish_list_id, user_id=user_id)
        if wish_list.is_default:
            raise ValueError("Cannot delete the default wish list")

        await db_client.delete_record(collection="wish_lists", record_id=wish_list_id)
        logger.info("Deleted wish list '%s' for %s", wish_list.title, user_id)


async def _persist_positions(*, collection: str, record_ids: list[str]) -> list[dict[str, Any]]:
    now = now_iso()
    updates = {record_id: {"sort_order": position, "updated_at": now} for position, record_id in enumerate(record_ids)}
    await db_client.update_records_by_id(collection=collection, updates=updates)
    return [await db_client.get_record(collection=collection, record_id=record_id) for record_id in record_ids]


async def reorder_wish_lists(*, user_id: str, wish_list_ids: list[str]) -> list[WishList]:
    """Persist a dragged order of wish lists as sort_order 0..n-1."""
    with span("wishlist_service.reorder_wish_lists"):
        if len(set(wish_list_ids)) != len(wish_list_ids):
            raise ValueError("Wish list IDs in a reorder must be unique")
        for wish_list_id in wish_list_ids:
            await get_wish_list(wish_list_id=wish_list_id, user_id=user_id)

        records = await _persist_positions(collection="wish_lists", record_ids=wish_list_ids)
        return [WishList.model_validate(record) for record in records]


# Wish items


async def list_wish_items(*, wish_list_id: str, user_id: str, query: str = "") -> list[WishItem]:
    """List the items of a wish list, incomplete first.

    A non-blank query keeps only items whose title or reason contains it, ignoring case.
    """
    with span("wishlist_service.list_wish_items"):
        await get_wish_list(wish_list_id=wish_list_id, user_id=user_id)

        filters = [f'wish_list_id = "{sanitize_param(wish_list_id)}"']
        query = query.strip()
        if query:
            term = sanitize_param(query)
            filters.append(f'(title ~ "{term}" || reason ~ "{term}")')

        records = await db_client.list_records(
            collection="wish_items",
            filter_query=" && ".join(filters),
            sort="+sort_order",
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
        )
        return sort_wish_items([WishItem.model_validate(record) for record in records])


async def create_wish_item(*, user_id: str, wish_item: WishItemCreate) -> WishItem:
    """Add an item at the end of a wish list."""
    with span("wishlist_service.create_wish_item"):
        items = await list_wish_items(wish_list_id=wish_item.wish_list_id, user_id=user_id)
        next_order = max((item.sort_order for item in items), default=-1) + 1

        now = now_iso()
        record = await db_client.create_record(
            collection="wish_items",
            data={
                "user_id": user_id,
                "wish_list_id": wish_item.wish_list_id,
                "title": wish_item.title,
                "reason": wish_item.reason,
                "is_completed": False,
                "sort_order": next_order,
                "created_at": now,
                "updated_at": now,
            },
        )

        logger.info("Created wish item '%s' for %s", wish_item.title, user_id)
        return WishItem.model_validate(record)


async def get_wish_item(*, wish_item_id: str, user_id: str) -> WishItem:
    """Get a wish item by ID with ownership validation.

    Raises:
        KeyError: If wish item not found
        PermissionError: If wish item doesn't belong to user
    """
    with span("wishlist_service.get_wish_item"):
        record = await db_client.get_record(collection="wish_items", record_id=wish_item_id)

        if record["user_id"] != user_id:
            raise PermissionError(f"Wish item {wish_item_id} does not belong to {user_id}")

        return WishItem.model_validate(record)


async def update_wish_item(*, wish_item_id: str, user_id: str, update: WishItemUpdate) -> WishItem:
    """Apply a partial update to a wish item."""
    with span("wishlist_service.update_wish_item"):
        await get_wish_item(wish_item_id=wish_item_id, user_id=user_id)

        data = update.model_dump(exclude_unset=True)
        if not data:
            raise ValueError("Nothing to update")
        data["updated_at"] = now_iso()

        record = await db_client.update_record(collection="wish_items", record_id=wish_item_id, data=data)
        return WishItem.model_validate(record)


async def toggle_wish_item(*, wish_item_id: str, user_id: str) -> WishItem:
    """Flip a wish item's completion flag."""
    with span("wishlist_service.toggle_wish_item"):
        item = await get_wish_item(wish_item_id=wish_item_id, user_id=user_id)
        return await update_wish_item(
            wish_item_id=wish_item_id,
            user_id=user_id,
            update=WishItemUpdate(is_completed=not item.is_completed),
        )


async def delete_wish_item(*, wish_item_id: str, user_id: str) -> None:
    """Delete a wish item."""
    with span("wishlist_service.delete_wish_item"):
        item = await get_wish_item(wish_item_id=wish_item_id, user_id=user_id)
        await db_client.delete_record(collection="wish_items", record_id=wish_item_id)
        logger.info("Deleted wish item '%s' for %s", item.title, user_id)


async def reorder_wish_items(*, user_id: str, wish_item_ids: list[str]) -> list[WishItem]:
    """Persist a dragged order of wish items as sort_order 0..n-1."""
    with span("wishlist_service.reorder_wish_items"):
        if len(set(wish_item_ids)) != len(wish_item_ids):
            raise ValueError("Wish item IDs in a reorder must be unique")
        for wish_item_id in wish_item_ids:
            await get_wish_item(wish_item_id=wish_item_id, user_id=user_id)

        records = await _persist_positions(collection="wish_items", record_ids=wish_item_ids)
        return [WishItem.model_validate(record) for record in records]


async def convert_to_task(*, wish_item_id: str, user_id: str, options: WishItemConvert) -> Task:
    """Schedule a wish item as a task; the item's reason becomes the memo.

    The wish item itself is left unchanged.
    """
    with span("wishlist_service.convert_to_task"):
        item = await get_wish_item(wish_item_id=wish_item_id, user_id=user_id)

        task = await task_service.create_task(
            user_id=user_id,
            task=TaskCreate(
                title=item.title,
                memo=item.reason,
                priority=options.priority,
                category_id=options.category_id,
                task_date=options.task_date,
            ),
        )

        logger.info("Converted wish item %s into task %s for %s", wish_item_id, task.id, user_id)
        return task
