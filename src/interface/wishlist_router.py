"""Wishlist endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status

from src.domain.create_models import WishItemConvert, WishItemCreate, WishListCreate
from src.domain.task import Task
from src.domain.update_models import ReorderRequest, WishItemUpdate, WishListUpdate
from src.domain.wishlist import WishItem, WishList
from src.interface.dependencies import get_current_user_id
from src.services import wishlist_service


router = APIRouter(prefix="/wishlists", tags=["wishlist"])


@router.get("")
async def list_wish_lists(user_id: str = Depends(get_current_user_id)) -> list[WishList]:
    """All wish lists; the default list is created on first visit."""
    await wishlist_service.ensure_default_wish_list(user_id=user_id)
    return await wishlist_service.list_wish_lists(user_id=user_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_wish_list(wish_list: WishListCreate, user_id: str = Depends(get_current_user_id)) -> WishList:
    return await wishlist_service.create_wish_list(user_id=user_id, wish_list=wish_list)


@router.post("/reorder")
async def reorder_wish_lists(body: ReorderRequest, user_id: str = Depends(get_current_user_id)) -> list[WishList]:
    return await wishlist_service.reorder_wish_lists(user_id=user_id, wish_list_ids=body.ids)


@router.patch("/{wish_list_id}")
async def update_wish_list(
    wish_list_id: str, update: WishListUpdate, user_id: str = Depends(get_current_user_id)
) -> WishList:
    return await wishlist_service.update_wish_list(wish_list_id=wish_list_id, user_id=user_id, update=update)


@router.delete("/{wish_list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_wish_list(wish_list_id: str, user_id: str = Depends(get_current_user_id)) -> Response:
    await wishlist_service.delete_wish_list(wish_list_id=wish_list_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{wish_list_id}/items")
async def list_wish_items(
    wish_list_id: str,
    q: str = Query(default=""),
    user_id: str = Depends(get_current_user_id),
) -> list[WishItem]:
    """Items of a list, incomplete first, optionally narrowed by a title or reason search."""
    return await wishlist_service.list_wish_items(wish_list_id=wish_list_id, user_id=user_id, query=q)


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def create_wish_item(wish_item: WishItemCreate, user_id: str = Depends(get_current_user_id)) -> WishItem:
    return await wishlist_service.create_wish_item(user_id=user_id, wish_item=wish_item)


@router.post("/items/reorder")
async def reorder_wish_items(body: ReorderRequest, user_id: str = Depends(get_current_user_id)) -> list[WishItem]:
    return await wishlist_service.reorder_wish_items(user_id=user_id, wish_item_ids=body.ids)


@router.patch("/items/{wish_item_id}")
async def update_wish_item(
    wish_item_id: str, update: WishItemUpdate, user_id: str = Depends(get_current_user_id)
) -> WishItem:
    return await wishlist_service.update_wish_item(wish_item_id=wish_item_id, user_id=user_id, update=update)


@router.post("/items/{wish_item_id}/toggle")
async def toggle_wish_item(wish_item_id: str, user_id: str = Depends(get_current_user_id)) -> WishItem:
    return await wishlist_service.toggle_wish_item(wish_item_id=wish_item_id, user_id=user_id)


@router.post("/items/{wish_item_id}/convert", status_code=status.HTTP_201_CREATED)
async def convert_wish_item(
    wish_item_id: str, options: WishItemConvert, user_id: str = Depends(get_current_user_id)
) -> Task:
    """Schedule a wish item as a task."""
    return await wishlist_service.convert_to_task(wish_item_id=wish_item_id, user_id=user_id, options=options)


@router.delete("/items/{wish_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_wish_item(wish_item_id: str, user_id: str = Depends(get_current_user_id)) -> Response:
    await wishlist_service.delete_wish_item(wish_item_id=wish_item_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
