"""Category endpoints."""

from fastapi import APIRouter, Depends, Response, status

from src.domain.category import Category
from src.domain.create_models import CategoryCreate
from src.domain.update_models import CategoryUpdate
from src.interface.dependencies import get_current_user_id
from src.services import category_service


router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(user_id: str = Depends(get_current_user_id)) -> list[Category]:
    return await category_service.list_categories(user_id=user_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(category: CategoryCreate, user_id: str = Depends(get_current_user_id)) -> Category:
    return await category_service.create_category(user_id=user_id, category=category)


@router.patch("/{category_id}")
async def update_category(
    category_id: str, update: CategoryUpdate, user_id: str = Depends(get_current_user_id)
) -> Category:
    return await category_service.update_category(category_id=category_id, user_id=user_id, update=update)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: str, user_id: str = Depends(get_current_user_id)) -> Response:
    """Delete a category; tagged tasks and routines become untagged."""
    await category_service.delete_category(category_id=category_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
