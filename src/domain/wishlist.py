"""Wishlist domain models."""

from datetime import datetime

from pydantic import BaseModel, Field


class WishList(BaseModel):
    """Wish list data transfer object."""

    id: str = Field(..., description="Unique wish list ID from database")
    user_id: str = Field(..., description="Owning user ID")
    title: str = Field(..., description="List title")
    is_default: bool = Field(default=False, description="Default list cannot be deleted")
    sort_order: int = Field(default=0, description="Position among the user's lists")
    created_at: datetime
    updated_at: datetime


class WishItem(BaseModel):
    """Wish item data transfer object."""

    id: str = Field(..., description="Unique wish item ID from database")
    user_id: str = Field(..., description="Owning user ID")
    wish_list_id: str = Field(..., description="Parent wish list ID")
    title: str = Field(..., description="What is wished for")
    reason: str | None = Field(default=None, description="Why; becomes the task memo on conversion")
    is_completed: bool = Field(default=False, description="Completion flag")
    sort_order: int = Field(default=0, description="Position within the list")
    created_at: datetime
    updated_at: datetime
