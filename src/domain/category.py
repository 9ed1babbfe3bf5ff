"""Category domain model."""

from datetime import datetime

from pydantic import BaseModel, Field


class Category(BaseModel):
    """Category data transfer object."""

    id: str = Field(..., description="Unique category ID from database")
    user_id: str = Field(..., description="Owning user ID")
    name: str = Field(..., description="Display name")
    color: str = Field(..., description="Display color (CSS hex)")
    sort_order: int = Field(default=0, description="Position in the category list")
    created_at: datetime
    updated_at: datetime
