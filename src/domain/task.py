"""Task domain models and enums."""

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class Priority(StrEnum):
    """Task priority, ranked high > medium > low."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Task(BaseModel):
    """Task data transfer object."""

    id: str = Field(..., description="Unique task ID from database")
    user_id: str = Field(..., description="Owning user ID")
    title: str = Field(..., description="Task title")
    memo: str | None = Field(default=None, description="Free-form note")
    # Kept as plain str so records with an unexpected priority still load and sort last
    priority: str = Field(default=Priority.MEDIUM, description="high, medium or low")
    is_completed: bool = Field(default=False, description="Completion flag")
    task_date: date = Field(..., description="Calendar date the task is scheduled on")
    sort_order: int = Field(default=0, description="Manual position among tasks of the same date")
    category_id: str | None = Field(default=None, description="Category ID, if tagged")
    routine_id: str | None = Field(default=None, description="Routine ID when generated from a routine")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
