"""Update models for database operations.

All fields are optional; services apply only the fields that were set
(``model_dump(exclude_unset=True)``). Explicit ``None`` clears nullable fields.
"""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from src.domain.create_models import (
    normalize_days_of_week,
    validate_color,
    validate_time_of_day,
    validate_title,
)
from src.domain.routine import Weekday
from src.domain.task import Priority


def _not_null(v: object, field_name: str) -> object:
    if v is None:
        raise ValueError(f"{field_name} cannot be null")
    return v


class TaskUpdate(BaseModel):
    """Partial update payload for a task."""

    title: str | None = None
    memo: str | None = None
    priority: Priority | None = None
    category_id: str | None = None
    task_date: date | None = None
    is_completed: bool | None = None
    sort_order: int | None = None

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v: str | None) -> str:
        """Validate title is usable."""
        return validate_title(_not_null(v, "title"))

    @field_validator("priority", "task_date", "is_completed", "sort_order")
    @classmethod
    def validate_not_null(cls, v: object) -> object:
        """Reject explicit nulls on required columns."""
        return _not_null(v, "field")


class RoutineUpdate(BaseModel):
    """Partial update payload for a routine."""

    title: str | None = None
    memo: str | None = None
    priority: Priority | None = None
    category_id: str | None = None
    has_time: bool | None = None
    time: str | None = None
    days_of_week: list[Weekday] | None = None

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v: str | None) -> str:
        """Validate title is usable."""
        return validate_title(_not_null(v, "title"))

    @field_validator("priority", "has_time")
    @classmethod
    def validate_not_null(cls, v: object) -> object:
        """Reject explicit nulls on required columns."""
        return _not_null(v, "field")

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str | None) -> str | None:
        """Validate and normalize the time of day."""
        return validate_time_of_day(v) if v else None

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: list[Weekday] | None) -> list[Weekday]:
        """Validate the weekday selection; null resets to every day."""
        return normalize_days_of_week(v) or []


class CategoryUpdate(BaseModel):
    """Partial update payload for a category."""

    name: str | None = None
    color: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        """Validate name is usable."""
        return validate_title(_not_null(v, "name"), field_name="Name")

    @field_validator("color")
    @classmethod
    def validate_color_hex(cls, v: str | None) -> str:
        """Validate color is a hex code."""
        return validate_color(_not_null(v, "color"))


class WishListUpdate(BaseModel):
    """Partial update payload for a wish list."""

    title: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v: str | None) -> str:
        """Validate title is usable."""
        return validate_title(_not_null(v, "title"))


class WishItemUpdate(BaseModel):
    """Partial update payload for a wish item."""

    title: str | None = None
    reason: str | None = None
    is_completed: bool | None = None

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v: str | None) -> str:
        """Validate title is usable."""
        return validate_title(_not_null(v, "title"))


class NotificationSettingsUpdate(BaseModel):
    """Update payload for the daily reminder settings."""

    notification_time: str
    notification_enabled: bool

    @field_validator("notification_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate and normalize the reminder time."""
        return validate_time_of_day(v)


class TaskMove(BaseModel):
    """Target date for moving a task."""

    task_date: date


class RoutineActivation(BaseModel):
    """Pause or resume a routine."""

    is_active: bool


class ReorderRequest(BaseModel):
    """Record IDs in their new display order."""

    ids: list[str] = Field(..., min_length=1)
