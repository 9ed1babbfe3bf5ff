"""Pydantic models for creating records in database."""

import re
from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator

from src.domain.routine import Weekday
from src.domain.task import Priority


MAX_TITLE_LENGTH = 200
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$"


def validate_title(v: str, *, field_name: str = "Title") -> str:
    """Strip a title and reject empty or overlong values."""
    v = v.strip()
    if not v:
        raise ValueError(f"{field_name} cannot be empty")
    if len(v) > MAX_TITLE_LENGTH:
        raise ValueError(f"{field_name} too long (max {MAX_TITLE_LENGTH} characters)")
    return v


def validate_time_of_day(v: str) -> str:
    """Normalize HH:MM or HH:MM:SS to HH:MM:SS."""
    if not re.match(TIME_OF_DAY_PATTERN, v):
        raise ValueError("Time must be in HH:MM format (e.g., 07:30)")
    return v if v.count(":") == 2 else f"{v}:00"


def validate_color(v: str | None) -> str | None:
    """Validate an optional #RRGGBB color."""
    if v is not None and not re.match(HEX_COLOR_PATTERN, v):
        raise ValueError("Color must be a hex code like #3b82f6")
    return v


def normalize_days_of_week(v: list[Weekday] | None) -> list[Weekday] | None:
    """Deduplicate and sort weekdays; an explicitly empty selection is rejected."""
    if v is None:
        return None
    if not v:
        raise ValueError("Select at least one weekday, or omit days_of_week for every day")
    return sorted(set(v))


class TaskCreate(BaseModel):
    """Pydantic model for creating a task record."""

    title: str = Field(..., description="Task title")
    memo: str | None = Field(default=None, description="Free-form note")
    priority: Priority = Field(default=Priority.MEDIUM, description="Task priority")
    category_id: str | None = Field(default=None, description="Category ID")
    task_date: date = Field(..., description="Calendar date (YYYY-MM-DD)")

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v: str) -> str:
        """Validate title is usable."""
        return validate_title(v)

    @field_validator("memo", "category_id")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank optional text as absent."""
        return v.strip() or None if v is not None else None


class RoutineCreate(BaseModel):
    """Pydantic model for creating a routine record."""

    title: str = Field(..., description="Routine title")
    memo: str | None = Field(default=None, description="Memo copied onto generated tasks")
    priority: Priority = Field(default=Priority.MEDIUM, description="Priority copied onto generated tasks")
    category_id: str | None = Field(default=None, description="Category ID")
    has_time: bool = Field(default=False, description="Whether the routine has a fixed time of day")
    time: str | None = Field(default=None, description="Time of day (HH:MM)")
    days_of_week: list[Weekday] | None = Field(
        default=None, description="Weekdays (0=Sunday..6=Saturday); omit for every day"
    )

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v: str) -> str:
        """Validate title is usable."""
        return validate_title(v)

    @field_validator("memo", "category_id")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank optional text as absent."""
        return v.strip() or None if v is not None else None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str | None) -> str | None:
        """Validate and normalize the time of day."""
        return validate_time_of_day(v) if v else None

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: list[Weekday] | None) -> list[Weekday] | None:
        """Validate the weekday selection."""
        return normalize_days_of_week(v)

    @model_validator(mode="after")
    def validate_time_presence(self) -> "RoutineCreate":
        """A fixed-time routine needs a time; others carry none."""
        if self.has_time and not self.time:
            raise ValueError("A time is required when has_time is set")
        if not self.has_time:
            self.time = None
        return self


class CategoryCreate(BaseModel):
    """Pydantic model for creating a category record."""

    name: str = Field(..., description="Display name")
    color: str | None = Field(default=None, description="Display color (#RRGGBB)")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is usable."""
        return validate_title(v, field_name="Name")

    @field_validator("color")
    @classmethod
    def validate_color_hex(cls, v: str | None) -> str | None:
        """Validate color is a hex code."""
        return validate_color(v)


class WishListCreate(BaseModel):
    """Pydantic model for creating a wish list record."""

    title: str = Field(..., description="List title")

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v: str) -> str:
        """Validate title is usable."""
        return validate_title(v)


class WishItemCreate(BaseModel):
    """Pydantic model for creating a wish item record."""

    wish_list_id: str = Field(..., description="Parent wish list ID")
    title: str = Field(..., description="What is wished for")
    reason: str | None = Field(default=None, description="Why")

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v: str) -> str:
        """Validate title is usable."""
        return validate_title(v)

    @field_validator("reason")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank optional text as absent."""
        return v.strip() or None if v is not None else None


class WishItemConvert(BaseModel):
    """Options for turning a wish item into a task."""

    task_date: date = Field(..., description="Date to schedule the new task on")
    priority: Priority = Field(default=Priority.MEDIUM, description="Priority of the new task")
    category_id: str | None = Field(default=None, description="Category of the new task")
