"""Routine domain models and enums."""

import json
from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel, Field, field_validator

from src.domain.task import Priority


class Weekday(IntEnum):
    """Day of week as stored on routines (Sunday first)."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


class Routine(BaseModel):
    """Routine data transfer object.

    An empty ``days_of_week`` means the routine applies every day.
    """

    id: str = Field(..., description="Unique routine ID from database")
    user_id: str = Field(..., description="Owning user ID")
    title: str = Field(..., description="Title copied onto generated tasks")
    memo: str | None = Field(default=None, description="Memo copied onto generated tasks")
    priority: str = Field(default=Priority.MEDIUM, description="Priority copied onto generated tasks")
    category_id: str | None = Field(default=None, description="Category copied onto generated tasks")
    is_active: bool = Field(default=True, description="Inactive routines are never materialized")
    has_time: bool = Field(default=False, description="Whether the routine has a fixed time of day")
    time: str | None = Field(default=None, description="Time of day (HH:MM:SS) when has_time is set")
    days_of_week: list[Weekday] = Field(default_factory=list, description="Weekdays the routine applies on")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @field_validator("days_of_week", mode="before")
    @classmethod
    def parse_stored_days(cls, v: object) -> object:
        """Accept the JSON text the database stores."""
        if v is None:
            return []
        if isinstance(v, str):
            return json.loads(v) if v.strip() else []
        return v
