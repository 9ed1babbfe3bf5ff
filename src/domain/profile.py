"""Profile domain model."""

from datetime import datetime

from pydantic import BaseModel, Field


class Profile(BaseModel):
    """Per-account settings."""

    id: str = Field(..., description="Unique profile ID from database")
    user_id: str = Field(..., description="Owning user ID")
    email: str = Field(default="", description="Account email")
    notification_time: str | None = Field(default=None, description="Daily reminder time (HH:MM:SS)")
    notification_enabled: bool = Field(default=False, description="Whether the daily reminder is enabled")
    created_at: datetime
    updated_at: datetime
