"""Pydantic models for service layer return types.

Background passes (materialization, carry-over) report outcomes through these
models instead of raising, so a failed pass never blocks the view that
triggered it.
"""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, Field

from src.domain.task import Task


class MaterializationStatus(StrEnum):
    """Outcome of one materialization pass."""

    COMPLETED = "completed"
    SKIPPED_PAST_DATE = "skipped_past_date"
    NO_ACTIVE_ROUTINES = "no_active_routines"
    FAILED = "failed"


class MaterializationResult(BaseModel):
    """What a materialization pass did for one user and date."""

    user_id: str
    target_date: date
    status: MaterializationStatus
    created_task_ids: list[str] = Field(default_factory=list)
    already_present: list[str] = Field(default_factory=list, description="Routine IDs that already had a task")
    skipped_weekday: list[str] = Field(default_factory=list, description="Routine IDs not scheduled that weekday")
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True unless the pass hit a backend error."""
        return self.status != MaterializationStatus.FAILED


class CarryOverResult(BaseModel):
    """What a carry-over sweep did for one user."""

    user_id: str
    today: date
    moved_count: int = 0
    left_behind: int = Field(default=0, description="Routine tasks kept in place because today already has one")
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True unless the sweep hit a backend error."""
        return self.error is None


class DayProgress(BaseModel):
    """Completion counts for a list of tasks."""

    completed: int
    total: int


class DayView(BaseModel):
    """Tasks for one date in day view order, plus what the background passes did."""

    user_id: str
    view_date: date
    is_today: bool
    tasks: list[Task]
    progress: DayProgress
    carry_over: CarryOverResult | None = None
    materialization: MaterializationResult | None = None
    warnings: list[str] = Field(default_factory=list)


class WeekDay(BaseModel):
    """One column of the week grid."""

    day: date
    is_today: bool
    tasks: list[Task]


class WeekView(BaseModel):
    """Seven Monday-start date buckets in manual order."""

    user_id: str
    start: date
    end: date
    days: list[WeekDay]
    warnings: list[str] = Field(default_factory=list)
