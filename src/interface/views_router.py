"""Day and week view endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Header, Query

from src.core.dates import today as current_date
from src.interface.dependencies import get_current_user_id, get_view_session
from src.models.service_models import DayView, WeekView
from src.services import day_view_service


router = APIRouter(prefix="/views", tags=["views"])


@router.get("/day")
async def get_day_view(
    view_date: date | None = Query(default=None, alias="date"),
    x_session_id: str | None = Header(default=None),
    user_id: str = Depends(get_current_user_id),
) -> DayView:
    """One date's tasks, after carry-over (today only) and routine materialization."""
    return await day_view_service.load_day(
        user_id=user_id,
        target_date=view_date or current_date(),
        session=get_view_session(user_id, x_session_id),
    )


@router.get("/week")
async def get_week_view(
    view_date: date | None = Query(default=None, alias="date"),
    user_id: str = Depends(get_current_user_id),
) -> WeekView:
    """The Monday-start week containing the date."""
    return await day_view_service.load_week(user_id=user_id, base_date=view_date or current_date())
