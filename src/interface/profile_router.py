"""Profile and notification settings endpoints."""

from fastapi import APIRouter, Depends

from src.domain.profile import Profile
from src.domain.update_models import NotificationSettingsUpdate
from src.interface.dependencies import get_current_user_id
from src.services import profile_service


router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("")
async def get_profile(user_id: str = Depends(get_current_user_id)) -> Profile:
    return await profile_service.get_profile(user_id=user_id)


@router.put("/notifications")
async def update_notification_settings(
    update: NotificationSettingsUpdate, user_id: str = Depends(get_current_user_id)
) -> Profile:
    """Save the daily reminder time and toggle."""
    return await profile_service.update_notification_settings(user_id=user_id, update=update)
