"""Profile service for account notification settings."""

import logging

from src.core import db_client
from src.core.config import constants
from src.core.dates import now_iso
from src.core.db_client import sanitize_param
from src.core.logging import span
from src.domain.profile import Profile
from src.domain.update_models import NotificationSettingsUpdate


logger = logging.getLogger(__name__)


async def get_profile(*, user_id: str, email: str = "") -> Profile:
    """Get a user's profile, creating it with default settings on first access."""
    with span("profile_service.get_profile"):
        record = await db_client.get_first_record(
            collection="profiles",
            filter_query=f'user_id = "{sanitize_param(user_id)}"',
        )
        if record:
            return Profile.model_validate(record)

        now = now_iso()
        try:
            record = await db_client.create_record(
                collection="profiles",
                data={
                    "user_id": user_id,
                    "email": email,
                    "notification_time": constants.DEFAULT_NOTIFICATION_TIME,
                    "notification_enabled": False,
                    "created_at": now,
                    "updated_at": now,
                },
            )
        except db_client.DuplicateRecordError:
            # Created concurrently by another request
            record = await db_client.get_first_record(
                collection="profiles",
                filter_query=f'user_id = "{sanitize_param(user_id)}"',
            )
            if record is None:
                raise

        logger.info("Created profile for %s", user_id)
        return Profile.model_validate(record)


async def update_notification_settings(*, user_id: str, update: NotificationSettingsUpdate) -> Profile:
    """Save the daily reminder time and whether it is enabled."""
    with span("profile_service.update_notification_settings"):
        profile = await get_profile(user_id=user_id)

        record = await db_client.update_record(
            collection="profiles",
            record_id=profile.id,
            data={
                "notification_time": update.notification_time,
                "notification_enabled": update.notification_enabled,
                "updated_at": now_iso(),
            },
        )

        logger.info(
            "Updated notification settings for %s (enabled=%s, time=%s)",
            user_id,
            update.notification_enabled,
            update.notification_time,
        )
        return Profile.model_validate(record)
