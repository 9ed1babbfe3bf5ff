from src.services import (
    carry_over_service,
    category_service,
    day_view_service,
    materialization_service,
    profile_service,
    routine_service,
    task_service,
    wishlist_service,
)


__all__ = [
    "carry_over_service",
    "category_service",
    "day_view_service",
    "materialization_service",
    "profile_service",
    "routine_service",
    "task_service",
    "wishlist_service",
]
