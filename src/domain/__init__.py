"""Domain models and DTOs."""

from src.domain.category import Category
from src.domain.create_models import (
    CategoryCreate,
    RoutineCreate,
    TaskCreate,
    WishItemConvert,
    WishItemCreate,
    WishListCreate,
)
from src.domain.profile import Profile
from src.domain.routine import Routine, Weekday
from src.domain.task import Priority, Task
from src.domain.update_models import (
    CategoryUpdate,
    NotificationSettingsUpdate,
    ReorderRequest,
    RoutineActivation,
    RoutineUpdate,
    TaskMove,
    TaskUpdate,
    WishItemUpdate,
    WishListUpdate,
)
from src.domain.wishlist import WishItem, WishList


__all__ = [
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "NotificationSettingsUpdate",
    "Priority",
    "Profile",
    "ReorderRequest",
    "Routine",
    "RoutineActivation",
    "RoutineCreate",
    "RoutineUpdate",
    "Task",
    "TaskCreate",
    "TaskMove",
    "TaskUpdate",
    "Weekday",
    "WishItem",
    "WishItemConvert",
    "WishItemCreate",
    "WishItemUpdate",
    "WishList",
    "WishListCreate",
    "WishListUpdate",
]
