"""ORM models package export."""

from wildlife_api.models.activity import (
    Activity,
    ActivityCategory,
    ActivityDifficulty,
    ActivitySlotOverride,
    ActivityStatus,
)
from wildlife_api.models.booking import (
    Booking,
    BookingStatus,
    BookingType,
    PaymentStatus,
)
from wildlife_api.models.user import User, UserRole, UserStatus

__all__ = [
    "Activity",
    "ActivityCategory",
    "ActivityDifficulty",
    "ActivitySlotOverride",
    "ActivityStatus",
    "Booking",
    "BookingStatus",
    "BookingType",
    "PaymentStatus",
    "User",
    "UserRole",
    "UserStatus",
]
