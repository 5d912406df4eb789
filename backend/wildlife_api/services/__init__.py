"""Service layer exports."""
from wildlife_api.services import (
    activity_service,
    booking_service,
    notification_service,
    slot_service,
)

__all__ = [
    "activity_service",
    "booking_service",
    "notification_service",
    "slot_service",
]
