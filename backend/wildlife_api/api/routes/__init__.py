"""HTTP routes mounted under the API prefix."""

from fastapi import APIRouter

from . import activities, activity_bookings, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(activities.router, prefix="/activities", tags=["activities"])
router.include_router(
    activity_bookings.router, prefix="/activity-bookings", tags=["activity-bookings"]
)
