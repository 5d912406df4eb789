"""Pydantic schemas exposed by the API."""
from wildlife_api.schemas.activity import (
    ActivityCategoryListResponse,
    ActivityCreate,
    ActivityListResponse,
    ActivityRead,
    ActivitySlotsRead,
    ActivityUpdate,
    SlotAdjustRequest,
    SlotAdjustResponse,
    SlotOverrideRead,
)
from wildlife_api.schemas.booking import (
    BookingCreate,
    BookingCreatedResponse,
    BookingDeletedResponse,
    BookingListResponse,
    BookingRead,
    BookingUpdate,
    BookingUpdatedResponse,
)
from wildlife_api.schemas.common import CamelModel, Pagination
from wildlife_api.schemas.slots import SlotCheckResponse, SlotVerifyResponse

__all__ = [
    "ActivityCategoryListResponse",
    "ActivityCreate",
    "ActivityListResponse",
    "ActivityRead",
    "ActivitySlotsRead",
    "ActivityUpdate",
    "BookingCreate",
    "BookingCreatedResponse",
    "BookingDeletedResponse",
    "BookingListResponse",
    "BookingRead",
    "BookingUpdate",
    "BookingUpdatedResponse",
    "CamelModel",
    "Pagination",
    "SlotAdjustRequest",
    "SlotAdjustResponse",
    "SlotCheckResponse",
    "SlotOverrideRead",
    "SlotVerifyResponse",
]
