"""Pydantic schemas for activity bookings."""
from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from pydantic import EmailStr, Field, field_validator

from wildlife_api.models.activity import to_calendar_date
from wildlife_api.models.booking import BookingStatus, BookingType, PaymentStatus
from wildlife_api.models.user import UserRole
from wildlife_api.schemas.common import CamelModel


class BookingCreate(CamelModel):
    """Payload submitted by the booking form."""

    user_id: uuid.UUID | None = None
    activity_id: uuid.UUID
    number_of_participants: int = Field(ge=1)
    preferred_date: date
    request_tour_guide: bool = False
    total_amount: Decimal | None = Field(default=None, ge=Decimal("0"))
    tourist_name: str | None = Field(default=None, max_length=255)
    tourist_email: EmailStr | None = None
    tourist_phone: str | None = Field(default=None, max_length=32)
    special_requests: str | None = Field(default=None, max_length=500)

    @field_validator("preferred_date", mode="before")
    @classmethod
    def _coerce_calendar_day(cls, value: Any) -> Any:
        if isinstance(value, (str, datetime)):
            try:
                return to_calendar_date(value)
            except ValueError as exc:
                raise ValueError("preferredDate must be an ISO date") from exc
        return value

    @field_validator("preferred_date")
    @classmethod
    def _reject_past_dates(cls, value: date) -> date:
        if value < datetime.now(UTC).date():
            raise ValueError("Preferred date cannot be in the past")
        return value


class BookingUpdate(CamelModel):
    """Status, payment and staff changes for a booking."""

    status: BookingStatus | None = None
    payment_status: PaymentStatus | None = None
    driver_id: uuid.UUID | None = Field(default=None, alias="driver")
    tour_guide_id: uuid.UUID | None = Field(default=None, alias="tourGuide")
    cancellation_reason: str | None = Field(default=None, max_length=500)


class UserSummary(CamelModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None
    role: UserRole
    is_available: bool


class ActivitySummary(CamelModel):
    id: uuid.UUID
    title: str
    location: str
    category: str
    duration: int
    price: Decimal


class BookingRead(CamelModel):
    """Serialized booking returned by the API."""

    id: uuid.UUID
    booking_ref: str
    booking_type: BookingType
    status: BookingStatus
    booking_date: date
    start_time: str
    duration: int
    number_of_adults: int
    number_of_children: int
    total_participants: int
    location_name: str
    adult_price: Decimal
    child_price: Decimal
    guide_price: Decimal
    vehicle_price: Decimal
    total_price: Decimal
    currency: str
    payment_status: PaymentStatus
    paid_amount: Decimal
    request_tour_guide: bool
    special_requests: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    confirmation_date: datetime | None = None
    cancellation_date: datetime | None = None
    completion_date: datetime | None = None
    cancellation_reason: str | None = None
    slots_released: bool
    customer_id: uuid.UUID
    activity_id: uuid.UUID | None = None
    driver_id: uuid.UUID | None = None
    tour_guide_id: uuid.UUID | None = None
    customer: UserSummary
    activity: ActivitySummary | None = None
    driver: UserSummary | None = None
    tour_guide: UserSummary | None = None
    created_at: datetime
    updated_at: datetime


class BookingListResponse(CamelModel):
    bookings: list[BookingRead]
    count: int


class BookingCreatedResponse(CamelModel):
    booking: BookingRead
    message: str = "Activity booked successfully"


class BookingUpdatedResponse(CamelModel):
    booking: BookingRead
    slots_restored: bool | None = None


class BookingDeletedResponse(CamelModel):
    message: str = "Activity booking deleted successfully"
    deleted_booking_id: uuid.UUID
    slots_restored: bool | None = None
