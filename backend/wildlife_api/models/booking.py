"""Booking models."""
from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wildlife_api.db.base import Base
from wildlife_api.models.activity import Activity, enum_values
from wildlife_api.models.mixins import TimestampMixin
from wildlife_api.models.user import User


class BookingStatus(str, enum.Enum):
    """Lifecycle states for bookings."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class BookingType(str, enum.Enum):
    ACTIVITY = "activity"
    SAFARI = "safari"
    TOUR = "tour"
    ACCOMMODATION = "accommodation"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    PARTIAL = "partial"
    REFUNDED = "refunded"
    FAILED = "failed"


class Booking(TimestampMixin, Base):
    """A tourist's reservation of participant slots on an activity date."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    booking_ref: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    activity_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("activities.id", ondelete="SET NULL"), index=True
    )
    booking_type: Mapped[BookingType] = mapped_column(
        Enum(BookingType, values_callable=enum_values),
        default=BookingType.ACTIVITY,
        nullable=False,
        index=True,
    )
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, values_callable=enum_values),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )
    booking_date: Mapped[date] = mapped_column(Date(), nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), default="09:00", nullable=False)
    duration: Mapped[int] = mapped_column(Integer(), nullable=False)

    number_of_adults: Mapped[int] = mapped_column(Integer(), nullable=False)
    number_of_children: Mapped[int] = mapped_column(Integer(), default=0, nullable=False)
    total_participants: Mapped[int] = mapped_column(Integer(), nullable=False)

    location_name: Mapped[str] = mapped_column(String(255), nullable=False)

    adult_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    child_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), default=Decimal("0"), nullable=False
    )
    guide_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), default=Decimal("0"), nullable=False
    )
    vehicle_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), default=Decimal("0"), nullable=False
    )
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="LKR", nullable=False)

    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, values_callable=enum_values),
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), nullable=False
    )

    request_tour_guide: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tour_guide_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True
    )
    driver_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True
    )

    special_requests: Mapped[str | None] = mapped_column(String(500))
    contact_name: Mapped[str | None] = mapped_column(String(255))
    contact_email: Mapped[str | None] = mapped_column(String(320))
    contact_phone: Mapped[str | None] = mapped_column(String(32))
    notes: Mapped[str | None] = mapped_column(String(1000))

    confirmation_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancellation_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completion_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancellation_reason: Mapped[str | None] = mapped_column(String(500))

    slots_released: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    customer: Mapped[User] = relationship(
        "User", foreign_keys=[customer_id], lazy="selectin"
    )
    activity: Mapped[Activity | None] = relationship(
        "Activity", foreign_keys=[activity_id], lazy="selectin"
    )
    tour_guide: Mapped[User | None] = relationship(
        "User", foreign_keys=[tour_guide_id], lazy="selectin"
    )
    driver: Mapped[User | None] = relationship(
        "User", foreign_keys=[driver_id], lazy="selectin"
    )
