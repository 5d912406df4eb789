"""Bookable activities and their per-date slot inventory."""
from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wildlife_api.db.base import Base
from wildlife_api.models.mixins import TimestampMixin

DEFAULT_CANCELLATION_POLICY = "Free cancellation up to 24 hours before the activity"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]


class ActivityStatus(str, enum.Enum):
    """Whether an activity is open for booking."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class ActivityCategory(str, enum.Enum):
    """Kinds of wildlife activity on offer."""

    SAFARI = "safari"
    WILDLIFE_TOUR = "wildlife-tour"
    BIRD_WATCHING = "bird-watching"
    NATURE_WALK = "nature-walk"
    PHOTOGRAPHY = "photography"
    ADVENTURE = "adventure"
    EDUCATIONAL = "educational"


class ActivityDifficulty(str, enum.Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


def to_calendar_date(value: date | datetime | str) -> date:
    """Normalize a date, datetime or ISO string to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return date.fromisoformat(text[:10])


class Activity(TimestampMixin, Base):
    """A wildlife-tourism offering with a daily participant capacity."""

    __tablename__ = "activities"
    __table_args__ = (
        CheckConstraint("daily_slots >= 1", name="ck_activities_daily_slots_min"),
        CheckConstraint("price >= 0", name="ck_activities_price_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(1000), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    duration: Mapped[int] = mapped_column(Integer(), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(1024))
    max_participants: Mapped[int] = mapped_column(Integer(), nullable=False)
    daily_slots: Mapped[int] = mapped_column(Integer(), nullable=False)
    status: Mapped[ActivityStatus] = mapped_column(
        Enum(ActivityStatus, values_callable=enum_values),
        default=ActivityStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    category: Mapped[ActivityCategory] = mapped_column(
        Enum(ActivityCategory, values_callable=enum_values),
        nullable=False,
        index=True,
    )
    difficulty: Mapped[ActivityDifficulty] = mapped_column(
        Enum(ActivityDifficulty, values_callable=enum_values),
        default=ActivityDifficulty.EASY,
        nullable=False,
    )
    requirements: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    includes: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    excludes: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    cancellation_policy: Mapped[str] = mapped_column(
        Text(), default=DEFAULT_CANCELLATION_POLICY, nullable=False
    )
    created_by_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL")
    )
    updated_by_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL")
    )

    slot_overrides: Mapped[list["ActivitySlotOverride"]] = relationship(
        "ActivitySlotOverride",
        back_populates="activity",
        cascade="all, delete-orphan",
        order_by="ActivitySlotOverride.slot_date",
        lazy="selectin",
    )

    def get_slots_for_date(self, day: date | datetime | str) -> int:
        """Return remaining slots for a calendar day from the loaded overrides."""
        target = to_calendar_date(day)
        for override in self.slot_overrides:
            if override.slot_date == target:
                return override.slots
        return self.daily_slots


class ActivitySlotOverride(Base):
    """Remaining slots for one activity on one calendar day.

    Days without a row implicitly have ``Activity.daily_slots`` remaining.
    """

    __tablename__ = "activity_slot_overrides"
    __table_args__ = (
        UniqueConstraint("activity_id", "slot_date", name="uq_slot_override_activity_date"),
        CheckConstraint("slots >= 0", name="ck_slot_override_slots_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    activity_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slot_date: Mapped[date] = mapped_column(Date(), nullable=False, index=True)
    slots: Mapped[int] = mapped_column(Integer(), nullable=False)

    activity: Mapped[Activity] = relationship("Activity", back_populates="slot_overrides")
