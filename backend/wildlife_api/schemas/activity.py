"""Pydantic schemas for activities and their slots."""
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import AliasChoices, Field

from wildlife_api.models.activity import (
    ActivityCategory,
    ActivityDifficulty,
    ActivityStatus,
)
from wildlife_api.schemas.common import CamelModel, Pagination


class SlotOverrideRead(CamelModel):
    """Remaining slots recorded for one day."""

    slot_date: date = Field(
        validation_alias=AliasChoices("date", "slot_date"), serialization_alias="date"
    )
    slots: int


class ActivityBase(CamelModel):
    """Shared activity fields."""

    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    price: Decimal = Field(ge=Decimal("0"))
    duration: int = Field(ge=1)
    location: str = Field(min_length=1, max_length=255)
    image_url: str | None = None
    max_participants: int = Field(ge=1)
    daily_slots: int = Field(ge=1)
    category: ActivityCategory
    difficulty: ActivityDifficulty = ActivityDifficulty.EASY
    requirements: list[str] = Field(default_factory=list)
    includes: list[str] = Field(default_factory=list)
    excludes: list[str] = Field(default_factory=list)
    cancellation_policy: str | None = None


class ActivityCreate(ActivityBase):
    """Payload for creating activities."""

    status: ActivityStatus = ActivityStatus.ACTIVE


class ActivityUpdate(CamelModel):
    """Mutable activity fields."""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    price: Decimal | None = Field(default=None, ge=Decimal("0"))
    duration: int | None = Field(default=None, ge=1)
    location: str | None = Field(default=None, min_length=1, max_length=255)
    image_url: str | None = None
    max_participants: int | None = Field(default=None, ge=1)
    daily_slots: int | None = Field(default=None, ge=1)
    status: ActivityStatus | None = None
    category: ActivityCategory | None = None
    difficulty: ActivityDifficulty | None = None
    requirements: list[str] | None = None
    includes: list[str] | None = None
    excludes: list[str] | None = None
    cancellation_policy: str | None = None


class ActivityRead(ActivityBase):
    """Serialized activity representation."""

    id: uuid.UUID
    status: ActivityStatus
    cancellation_policy: str
    slot_overrides: list[SlotOverrideRead] = Field(
        default_factory=list,
        validation_alias=AliasChoices("availableSlots", "slot_overrides"),
        serialization_alias="availableSlots",
    )
    created_by_id: uuid.UUID | None = None
    updated_by_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


class ActivityListResponse(CamelModel):
    activities: list[ActivityRead]
    pagination: Pagination


class ActivityCategoryListResponse(ActivityListResponse):
    category: ActivityCategory


class ActivitySlotsRead(CamelModel):
    """Remaining slots for an activity on one day."""

    activity_id: uuid.UUID
    slot_date: date = Field(alias="date")
    available_slots: int
    max_participants: int
    daily_slots: int


class SlotAdjustRequest(CamelModel):
    """Staff request to take slots off a day."""

    slot_date: date = Field(alias="date")
    participant_count: int = Field(ge=1)


class SlotAdjustResponse(CamelModel):
    activity_id: uuid.UUID
    slot_date: date = Field(alias="date")
    available_slots: int
    participant_count: int
