"""Slot availability responses."""
from __future__ import annotations

import uuid
from datetime import date

from pydantic import Field

from wildlife_api.schemas.common import CamelModel


class SlotCheckResponse(CamelModel):
    can_book: bool
    available_slots: int
    requested_participants: int
    activity_id: uuid.UUID
    slot_date: date = Field(alias="date")
    message: str


class SlotVerifyResponse(CamelModel):
    """Stored remaining slots for a day next to the daily maximum."""

    activity_id: uuid.UUID
    slot_date: date = Field(alias="date")
    current_available_slots: int
    max_slots: int
