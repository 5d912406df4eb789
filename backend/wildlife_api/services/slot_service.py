"""Per-date slot inventory for activities.

Remaining capacity lives in ``activity_slot_overrides``; a day without a row
has the activity's full ``daily_slots``. Every mutation here is a single
conditional ``UPDATE`` so concurrent requests cannot interleave a read and a
write on the same row.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wildlife_api.models.activity import Activity, ActivitySlotOverride, to_calendar_date
from wildlife_api.models.booking import Booking

logger = logging.getLogger(__name__)


class SlotError(Exception):
    """Base error for slot inventory operations."""


class InsufficientSlotsError(SlotError):
    """Raised when a day cannot absorb the requested participants."""

    def __init__(self, available: int, requested: int) -> None:
        self.available = available
        self.requested = requested
        super().__init__(
            f"Not enough slots available. Only {available} slots remaining, "
            f"but {requested} participants requested."
        )


@dataclass(frozen=True)
class SlotRestoreResult:
    """Outcome of crediting a booking's participants back to its activity."""

    restored: bool
    available_slots: int | None = None
    reason: str | None = None


def _override_filter(activity_id: uuid.UUID, slot_date: date):
    return (
        ActivitySlotOverride.activity_id == activity_id,
        ActivitySlotOverride.slot_date == slot_date,
    )


def _validate_count(participant_count: int) -> None:
    if participant_count < 1:
        raise ValueError("Participant count must be greater than 0")


async def get_available_slots(
    session: AsyncSession,
    *,
    activity: Activity,
    slot_date: date | datetime | str,
) -> int:
    """Return the remaining slots for a day straight from the database."""
    day = to_calendar_date(slot_date)
    result = await session.execute(
        select(ActivitySlotOverride.slots).where(*_override_filter(activity.id, day))
    )
    slots = result.scalar_one_or_none()
    return activity.daily_slots if slots is None else slots


async def _ensure_override(
    session: AsyncSession, *, activity: Activity, slot_date: date
) -> None:
    """Create the override row at full capacity unless it already exists."""
    dialect = session.get_bind().dialect.name
    values = {
        "id": uuid.uuid4(),
        "activity_id": activity.id,
        "slot_date": slot_date,
        "slots": activity.daily_slots,
    }
    if dialect in {"postgresql", "sqlite"}:
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            from sqlalchemy.dialects.sqlite import insert
        await session.execute(
            insert(ActivitySlotOverride)
            .values(**values)
            .on_conflict_do_nothing(index_elements=["activity_id", "slot_date"])
        )
        return

    existing = await session.execute(
        select(ActivitySlotOverride.id).where(*_override_filter(activity.id, slot_date))
    )
    if existing.scalar_one_or_none() is not None:
        return
    try:
        async with session.begin_nested():
            session.add(ActivitySlotOverride(**values))
    except IntegrityError:
        logger.debug(
            "Slot override for %s on %s created concurrently", activity.id, slot_date
        )


async def update_slots(
    session: AsyncSession,
    *,
    activity: Activity,
    slot_date: date | datetime | str,
    participant_count: int,
) -> int:
    """Decrement a day's slots, clamping at zero, and persist the change."""
    _validate_count(participant_count)
    day = to_calendar_date(slot_date)
    await _ensure_override(session, activity=activity, slot_date=day)
    await session.execute(
        update(ActivitySlotOverride)
        .where(*_override_filter(activity.id, day))
        .values(
            slots=case(
                (
                    ActivitySlotOverride.slots > participant_count,
                    ActivitySlotOverride.slots - participant_count,
                ),
                else_=0,
            )
        )
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    remaining = await get_available_slots(session, activity=activity, slot_date=day)
    logger.info(
        "Slots updated for activity %s on %s: -%s, %s remaining",
        activity.id,
        day,
        participant_count,
        remaining,
    )
    return remaining


async def reserve_slots(
    session: AsyncSession,
    *,
    activity: Activity,
    slot_date: date | datetime | str,
    participant_count: int,
) -> int:
    """Atomically take slots for a booking or raise ``InsufficientSlotsError``.

    Runs inside the caller's transaction; the caller commits.
    """
    _validate_count(participant_count)
    day = to_calendar_date(slot_date)
    await _ensure_override(session, activity=activity, slot_date=day)
    result = await session.execute(
        update(ActivitySlotOverride)
        .where(
            *_override_filter(activity.id, day),
            ActivitySlotOverride.slots >= participant_count,
        )
        .values(slots=ActivitySlotOverride.slots - participant_count)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        available = await get_available_slots(session, activity=activity, slot_date=day)
        raise InsufficientSlotsError(available, participant_count)
    return await get_available_slots(session, activity=activity, slot_date=day)


async def restore_slots(session: AsyncSession, *, booking: Booking) -> SlotRestoreResult:
    """Credit a booking's participants back to its activity day.

    Idempotent per booking. Never raises for a dangling activity reference;
    the returned result says whether anything was credited. Runs inside the
    caller's transaction.
    """
    if booking.slots_released:
        return SlotRestoreResult(restored=False, reason="Slots already released")
    if booking.activity_id is None:
        return SlotRestoreResult(restored=False, reason="Booking has no activity reference")
    activity = await session.get(Activity, booking.activity_id)
    if activity is None:
        return SlotRestoreResult(restored=False, reason="Activity not found")

    count = booking.total_participants
    credited = ActivitySlotOverride.slots + count
    result = await session.execute(
        update(ActivitySlotOverride)
        .where(*_override_filter(activity.id, booking.booking_date))
        .values(
            slots=case(
                (credited >= activity.daily_slots, activity.daily_slots),
                else_=credited,
            )
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.info(
            "No slot override for activity %s on %s; day already at full capacity",
            activity.id,
            booking.booking_date,
        )
    booking.slots_released = True
    session.add(booking)
    await session.flush()
    available = await get_available_slots(
        session, activity=activity, slot_date=booking.booking_date
    )
    logger.info(
        "Restored %s slot(s) for activity %s on %s; %s available",
        count,
        activity.id,
        booking.booking_date,
        available,
    )
    return SlotRestoreResult(restored=True, available_slots=available)


async def shift_overrides_for_capacity(
    session: AsyncSession, *, activity: Activity, previous_daily_slots: int
) -> None:
    """Move stored overrides by the change in ``daily_slots``.

    Slots already taken on a day stay taken, so the remaining count follows the
    capacity change and is kept within ``0..daily_slots``.
    """
    delta = activity.daily_slots - previous_daily_slots
    if delta == 0:
        return
    shifted = ActivitySlotOverride.slots + delta
    await session.execute(
        update(ActivitySlotOverride)
        .where(ActivitySlotOverride.activity_id == activity.id)
        .values(
            slots=case(
                (shifted < 0, 0),
                (shifted > activity.daily_slots, activity.daily_slots),
                else_=shifted,
            )
        )
        .execution_options(synchronize_session=False)
    )
    logger.info(
        "Slot overrides for activity %s shifted by %+d after capacity change",
        activity.id,
        delta,
    )
