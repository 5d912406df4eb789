"""Tests for per-day slot inventory."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import select

from wildlife_api.db.session import get_sessionmaker
from wildlife_api.models import (
    Activity,
    ActivitySlotOverride,
    Booking,
    BookingStatus,
    BookingType,
)
from wildlife_api.services import activity_service, slot_service
from wildlife_api.services.slot_service import InsufficientSlotsError

pytestmark = pytest.mark.asyncio

TRIP_DAY = date(2031, 3, 14)


async def _activity(session, activity_id: uuid.UUID) -> Activity:
    return await session.get(Activity, activity_id)


async def _stored_override(session, activity_id: uuid.UUID, day: date) -> int | None:
    result = await session.execute(
        select(ActivitySlotOverride.slots).where(
            ActivitySlotOverride.activity_id == activity_id,
            ActivitySlotOverride.slot_date == day,
        )
    )
    return result.scalar_one_or_none()


def _booking(context: dict[str, object], participants: int, day: date = TRIP_DAY) -> Booking:
    return Booking(
        booking_ref=f"ACT-TEST-{uuid.uuid4().hex[:6].upper()}",
        customer_id=context["tourist_id"],
        activity_id=context["activity_id"],
        booking_type=BookingType.ACTIVITY,
        status=BookingStatus.PENDING,
        booking_date=day,
        duration=4,
        number_of_adults=participants,
        total_participants=participants,
        location_name="Yala National Park",
        adult_price=Decimal("2500.00"),
        total_price=Decimal("2500.00") * participants,
    )


async def test_unbooked_day_reports_daily_slots(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        activity = await _activity(session, seeded["activity_id"])
        assert activity.get_slots_for_date(TRIP_DAY) == 10
        assert await slot_service.get_available_slots(
            session, activity=activity, slot_date=TRIP_DAY
        ) == 10
        assert await _stored_override(session, activity.id, TRIP_DAY) is None


async def test_date_forms_resolve_to_same_day(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        activity = await _activity(session, seeded["activity_id"])
        await slot_service.update_slots(
            session,
            activity=activity,
            slot_date=datetime(2031, 3, 14, 16, 45),
            participant_count=2,
        )
        for form in (TRIP_DAY, "2031-03-14", "2031-03-14T00:00:00.000Z"):
            assert await slot_service.get_available_slots(
                session, activity=activity, slot_date=form
            ) == 8


async def test_update_slots_decrements_and_clamps(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        activity = await _activity(session, seeded["activity_id"])
        remaining = await slot_service.update_slots(
            session, activity=activity, slot_date=TRIP_DAY, participant_count=4
        )
        assert remaining == 6

        remaining = await slot_service.update_slots(
            session, activity=activity, slot_date=TRIP_DAY, participant_count=9
        )
        assert remaining == 0
        assert await _stored_override(session, activity.id, TRIP_DAY) == 0

        other_day = await slot_service.get_available_slots(
            session, activity=activity, slot_date=date(2031, 3, 15)
        )
        assert other_day == 10


async def test_update_slots_rejects_non_positive_count(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        activity = await _activity(session, seeded["activity_id"])
        with pytest.raises(ValueError):
            await slot_service.update_slots(
                session, activity=activity, slot_date=TRIP_DAY, participant_count=0
            )


async def test_reserve_slots_refuses_overbooking(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        activity = await _activity(session, seeded["activity_id"])
        remaining = await slot_service.reserve_slots(
            session, activity=activity, slot_date=TRIP_DAY, participant_count=7
        )
        await session.commit()
        assert remaining == 3

        with pytest.raises(InsufficientSlotsError) as excinfo:
            await slot_service.reserve_slots(
                session, activity=activity, slot_date=TRIP_DAY, participant_count=4
            )
        await session.rollback()
        assert excinfo.value.available == 3
        assert excinfo.value.requested == 4
        assert str(excinfo.value) == (
            "Not enough slots available. Only 3 slots remaining, "
            "but 4 participants requested."
        )
        assert await _stored_override(session, seeded["activity_id"], TRIP_DAY) == 3


async def test_concurrent_reservations_for_last_slots(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as setup:
        activity = await _activity(setup, seeded["activity_id"])
        await slot_service.update_slots(
            setup, activity=activity, slot_date=TRIP_DAY, participant_count=7
        )

    async with sessionmaker() as first, sessionmaker() as second:
        first_activity = await _activity(first, seeded["activity_id"])
        second_activity = await _activity(second, seeded["activity_id"])
        assert await slot_service.get_available_slots(
            first, activity=first_activity, slot_date=TRIP_DAY
        ) == 3
        assert await slot_service.get_available_slots(
            second, activity=second_activity, slot_date=TRIP_DAY
        ) == 3

        await slot_service.reserve_slots(
            first, activity=first_activity, slot_date=TRIP_DAY, participant_count=3
        )
        await first.commit()

        with pytest.raises(InsufficientSlotsError):
            await slot_service.reserve_slots(
                second, activity=second_activity, slot_date=TRIP_DAY, participant_count=3
            )
        await second.rollback()

    async with sessionmaker() as session:
        assert await _stored_override(session, seeded["activity_id"], TRIP_DAY) == 0


async def test_restore_slots_is_idempotent(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        activity = await _activity(session, seeded["activity_id"])
        await slot_service.reserve_slots(
            session, activity=activity, slot_date=TRIP_DAY, participant_count=4
        )
        booking = _booking(seeded, 4)
        session.add(booking)
        await session.commit()

        first = await slot_service.restore_slots(session, booking=booking)
        await session.commit()
        assert first.restored is True
        assert first.available_slots == 10
        assert booking.slots_released is True

        second = await slot_service.restore_slots(session, booking=booking)
        await session.commit()
        assert second.restored is False
        assert second.reason == "Slots already released"
        assert await _stored_override(session, activity.id, TRIP_DAY) == 10


async def test_restore_slots_caps_at_daily_slots(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        activity = await _activity(session, seeded["activity_id"])
        await slot_service.update_slots(
            session, activity=activity, slot_date=TRIP_DAY, participant_count=2
        )
        booking = _booking(seeded, 5)
        session.add(booking)
        await session.commit()

        result = await slot_service.restore_slots(session, booking=booking)
        await session.commit()
        assert result.restored is True
        assert result.available_slots == 10
        assert await _stored_override(session, activity.id, TRIP_DAY) == 10


async def test_restore_without_override_leaves_day_untouched(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = _booking(seeded, 3)
        session.add(booking)
        await session.commit()

        result = await slot_service.restore_slots(session, booking=booking)
        await session.commit()
        assert result.restored is True
        assert result.available_slots == 10
        assert await _stored_override(session, seeded["activity_id"], TRIP_DAY) is None


async def test_restore_without_activity_reports_failure(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = _booking(seeded, 2)
        booking.activity_id = None
        session.add(booking)
        await session.commit()

        result = await slot_service.restore_slots(session, booking=booking)
        assert result.restored is False
        assert result.reason == "Booking has no activity reference"
        assert booking.slots_released is False


async def test_capacity_change_keeps_booked_slots_taken(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        activity = await _activity(session, seeded["activity_id"])
        for participants in (4, 4):
            await slot_service.reserve_slots(
                session, activity=activity, slot_date=TRIP_DAY, participant_count=participants
            )
        await slot_service.reserve_slots(
            session, activity=activity, slot_date=date(2031, 3, 15), participant_count=1
        )
        await session.commit()

        activity = await activity_service.update_activity(
            session, activity=activity, updated_by_id=None, daily_slots=6
        )
        assert await slot_service.get_available_slots(
            session, activity=activity, slot_date=TRIP_DAY
        ) == 0
        assert await slot_service.get_available_slots(
            session, activity=activity, slot_date=date(2031, 3, 15)
        ) == 5
        assert await slot_service.get_available_slots(
            session, activity=activity, slot_date=date(2031, 3, 16)
        ) == 6

        activity = await activity_service.update_activity(
            session, activity=activity, updated_by_id=None, daily_slots=12
        )
        assert await _stored_override(session, seeded["activity_id"], date(2031, 3, 15)) == 11
