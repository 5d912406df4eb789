"""Tests for the activity booking workflow."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select, update

from wildlife_api.db.session import get_sessionmaker
from wildlife_api.models import (
    Activity,
    ActivityStatus,
    Booking,
    BookingStatus,
    PaymentStatus,
    User,
)
from wildlife_api.services import booking_service, slot_service
from wildlife_api.services.booking_service import ActivityUnavailableError, NotFoundError
from wildlife_api.services.slot_service import InsufficientSlotsError

pytestmark = pytest.mark.asyncio

TRIP_DAY = date(2031, 3, 14)


async def _book(session, context: dict[str, object], participants: int, **extra) -> Booking:
    return await booking_service.create_booking(
        session,
        customer_id=context["tourist_id"],
        activity_id=context["activity_id"],
        number_of_participants=participants,
        preferred_date=TRIP_DAY,
        **extra,
    )


async def _is_available(session, user_id) -> bool:
    result = await session.execute(select(User.is_available).where(User.id == user_id))
    return result.scalar_one()


async def _remaining(session, context: dict[str, object]) -> int:
    activity = await session.get(Activity, context["activity_id"])
    return await slot_service.get_available_slots(
        session, activity=activity, slot_date=TRIP_DAY
    )


async def test_booking_sequence_tracks_slots(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        first = await _book(session, seeded, 4)
        assert await _remaining(session, seeded) == 6

        await _book(session, seeded, 5)
        assert await _remaining(session, seeded) == 1

        with pytest.raises(InsufficientSlotsError) as excinfo:
            await _book(session, seeded, 3)
        assert "Only 1 slots remaining, but 3 participants requested" in str(excinfo.value)
        assert await _remaining(session, seeded) == 1

        count = await session.execute(select(Booking.id))
        assert len(count.scalars().all()) == 2

        _, restore = await booking_service.update_booking(
            session, booking=first, status=BookingStatus.CANCELLED
        )
        assert restore is not None and restore.restored is True
        assert await _remaining(session, seeded) == 5


async def test_create_booking_fills_pricing_and_contact(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = await _book(
            session,
            seeded,
            2,
            request_tour_guide=True,
            tourist_name="Tara Traveller",
            tourist_email="tara@example.com",
            tourist_phone="+94 77 123 4567",
            special_requests="Vegetarian lunch",
        )
    assert re.fullmatch(r"ACT-\d{8}-[0-9A-F]{6}", booking.booking_ref)
    assert booking.status == BookingStatus.PENDING
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.booking_date == TRIP_DAY
    assert booking.total_participants == 2
    assert booking.guide_price == Decimal("5000")
    assert booking.total_price == Decimal("10000.00")
    assert booking.currency == "LKR"
    assert booking.contact_email == "tara@example.com"
    assert booking.activity is not None
    assert booking.activity.title == "Yala Leopard Safari"
    assert booking.slots_released is False


async def test_create_booking_uses_quoted_total(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = await _book(session, seeded, 3, total_amount=Decimal("6000"))
    assert booking.total_price == Decimal("6000")


async def test_create_booking_validation(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        with pytest.raises(ValueError):
            await _book(session, seeded, 0)
        with pytest.raises(ValueError, match="limited to 8 participants"):
            await _book(session, seeded, 9)
        with pytest.raises(NotFoundError):
            await booking_service.create_booking(
                session,
                customer_id=seeded["tourist_id"],
                activity_id=seeded["guide_id"],
                number_of_participants=1,
                preferred_date=TRIP_DAY,
            )

        activity = await session.get(Activity, seeded["activity_id"])
        activity.status = ActivityStatus.INACTIVE
        await session.commit()
        with pytest.raises(ActivityUnavailableError):
            await _book(session, seeded, 1)
        assert await _remaining(session, seeded) == 10


async def test_check_availability(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _book(session, seeded, 7)
        ok = await booking_service.check_availability(
            session, activity_id=seeded["activity_id"], slot_date=TRIP_DAY, participants=3
        )
        assert ok["can_book"] is True
        assert ok["available_slots"] == 3

        short = await booking_service.check_availability(
            session, activity_id=seeded["activity_id"], slot_date=TRIP_DAY, participants=4
        )
        assert short["can_book"] is False
        assert short["message"] == (
            "Not enough slots available. Only 3 slots remaining, "
            "but 4 participants requested."
        )

        verify = await booking_service.verify_slots(
            session, activity_id=seeded["activity_id"], slot_date=TRIP_DAY
        )
        assert verify["current_available_slots"] == 3
        assert verify["max_slots"] == 10

        with pytest.raises(ValueError):
            await booking_service.check_availability(
                session,
                activity_id=seeded["activity_id"],
                slot_date=TRIP_DAY,
                participants=0,
            )


async def test_check_availability_for_inactive_activity(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        activity = await session.get(Activity, seeded["activity_id"])
        activity.status = ActivityStatus.SUSPENDED
        await session.commit()

        summary = await booking_service.check_availability(
            session, activity_id=seeded["activity_id"], slot_date=TRIP_DAY, participants=1
        )
    assert summary["can_book"] is False
    assert summary["available_slots"] == 0


async def test_status_transitions_and_staff_availability(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = await _book(session, seeded, 2)

        booking, restore = await booking_service.update_booking(
            session,
            booking=booking,
            status=BookingStatus.CONFIRMED,
            driver_id=seeded["driver_id"],
            tour_guide_id=seeded["guide_id"],
        )
        assert restore is None
        assert booking.confirmation_date is not None
        assert booking.driver_id == seeded["driver_id"]
        assert booking.tour_guide_id == seeded["guide_id"]
        assert await _is_available(session, seeded["driver_id"]) is False
        assert await _is_available(session, seeded["guide_id"]) is False

        with pytest.raises(ValueError, match="Invalid status transition"):
            await booking_service.update_booking(
                session, booking=booking, status=BookingStatus.REFUNDED
            )
        booking, _ = await booking_service.update_booking(
            session, booking=booking, status=BookingStatus.IN_PROGRESS
        )
        booking, _ = await booking_service.update_booking(
            session,
            booking=booking,
            status=BookingStatus.COMPLETED,
            payment_status=PaymentStatus.PAID,
        )
        assert booking.completion_date is not None
        assert booking.payment_status == PaymentStatus.PAID

        assert await _is_available(session, seeded["driver_id"]) is True
        assert await _is_available(session, seeded["guide_id"]) is True
        assert await _remaining(session, seeded) == 8


async def test_assigning_wrong_role_is_rejected(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = await _book(session, seeded, 1)
        with pytest.raises(ValueError, match="safari driver"):
            await booking_service.update_booking(
                session, booking=booking, driver_id=seeded["guide_id"]
            )


async def test_cancel_twice_restores_once(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = await _book(session, seeded, 4)
        booking, restore = await booking_service.update_booking(
            session,
            booking=booking,
            status=BookingStatus.CANCELLED,
            cancellation_reason="Weather",
        )
        assert restore is not None and restore.restored is True
        assert booking.cancellation_reason == "Weather"
        assert booking.slots_released is True

        booking, restore = await booking_service.update_booking(
            session, booking=booking, status=BookingStatus.CANCELLED
        )
        assert restore is None

        deleted = await booking_service.delete_booking(session, booking=booking)
        assert deleted is None
        assert await _remaining(session, seeded) == 10


async def test_delete_active_booking_restores_slots(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = await _book(session, seeded, 6)
        assert await _remaining(session, seeded) == 4

        restore = await booking_service.delete_booking(session, booking=booking)
        assert restore is not None and restore.restored is True
        assert await _remaining(session, seeded) == 10
        assert await booking_service.get_booking(session, booking_id=booking.id) is None


async def test_list_bookings_filters(seeded: dict[str, object], db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        mine = await _book(session, seeded, 1)
        await booking_service.create_booking(
            session,
            customer_id=seeded["other_tourist_id"],
            activity_id=seeded["activity_id"],
            number_of_participants=2,
            preferred_date=TRIP_DAY,
        )
        await booking_service.update_booking(
            session, booking=mine, status=BookingStatus.CONFIRMED
        )

        everything = await booking_service.list_bookings(session)
        assert len(everything) == 2
        own = await booking_service.list_bookings(session, customer_id=seeded["tourist_id"])
        assert [item.id for item in own] == [mine.id]
        confirmed = await booking_service.list_bookings(
            session, status=BookingStatus.CONFIRMED
        )
        assert [item.id for item in confirmed] == [mine.id]


async def test_reassigning_staff_frees_previous_assignee(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = await _book(session, seeded, 2)
        booking, _ = await booking_service.update_booking(
            session,
            booking=booking,
            status=BookingStatus.CONFIRMED,
            driver_id=seeded["driver_id"],
        )
        assert await _is_available(session, seeded["driver_id"]) is False

        booking, _ = await booking_service.update_booking(
            session, booking=booking, driver_id=seeded["relief_driver_id"]
        )
        assert booking.driver_id == seeded["relief_driver_id"]
        assert await _is_available(session, seeded["driver_id"]) is True
        assert await _is_available(session, seeded["relief_driver_id"]) is False

        await booking_service.update_booking(
            session, booking=booking, status=BookingStatus.CANCELLED
        )
        assert await _is_available(session, seeded["driver_id"]) is True
        assert await _is_available(session, seeded["relief_driver_id"]) is True


async def test_assigning_staff_to_pending_booking_keeps_them_available(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = await _book(session, seeded, 1)
        booking, _ = await booking_service.update_booking(
            session, booking=booking, tour_guide_id=seeded["guide_id"]
        )
        assert booking.tour_guide_id == seeded["guide_id"]
        assert await _is_available(session, seeded["guide_id"]) is True


async def _detach_activity(session, booking: Booking) -> Booking:
    await session.execute(
        update(Booking).where(Booking.id == booking.id).values(activity_id=None)
    )
    await session.commit()
    await session.refresh(booking)
    return booking


async def test_cancel_without_activity_still_cancels(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = await _detach_activity(session, await _book(session, seeded, 3))
        assert booking.activity_id is None

        booking, restore = await booking_service.update_booking(
            session, booking=booking, status=BookingStatus.CANCELLED
        )
        assert booking.status == BookingStatus.CANCELLED
        assert booking.cancellation_date is not None
        assert restore is not None
        assert restore.restored is False
        assert restore.reason == "Booking has no activity reference"
        assert booking.slots_released is False
        assert await _remaining(session, seeded) == 7


async def test_delete_without_activity_still_deletes(
    seeded: dict[str, object], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        booking = await _detach_activity(session, await _book(session, seeded, 3))
        booking_id = booking.id

        restore = await booking_service.delete_booking(session, booking=booking)
        assert restore is not None and restore.restored is False
        assert await booking_service.get_booking(session, booking_id=booking_id) is None
