"""Activity booking service helpers."""
from __future__ import annotations

import logging
import secrets
import uuid
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wildlife_api.core.config import get_settings
from wildlife_api.models.activity import Activity, ActivityStatus, to_calendar_date
from wildlife_api.models.booking import (
    Booking,
    BookingStatus,
    BookingType,
    PaymentStatus,
)
from wildlife_api.models.user import User, UserRole
from wildlife_api.services import slot_service
from wildlife_api.services.slot_service import InsufficientSlotsError, SlotRestoreResult

logger = logging.getLogger(__name__)

UNSET: Any = object()

_ALLOWED_STATUS_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED},
    BookingStatus.IN_PROGRESS: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: {BookingStatus.REFUNDED},
    BookingStatus.CANCELLED: {BookingStatus.REFUNDED},
    BookingStatus.REFUNDED: set(),
}

_STAFF_BUSY_STATUSES = {BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS}
_STAFF_FREE_STATUSES = {BookingStatus.COMPLETED, BookingStatus.CANCELLED}


class NotFoundError(LookupError):
    """Raised when a referenced record does not exist."""


class ActivityUnavailableError(ValueError):
    """Raised when an activity is not open for booking."""


def generate_booking_ref(today: date | None = None) -> str:
    day = today or datetime.now(UTC).date()
    return f"ACT-{day:%Y%m%d}-{secrets.token_hex(3).upper()}"


def calculate_total_price(
    *,
    number_of_adults: int,
    number_of_children: int,
    adult_price: Decimal,
    child_price: Decimal = Decimal("0"),
    guide_price: Decimal = Decimal("0"),
    vehicle_price: Decimal = Decimal("0"),
) -> Decimal:
    return (
        adult_price * number_of_adults
        + child_price * number_of_children
        + guide_price
        + vehicle_price
    )


async def _reload_booking(session: AsyncSession, booking_id: uuid.UUID) -> Booking:
    result = await session.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def list_bookings(
    session: AsyncSession,
    *,
    customer_id: uuid.UUID | None = None,
    status: BookingStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> Sequence[Booking]:
    stmt = select(Booking).where(Booking.booking_type == BookingType.ACTIVITY)
    if customer_id is not None:
        stmt = stmt.where(Booking.customer_id == customer_id)
    if status is not None:
        stmt = stmt.where(Booking.status == status)
    stmt = stmt.order_by(Booking.booking_date.desc(), Booking.created_at.desc())
    result = await session.execute(stmt.offset(skip).limit(limit))
    return result.scalars().unique().all()


async def get_booking(
    session: AsyncSession, *, booking_id: uuid.UUID
) -> Booking | None:
    result = await session.execute(select(Booking).where(Booking.id == booking_id))
    return result.scalar_one_or_none()


async def _load_bookable_activity(
    session: AsyncSession, activity_id: uuid.UUID
) -> Activity:
    activity = await session.get(Activity, activity_id)
    if activity is None:
        raise NotFoundError("Activity not found")
    if activity.status != ActivityStatus.ACTIVE:
        raise ActivityUnavailableError("Activity is not currently available for booking")
    return activity


async def check_availability(
    session: AsyncSession,
    *,
    activity_id: uuid.UUID,
    slot_date: date,
    participants: int,
) -> dict[str, object]:
    """Report whether ``participants`` fit on ``slot_date``."""
    if participants < 1:
        raise ValueError("Participants must be a valid number greater than 0")
    activity = await session.get(Activity, activity_id)
    if activity is None:
        raise NotFoundError("Activity not found")

    summary: dict[str, object] = {
        "activity_id": activity.id,
        "date": slot_date,
        "requested_participants": participants,
    }
    if activity.status != ActivityStatus.ACTIVE:
        summary.update(
            can_book=False,
            available_slots=0,
            message="Activity is not currently available for booking",
        )
        return summary

    available = await slot_service.get_available_slots(
        session, activity=activity, slot_date=slot_date
    )
    can_book = available >= participants
    logger.info(
        "Slot check: activity %s, date %s, available %s, requested %s, can book %s",
        activity.id,
        slot_date,
        available,
        participants,
        can_book,
    )
    if can_book:
        message = f"{available} slots available for {participants} participants"
    else:
        message = str(InsufficientSlotsError(available, participants))
    summary.update(can_book=can_book, available_slots=available, message=message)
    return summary


async def verify_slots(
    session: AsyncSession, *, activity_id: uuid.UUID, slot_date: date
) -> dict[str, object]:
    """Report the stored slot count for a day alongside the daily maximum."""
    activity = await session.get(Activity, activity_id)
    if activity is None:
        raise NotFoundError("Activity not found")
    current = await slot_service.get_available_slots(
        session, activity=activity, slot_date=slot_date
    )
    return {
        "activity_id": activity.id,
        "date": slot_date,
        "current_available_slots": current,
        "max_slots": activity.daily_slots,
    }


async def create_booking(
    session: AsyncSession,
    *,
    customer_id: uuid.UUID,
    activity_id: uuid.UUID,
    number_of_participants: int,
    preferred_date: date | datetime | str,
    request_tour_guide: bool = False,
    total_amount: Decimal | None = None,
    tourist_name: str | None = None,
    tourist_email: str | None = None,
    tourist_phone: str | None = None,
    special_requests: str | None = None,
) -> Booking:
    """Reserve slots and record the booking in one transaction."""
    if number_of_participants < 1:
        raise ValueError("Number of participants must be a valid number greater than 0")
    booking_date = to_calendar_date(preferred_date)

    customer = await session.get(User, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    activity = await _load_bookable_activity(session, activity_id)
    if number_of_participants > activity.max_participants:
        raise ValueError(
            f"A single booking is limited to {activity.max_participants} participants"
        )

    available = await slot_service.get_available_slots(
        session, activity=activity, slot_date=booking_date
    )
    if available < number_of_participants:
        raise InsufficientSlotsError(available, number_of_participants)

    settings = get_settings()
    guide_price = settings.tour_guide_fee if request_tour_guide else Decimal("0")
    total_price = total_amount or calculate_total_price(
        number_of_adults=number_of_participants,
        number_of_children=0,
        adult_price=activity.price,
        guide_price=guide_price,
    )

    try:
        remaining = await slot_service.reserve_slots(
            session,
            activity=activity,
            slot_date=booking_date,
            participant_count=number_of_participants,
        )
        booking = Booking(
            booking_ref=generate_booking_ref(),
            customer_id=customer.id,
            activity_id=activity.id,
            booking_type=BookingType.ACTIVITY,
            status=BookingStatus.PENDING,
            booking_date=booking_date,
            start_time=settings.default_start_time,
            duration=activity.duration,
            number_of_adults=number_of_participants,
            number_of_children=0,
            total_participants=number_of_participants,
            location_name=activity.location,
            adult_price=activity.price,
            child_price=Decimal("0"),
            guide_price=guide_price,
            vehicle_price=Decimal("0"),
            total_price=total_price,
            currency=settings.default_currency,
            payment_status=PaymentStatus.PENDING,
            paid_amount=Decimal("0"),
            request_tour_guide=request_tour_guide,
            special_requests=special_requests or None,
            contact_name=tourist_name,
            contact_email=tourist_email,
            contact_phone=tourist_phone,
        )
        session.add(booking)
        await session.commit()
    except (InsufficientSlotsError, IntegrityError):
        await session.rollback()
        raise

    logger.info(
        "Activity booking created: %s - %s for %s participant(s) on %s, %s slot(s) left",
        booking.booking_ref,
        activity.title,
        number_of_participants,
        booking_date,
        remaining,
    )
    return await _reload_booking(session, booking.id)


def _validate_status_transition(current: BookingStatus, target: BookingStatus) -> None:
    if target == current:
        return
    allowed = _ALLOWED_STATUS_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise ValueError(
            f"Invalid status transition from {current.value} to {target.value}"
        )


async def _validate_staff(
    session: AsyncSession, user_id: uuid.UUID, role: UserRole
) -> None:
    user = await session.get(User, user_id)
    if user is None or user.role != role:
        label = role.value.replace("_", " ")
        raise ValueError(f"Assigned {label} not found")


async def _set_staff_availability(
    session: AsyncSession, user_ids: Iterable[uuid.UUID | None], available: bool
) -> None:
    ids = [user_id for user_id in user_ids if user_id is not None]
    if not ids:
        return
    await session.execute(
        update(User)
        .where(User.id.in_(ids))
        .values(is_available=available)
        .execution_options(synchronize_session=False)
    )
    logger.info(
        "Staff %s marked as %s",
        ", ".join(str(user_id) for user_id in ids),
        "available" if available else "unavailable",
    )


async def _release_slots(
    session: AsyncSession, booking: Booking, *, reason: str
) -> SlotRestoreResult:
    result = await slot_service.restore_slots(session, booking=booking)
    if not result.restored:
        logger.warning(
            "Slots not restored for booking %s after %s: %s",
            booking.id,
            reason,
            result.reason,
        )
    return result


async def update_booking(
    session: AsyncSession,
    *,
    booking: Booking,
    status: BookingStatus | None = None,
    payment_status: PaymentStatus | None = None,
    driver_id: uuid.UUID | None = UNSET,
    tour_guide_id: uuid.UUID | None = UNSET,
    cancellation_reason: str | None = None,
) -> tuple[Booking, SlotRestoreResult | None]:
    """Apply a status/assignment update, restoring slots on cancellation."""
    restore_result: SlotRestoreResult | None = None
    now = datetime.now(UTC)
    status_changed = status is not None and status != booking.status
    if status_changed:
        _validate_status_transition(booking.status, status)

    released: list[uuid.UUID | None] = []
    assigned: list[uuid.UUID | None] = []
    if driver_id is not UNSET and driver_id != booking.driver_id:
        if driver_id is not None:
            await _validate_staff(session, driver_id, UserRole.SAFARI_DRIVER)
        released.append(booking.driver_id)
        assigned.append(driver_id)
        booking.driver_id = driver_id
    if tour_guide_id is not UNSET and tour_guide_id != booking.tour_guide_id:
        if tour_guide_id is not None:
            await _validate_staff(session, tour_guide_id, UserRole.TOUR_GUIDE)
        released.append(booking.tour_guide_id)
        assigned.append(tour_guide_id)
        booking.tour_guide_id = tour_guide_id
    await _set_staff_availability(session, released, True)

    if status_changed:
        if status == BookingStatus.CANCELLED:
            restore_result = await _release_slots(session, booking, reason="cancellation")
            booking.cancellation_date = now
            if cancellation_reason:
                booking.cancellation_reason = cancellation_reason
        elif status == BookingStatus.CONFIRMED:
            booking.confirmation_date = now
        elif status == BookingStatus.COMPLETED:
            booking.completion_date = now
        booking.status = status

    if payment_status is not None:
        booking.payment_status = payment_status

    staff = [booking.driver_id, booking.tour_guide_id]
    if status_changed and status in _STAFF_FREE_STATUSES:
        await _set_staff_availability(session, staff, True)
    elif status_changed and status in _STAFF_BUSY_STATUSES:
        await _set_staff_availability(session, staff, False)
    elif booking.status in _STAFF_BUSY_STATUSES:
        await _set_staff_availability(session, assigned, False)

    session.add(booking)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    logger.info(
        "Activity booking %s updated: status=%s payment=%s driver=%s guide=%s",
        booking.id,
        booking.status.value,
        booking.payment_status.value,
        booking.driver_id,
        booking.tour_guide_id,
    )
    return await _reload_booking(session, booking.id), restore_result


async def delete_booking(
    session: AsyncSession, *, booking: Booking
) -> SlotRestoreResult | None:
    """Hard-delete a booking, first releasing its slots and staff."""
    if booking.booking_type != BookingType.ACTIVITY:
        raise ValueError("This endpoint is only for activity bookings")

    restore_result: SlotRestoreResult | None = None
    if booking.status != BookingStatus.CANCELLED:
        restore_result = await _release_slots(session, booking, reason="deletion")
    await _set_staff_availability(session, [booking.driver_id, booking.tour_guide_id], True)

    booking_id = booking.id
    await session.delete(booking)
    await session.commit()
    logger.info("Activity booking %s deleted", booking_id)
    return restore_result
