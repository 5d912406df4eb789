"""Activity booking API."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wildlife_api.api import deps
from wildlife_api.api.rate_limit import DEFAULT_RATE_DEP
from wildlife_api.models.booking import Booking, BookingStatus
from wildlife_api.models.user import User
from wildlife_api.schemas.booking import (
    BookingCreate,
    BookingCreatedResponse,
    BookingDeletedResponse,
    BookingListResponse,
    BookingRead,
    BookingUpdate,
    BookingUpdatedResponse,
)
from wildlife_api.schemas.slots import SlotCheckResponse, SlotVerifyResponse
from wildlife_api.security.permissions import BOOKING_MANAGERS, require_roles
from wildlife_api.services import booking_service, notification_service
from wildlife_api.services.booking_service import NotFoundError
from wildlife_api.services.slot_service import SlotError

router = APIRouter()


def _is_manager(user: User) -> bool:
    return user.role in BOOKING_MANAGERS


async def _get_booking_or_404(session: AsyncSession, booking_id: uuid.UUID) -> Booking:
    booking = await booking_service.get_booking(session, booking_id=booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    return booking


@router.get(
    "/check-slots",
    response_model=SlotCheckResponse,
    summary="Check whether participants fit on a date",
    dependencies=[DEFAULT_RATE_DEP],
)
async def check_slots(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    activity_id: Annotated[uuid.UUID, Query(alias="activityId")],
    slot_date: Annotated[date, Query(alias="date")],
    participants: int,
) -> SlotCheckResponse:
    try:
        summary = await booking_service.check_availability(
            session,
            activity_id=activity_id,
            slot_date=slot_date,
            participants=participants,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return SlotCheckResponse.model_validate(summary)


@router.get(
    "/verify-slots",
    response_model=SlotVerifyResponse,
    summary="Show stored slots for a date",
    dependencies=[DEFAULT_RATE_DEP],
)
async def verify_slots(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    activity_id: Annotated[uuid.UUID, Query(alias="activityId")],
    slot_date: Annotated[date, Query(alias="date")],
) -> SlotVerifyResponse:
    try:
        summary = await booking_service.verify_slots(
            session, activity_id=activity_id, slot_date=slot_date
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return SlotVerifyResponse.model_validate(summary)


@router.post(
    "",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an activity",
    dependencies=[DEFAULT_RATE_DEP],
)
async def create_activity_booking(
    payload: BookingCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
    background_tasks: BackgroundTasks,
) -> BookingCreatedResponse:
    customer_id = payload.user_id or current_user.id
    if customer_id != current_user.id and not _is_manager(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
        )
    try:
        booking = await booking_service.create_booking(
            session,
            customer_id=customer_id,
            activity_id=payload.activity_id,
            number_of_participants=payload.number_of_participants,
            preferred_date=payload.preferred_date,
            request_tour_guide=payload.request_tour_guide,
            total_amount=payload.total_amount,
            tourist_name=payload.tourist_name,
            tourist_email=payload.tourist_email,
            tourist_phone=payload.tourist_phone,
            special_requests=payload.special_requests,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (ValueError, SlotError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Unable to create booking"
        ) from exc

    notification_service.notify_booking_created(booking, background_tasks)
    return BookingCreatedResponse(booking=BookingRead.model_validate(booking))


@router.get("", response_model=BookingListResponse, summary="List activity bookings")
async def list_activity_bookings(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
    user_id: Annotated[uuid.UUID | None, Query(alias="userId")] = None,
    booking_status: Annotated[BookingStatus | None, Query(alias="status")] = None,
    skip: int = 0,
    limit: int = 100,
) -> BookingListResponse:
    if not _is_manager(current_user):
        user_id = current_user.id
    bookings = await booking_service.list_bookings(
        session,
        customer_id=user_id,
        status=booking_status,
        skip=skip,
        limit=min(limit, 200),
    )
    return BookingListResponse(
        bookings=[BookingRead.model_validate(obj) for obj in bookings],
        count=len(bookings),
    )


@router.get("/{booking_id}", response_model=BookingRead, summary="Get activity booking")
async def get_activity_booking(
    booking_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> BookingRead:
    booking = await _get_booking_or_404(session, booking_id)
    if booking.customer_id != current_user.id and not _is_manager(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
        )
    return BookingRead.model_validate(booking)


@router.put(
    "/{booking_id}",
    response_model=BookingUpdatedResponse,
    summary="Update activity booking status",
)
async def update_activity_booking(
    booking_id: uuid.UUID,
    payload: BookingUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
    background_tasks: BackgroundTasks,
) -> BookingUpdatedResponse:
    require_roles(current_user, BOOKING_MANAGERS)
    booking = await _get_booking_or_404(session, booking_id)
    previous_status = booking.status
    changes = payload.model_dump(exclude_unset=True)
    try:
        updated, restore_result = await booking_service.update_booking(
            session,
            booking=booking,
            status=changes.get("status"),
            payment_status=changes.get("payment_status"),
            driver_id=changes.get("driver_id", booking_service.UNSET),
            tour_guide_id=changes.get("tour_guide_id", booking_service.UNSET),
            cancellation_reason=changes.get("cancellation_reason"),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Unable to update booking"
        ) from exc

    if (
        updated.status == BookingStatus.CANCELLED
        and previous_status != BookingStatus.CANCELLED
    ):
        notification_service.notify_booking_cancelled(updated, background_tasks)
    return BookingUpdatedResponse(
        booking=BookingRead.model_validate(updated),
        slots_restored=restore_result.restored if restore_result else None,
    )


@router.delete(
    "/{booking_id}",
    response_model=BookingDeletedResponse,
    summary="Delete activity booking",
)
async def delete_activity_booking(
    booking_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> BookingDeletedResponse:
    require_roles(current_user, BOOKING_MANAGERS)
    booking = await _get_booking_or_404(session, booking_id)
    try:
        restore_result = await booking_service.delete_booking(session, booking=booking)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return BookingDeletedResponse(
        deleted_booking_id=booking_id,
        slots_restored=restore_result.restored if restore_result else None,
    )
