"""Activity catalogue and slot management API."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wildlife_api.api import deps
from wildlife_api.models.activity import Activity, ActivityCategory, ActivityStatus
from wildlife_api.models.user import User
from wildlife_api.schemas.activity import (
    ActivityCategoryListResponse,
    ActivityCreate,
    ActivityListResponse,
    ActivityRead,
    ActivitySlotsRead,
    ActivityUpdate,
    SlotAdjustRequest,
    SlotAdjustResponse,
)
from wildlife_api.schemas.common import Pagination
from wildlife_api.security.permissions import (
    ACTIVITY_MANAGERS,
    BOOKING_MANAGERS,
    require_roles,
)
from wildlife_api.services import activity_service, slot_service

router = APIRouter()

SLOT_MANAGERS = ACTIVITY_MANAGERS | BOOKING_MANAGERS


async def _get_activity_or_404(session: AsyncSession, activity_id: uuid.UUID) -> Activity:
    activity = await activity_service.get_activity(session, activity_id=activity_id)
    if activity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found"
        )
    return activity


@router.get("", response_model=ActivityListResponse, summary="List activities")
async def list_activities(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    category: ActivityCategory | None = None,
    activity_status: Annotated[ActivityStatus | None, Query(alias="status")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> ActivityListResponse:
    activities, total = await activity_service.list_activities(
        session,
        category=category,
        status=activity_status,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return ActivityListResponse(
        activities=[ActivityRead.model_validate(obj) for obj in activities],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get(
    "/category/{category}",
    response_model=ActivityCategoryListResponse,
    summary="List active activities in a category",
)
async def list_activities_by_category(
    category: ActivityCategory,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> ActivityCategoryListResponse:
    activities, total = await activity_service.list_activities(
        session,
        category=category,
        status=ActivityStatus.ACTIVE,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return ActivityCategoryListResponse(
        activities=[ActivityRead.model_validate(obj) for obj in activities],
        category=category,
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.post(
    "",
    response_model=ActivityRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create activity",
)
async def create_activity(
    payload: ActivityCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> ActivityRead:
    require_roles(current_user, ACTIVITY_MANAGERS)
    try:
        activity = await activity_service.create_activity(
            session, created_by_id=current_user.id, **payload.model_dump()
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Unable to create activity"
        ) from exc
    return ActivityRead.model_validate(activity)


@router.get("/{activity_id}", response_model=ActivityRead, summary="Get activity")
async def get_activity(
    activity_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> ActivityRead:
    activity = await _get_activity_or_404(session, activity_id)
    return ActivityRead.model_validate(activity)


@router.put("/{activity_id}", response_model=ActivityRead, summary="Update activity")
async def update_activity(
    activity_id: uuid.UUID,
    payload: ActivityUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> ActivityRead:
    require_roles(current_user, ACTIVITY_MANAGERS)
    activity = await _get_activity_or_404(session, activity_id)
    try:
        activity = await activity_service.update_activity(
            session,
            activity=activity,
            updated_by_id=current_user.id,
            **payload.model_dump(exclude_unset=True),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Unable to update activity"
        ) from exc
    return ActivityRead.model_validate(activity)


@router.delete(
    "/{activity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete activity",
)
async def delete_activity(
    activity_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> Response:
    require_roles(current_user, ACTIVITY_MANAGERS)
    activity = await _get_activity_or_404(session, activity_id)
    await activity_service.delete_activity(session, activity=activity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{activity_id}/slots/{slot_date}",
    response_model=ActivitySlotsRead,
    summary="Remaining slots for a date",
)
async def get_activity_slots(
    activity_id: uuid.UUID,
    slot_date: date,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> ActivitySlotsRead:
    activity = await _get_activity_or_404(session, activity_id)
    available = await slot_service.get_available_slots(
        session, activity=activity, slot_date=slot_date
    )
    return ActivitySlotsRead(
        activity_id=activity.id,
        slot_date=slot_date,
        available_slots=available,
        max_participants=activity.max_participants,
        daily_slots=activity.daily_slots,
    )


@router.put(
    "/{activity_id}/slots",
    response_model=SlotAdjustResponse,
    summary="Take slots off a date",
)
async def adjust_activity_slots(
    activity_id: uuid.UUID,
    payload: SlotAdjustRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> SlotAdjustResponse:
    require_roles(current_user, SLOT_MANAGERS)
    activity = await _get_activity_or_404(session, activity_id)
    try:
        remaining = await activity_service.adjust_slots(
            session,
            activity=activity,
            slot_date=payload.slot_date,
            participant_count=payload.participant_count,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return SlotAdjustResponse(
        activity_id=activity.id,
        slot_date=payload.slot_date,
        available_slots=remaining,
        participant_count=payload.participant_count,
    )
