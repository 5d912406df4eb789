"""Activity management service helpers."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wildlife_api.models.activity import (
    DEFAULT_CANCELLATION_POLICY,
    Activity,
    ActivityCategory,
    ActivityDifficulty,
    ActivityStatus,
)
from wildlife_api.services import slot_service

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {
    "title",
    "description",
    "price",
    "duration",
    "location",
    "image_url",
    "max_participants",
    "daily_slots",
    "status",
    "category",
    "difficulty",
    "requirements",
    "includes",
    "excludes",
    "cancellation_policy",
}

_NULLABLE_FIELDS = {"image_url"}


def _normalize_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    return [item.strip() for item in value if item and item.strip()]


def _validate_capacity(max_participants: int, daily_slots: int) -> None:
    if daily_slots < 1:
        raise ValueError("Must have at least 1 slot per day")
    if max_participants < 1:
        raise ValueError("Must allow at least 1 participant")


async def list_activities(
    session: AsyncSession,
    *,
    category: ActivityCategory | None = None,
    status: ActivityStatus | None = None,
    skip: int = 0,
    limit: int = 10,
) -> tuple[Sequence[Activity], int]:
    """Return one page of activities and the total matching count."""
    filters = []
    if category is not None:
        filters.append(Activity.category == category)
    if status is not None:
        filters.append(Activity.status == status)

    stmt = (
        select(Activity)
        .where(*filters)
        .order_by(Activity.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    activities = (await session.execute(stmt)).scalars().unique().all()
    total = (
        await session.execute(select(func.count()).select_from(Activity).where(*filters))
    ).scalar_one()
    return activities, total


async def get_activity(
    session: AsyncSession, *, activity_id: uuid.UUID
) -> Activity | None:
    """Load an activity with fresh slot overrides."""
    result = await session.execute(
        select(Activity)
        .where(Activity.id == activity_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _reload(session: AsyncSession, activity_id: uuid.UUID) -> Activity:
    result = await session.execute(
        select(Activity)
        .where(Activity.id == activity_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_activity(
    session: AsyncSession,
    *,
    created_by_id: uuid.UUID | None,
    title: str,
    description: str,
    price: Decimal,
    duration: int,
    location: str,
    max_participants: int,
    daily_slots: int,
    category: ActivityCategory,
    difficulty: ActivityDifficulty = ActivityDifficulty.EASY,
    status: ActivityStatus = ActivityStatus.ACTIVE,
    image_url: str | None = None,
    requirements: list[str] | str | None = None,
    includes: list[str] | None = None,
    excludes: list[str] | None = None,
    cancellation_policy: str | None = None,
) -> Activity:
    _validate_capacity(max_participants, daily_slots)
    activity = Activity(
        title=title.strip(),
        description=description.strip(),
        price=price,
        duration=duration,
        location=location.strip(),
        image_url=image_url,
        max_participants=max_participants,
        daily_slots=daily_slots,
        category=category,
        difficulty=difficulty,
        status=status,
        requirements=_normalize_list(requirements),
        includes=_normalize_list(includes),
        excludes=_normalize_list(excludes),
        cancellation_policy=cancellation_policy or DEFAULT_CANCELLATION_POLICY,
        created_by_id=created_by_id,
    )
    session.add(activity)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    logger.info("Activity created: %s (%s)", activity.title, activity.id)
    return await _reload(session, activity.id)


async def update_activity(
    session: AsyncSession,
    *,
    activity: Activity,
    updated_by_id: uuid.UUID | None,
    **changes: Any,
) -> Activity:
    """Apply a partial update; unknown keys are ignored.

    Only keys present in ``changes`` are touched. ``None`` clears a nullable
    column and is ignored for required ones.
    """
    previous_daily_slots = activity.daily_slots
    for key, value in changes.items():
        if key not in _UPDATABLE_FIELDS:
            continue
        if value is None and key not in _NULLABLE_FIELDS:
            continue
        if key in {"requirements", "includes", "excludes"}:
            value = _normalize_list(value)
        setattr(activity, key, value)

    _validate_capacity(activity.max_participants, activity.daily_slots)
    activity.updated_by_id = updated_by_id
    session.add(activity)
    if activity.daily_slots != previous_daily_slots:
        await session.flush()
        await slot_service.shift_overrides_for_capacity(
            session, activity=activity, previous_daily_slots=previous_daily_slots
        )
    await session.commit()
    logger.info("Activity updated: %s (%s)", activity.title, activity.id)
    return await _reload(session, activity.id)


async def delete_activity(session: AsyncSession, *, activity: Activity) -> None:
    await session.delete(activity)
    await session.commit()
    logger.info("Activity deleted: %s (%s)", activity.title, activity.id)


async def adjust_slots(
    session: AsyncSession,
    *,
    activity: Activity,
    slot_date: date,
    participant_count: int,
) -> int:
    """Staff-side clamped decrement of a day's remaining slots."""
    return await slot_service.update_slots(
        session,
        activity=activity,
        slot_date=slot_date,
        participant_count=participant_count,
    )
