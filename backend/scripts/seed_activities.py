"""Seed a sample activity catalogue for local development."""
from __future__ import annotations

import asyncio
from decimal import Decimal

from sqlalchemy import select

from wildlife_api.core.config import get_settings
from wildlife_api.db.session import get_sessionmaker
from wildlife_api.models.activity import Activity, ActivityCategory, ActivityDifficulty

SAMPLE_ACTIVITIES = [
    {
        "title": "Yala Morning Jeep Safari",
        "description": "Dawn game drive through Yala block 1 looking for leopards and sloth bears.",
        "price": Decimal("12500"),
        "duration": 4,
        "location": "Yala National Park",
        "max_participants": 6,
        "category": ActivityCategory.SAFARI,
        "difficulty": ActivityDifficulty.EASY,
        "includes": ["Jeep", "Park tracker", "Bottled water"],
    },
    {
        "title": "Sinharaja Rainforest Bird Walk",
        "description": "Guided walk for endemic birds along the Kudawa trail.",
        "price": Decimal("7500"),
        "duration": 5,
        "location": "Sinharaja Forest Reserve",
        "max_participants": 8,
        "category": ActivityCategory.BIRD_WATCHING,
        "difficulty": ActivityDifficulty.MODERATE,
        "requirements": ["Leech socks", "Binoculars"],
    },
    {
        "title": "Minneriya Elephant Gathering",
        "description": "Afternoon drive to watch the seasonal elephant gathering at the tank.",
        "price": Decimal("10000"),
        "duration": 3,
        "location": "Minneriya National Park",
        "max_participants": 6,
        "category": ActivityCategory.WILDLIFE_TOUR,
        "difficulty": ActivityDifficulty.EASY,
    },
    {
        "title": "Knuckles Range Nature Trek",
        "description": "Full-day trek across cloud forest ridges with a naturalist.",
        "price": Decimal("9000"),
        "duration": 8,
        "location": "Knuckles Mountain Range",
        "max_participants": 10,
        "category": ActivityCategory.NATURE_WALK,
        "difficulty": ActivityDifficulty.HARD,
        "requirements": ["Hiking boots", "Rain jacket"],
    },
]


async def seed_activities(daily_slots: int | None = None) -> None:
    slots = daily_slots or get_settings().default_daily_slots
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        created = 0
        for fields in SAMPLE_ACTIVITIES:
            existing = await session.execute(
                select(Activity.id).where(Activity.title == fields["title"])
            )
            if existing.scalar_one_or_none() is not None:
                continue
            session.add(Activity(daily_slots=slots, **fields))
            created += 1
        if created:
            await session.commit()
        print(f"Seeded {created} activit{'y' if created == 1 else 'ies'}.")


def main() -> None:
    asyncio.run(seed_activities())


if __name__ == "__main__":
    main()
