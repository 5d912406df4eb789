"""Test fixtures for the wildlife tourism backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator, Callable
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from wildlife_api.core.config import get_settings
from wildlife_api.core.security import create_access_token
from wildlife_api.db.base import Base
from wildlife_api.db.session import dispose_engine, get_sessionmaker
from wildlife_api.main import app
from wildlife_api.models import (
    Activity,
    ActivityCategory,
    ActivityStatus,
    User,
    UserRole,
    UserStatus,
)


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def seeded(reset_database: None, db_url: str) -> dict[str, object]:
    """Seed staff, a tourist and one safari with ten slots per day."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        users = {
            "admin": User(
                email="admin@example.com",
                first_name="Ada",
                last_name="Admin",
                role=UserRole.ADMIN,
                status=UserStatus.ACTIVE,
            ),
            "operator": User(
                email="operator@example.com",
                first_name="Oli",
                last_name="Operator",
                role=UserRole.CALL_OPERATOR,
                status=UserStatus.ACTIVE,
            ),
            "tourist": User(
                email="tourist@example.com",
                first_name="Tara",
                last_name="Traveller",
                role=UserRole.TOURIST,
                status=UserStatus.ACTIVE,
            ),
            "other_tourist": User(
                email="other.tourist@example.com",
                first_name="Nimal",
                last_name="Perera",
                role=UserRole.TOURIST,
                status=UserStatus.ACTIVE,
            ),
            "guide": User(
                email="guide@example.com",
                first_name="Gihan",
                last_name="Guide",
                role=UserRole.TOUR_GUIDE,
                status=UserStatus.ACTIVE,
            ),
            "driver": User(
                email="driver@example.com",
                first_name="Dilan",
                last_name="Driver",
                role=UserRole.SAFARI_DRIVER,
                status=UserStatus.ACTIVE,
            ),
            "relief_driver": User(
                email="relief.driver@example.com",
                first_name="Ruwan",
                last_name="Driver",
                role=UserRole.SAFARI_DRIVER,
                status=UserStatus.ACTIVE,
            ),
        }
        session.add_all(users.values())
        await session.flush()

        activity = Activity(
            title="Yala Leopard Safari",
            description="Morning jeep safari in Yala block 1.",
            price=Decimal("2500.00"),
            duration=4,
            location="Yala National Park",
            max_participants=8,
            daily_slots=10,
            status=ActivityStatus.ACTIVE,
            category=ActivityCategory.SAFARI,
            created_by_id=users["admin"].id,
        )
        session.add(activity)
        await session.commit()

        context: dict[str, object] = {
            f"{name}_id": user.id for name, user in users.items()
        }
        context["activity_id"] = activity.id
    return context


@pytest_asyncio.fixture()
async def app_context(seeded: dict[str, object]) -> AsyncIterator[dict[str, object]]:
    """Yield an async client alongside the seeded ids."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield {**seeded, "client": client}


@pytest.fixture()
def auth_headers() -> Callable[[object], dict[str, str]]:
    """Build bearer headers for a user id, as the identity provider would."""

    def _build(user_id: object) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}

    return _build
