"""Database session and engine helpers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from wildlife_api.core.config import get_settings

logger = logging.getLogger(__name__)

_engine_cache: dict[str, AsyncEngine] = {}
_sessionmaker_cache: dict[str, async_sessionmaker[AsyncSession]] = {}


def _resolve_database_url(override: str | None = None) -> str:
    settings = get_settings()
    return override or settings.database_url


def get_engine(database_url: str | None = None) -> AsyncEngine:
    """Return the cached engine for the given database URL."""
    url = _resolve_database_url(database_url)
    get_sessionmaker(url)
    return _engine_cache[url]


def get_sessionmaker(
    database_url: str | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Return (and cache) an async sessionmaker for the given database URL."""
    url = _resolve_database_url(database_url)
    sessionmaker = _sessionmaker_cache.get(url)
    if sessionmaker is None:
        engine = create_async_engine(url, echo=False, future=True)
        sessionmaker = async_sessionmaker(
            engine, expire_on_commit=False, class_=AsyncSession
        )
        _engine_cache[url] = engine
        _sessionmaker_cache[url] = sessionmaker
    return sessionmaker


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an async database session using the configured engine."""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        yield session


async def wait_for_database(
    database_url: str | None = None,
    *,
    retries: int | None = None,
    delay_seconds: float | None = None,
) -> bool:
    """Probe the database until it answers or the retry budget runs out."""
    settings = get_settings()
    attempts = max(1, retries if retries is not None else settings.db_connect_retries)
    delay = delay_seconds if delay_seconds is not None else settings.db_connect_retry_seconds
    engine = get_engine(database_url)
    for attempt in range(1, attempts + 1):
        try:
            async with engine.connect() as connection:
                await connection.execute(text("SELECT 1"))
            return True
        except (OperationalError, OSError) as exc:
            logger.warning(
                "Database connection attempt %s/%s failed: %s", attempt, attempts, exc
            )
            if attempt < attempts:
                await asyncio.sleep(delay)
    logger.error("Database unreachable after %s attempt(s)", attempts)
    return False


async def dispose_engine(database_url: str | None = None) -> None:
    """Dispose the cached engine/sessionmaker for the given database URL."""
    url = _resolve_database_url(database_url)
    engine = _engine_cache.pop(url, None)
    if engine is not None:
        await engine.dispose()
    _sessionmaker_cache.pop(url, None)
