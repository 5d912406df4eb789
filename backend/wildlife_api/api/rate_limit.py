"""Redis-backed request throttling for public and booking endpoints."""

from __future__ import annotations

from fastapi import Depends, Request, Response
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter

from wildlife_api.core.config import get_settings

_WINDOWS = {
    "second": 1,
    "seconds": 1,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


def parse_rate(value: str | None, fallback: tuple[int, int]) -> tuple[int, int]:
    """Turn ``"100/minute"`` into ``(100, 60)``."""
    if not value or "/" not in value:
        return fallback
    count_str, window_str = value.split("/", 1)
    try:
        count = int(count_str.strip())
    except ValueError:
        return fallback
    seconds = _WINDOWS.get(window_str.strip().lower(), fallback[1])
    return count, seconds


def rate_dependency(limit: tuple[int, int]):
    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=limit[0], seconds=limit[1])
        await limiter(request, response)

    return Depends(_dependency)


DEFAULT_RATE_DEP = rate_dependency(
    parse_rate(get_settings().rate_limit_default, fallback=(100, 60))
)
