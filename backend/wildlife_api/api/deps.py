"""Common API dependencies."""

from __future__ import annotations

import uuid
from typing import Annotated
from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from wildlife_api.core.config import get_settings
from wildlife_api.core.security import decode_access_token
from wildlife_api.db.session import get_session
from wildlife_api.models.user import User, UserStatus

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.auth_token_url)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> User:
    """Resolve the bearer token's subject to a stored user."""
    try:
        subject = decode_access_token(token).get("sub")
        user_id = uuid.UUID(subject)
    except (JWTError, ValueError, TypeError) as exc:
        raise _unauthorized("Could not validate credentials") from exc

    user = await session.get(User, user_id)
    if user is None:
        raise _unauthorized("Could not validate credentials")
    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Reject accounts that are suspended or not yet activated."""
    if current_user.status != UserStatus.ACTIVE:
        raise _unauthorized(f"User account is {current_user.status.value}")
    return current_user
