"""Role helpers for explicit authorization checks."""

from __future__ import annotations

from fastapi import HTTPException, status

from wildlife_api.models.user import User, UserRole

ACTIVITY_MANAGERS = frozenset({UserRole.ADMIN, UserRole.WILDLIFE_OFFICER})
BOOKING_MANAGERS = frozenset(
    {UserRole.ADMIN, UserRole.WILDLIFE_OFFICER, UserRole.CALL_OPERATOR}
)


def require_roles(user: User, allowed: frozenset[UserRole] | set[UserRole]) -> None:
    """Raise HTTP 403 if a user is not a member of the allowed role set."""

    if user.role not in allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )


__all__ = ["ACTIVITY_MANAGERS", "BOOKING_MANAGERS", "require_roles"]
