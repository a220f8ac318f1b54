"""
FastAPI dependencies for session-based authentication.

The session secret travels in an HttpOnly cookie. The dependency chain is:

  get_session_secret (cookie -> str | None)
      ├── get_optional_user (secret -> serialized user | None)   [pages]
      └── get_current_user  (secret -> UserResponse or 401)      [actions]

Pages use get_optional_user so a guest still sees the dashboard; every
JSON action that needs a user declares get_current_user, and an invalid or
missing session is rejected before the route handler runs.
"""

from typing import Any

from fastapi import Depends
from fastapi.security import APIKeyCookie
from sqlalchemy.ext.asyncio import AsyncSession

from bankdash.config import settings
from bankdash.database import get_db
from bankdash.exceptions import NotAuthenticatedError
from bankdash.schemas.user import UserResponse
from bankdash.services import user_service


# auto_error=False: a missing cookie is a guest, not an immediate 403
session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)


async def get_session_secret(
    secret: str | None = Depends(session_cookie),
) -> str | None:
    return secret


async def get_optional_user(
    secret: str | None = Depends(get_session_secret),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any] | None:
    """The signed-in user, serialized, or None for guests."""
    return await user_service.get_logged_in_user(db, secret)


async def get_current_user(
    logged_in: dict[str, Any] | None = Depends(get_optional_user),
) -> UserResponse:
    """
    Require a signed-in user.

    Raises:
        NotAuthenticatedError: If the session cookie is missing, invalid,
            expired, or was logged out.
    """
    if logged_in is None:
        raise NotAuthenticatedError()
    return UserResponse.model_validate(logged_in)
