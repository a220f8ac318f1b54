"""
Authentication router — sign-up, sign-in, logout, and the current user.

Endpoints:
  POST /auth/sign-up  — Onboard a new user and open a session
  POST /auth/sign-in  — Authenticate and open a session
  POST /auth/logout   — Delete the session and clear the cookie
  GET  /auth/me       — The signed-in user

Sign-up and sign-in set the session cookie:
  path="/", HttpOnly, SameSite=strict, Secure (unless disabled for local
  HTTP development), max-age equal to the session lifetime.

Security audit notes:
  - Plaintext passwords and SSNs exist only in memory during the request;
    the service layer hashes/encrypts them and never logs them.
  - The session secret appears only in the Set-Cookie header.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from bankdash.config import settings
from bankdash.database import get_db
from bankdash.dependencies import get_current_user, get_session_secret
from bankdash.exceptions import ActionFailedError, InvalidCredentialsError
from bankdash.schemas.auth import SignInRequest, SignUpRequest
from bankdash.schemas.user import UserResponse
from bankdash.services import user_service

router = APIRouter()


def _set_session_cookie(response: Response, secret: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=secret,
        path="/",
        httponly=True,
        samesite="strict",
        secure=settings.SESSION_COOKIE_SECURE,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
    )


@router.post(
    "/sign-up",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def sign_up(
    request: SignUpRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Create the account, the Dwolla customer, and the user document, then
    sign the user in.

    - **email** / **password**: login credentials (password ≥ 8 characters)
    - **first_name**, **last_name**, **address1**, **city**, **state**,
      **postal_code**, **date_of_birth**, **ssn**: forwarded to Dwolla
    """
    result = await user_service.sign_up(db, request)
    if result is None:
        raise ActionFailedError("Error creating user")

    user, secret = result
    _set_session_cookie(response, secret)
    return user


@router.post(
    "/sign-in",
    response_model=UserResponse,
    summary="Authenticate and open a session",
)
async def sign_in(
    request: SignInRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    result = await user_service.sign_in(db, request.email, request.password)
    if result is None:
        raise InvalidCredentialsError()

    user, secret = result
    _set_session_cookie(response, secret)
    return user


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Sign out",
)
async def logout(
    response: Response,
    secret: str | None = Depends(get_session_secret),
    db: AsyncSession = Depends(get_db),
):
    """Delete the current session. The cookie is cleared either way."""
    await user_service.logout_account(db, secret)
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
    response.status_code = status.HTTP_204_NO_CONTENT
    return None


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the signed-in user",
)
async def me(user: UserResponse = Depends(get_current_user)):
    return user
