"""
User service — onboarding, sessions, and bank linking actions.

These are the application's server actions. Each one is a short sequence
of calls to the local store, Plaid, and Dwolla, and they all share one
error contract: on any failure the action logs the exception, rolls back
whatever it wrote to the database session, and returns None. Routers
treat None as "the action failed" and answer accordingly.

Sign-up flow:
  1. Create the User account (email + Argon2 hash)
  2. Create a personal Dwolla customer from the form data
  3. Store the user document (UserProfile) with the Dwolla customer ID/URL
  4. Open a Session and return its secret for the session cookie

Bank linking flow (exchange_public_token):
  1. Exchange the Plaid Link public token for an access token + item ID
  2. Fetch the item's accounts and take the first one
  3. Create a Dwolla processor token for that account
  4. Turn the processor token into a Dwolla funding source
  5. Store the Bank document

Security notes:
  - Sign-in returns the same failure for "unknown email" and "wrong
    password"
  - The password is hashed before storage and is not part of the user
    document; the SSN is only stored encrypted
  - Plaid access tokens are encrypted before they touch the database
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi.concurrency import run_in_threadpool
from plaid.model.accounts_get_request import AccountsGetRequest
from plaid.model.country_code import CountryCode
from plaid.model.item_public_token_exchange_request import ItemPublicTokenExchangeRequest
from plaid.model.link_token_create_request import LinkTokenCreateRequest
from plaid.model.link_token_create_request_user import LinkTokenCreateRequestUser
from plaid.model.processor_token_create_request import ProcessorTokenCreateRequest
from plaid.model.products import Products
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from bankdash.clients import plaid_client
from bankdash.config import settings
from bankdash.exceptions import DuplicateEmailError, InvalidCredentialsError, VendorError
from bankdash.models.bank import Bank
from bankdash.models.session import Session
from bankdash.models.user import User
from bankdash.models.user_profile import UserProfile
from bankdash.schemas.auth import SignUpRequest
from bankdash.schemas.bank import BankResponse
from bankdash.schemas.user import UserResponse
from bankdash.security import (
    create_session_token,
    decode_session_token,
    encrypt_value,
    hash_password,
    session_expiry,
    verify_password,
)
from bankdash.services.dwolla_service import add_funding_source, create_dwolla_customer
from bankdash.utils import encrypt_id, extract_customer_id_from_url, full_name, parse_stringify

logger = logging.getLogger(__name__)

# Plaid Link rejects client names longer than this
PLAID_CLIENT_NAME_MAX = 30


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _serialize_user(user: User, profile: UserProfile) -> dict[str, Any]:
    return parse_stringify(
        UserResponse(
            id=profile.id,
            user_id=user.id,
            email=profile.email,
            name=user.name,
            first_name=profile.first_name,
            last_name=profile.last_name,
            address1=profile.address1,
            city=profile.city,
            state=profile.state,
            postal_code=profile.postal_code,
            date_of_birth=profile.date_of_birth,
            dwolla_customer_id=profile.dwolla_customer_id,
            dwolla_customer_url=profile.dwolla_customer_url,
            created_at=profile.created_at,
        )
    )


async def _get_profile(db: AsyncSession, user_id: uuid.UUID) -> UserProfile | None:
    result = await db.execute(select(UserProfile).where(UserProfile.user_id == user_id))
    return result.scalar_one_or_none()


async def _create_account(db: AsyncSession, email: str, password: str, name: str) -> User:
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise DuplicateEmailError(email)

    user = User(email=email, hashed_password=hash_password(password), name=name)
    db.add(user)
    # Flush to get user.id assigned
    await db.flush()
    return user


async def _create_session(db: AsyncSession, user: User) -> str:
    """
    Open a Session row and return the signed secret for the cookie.

    The user's expired sessions are purged first.
    """
    now = datetime.now(timezone.utc)
    await db.execute(
        delete(Session).where(Session.user_id == user.id, Session.expires_at <= now)
    )
    session = Session(user_id=user.id, expires_at=session_expiry(now))
    db.add(session)
    await db.flush()
    return create_session_token(user.id, session.id, session.expires_at)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

async def sign_in(
    db: AsyncSession,
    email: str,
    password: str,
) -> tuple[dict[str, Any], str] | None:
    """
    Authenticate with email and password and open a session.

    Returns:
        Tuple of (serialized user, session secret), or None on failure.
    """
    try:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        # Same error for every case so emails cannot be enumerated
        if user is None or not user.is_active:
            raise InvalidCredentialsError()
        if not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()

        profile = await _get_profile(db, user.id)
        if profile is None:
            raise InvalidCredentialsError()

        secret = await _create_session(db, user)
        logger.info("User signed in", extra={"user_id": user.id})
        return _serialize_user(user, profile), secret
    except Exception:
        logger.exception("Sign-in failed")
        await db.rollback()
        return None


async def sign_up(
    db: AsyncSession,
    user_data: SignUpRequest,
) -> tuple[dict[str, Any], str] | None:
    """
    Onboard a new user: account, Dwolla customer, user document, session.

    Everything written to the database happens in the request's
    transaction, so a failure at any step leaves no local records. A
    Dwolla customer created before a later failure is not removed.

    Returns:
        Tuple of (serialized user, session secret), or None on failure.
    """
    try:
        name = full_name(user_data.first_name, user_data.last_name)
        user = await _create_account(db, user_data.email, user_data.password, name)

        dwolla_customer_url = await create_dwolla_customer({
            "firstName": user_data.first_name,
            "lastName": user_data.last_name,
            "email": user_data.email,
            "type": "personal",
            "address1": user_data.address1,
            "city": user_data.city,
            "state": user_data.state,
            "postalCode": user_data.postal_code,
            "dateOfBirth": user_data.date_of_birth,
            "ssn": user_data.ssn,
        })
        if not dwolla_customer_url:
            raise VendorError("Error creating Dwolla customer")

        profile = UserProfile(
            user_id=user.id,
            email=user_data.email,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            address1=user_data.address1,
            city=user_data.city,
            state=user_data.state,
            postal_code=user_data.postal_code,
            date_of_birth=user_data.date_of_birth,
            ssn_encrypted=encrypt_value(user_data.ssn),
            dwolla_customer_id=extract_customer_id_from_url(dwolla_customer_url),
            dwolla_customer_url=dwolla_customer_url,
        )
        db.add(profile)
        await db.flush()

        secret = await _create_session(db, user)
        logger.info("User signed up", extra={"user_id": user.id})
        return _serialize_user(user, profile), secret
    except Exception:
        logger.exception("Sign-up failed")
        await db.rollback()
        return None


async def get_logged_in_user(
    db: AsyncSession,
    session_secret: str | None,
) -> dict[str, Any] | None:
    """
    Resolve a session cookie to the signed-in user.

    Returns None when there is no cookie, the token doesn't verify, or the
    session was deleted or has expired.
    """
    if not session_secret:
        return None

    try:
        user_id, session_id = decode_session_token(session_secret)

        session = await db.get(Session, session_id)
        if session is None or session.user_id != user_id or session.is_expired():
            return None

        user = await db.get(User, user_id)
        if user is None or not user.is_active:
            return None

        profile = await _get_profile(db, user.id)
        if profile is None:
            return None

        return _serialize_user(user, profile)
    except Exception:
        # Stale or tampered cookies are routine; keep them out of error logs
        logger.debug("Session lookup failed", exc_info=True)
        return None


async def logout_account(db: AsyncSession, session_secret: str | None) -> bool | None:
    """
    Delete the session behind a cookie.

    Returns:
        True once the session is gone, or None on failure.
    """
    try:
        if not session_secret:
            raise InvalidCredentialsError()
        _, session_id = decode_session_token(session_secret, verify_exp=False)
        await db.execute(delete(Session).where(Session.id == session_id))
        return True
    except Exception:
        logger.warning("Logout failed", exc_info=True)
        await db.rollback()
        return None


async def get_user_info(db: AsyncSession, user_id: uuid.UUID) -> dict[str, Any] | None:
    """Return the serialized user document for an account ID, or None."""
    try:
        user = await db.get(User, user_id)
        profile = await _get_profile(db, user_id) if user else None
        if user is None or profile is None:
            return None
        return _serialize_user(user, profile)
    except Exception:
        logger.exception("Loading user info failed", extra={"user_id": user_id})
        return None


# ---------------------------------------------------------------------------
# Bank linking
# ---------------------------------------------------------------------------

async def create_link_token(user: UserResponse) -> dict[str, Any] | None:
    """
    Create a Plaid Link token for the user.

    Returns:
        {"link_token": "..."} or None on failure.
    """
    try:
        request = LinkTokenCreateRequest(
            user=LinkTokenCreateRequestUser(client_user_id=str(user.user_id)),
            client_name=user.name[:PLAID_CLIENT_NAME_MAX],
            products=[Products(product) for product in settings.PLAID_PRODUCTS],
            language="en",
            country_codes=[CountryCode(code) for code in settings.PLAID_COUNTRY_CODES],
        )

        client = plaid_client.get_plaid_client()
        response = await run_in_threadpool(client.link_token_create, request)

        return parse_stringify({"link_token": response["link_token"]})
    except Exception:
        logger.exception("Creating a Plaid link token failed", extra={"user_id": user.user_id})
        return None


async def create_bank_account(
    db: AsyncSession,
    user_id: uuid.UUID,
    bank_id: str,
    account_id: str,
    access_token: str,
    funding_source_url: str,
    sharable_id: str,
) -> dict[str, Any] | None:
    """
    Store a Bank document for a newly linked account.

    Returns:
        The serialized bank (without the access token), or None on failure.
    """
    try:
        bank = Bank(
            user_id=user_id,
            bank_id=bank_id,
            account_id=account_id,
            access_token_encrypted=encrypt_value(access_token),
            funding_source_url=funding_source_url,
            sharable_id=sharable_id,
        )
        db.add(bank)
        await db.flush()

        return parse_stringify(BankResponse.model_validate(bank))
    except Exception:
        logger.exception("Storing the bank document failed", extra={"user_id": user_id})
        await db.rollback()
        return None


async def exchange_public_token(
    db: AsyncSession,
    public_token: str,
    user: UserResponse,
) -> dict[str, Any] | None:
    """
    Finish Plaid Link: exchange the public token and link the first account.

    Returns:
        {"public_token_exchange": "complete"} or None on failure.
    """
    try:
        client = plaid_client.get_plaid_client()

        exchange_response = await run_in_threadpool(
            client.item_public_token_exchange,
            ItemPublicTokenExchangeRequest(public_token=public_token),
        )
        access_token = exchange_response["access_token"]
        item_id = exchange_response["item_id"]

        accounts_response = await run_in_threadpool(
            client.accounts_get,
            AccountsGetRequest(access_token=access_token),
        )
        account_data = accounts_response["accounts"][0]
        account_id = account_data["account_id"]

        processor_token_response = await run_in_threadpool(
            client.processor_token_create,
            ProcessorTokenCreateRequest(
                access_token=access_token,
                account_id=account_id,
                processor="dwolla",
            ),
        )
        processor_token = processor_token_response["processor_token"]

        funding_source_url = await add_funding_source(
            dwolla_customer_id=user.dwolla_customer_id,
            processor_token=processor_token,
            bank_name=account_data["name"],
        )
        if not funding_source_url:
            raise VendorError("Error creating Dwolla funding source")

        bank = await create_bank_account(
            db,
            user_id=user.user_id,
            bank_id=item_id,
            account_id=account_id,
            access_token=access_token,
            funding_source_url=funding_source_url,
            sharable_id=encrypt_id(account_id),
        )
        if bank is None:
            raise VendorError("Error storing bank account")

        logger.info("Bank linked", extra={"user_id": user.user_id, "bank_id": bank["id"]})
        return parse_stringify({"public_token_exchange": "complete"})
    except Exception:
        logger.exception("Exchanging the Plaid public token failed", extra={"user_id": user.user_id})
        await db.rollback()
        return None
