"""
Security utilities: password hashing, session tokens, and Fernet encryption.

This module centralizes all cryptographic operations so they're easy to
audit and update. Three concerns are handled here:

1. PASSWORD HASHING (Argon2)
   - Passwords are never stored in plaintext, and never copied into the
     user document created at sign-up
   - passlib's CryptContext handles hashing and verification

2. SESSION TOKENS (JWT)
   - Signing in creates a Session row; the browser receives a signed JWT
     carrying the user ID ("sub") and the session ID ("sid")
   - The JWT lives in an HttpOnly cookie. Because the session row is
     checked on every request, deleting it (logout) revokes the cookie
     even before the JWT expires

3. FERNET ENCRYPTION (AES-128-CBC + HMAC-SHA256)
   - Plaid access tokens grant ongoing read access to a user's bank; they
     are encrypted before being stored on the Bank document
   - SSNs collected at sign-up (required by Dwolla for personal
     verified customers) are encrypted the same way
"""

import uuid
from datetime import datetime, timedelta, timezone

from cryptography.fernet import Fernet
from jose import jwt
from passlib.context import CryptContext

from bankdash.config import settings


# ---------------------------------------------------------------------------
# 1. Password Hashing (Argon2)
# ---------------------------------------------------------------------------

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """Hash a plaintext password using Argon2id."""
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a stored Argon2 hash."""
    return pwd_context.verify(plain_password, hashed_password)


# ---------------------------------------------------------------------------
# 2. Session Tokens
# ---------------------------------------------------------------------------


def session_expiry(now: datetime | None = None) -> datetime:
    """Return the expiry timestamp for a session created at `now`."""
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)


def create_session_token(
    user_id: uuid.UUID,
    session_id: uuid.UUID,
    expires_at: datetime,
) -> str:
    """
    Create the signed session secret stored in the session cookie.

    Args:
        user_id: The account the session belongs to.
        session_id: The Session row backing this token.
        expires_at: Expiration timestamp, copied from the Session row.

    Returns:
        An encoded JWT string.
    """
    claims = {
        "sub": str(user_id),
        "sid": str(session_id),
        "exp": expires_at,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str, verify_exp: bool = True) -> tuple[uuid.UUID, uuid.UUID]:
    """
    Decode and verify a session secret.

    Logout passes verify_exp=False so an expired cookie can still name the
    session row to delete. The signature is always checked.

    Returns:
        Tuple of (user ID, session ID).

    Raises:
        JWTError: If the token is expired, tampered with, or invalid.
        ValueError: If the claims are missing or not UUIDs.
    """
    payload = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        options={"verify_exp": verify_exp},
    )
    user_id = payload.get("sub")
    session_id = payload.get("sid")
    if user_id is None or session_id is None:
        raise ValueError("Session token is missing required claims")
    return uuid.UUID(user_id), uuid.UUID(session_id)


# ---------------------------------------------------------------------------
# 3. Fernet Encryption (access tokens and SSNs at rest)
# ---------------------------------------------------------------------------

_fernet = Fernet(settings.ENCRYPTION_KEY.encode())


def encrypt_value(plaintext: str) -> bytes:
    """Encrypt a string value for storage in a LargeBinary column."""
    return _fernet.encrypt(plaintext.encode())


def decrypt_value(ciphertext: bytes) -> str:
    """
    Decrypt a Fernet-encrypted value back to plaintext.

    Raises:
        cryptography.fernet.InvalidToken: If the data is corrupted or
            the encryption key doesn't match.
    """
    return _fernet.decrypt(ciphertext).decode()
