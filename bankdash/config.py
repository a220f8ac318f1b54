"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env
file as a fallback. Vendor credentials (Plaid, Dwolla) and signing keys never
live in source code — .env is gitignored and .env.example is the template.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from bankdash.config import settings
    print(settings.PLAID_ENV)
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for Bankdash.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Signs the session JWT stored in the session cookie
      - ENCRYPTION_KEY: Fernet key for Plaid access tokens and SSNs at rest
      - PLAID_CLIENT_ID / PLAID_SECRET: Plaid API credentials
      - DWOLLA_KEY / DWOLLA_SECRET: Dwolla application credentials
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Bankdash"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # --- Database ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/bankdash.db"

    # --- Sessions ---
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    SESSION_EXPIRE_MINUTES: int = 60 * 24 * 7
    SESSION_COOKIE_NAME: str = "bankdash-session"
    # Only disable for plain-HTTP local development
    SESSION_COOKIE_SECURE: bool = True

    # --- Encryption at rest ---
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    ENCRYPTION_KEY: str

    # --- Plaid ---
    PLAID_CLIENT_ID: str
    PLAID_SECRET: str
    PLAID_ENV: Literal["sandbox", "production"] = "sandbox"
    PLAID_PRODUCTS: list[str] = ["auth"]
    PLAID_COUNTRY_CODES: list[str] = ["US"]

    # --- Dwolla ---
    DWOLLA_KEY: str
    DWOLLA_SECRET: str
    DWOLLA_ENV: Literal["sandbox", "production"] = "sandbox"
    DWOLLA_TIMEOUT: float = 30.0

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["text", "json"] = "text"


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
