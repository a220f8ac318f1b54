"""
User model — the authentication account.

Each User is a login credential (email + hashed password) plus a display
name. It is kept separate from UserProfile on purpose:

  - User answers "who is signing in?" (email, password hash, active flag)
  - UserProfile is the user document created during onboarding: address,
    date of birth, and the Dwolla customer the user was registered as

A sign-up creates both, in that order, inside one database transaction.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bankdash.database import Base, UTCDateTime


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Email is the login identifier, unique and indexed
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # Argon2id hash of the password
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # "<first> <last>", used as the Plaid Link client name and the greeting
    name: Mapped[str] = mapped_column(
        String(201),
        nullable=False,
    )

    # Deactivated users can't sign in but their data is preserved
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    profile: Mapped["UserProfile"] = relationship(
        back_populates="user",
        uselist=False,
    )

    sessions: Mapped[list["Session"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
