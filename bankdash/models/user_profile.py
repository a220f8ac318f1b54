"""
UserProfile model — the user document created during onboarding.

Holds everything collected on the sign-up form except the password, plus
the Dwolla customer created for the user. The chain is:

    User (auth) --> UserProfile (document) --> Bank(s) (linked accounts)

Dwolla fields:
  dwolla_customer_url is the Location returned when the customer was
  created; dwolla_customer_id is its last path segment. Funding sources
  for linked banks are attached to this customer.

The SSN is required by Dwolla for personal verified customers. It is sent
once at customer creation and stored here only Fernet-encrypted.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, ForeignKey, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bankdash.database import Base, UTCDateTime


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # UNIQUE enforces one document per account
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        unique=True,
        nullable=False,
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    address1: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    # Two-letter US state code
    state: Mapped[str] = mapped_column(String(2), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(10), nullable=False)
    # YYYY-MM-DD, as Dwolla expects it
    date_of_birth: Mapped[str] = mapped_column(String(10), nullable=False)

    ssn_encrypted: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    dwolla_customer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    dwolla_customer_url: Mapped[str] = mapped_column(String(255), nullable=False)

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

    user: Mapped["User"] = relationship(
        back_populates="profile",
    )
