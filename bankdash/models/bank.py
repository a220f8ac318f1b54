"""
Bank model — a bank account linked through Plaid.

Created at the end of the public-token exchange. Each row ties together:

  - bank_id: the Plaid item ID (one login at one institution)
  - account_id: the Plaid account ID of the linked account
  - access_token: the Plaid access token for the item (Fernet-encrypted)
  - funding_source_url: the Dwolla funding source created from the
    account's processor token; money moves to and from this URL
  - sharable_id: encrypt_id(account_id), given to other users so they can
    send money to this account

The access token is never serialized back out of the service layer.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, ForeignKey, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from bankdash.database import Base, UTCDateTime


class Bank(Base):
    __tablename__ = "banks"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # Plaid item ID
    bank_id: Mapped[str] = mapped_column(String(100), nullable=False)

    # Plaid account ID, looked up when resolving a sharable ID
    account_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    access_token_encrypted: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
    )

    funding_source_url: Mapped[str] = mapped_column(String(255), nullable=False)

    sharable_id: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
