"""
Transaction model — a record of money moved over Dwolla.

Every successful transfer creates one Transaction. The money itself moves
between Dwolla funding sources; this row is the application's record of
it, used for the dashboard's recent-transactions list.

Key fields:
  - sender_id / sender_bank_id: the user and Bank document debited
  - receiver_id / receiver_bank_id: the user and Bank document credited
  - amount_cents: always positive, integer cents
  - transfer_url: the Dwolla transfer resource returned by the API
  - channel / category: "online" / "Transfer" for every app-initiated move

Amounts are stored as integer cents so all arithmetic is exact; they are
formatted as decimal strings only when sent to Dwolla.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bankdash.database import Base, UTCDateTime


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_transactions_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Memo shown in the transactions list
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    channel: Mapped[str] = mapped_column(String(20), nullable=False, default="online")
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="Transfer")

    sender_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )
    sender_bank_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("banks.id"),
        nullable=False,
        index=True,
    )
    receiver_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )
    receiver_bank_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("banks.id"),
        nullable=False,
        index=True,
    )

    # Receiver's email, as entered on the transfer form
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    transfer_url: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
