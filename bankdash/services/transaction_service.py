"""
Transaction service — moving money between linked banks.

A transfer goes:

  sender's Bank (funding source)  --Dwolla-->  receiver's Bank (funding source)

The receiver is identified by the sharable ID they handed out, which
decodes to a Plaid account ID and from there to a Bank document. The
sender bank must belong to the signed-in user.

Money only moves on Dwolla; once Dwolla accepts the transfer, a
Transaction row records it for both parties' transaction lists. If the
record can't be written after Dwolla accepted the transfer, the failure
is logged with the transfer URL so it can be reconciled by hand.

All functions follow the action contract: log, return None on failure.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bankdash.exceptions import BankNotFoundError, UnauthorizedAccessError, VendorError
from bankdash.models.bank import Bank
from bankdash.models.transaction import Transaction
from bankdash.schemas.transaction import TransactionResponse
from bankdash.services.dwolla_service import create_transfer
from bankdash.utils import decrypt_id, parse_stringify

logger = logging.getLogger(__name__)


async def create_transaction(
    db: AsyncSession,
    name: str,
    amount_cents: int,
    sender_id: uuid.UUID,
    sender_bank_id: uuid.UUID,
    receiver_id: uuid.UUID,
    receiver_bank_id: uuid.UUID,
    email: str,
    transfer_url: str,
) -> dict[str, Any] | None:
    """Record a completed transfer. Returns it serialized, or None."""
    try:
        transaction = Transaction(
            name=name,
            amount_cents=amount_cents,
            channel="online",
            category="Transfer",
            sender_id=sender_id,
            sender_bank_id=sender_bank_id,
            receiver_id=receiver_id,
            receiver_bank_id=receiver_bank_id,
            email=email,
            transfer_url=transfer_url,
        )
        db.add(transaction)
        await db.flush()

        return parse_stringify(TransactionResponse.model_validate(transaction))
    except Exception:
        logger.exception(
            "Recording transaction failed for transfer %s", transfer_url,
            extra={"user_id": sender_id},
        )
        await db.rollback()
        return None


async def get_transactions_by_bank_id(
    db: AsyncSession,
    bank_id: uuid.UUID,
) -> list[dict[str, Any]] | None:
    """Transfers where the bank was sender or receiver, newest first."""
    try:
        result = await db.execute(
            select(Transaction)
            .where(
                or_(
                    Transaction.sender_bank_id == bank_id,
                    Transaction.receiver_bank_id == bank_id,
                )
            )
            .order_by(Transaction.created_at.desc())
        )
        return [
            parse_stringify(TransactionResponse.model_validate(txn))
            for txn in result.scalars()
        ]
    except Exception:
        logger.exception("Listing transactions failed", extra={"bank_id": bank_id})
        return None


async def get_transactions_by_user_id(
    db: AsyncSession,
    user_id: uuid.UUID,
    limit: int = 10,
) -> list[dict[str, Any]] | None:
    """A user's most recent transfers, sent or received."""
    try:
        result = await db.execute(
            select(Transaction)
            .where(
                or_(
                    Transaction.sender_id == user_id,
                    Transaction.receiver_id == user_id,
                )
            )
            .order_by(Transaction.created_at.desc())
            .limit(limit)
        )
        return [
            parse_stringify(TransactionResponse.model_validate(txn))
            for txn in result.scalars()
        ]
    except Exception:
        logger.exception("Listing recent transactions failed", extra={"user_id": user_id})
        return None


async def transfer_funds(
    db: AsyncSession,
    user_id: uuid.UUID,
    sender_bank_id: uuid.UUID,
    sharable_id: str,
    amount_cents: int,
    name: str,
    email: str,
) -> dict[str, Any] | None:
    """
    Send money from one of the user's banks to the bank behind a sharable ID.

    Returns:
        The recorded transaction, serialized, or None on failure.
    """
    try:
        sender_bank = await db.get(Bank, sender_bank_id)
        if sender_bank is None:
            raise BankNotFoundError(str(sender_bank_id))
        if sender_bank.user_id != user_id:
            raise UnauthorizedAccessError("You do not have access to this bank")

        receiver_account_id = decrypt_id(sharable_id)
        result = await db.execute(select(Bank).where(Bank.account_id == receiver_account_id))
        receiver_bank = result.scalars().first()
        if receiver_bank is None:
            raise BankNotFoundError(receiver_account_id)
        if receiver_bank.id == sender_bank.id:
            raise ValueError("Cannot transfer to the same bank account")

        transfer_url = await create_transfer(
            source_funding_source_url=sender_bank.funding_source_url,
            destination_funding_source_url=receiver_bank.funding_source_url,
            amount_cents=amount_cents,
        )
        if not transfer_url:
            raise VendorError("Error creating Dwolla transfer")

        transaction = await create_transaction(
            db,
            name=name,
            amount_cents=amount_cents,
            sender_id=sender_bank.user_id,
            sender_bank_id=sender_bank.id,
            receiver_id=receiver_bank.user_id,
            receiver_bank_id=receiver_bank.id,
            email=email,
            transfer_url=transfer_url,
        )
        if transaction is None:
            raise VendorError(f"Transfer {transfer_url} was sent but not recorded")

        logger.info("Transfer created", extra={"user_id": user_id, "bank_id": sender_bank.id})
        return transaction
    except Exception:
        logger.exception("Transfer failed", extra={"user_id": user_id})
        await db.rollback()
        return None
