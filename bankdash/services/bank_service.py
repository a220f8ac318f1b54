"""
Bank service — reads over linked banks and their Plaid accounts.

Bank documents are returned serialized (see schemas.bank.BankResponse),
which leaves out the encrypted Plaid access token. Account views combine
a Bank document with the live account data Plaid reports for it.

All functions follow the action contract: log, return None on failure.
"""

import logging
import uuid
from typing import Any

from fastapi.concurrency import run_in_threadpool
from plaid.model.accounts_get_request import AccountsGetRequest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bankdash.clients import plaid_client
from bankdash.exceptions import BankNotFoundError, VendorError
from bankdash.models.bank import Bank
from bankdash.schemas.bank import AccountResponse, AccountsResponse, BankResponse
from bankdash.security import decrypt_value
from bankdash.services import transaction_service
from bankdash.utils import parse_stringify

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    """Unwrap Plaid SDK enum-like values (AccountType, ...) to their raw value."""
    return getattr(value, "value", value)


async def get_banks(db: AsyncSession, user_id: uuid.UUID) -> list[dict[str, Any]] | None:
    """All banks linked by a user, oldest first."""
    try:
        result = await db.execute(
            select(Bank).where(Bank.user_id == user_id).order_by(Bank.created_at)
        )
        return [parse_stringify(BankResponse.model_validate(bank)) for bank in result.scalars()]
    except Exception:
        logger.exception("Listing banks failed", extra={"user_id": user_id})
        return None


async def get_bank(db: AsyncSession, document_id: uuid.UUID) -> dict[str, Any] | None:
    """A bank document by its ID."""
    try:
        bank = await db.get(Bank, document_id)
        if bank is None:
            raise BankNotFoundError(str(document_id))
        return parse_stringify(BankResponse.model_validate(bank))
    except Exception:
        logger.exception("Loading bank failed", extra={"bank_id": document_id})
        return None


async def get_bank_by_account_id(db: AsyncSession, account_id: str) -> dict[str, Any] | None:
    """A bank document by its Plaid account ID."""
    try:
        result = await db.execute(select(Bank).where(Bank.account_id == account_id))
        bank = result.scalars().first()
        if bank is None:
            raise BankNotFoundError(account_id)
        return parse_stringify(BankResponse.model_validate(bank))
    except Exception:
        logger.exception("Loading bank by account ID failed")
        return None


async def _fetch_account(bank: Bank) -> AccountResponse:
    client = plaid_client.get_plaid_client()
    response = await run_in_threadpool(
        client.accounts_get,
        AccountsGetRequest(access_token=decrypt_value(bank.access_token_encrypted)),
    )

    accounts = list(response["accounts"])
    account = next(
        (item for item in accounts if item["account_id"] == bank.account_id),
        None,
    )
    if account is None:
        raise VendorError(f"Plaid no longer reports account for bank {bank.id}")

    balances = account["balances"]
    return AccountResponse(
        id=account["account_id"],
        bank_document_id=bank.id,
        name=account["name"],
        official_name=account.get("official_name"),
        mask=account.get("mask"),
        type=str(_plain(account["type"])),
        subtype=_plain(account.get("subtype")),
        current_balance=balances.get("current"),
        available_balance=balances.get("available"),
        sharable_id=bank.sharable_id,
    )


async def get_accounts(db: AsyncSession, user_id: uuid.UUID) -> dict[str, Any] | None:
    """
    Live Plaid account data for every bank a user has linked.

    Returns:
        {"data": [...], "total_banks": n, "total_current_balance": x}
        or None on failure.
    """
    try:
        result = await db.execute(
            select(Bank).where(Bank.user_id == user_id).order_by(Bank.created_at)
        )
        banks = list(result.scalars())

        accounts = [await _fetch_account(bank) for bank in banks]
        total_current_balance = sum(account.current_balance or 0 for account in accounts)

        return parse_stringify(
            AccountsResponse(
                data=accounts,
                total_banks=len(accounts),
                total_current_balance=total_current_balance,
            )
        )
    except Exception:
        logger.exception("Loading accounts failed", extra={"user_id": user_id})
        return None


async def get_account(
    db: AsyncSession,
    document_id: uuid.UUID,
    user_id: uuid.UUID,
) -> dict[str, Any] | None:
    """
    One linked account with the transfers recorded against it.

    Returns:
        {"data": account, "transactions": [...]} or None on failure
        (including when the bank belongs to another user).
    """
    try:
        bank = await db.get(Bank, document_id)
        if bank is None or bank.user_id != user_id:
            raise BankNotFoundError(str(document_id))

        account = await _fetch_account(bank)
        transactions = await transaction_service.get_transactions_by_bank_id(db, bank.id)
        if transactions is None:
            raise RuntimeError(f"Loading transactions for bank {bank.id} failed")

        return {
            "data": parse_stringify(account),
            "transactions": transactions,
        }
    except Exception:
        logger.exception("Loading account failed", extra={"bank_id": document_id})
        return None
