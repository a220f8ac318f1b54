"""
Banks router — Plaid Link and linked bank accounts.

Endpoints:
  POST /banks/link-token             — Create a Plaid Link token
  POST /banks/exchange-public-token  — Finish Plaid Link and link the account
  GET  /banks                        — The user's linked bank documents
  GET  /banks/accounts               — Live account data for all linked banks
  GET  /banks/{bank_id}              — One linked account with its transfers

Linking a bank is a two-step browser flow: the frontend opens Plaid Link
with the token from /banks/link-token, and Plaid Link hands back a public
token that the frontend posts to /banks/exchange-public-token.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bankdash.database import get_db
from bankdash.dependencies import get_current_user
from bankdash.exceptions import ActionFailedError
from bankdash.schemas.bank import (
    AccountsResponse,
    BankResponse,
    ExchangePublicTokenRequest,
    ExchangePublicTokenResponse,
    LinkTokenResponse,
)
from bankdash.schemas.user import UserResponse
from bankdash.services import bank_service, user_service

router = APIRouter()


@router.post(
    "/link-token",
    response_model=LinkTokenResponse,
    summary="Create a Plaid Link token",
)
async def create_link_token(user: UserResponse = Depends(get_current_user)):
    result = await user_service.create_link_token(user)
    if result is None:
        raise ActionFailedError("Error creating link token")
    return result


@router.post(
    "/exchange-public-token",
    response_model=ExchangePublicTokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Link a bank account from a Plaid public token",
)
async def exchange_public_token(
    request: ExchangePublicTokenRequest,
    user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Exchange the Plaid Link public token, create a Dwolla funding source
    for the first account on the item, and store the bank.
    """
    result = await user_service.exchange_public_token(db, request.public_token, user)
    if result is None:
        raise ActionFailedError("Error exchanging public token")
    return result


@router.get(
    "",
    response_model=list[BankResponse],
    summary="List linked banks",
)
async def list_banks(
    user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    banks = await bank_service.get_banks(db, user.user_id)
    if banks is None:
        raise ActionFailedError("Error loading banks")
    return banks


@router.get(
    "/accounts",
    response_model=AccountsResponse,
    summary="Live balances for all linked banks",
)
async def list_accounts(
    user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    accounts = await bank_service.get_accounts(db, user.user_id)
    if accounts is None:
        raise ActionFailedError("Error loading accounts")
    return accounts


@router.get(
    "/{bank_id}",
    summary="One linked account with its transfers",
)
async def get_account(
    bank_id: uuid.UUID,
    user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    account = await bank_service.get_account(db, bank_id, user.user_id)
    if account is None:
        raise ActionFailedError("Error loading account")
    return account
