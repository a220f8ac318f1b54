"""
Pydantic schemas for bank linking and linked-account views.

Plaid balances are reported in dollars as floats; they are passed through
as the vendor reports them. Amounts the application itself originates
(transfers) are integer cents; see schemas/transaction.py.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class LinkTokenResponse(BaseModel):
    """Response body for POST /banks/link-token."""
    link_token: str


class ExchangePublicTokenRequest(BaseModel):
    """Request body for POST /banks/exchange-public-token."""
    public_token: str = Field(min_length=1)


class ExchangePublicTokenResponse(BaseModel):
    public_token_exchange: str


class BankResponse(BaseModel):
    """A linked bank document. The Plaid access token is never exposed."""
    id: uuid.UUID
    user_id: uuid.UUID
    bank_id: str
    account_id: str
    funding_source_url: str
    sharable_id: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountResponse(BaseModel):
    """One Plaid account, as shown on the dashboard."""
    id: str                        # Plaid account ID
    bank_document_id: uuid.UUID    # Bank.id
    name: str
    official_name: str | None = None
    mask: str | None = None
    type: str
    subtype: str | None = None
    current_balance: float | None = None
    available_balance: float | None = None
    sharable_id: str


class AccountsResponse(BaseModel):
    """Response body for GET /banks/accounts."""
    data: list[AccountResponse]
    total_banks: int
    total_current_balance: float
