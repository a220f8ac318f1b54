"""
Pydantic schemas for transfers.

All monetary amounts are integer cents.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class TransferRequest(BaseModel):
    """
    Request body for POST /transfers.

    The receiver is identified only by the sharable ID they gave the
    sender; the sender bank must be one of the caller's own banks.
    """
    sender_bank_id: uuid.UUID
    sharable_id: str = Field(min_length=1)
    amount_cents: int = Field(gt=0, description="Positive amount in cents")
    name: str = Field(min_length=1, max_length=255, description="Transfer note")
    email: EmailStr = Field(description="Receiver's email address")


class TransactionResponse(BaseModel):
    """Public representation of a recorded transfer."""
    id: uuid.UUID
    name: str
    amount_cents: int
    channel: str
    category: str
    sender_id: uuid.UUID
    sender_bank_id: uuid.UUID
    receiver_id: uuid.UUID
    receiver_bank_id: uuid.UUID
    email: str
    transfer_url: str
    created_at: datetime

    model_config = {"from_attributes": True}
