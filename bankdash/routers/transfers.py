"""
Transfers router — send money to another user's linked bank.

Endpoints:
  POST /transfers — Transfer from one of your banks to a sharable ID
  GET  /transfers — Your recent transfers, sent and received

The source bank must belong to the signed-in user; the destination is any
linked bank, identified by the sharable ID its owner gave out.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bankdash.database import get_db
from bankdash.dependencies import get_current_user
from bankdash.exceptions import ActionFailedError
from bankdash.schemas.transaction import TransactionResponse, TransferRequest
from bankdash.schemas.user import UserResponse
from bankdash.services import transaction_service

router = APIRouter()


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Transfer money to another bank",
)
async def create_transfer(
    request: TransferRequest,
    user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    - **sender_bank_id**: One of your linked banks
    - **sharable_id**: The receiver's sharable ID
    - **amount_cents**: Positive integer in cents (e.g., $50.00 = 5000)
    - **name**: Note shown in both parties' transaction lists
    - **email**: Receiver's email address
    """
    transaction = await transaction_service.transfer_funds(
        db,
        user_id=user.user_id,
        sender_bank_id=request.sender_bank_id,
        sharable_id=request.sharable_id,
        amount_cents=request.amount_cents,
        name=request.name,
        email=request.email,
    )
    if transaction is None:
        raise ActionFailedError("Error creating transfer")
    return transaction


@router.get(
    "",
    response_model=list[TransactionResponse],
    summary="List recent transfers",
)
async def list_transfers(
    limit: int = Query(default=10, ge=1, le=100),
    user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    transactions = await transaction_service.get_transactions_by_user_id(
        db, user.user_id, limit=limit,
    )
    if transactions is None:
        raise ActionFailedError("Error loading transfers")
    return transactions
