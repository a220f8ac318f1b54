"""
Dashboard service — assembles the home page.

Guests get the greeting with "Guest" and an empty balance box. For a
signed-in user the balance box and sidebar come from Plaid (via
bank_service.get_accounts) and the transactions list from the recorded
transfers. If Plaid is unavailable the page still renders, with the
balance box empty, since get_accounts() logs and returns None.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from bankdash.schemas.dashboard import DashboardResponse, HeaderBox, RightSidebar, TotalBalanceBox
from bankdash.schemas.user import UserResponse
from bankdash.services import bank_service, transaction_service

GREETING_TITLE = "Welcome"
GREETING_SUBTEXT = "Access and manage your account and transaction efficiently."
RECENT_TRANSACTIONS_LIMIT = 10


async def build_dashboard(
    db: AsyncSession,
    logged_in: dict[str, Any] | None,
) -> DashboardResponse:
    user = UserResponse.model_validate(logged_in) if logged_in else None

    accounts: dict[str, Any] = {"data": [], "total_banks": 0, "total_current_balance": 0.0}
    transactions: list[dict[str, Any]] = []

    if user is not None:
        accounts = await bank_service.get_accounts(db, user.user_id) or accounts
        transactions = await transaction_service.get_transactions_by_user_id(
            db, user.user_id, limit=RECENT_TRANSACTIONS_LIMIT,
        ) or []

    return DashboardResponse(
        header=HeaderBox(
            type="greeting",
            title=GREETING_TITLE,
            user=user.name if user else "Guest",
            subtext=GREETING_SUBTEXT,
        ),
        total_balance=TotalBalanceBox(
            accounts=accounts["data"],
            total_banks=accounts["total_banks"],
            total_current_balance=accounts["total_current_balance"],
        ),
        transactions=transactions,
        sidebar=RightSidebar(
            user=user,
            banks=accounts["data"],
        ),
    )
