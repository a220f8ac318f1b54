"""
Pydantic schemas for the home dashboard.

The dashboard is assembled from three pieces: a greeting header, a total
balance box summarizing linked accounts, and a right sidebar with the
user and their banks. The same model backs both GET /dashboard (JSON)
and the rendered home page.
"""

from typing import Literal

from pydantic import BaseModel

from bankdash.schemas.bank import AccountResponse
from bankdash.schemas.transaction import TransactionResponse
from bankdash.schemas.user import UserResponse


class HeaderBox(BaseModel):
    type: Literal["greeting", "title"] = "greeting"
    title: str
    user: str
    subtext: str


class TotalBalanceBox(BaseModel):
    accounts: list[AccountResponse]
    total_banks: int
    total_current_balance: float


class RightSidebar(BaseModel):
    user: UserResponse | None
    banks: list[AccountResponse]


class DashboardResponse(BaseModel):
    header: HeaderBox
    total_balance: TotalBalanceBox
    transactions: list[TransactionResponse]
    sidebar: RightSidebar
