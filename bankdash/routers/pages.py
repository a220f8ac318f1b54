"""
Pages router — the server-rendered screens.

Endpoints:
  GET /           — Home dashboard (HTML)
  GET /dashboard  — The same dashboard data as JSON
  GET /sign-in    — Sign-in form (HTML)
  GET /sign-up    — Sign-up form (HTML)

The forms post JSON to the /auth endpoints from a small inline script and
go to the dashboard on success; the session cookie set by /auth is all the
dashboard needs. Every user-supplied string is HTML-escaped.
"""

from html import escape
from typing import Any, Literal

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from bankdash.config import settings
from bankdash.database import get_db
from bankdash.dependencies import get_optional_user
from bankdash.schemas.dashboard import DashboardResponse
from bankdash.services import dashboard_service
from bankdash.utils import format_amount

router = APIRouter()


SIGN_UP_FIELDS = [
    ("first_name", "First Name", "text"),
    ("last_name", "Last Name", "text"),
    ("address1", "Address", "text"),
    ("city", "City", "text"),
    ("state", "State (e.g. NY)", "text"),
    ("postal_code", "Postal Code", "text"),
    ("date_of_birth", "Date of Birth", "date"),
    ("ssn", "SSN", "text"),
]

SIGN_IN_FIELDS = [
    ("email", "Email", "email"),
    ("password", "Password", "password"),
]


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)} | {escape(settings.APP_NAME)}</title>
</head>
<body>
{body}
</body>
</html>"""


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


def render_auth_form(form_type: Literal["sign-in", "sign-up"]) -> str:
    fields = (SIGN_UP_FIELDS if form_type == "sign-up" else []) + SIGN_IN_FIELDS
    inputs = "\n".join(
        f'        <label>{escape(label)} <input name="{name}" type="{input_type}" required></label>'
        for name, label, input_type in fields
    )
    heading = "Sign Up" if form_type == "sign-up" else "Sign In"
    other_link = (
        '<a href="/sign-in">Already have an account? Sign in</a>'
        if form_type == "sign-up"
        else '<a href="/sign-up">Don\'t have an account? Sign up</a>'
    )

    body = f"""<section class="flex-center size-full max-sm:px-6">
    <form class="auth-form" id="auth-form" data-type="{form_type}">
        <h1>{heading}</h1>
        <p>Please enter your details</p>
{inputs}
        <button type="submit">{heading}</button>
        <p class="form-error" id="form-error"></p>
    </form>
    {other_link}
</section>
<script>
document.getElementById("auth-form").addEventListener("submit", async (event) => {{
    event.preventDefault();
    const data = Object.fromEntries(new FormData(event.target).entries());
    const response = await fetch("/auth/{form_type}", {{
        method: "POST",
        headers: {{"Content-Type": "application/json"}},
        body: JSON.stringify(data),
    }});
    if (response.ok) {{
        window.location.href = "/";
    }} else {{
        const error = await response.json();
        document.getElementById("form-error").textContent =
            typeof error.detail === "string" ? error.detail : "Please check the form";
    }}
}});
</script>"""
    return _page(heading, body)


def render_dashboard(dashboard: DashboardResponse) -> str:
    header = dashboard.header
    balance = dashboard.total_balance

    account_items = "\n".join(
        f"<li>{escape(account.name)}: {_money(account.current_balance or 0)}</li>"
        for account in balance.accounts
    )
    transaction_items = "\n".join(
        f"<li>{escape(txn.name)}: ${format_amount(txn.amount_cents)} "
        f"({txn.created_at:%Y-%m-%d})</li>"
        for txn in dashboard.transactions
    ) or "<li>No transactions yet</li>"

    sidebar_user = dashboard.sidebar.user
    sidebar = (
        f"<h2>{escape(sidebar_user.name)}</h2><p>{escape(sidebar_user.email)}</p>"
        if sidebar_user
        else '<p><a href="/sign-in">Sign in</a> to link a bank.</p>'
    )
    bank_items = "\n".join(
        f"<li>{escape(bank.name)} ****{escape(bank.mask or '')}: {_money(bank.current_balance or 0)}</li>"
        for bank in dashboard.sidebar.banks
    )

    body = f"""<section class="home">
    <div class="home-content">
        <header class="home-header">
            <div class="header-box">
                <h1>{escape(header.title)} <span class="text-bankGradient">{escape(header.user)}</span></h1>
                <p>{escape(header.subtext)}</p>
            </div>
            <div class="total-balance">
                <h2>Bank Accounts: {balance.total_banks}</h2>
                <p>Total Current Balance</p>
                <p class="total-balance-amount">{_money(balance.total_current_balance)}</p>
                <ul>{account_items}</ul>
            </div>
        </header>
        <h2>Recent transactions</h2>
        <ul class="recent-transactions">{transaction_items}</ul>
    </div>
    <aside class="right-sidebar">
        {sidebar}
        <h2>My Banks</h2>
        <ul>{bank_items}</ul>
    </aside>
</section>"""
    return _page("Home", body)


@router.get("/dashboard", response_model=DashboardResponse, tags=["Pages"])
async def dashboard(
    logged_in: dict[str, Any] | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard_service.build_dashboard(db, logged_in)


@router.get("/", response_class=HTMLResponse, tags=["Pages"])
async def home(
    logged_in: dict[str, Any] | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    data = await dashboard_service.build_dashboard(db, logged_in)
    return HTMLResponse(content=render_dashboard(data))


@router.get("/sign-in", response_class=HTMLResponse, tags=["Pages"])
async def sign_in_page():
    return HTMLResponse(content=render_auth_form("sign-in"))


@router.get("/sign-up", response_class=HTMLResponse, tags=["Pages"])
async def sign_up_page():
    return HTMLResponse(content=render_auth_form("sign-up"))
