"""
Test fixtures for the Bankdash test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - fake_plaid: In-process stand-in for the Plaid SDK client (autouse)
  - fake_dwolla: httpx.MockTransport-backed Dwolla API (autouse)
  - client: Async HTTP test client (no session)
  - sign_up_user: Factory that onboards a user through POST /auth/sign-up
  - authenticated_client: Client holding a signed-up user's session cookie
  - linked_client: authenticated_client with one bank linked

Key design decisions:
  - Settings are read at import time, so the required environment is set
    at the top of this module before anything from bankdash is imported.
  - Vendors are replaced at their factory functions
    (get_plaid_client / get_dwolla_client). For Dwolla the real
    DwollaClient runs against a mock transport, so request bodies, auth
    headers and Location parsing are all exercised.
  - The session cookie is marked non-Secure for tests because the test
    client talks plain http://.
"""

import json
import os
import uuid

from cryptography.fernet import Fernet

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ.setdefault("PLAID_CLIENT_ID", "test-plaid-client")
os.environ.setdefault("PLAID_SECRET", "test-plaid-secret")
os.environ.setdefault("DWOLLA_KEY", "test-dwolla-key")
os.environ.setdefault("DWOLLA_SECRET", "test-dwolla-secret")
os.environ["SESSION_COOKIE_SECURE"] = "false"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from plaid.exceptions import ApiException  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402
from unittest.mock import patch  # noqa: E402

from bankdash.clients.dwolla_client import DWOLLA_HOSTS, DwollaClient  # noqa: E402
from bankdash.database import Base, get_db  # noqa: E402
from bankdash.main import app  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite://"
DWOLLA_BASE = DWOLLA_HOSTS["sandbox"]


# ---------------------------------------------------------------------------
# Vendor fakes
# ---------------------------------------------------------------------------

class FakePlaid:
    """
    Minimal in-memory Plaid API.

    Register an item with add_item(); Plaid Link would normally hand the
    browser its public token. Calls are recorded in `calls` as
    (method name, request) tuples.
    """

    def __init__(self):
        self.calls = []
        self._by_public_token = {}
        self._by_access_token = {}
        self.fail_on = set()

    def add_item(
        self,
        public_token: str,
        account_id: str,
        name: str = "Plaid Checking",
        current: float | None = 110.0,
        available: float | None = 100.0,
        mask: str = "0000",
    ) -> dict:
        item = {
            "access_token": f"access-sandbox-{uuid.uuid4()}",
            "item_id": f"item-{uuid.uuid4()}",
            "accounts": [
                {
                    "account_id": account_id,
                    "name": name,
                    "official_name": f"{name} Official",
                    "mask": mask,
                    "type": "depository",
                    "subtype": "checking",
                    "balances": {"current": current, "available": available},
                }
            ],
        }
        self._by_public_token[public_token] = item
        self._by_access_token[item["access_token"]] = item
        return item

    def _record(self, method: str, request) -> None:
        self.calls.append((method, request))
        if method in self.fail_on:
            raise ApiException(status=400, reason=f"{method} failed")

    def link_token_create(self, request):
        self._record("link_token_create", request)
        return {"link_token": "link-sandbox-token", "request_id": "req-1"}

    def item_public_token_exchange(self, request):
        self._record("item_public_token_exchange", request)
        item = self._by_public_token.get(request.public_token)
        if item is None:
            raise ApiException(status=400, reason="INVALID_PUBLIC_TOKEN")
        return {"access_token": item["access_token"], "item_id": item["item_id"]}

    def accounts_get(self, request):
        self._record("accounts_get", request)
        item = self._by_access_token.get(request.access_token)
        if item is None:
            raise ApiException(status=400, reason="INVALID_ACCESS_TOKEN")
        return {"accounts": item["accounts"]}

    def processor_token_create(self, request):
        self._record("processor_token_create", request)
        return {"processor_token": f"processor-sandbox-{request.account_id}"}

    def methods_called(self) -> list[str]:
        return [method for method, _ in self.calls]


class FakeDwolla:
    """
    Dwolla API behind httpx.MockTransport.

    Requests are recorded as dicts with method, path, headers and the
    decoded JSON body. Add a resource name ("token", "customers",
    "on-demand-authorizations", "funding-sources", "transfers") to
    `fail_on` to make Dwolla reject it with a 400.
    """

    def __init__(self):
        self.requests = []
        self.fail_on = set()

    @staticmethod
    def _resource(path: str) -> str:
        if path.endswith("/funding-sources"):
            return "funding-sources"
        return path.strip("/").split("/")[0]

    def requests_for(self, resource: str) -> list[dict]:
        return [req for req in self.requests if self._resource(req["path"]) == resource]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        resource = self._resource(path)
        body = None
        if resource != "token" and request.content:
            body = json.loads(request.content)
        self.requests.append({
            "method": request.method,
            "path": path,
            "headers": request.headers,
            "body": body,
        })

        if resource in self.fail_on:
            return httpx.Response(
                400,
                json={"code": "ValidationError", "message": "Validation error(s) present."},
            )

        if resource == "token":
            return httpx.Response(
                200,
                json={"access_token": "dwolla-access-token", "token_type": "bearer", "expires_in": 3600},
            )
        if resource == "customers":
            return httpx.Response(
                201, headers={"Location": f"{DWOLLA_BASE}/customers/{uuid.uuid4()}"},
            )
        if resource == "on-demand-authorizations":
            href = f"{DWOLLA_BASE}/on-demand-authorizations/{uuid.uuid4()}"
            return httpx.Response(
                200,
                json={
                    "_links": {"self": {"href": href}},
                    "bodyText": "I agree that future payments ...",
                    "buttonText": "Agree & Continue",
                },
            )
        if resource == "funding-sources":
            return httpx.Response(
                201, headers={"Location": f"{DWOLLA_BASE}/funding-sources/{uuid.uuid4()}"},
            )
        if resource == "transfers":
            return httpx.Response(
                201, headers={"Location": f"{DWOLLA_BASE}/transfers/{uuid.uuid4()}"},
            )
        return httpx.Response(404, json={"code": "NotFound"})


@pytest.fixture(autouse=True)
def fake_plaid():
    fake = FakePlaid()
    with patch("bankdash.clients.plaid_client.get_plaid_client", return_value=fake):
        yield fake


@pytest.fixture(autouse=True)
def fake_dwolla():
    fake = FakeDwolla()
    dwolla = DwollaClient(
        key="test-dwolla-key",
        secret="test-dwolla-secret",
        environment="sandbox",
        transport=httpx.MockTransport(fake.handler),
    )
    with patch("bankdash.clients.dwolla_client.get_dwolla_client", return_value=dwolla):
        yield fake


# ---------------------------------------------------------------------------
# Database and HTTP client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine):
    """Async HTTP test client with the test database injected."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


def sign_up_data(
    email: str = "testuser@example.com",
    password: str = "SecurePass123!",
    first_name: str = "Test",
    last_name: str = "User",
) -> dict:
    return {
        "email": email,
        "password": password,
        "first_name": first_name,
        "last_name": last_name,
        "address1": "1234 Main St",
        "city": "New York",
        "state": "NY",
        "postal_code": "10001",
        "date_of_birth": "1990-01-31",
        "ssn": "1234",
    }


@pytest.fixture
def sign_up_payload():
    """Factory for a valid sign-up body; keyword arguments override fields."""
    return sign_up_data


@pytest.fixture
def sign_up_user():
    """Factory: sign up through the real endpoint and return the response."""

    async def _sign_up(client: AsyncClient, **overrides) -> httpx.Response:
        return await client.post("/auth/sign-up", json=sign_up_data(**overrides))

    return _sign_up


@pytest_asyncio.fixture
async def authenticated_client(client, sign_up_user):
    """Test client holding the session cookie of a freshly signed-up user."""
    response = await sign_up_user(client)
    assert response.status_code == 201, f"Sign-up failed: {response.text}"
    return client


@pytest.fixture
def link_bank(fake_plaid):
    """Factory: link a Plaid account for whoever `client` is signed in as."""

    async def _link(
        client: AsyncClient,
        account_id: str,
        name: str = "Plaid Checking",
        current: float | None = 110.0,
    ) -> httpx.Response:
        public_token = f"public-sandbox-{account_id}"
        fake_plaid.add_item(public_token, account_id, name=name, current=current)
        return await client.post(
            "/banks/exchange-public-token",
            json={"public_token": public_token},
        )

    return _link


@pytest_asyncio.fixture
async def linked_client(authenticated_client, link_bank):
    """authenticated_client with one linked bank (account "acc-checking")."""
    response = await link_bank(authenticated_client, "acc-checking")
    assert response.status_code == 201, f"Linking failed: {response.text}"
    return authenticated_client
