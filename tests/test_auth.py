"""
Tests for authentication endpoints (sign-up, sign-in, logout, me).

These tests verify:
  - Sign-up creates the account, a personal Dwolla customer, and the user
    document, and sets the session cookie
  - The response never contains the password or SSN
  - A Dwolla failure rolls the whole sign-up back
  - Duplicate emails are rejected before Dwolla is called
  - Sign-in returns the same error for unknown email and wrong password
  - Logout revokes the session server-side, not just in the browser
"""

from datetime import datetime, timedelta

from bankdash.clients.dwolla_client import DWOLLA_HOSTS
from bankdash.config import settings
from bankdash.utils import extract_customer_id_from_url

COOKIE = settings.SESSION_COOKIE_NAME
DWOLLA_BASE = DWOLLA_HOSTS["sandbox"]


# ---------------------------------------------------------------------------
# Sign-up Tests
# ---------------------------------------------------------------------------

class TestSignUp:
    """Tests for POST /auth/sign-up."""

    async def test_sign_up_success(self, client, sign_up_user):
        """A valid sign-up returns 201 with the user document."""
        response = await sign_up_user(client, email="newuser@example.com", first_name="Jane", last_name="Doe")
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "newuser@example.com"
        assert data["name"] == "Jane Doe"
        assert data["state"] == "NY"
        assert data["dwolla_customer_url"].startswith(f"{DWOLLA_BASE}/customers/")
        assert data["dwolla_customer_id"] == extract_customer_id_from_url(data["dwolla_customer_url"])

    async def test_sign_up_hides_secrets(self, client, sign_up_user):
        """Neither the password nor the SSN is echoed back."""
        response = await sign_up_user(client)
        data = response.json()
        assert "password" not in data
        assert "hashed_password" not in data
        assert "ssn" not in data
        assert "SecurePass123!" not in response.text

    async def test_sign_up_sets_session_cookie(self, client, sign_up_user):
        """The session cookie is HttpOnly, SameSite=strict and site-wide."""
        response = await sign_up_user(client)
        assert COOKIE in response.cookies
        set_cookie = response.headers["set-cookie"].lower()
        assert "httponly" in set_cookie
        assert "samesite=strict" in set_cookie
        assert "path=/" in set_cookie

    async def test_sign_up_creates_personal_dwolla_customer(self, client, sign_up_user, fake_dwolla):
        """The Dwolla customer is created from the form data with type=personal."""
        await sign_up_user(client, email="dwolla@example.com", first_name="Ada", last_name="Lovelace")

        customers = fake_dwolla.requests_for("customers")
        assert len(customers) == 1
        body = customers[0]["body"]
        assert body["type"] == "personal"
        assert body["firstName"] == "Ada"
        assert body["lastName"] == "Lovelace"
        assert body["email"] == "dwolla@example.com"
        assert body["postalCode"] == "10001"
        assert body["dateOfBirth"] == "1990-01-31"
        assert body["ssn"] == "1234"
        assert customers[0]["headers"]["authorization"] == "Bearer dwolla-access-token"

    async def test_sign_up_signs_user_in(self, authenticated_client):
        """After sign-up the cookie alone identifies the user."""
        response = await authenticated_client.get("/auth/me")
        assert response.status_code == 200
        assert response.json()["email"] == "testuser@example.com"

    async def test_created_at_is_stable_utc(self, client, sign_up_user):
        """The sign-up response and a later /auth/me agree on created_at, in UTC."""
        signed_up = (await sign_up_user(client)).json()
        me = (await client.get("/auth/me")).json()

        assert me["created_at"] == signed_up["created_at"]
        assert datetime.fromisoformat(me["created_at"].replace("Z", "+00:00")).utcoffset() == timedelta(0)

    async def test_sign_up_duplicate_email(self, client, sign_up_user, fake_dwolla):
        """A registered email is rejected without creating another Dwolla customer."""
        first = await sign_up_user(client, email="duplicate@example.com")
        assert first.status_code == 201

        second = await sign_up_user(client, email="duplicate@example.com")
        assert second.status_code == 400
        assert second.json()["error_type"] == "action_failed"
        assert len(fake_dwolla.requests_for("customers")) == 1

    async def test_sign_up_dwolla_failure_rolls_back(self, client, sign_up_user, fake_dwolla):
        """If Dwolla rejects the customer, no local account survives."""
        fake_dwolla.fail_on.add("customers")
        response = await sign_up_user(client, email="rollback@example.com")
        assert response.status_code == 400
        assert COOKIE not in response.cookies

        # The account was not kept, so signing in fails...
        sign_in = await client.post(
            "/auth/sign-in",
            json={"email": "rollback@example.com", "password": "SecurePass123!"},
        )
        assert sign_in.status_code == 401

        # ...and the email is still free once Dwolla recovers
        fake_dwolla.fail_on.clear()
        retry = await sign_up_user(client, email="rollback@example.com")
        assert retry.status_code == 201

    async def test_sign_up_short_password(self, client, sign_up_payload):
        payload = sign_up_payload(password="short")
        response = await client.post("/auth/sign-up", json=payload)
        assert response.status_code == 422

    async def test_sign_up_invalid_state(self, client, sign_up_payload):
        payload = sign_up_payload()
        payload["state"] = "New York"
        response = await client.post("/auth/sign-up", json=payload)
        assert response.status_code == 422

    async def test_sign_up_invalid_ssn(self, client, sign_up_payload):
        payload = sign_up_payload()
        payload["ssn"] = "12-34"
        response = await client.post("/auth/sign-up", json=payload)
        assert response.status_code == 422

    async def test_sign_up_missing_fields(self, client, fake_dwolla):
        """Validation happens before any vendor call."""
        response = await client.post(
            "/auth/sign-up",
            json={"email": "missing@example.com", "password": "SecurePass123!"},
        )
        assert response.status_code == 422
        assert fake_dwolla.requests == []


# ---------------------------------------------------------------------------
# Sign-in Tests
# ---------------------------------------------------------------------------

class TestSignIn:
    """Tests for POST /auth/sign-in."""

    async def test_sign_in_success(self, authenticated_client):
        await authenticated_client.post("/auth/logout")

        response = await authenticated_client.post(
            "/auth/sign-in",
            json={"email": "testuser@example.com", "password": "SecurePass123!"},
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Test User"
        assert COOKIE in response.cookies

        me = await authenticated_client.get("/auth/me")
        assert me.status_code == 200

    async def test_sign_in_wrong_password(self, authenticated_client):
        response = await authenticated_client.post(
            "/auth/sign-in",
            json={"email": "testuser@example.com", "password": "WrongPassword!"},
        )
        assert response.status_code == 401
        assert response.json()["error_type"] == "invalid_credentials"

    async def test_sign_in_unknown_email_same_error(self, authenticated_client):
        """Unknown email and wrong password are indistinguishable."""
        wrong_password = await authenticated_client.post(
            "/auth/sign-in",
            json={"email": "testuser@example.com", "password": "WrongPassword!"},
        )
        unknown_email = await authenticated_client.post(
            "/auth/sign-in",
            json={"email": "nobody@example.com", "password": "WrongPassword!"},
        )
        assert unknown_email.status_code == wrong_password.status_code == 401
        assert unknown_email.json() == wrong_password.json()


# ---------------------------------------------------------------------------
# Session Tests
# ---------------------------------------------------------------------------

class TestSession:
    """Tests for GET /auth/me and POST /auth/logout."""

    async def test_me_requires_session(self, client):
        response = await client.get("/auth/me")
        assert response.status_code == 401
        assert response.json()["error_type"] == "not_authenticated"

    async def test_me_rejects_tampered_cookie(self, client):
        response = await client.get("/auth/me", headers={"Cookie": f"{COOKIE}=not-a-jwt"})
        assert response.status_code == 401

    async def test_logout_clears_cookie(self, authenticated_client):
        response = await authenticated_client.post("/auth/logout")
        assert response.status_code == 204
        assert COOKIE in response.headers["set-cookie"]

        me = await authenticated_client.get("/auth/me")
        assert me.status_code == 401

    async def test_logout_revokes_session(self, authenticated_client):
        """A copied cookie stops working once its session is logged out."""
        secret = authenticated_client.cookies.get(COOKIE)
        assert secret

        await authenticated_client.post("/auth/logout")

        response = await authenticated_client.get(
            "/auth/me", headers={"Cookie": f"{COOKIE}={secret}"},
        )
        assert response.status_code == 401

    async def test_logout_without_session(self, client):
        """Logging out with no session still succeeds and clears the cookie."""
        response = await client.post("/auth/logout")
        assert response.status_code == 204
