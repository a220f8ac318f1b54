"""
Tests for the server-rendered pages and the dashboard JSON.

These tests verify:
  - Guests see the greeting with "Guest" and an empty balance box
  - Signed-in users see their name, linked banks, totals and transfers
  - The dashboard still renders when Plaid is unavailable
  - The auth forms render in sign-in and sign-up mode
  - User-supplied text is HTML-escaped
"""


class TestDashboard:
    """Tests for GET /dashboard and GET /."""

    async def test_guest_dashboard(self, client):
        response = await client.get("/dashboard")
        assert response.status_code == 200
        data = response.json()
        assert data["header"] == {
            "type": "greeting",
            "title": "Welcome",
            "user": "Guest",
            "subtext": "Access and manage your account and transaction efficiently.",
        }
        assert data["total_balance"]["total_banks"] == 0
        assert data["total_balance"]["total_current_balance"] == 0.0
        assert data["transactions"] == []
        assert data["sidebar"] == {"user": None, "banks": []}

    async def test_signed_in_dashboard(self, linked_client):
        response = await linked_client.get("/dashboard")
        assert response.status_code == 200
        data = response.json()
        assert data["header"]["user"] == "Test User"
        assert data["total_balance"]["total_banks"] == 1
        assert data["total_balance"]["total_current_balance"] == 110.0
        assert data["sidebar"]["user"]["email"] == "testuser@example.com"
        assert [bank["id"] for bank in data["sidebar"]["banks"]] == ["acc-checking"]

    async def test_dashboard_survives_plaid_outage(self, linked_client, fake_plaid):
        fake_plaid.fail_on.add("accounts_get")
        response = await linked_client.get("/dashboard")
        assert response.status_code == 200
        data = response.json()
        assert data["header"]["user"] == "Test User"
        assert data["total_balance"]["total_banks"] == 0

    async def test_home_page_guest(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Welcome" in response.text
        assert "Guest" in response.text
        assert "$0.00" in response.text
        assert 'href="/sign-in"' in response.text

    async def test_home_page_signed_in(self, linked_client):
        response = await linked_client.get("/")
        assert response.status_code == 200
        assert "Test User" in response.text
        assert "Plaid Checking" in response.text
        assert "$110.00" in response.text

    async def test_home_page_escapes_names(self, client, sign_up_user):
        await sign_up_user(client, first_name="<b>Eve</b>", last_name="Example")
        response = await client.get("/")
        assert "<b>Eve</b>" not in response.text
        assert "&lt;b&gt;Eve&lt;/b&gt;" in response.text


class TestAuthPages:
    """Tests for GET /sign-in and GET /sign-up."""

    async def test_sign_in_page(self, client):
        response = await client.get("/sign-in")
        assert response.status_code == 200
        assert 'data-type="sign-in"' in response.text
        assert 'name="email"' in response.text
        assert 'name="password"' in response.text
        assert 'name="ssn"' not in response.text
        assert '"/auth/sign-in"' in response.text

    async def test_sign_up_page(self, client):
        response = await client.get("/sign-up")
        assert response.status_code == 200
        assert 'data-type="sign-up"' in response.text
        for field in ("first_name", "last_name", "address1", "city", "state",
                      "postal_code", "date_of_birth", "ssn", "email", "password"):
            assert f'name="{field}"' in response.text
        assert '"/auth/sign-up"' in response.text


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
