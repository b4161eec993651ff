"""Tests for the HTTP API, including the register-to-delete scenario."""

import pytest
from datetime import date, timedelta


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def expense_body(**overrides):
    body = {
        "title": "Coffee",
        "amount": 4.5,
        "category": "Food",
        "date": date.today().isoformat(),
    }
    body.update(overrides)
    return body


@pytest.fixture
def token(register):
    return register()


@pytest.fixture
def create(client, token):
    """Create an expense for the default user and return its JSON."""

    def _create(**overrides):
        response = client.post("/api/expenses", json=expense_body(**overrides), headers=bearer(token))
        assert response.status_code == 201, response.get_json()
        return response.get_json()["data"]

    return _create


class TestSystemRoutes:
    """Tests for unauthenticated routes and the error envelope."""

    def test_health(self, client):
        """Health check reports that the API is running."""
        response = client.get("/api/health")
        body = response.get_json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["message"] == "Expense Tracker API is running!"
        assert "timestamp" in body

    def test_categories(self, client):
        """The category list needs no token."""
        body = client.get("/api/categories").get_json()
        assert body["data"][0] == "Food"
        assert len(body["data"]) == 8

    def test_unknown_route(self, client):
        """Unmatched routes get the not-found envelope."""
        response = client.get("/api/nowhere")
        assert response.status_code == 404
        assert response.get_json() == {"success": False, "message": "Route not found: /api/nowhere"}

    def test_wrong_method(self, client):
        """Unsupported methods get 405 in the same envelope."""
        response = client.patch("/api/health")
        assert response.status_code == 405
        assert response.get_json()["success"] is False

    def test_cors_header(self, client):
        """Configured origins are allowed."""
        response = client.get("/api/health", headers={"Origin": "http://localhost:8501"})
        assert response.headers.get("Access-Control-Allow-Origin") == "http://localhost:8501"

    def test_unexpected_error_is_generic(self, client, token, components, monkeypatch):
        """Unexpected failures become a 500 without internal detail."""

        def explode(*args, **kwargs):
            raise RuntimeError("database on fire")

        monkeypatch.setattr(components.expenses, "summarize", explode)
        response = client.get("/api/expenses/statistics/summary", headers=bearer(token))
        body = response.get_json()

        assert response.status_code == 500
        assert body == {"success": False, "message": "Server error"}

    def test_unexpected_error_detail_in_debug_mode(self, client, token, components, monkeypatch):
        """Debug mode attaches the exception text."""

        def explode(*args, **kwargs):
            raise RuntimeError("database on fire")

        monkeypatch.setattr(components.expenses, "summarize", explode)
        monkeypatch.setattr(components.settings.app, "debug_mode", True)
        response = client.get("/api/expenses/statistics/summary", headers=bearer(token))
        assert response.get_json()["error"] == "database on fire"


class TestUserRoutes:
    """Tests for register, login and profile."""

    def test_register(self, client):
        """Registration returns the public user and a token."""
        response = client.post("/api/users/register", json={
            "username": "alice",
            "email": "Alice@Example.com",
            "password": "secret123",
        })
        body = response.get_json()

        assert response.status_code == 201
        assert body["message"] == "User registered successfully"
        assert body["data"]["email"] == "alice@example.com"
        assert body["data"]["token"]
        assert "password" not in body["data"]
        assert "passwordHash" not in body["data"]

    def test_register_conflict(self, client, register):
        """A taken email or username is a 400 conflict."""
        register()
        response = client.post("/api/users/register", json={
            "username": "alice",
            "email": "someone@example.com",
            "password": "secret123",
        })
        assert response.status_code == 400
        assert response.get_json()["message"] == "User already exists with this email or username"

    def test_register_validation(self, client):
        """Field problems are listed in errors."""
        response = client.post("/api/users/register", json={"username": "al"})
        body = response.get_json()
        assert response.status_code == 400
        assert body["success"] is False
        assert body["errors"]

    def test_malformed_json(self, client):
        """A body that is not JSON is a validation failure."""
        response = client.post(
            "/api/users/register",
            data="{not json",
            content_type="application/json",
        )
        assert response.status_code == 400
        assert response.get_json()["errors"] == ["Request body must be a JSON object"]

    def test_login(self, client, register):
        """Correct credentials log in."""
        register()
        response = client.post("/api/users/login", json={
            "email": "alice@example.com",
            "password": "secret123",
        })
        assert response.status_code == 200
        assert response.get_json()["message"] == "Login successful"
        assert response.get_json()["data"]["token"]

    def test_login_failures_are_indistinguishable(self, client, register):
        """Wrong password and unknown email give the same 401."""
        register()
        wrong_password = client.post("/api/users/login", json={
            "email": "alice@example.com",
            "password": "nope-nope",
        })
        unknown_email = client.post("/api/users/login", json={
            "email": "ghost@example.com",
            "password": "secret123",
        })
        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.get_json() == unknown_email.get_json()

    def test_profile(self, client, token):
        """Profile returns the user without the password."""
        body = client.get("/api/users/profile", headers=bearer(token)).get_json()
        assert body["data"]["username"] == "alice"
        assert set(body["data"]) == {"id", "username", "email", "createdAt"}

    def test_profile_requires_token(self, client):
        """No token is a 401."""
        assert client.get("/api/users/profile").status_code == 401

    def test_invalid_token(self, client):
        """A garbage token is a 401."""
        response = client.get("/api/expenses", headers=bearer("garbage"))
        assert response.status_code == 401
        assert response.get_json()["success"] is False

    def test_non_bearer_scheme(self, client, token):
        """Only the Bearer scheme is accepted."""
        response = client.get("/api/expenses", headers={"Authorization": f"Basic {token}"})
        assert response.status_code == 401


class TestExpenseRoutes:
    """Tests for the expense endpoints."""

    def test_create(self, client, token):
        """Creating returns the stored expense."""
        response = client.post("/api/expenses", json=expense_body(), headers=bearer(token))
        body = response.get_json()

        assert response.status_code == 201
        assert body["message"] == "Expense created successfully"
        assert body["data"]["title"] == "Coffee"
        assert body["data"]["amount"] == 4.5
        assert body["data"]["description"] == ""
        assert set(body["data"]) == {
            "id", "title", "amount", "category", "date",
            "description", "userId", "createdAt", "updatedAt",
        }

    def test_create_requires_auth(self, client):
        """Anonymous creates are rejected."""
        assert client.post("/api/expenses", json=expense_body()).status_code == 401

    def test_create_future_date(self, client, token):
        """Tomorrow is rejected."""
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        response = client.post("/api/expenses", json=expense_body(date=tomorrow), headers=bearer(token))
        assert response.status_code == 400
        assert "Date cannot be in the future" in response.get_json()["errors"]

    def test_create_missing_fields(self, client, token):
        """Missing fields are listed."""
        response = client.post("/api/expenses", json={"title": "Coffee"}, headers=bearer(token))
        assert response.status_code == 400
        assert len(response.get_json()["errors"]) == 3

    def test_list_with_pagination(self, client, token, create):
        """Listing returns items and a pagination block."""
        for day in (1, 2, 3):
            create(title=f"day{day}", date=f"2024-01-0{day}")

        response = client.get("/api/expenses?page=2&limit=1", headers=bearer(token))
        body = response.get_json()

        assert response.status_code == 200
        assert [item["title"] for item in body["data"]] == ["day2"]
        assert body["pagination"] == {
            "currentPage": 2,
            "totalPages": 3,
            "totalExpenses": 3,
            "limit": 1,
            "hasNext": True,
            "hasPrev": True,
        }

    def test_list_filters(self, client, token, create):
        """Category, search and dates combine."""
        create(title="Coffee", category="Food", date="2024-01-05")
        create(title="Coffee grinder", category="Shopping", date="2024-01-06")
        create(title="Bus", category="Transportation", date="2024-01-07")

        body = client.get(
            "/api/expenses?category=Shopping&search=coffee&startDate=2024-01-01&endDate=2024-01-31",
            headers=bearer(token),
        ).get_json()
        assert [item["title"] for item in body["data"]] == ["Coffee grinder"]

        body = client.get("/api/expenses?category=All", headers=bearer(token)).get_json()
        assert body["pagination"]["totalExpenses"] == 3

    def test_list_bad_date(self, client, token):
        """A malformed date filter is a 400."""
        response = client.get("/api/expenses?startDate=soon", headers=bearer(token))
        assert response.status_code == 400

    def test_summary(self, client, token, create):
        """Summary aggregates the caller's expenses."""
        create(amount=30, category="Food")
        create(amount=10, category="Utilities")

        body = client.get("/api/expenses/statistics/summary", headers=bearer(token)).get_json()
        assert body["data"]["totalAmount"] == 40
        assert body["data"]["totalCount"] == 2
        assert body["data"]["categoryBreakdown"][0] == {
            "category": "Food",
            "total": 30,
            "count": 1,
            "percentage": 75.0,
        }

    def test_get_update_delete(self, client, token, create):
        """Single-expense routes work for the owner."""
        expense = create(description="with milk")
        path = f"/api/expenses/{expense['id']}"

        assert client.get(path, headers=bearer(token)).get_json()["data"] == expense

        updated = client.put(path, json={"amount": "", "description": ""}, headers=bearer(token))
        assert updated.status_code == 200
        assert updated.get_json()["message"] == "Expense updated successfully"
        assert updated.get_json()["data"]["amount"] == 4.5
        assert updated.get_json()["data"]["description"] == ""

        deleted = client.delete(path, headers=bearer(token))
        assert deleted.get_json()["message"] == "Expense deleted successfully"
        assert deleted.get_json()["data"]["id"] == expense["id"]

    def test_update_with_falsy_values_keeps_fields(self, client, token, create):
        """0 and false in an update change nothing."""
        expense = create(amount=12.5)
        path = f"/api/expenses/{expense['id']}"

        response = client.put(path, json={"amount": 0}, headers=bearer(token))
        assert response.status_code == 200
        assert response.get_json()["data"]["amount"] == 12.5

        response = client.put(path, json={"title": False, "amount": False}, headers=bearer(token))
        assert response.status_code == 200
        assert response.get_json()["data"]["title"] == "Coffee"
        assert response.get_json()["data"]["amount"] == 12.5

    def test_update_validation(self, client, token, create):
        """Invalid supplied fields are rejected."""
        expense = create()
        response = client.put(
            f"/api/expenses/{expense['id']}",
            json={"category": "Gifts"},
            headers=bearer(token),
        )
        assert response.status_code == 400

    def test_other_users_expense_is_not_found(self, client, token, create, register):
        """Another user cannot read, change or delete the expense."""
        expense = create()
        intruder = register(username="mallory", email="mallory@example.com")
        path = f"/api/expenses/{expense['id']}"

        assert client.get(path, headers=bearer(intruder)).status_code == 404
        assert client.put(path, json={"amount": 1}, headers=bearer(intruder)).status_code == 404
        assert client.delete(path, headers=bearer(intruder)).status_code == 404

        # Still intact for the owner
        assert client.get(path, headers=bearer(token)).get_json()["data"]["amount"] == 4.5

    def test_malformed_id_is_not_found(self, client, token):
        """An id that is not a UUID is a plain 404."""
        response = client.get("/api/expenses/not-a-uuid", headers=bearer(token))
        assert response.status_code == 404
        assert response.get_json()["message"] == "Expense not found"


class TestEndToEnd:
    """Register, log in, create, list, delete, and confirm the record is gone."""

    def test_coffee_scenario(self, client):
        """The full lifecycle of one expense."""
        client.post("/api/users/register", json={
            "username": "usera",
            "email": "a@example.com",
            "password": "password1",
        })
        login = client.post("/api/users/login", json={
            "email": "a@example.com",
            "password": "password1",
        })
        token = login.get_json()["data"]["token"]
        user_id = login.get_json()["data"]["id"]
        today = date.today().isoformat()

        created = client.post("/api/expenses", json={
            "title": "Coffee",
            "amount": 4.5,
            "category": "Food",
            "date": today,
        }, headers=bearer(token)).get_json()["data"]

        assert created["userId"] == user_id
        assert (created["title"], created["amount"], created["category"], created["date"]) == (
            "Coffee", 4.5, "Food", today,
        )

        listed = client.get("/api/expenses", headers=bearer(token)).get_json()
        assert listed["data"] == [created]

        client.delete(f"/api/expenses/{created['id']}", headers=bearer(token))
        gone = client.get(f"/api/expenses/{created['id']}", headers=bearer(token))
        assert gone.status_code == 404
