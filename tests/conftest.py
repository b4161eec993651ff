"""
Shared fixtures.

Every test gets its own in-memory SQLite database. Expense timestamps
come from a ticking clock so creation order is deterministic.
"""

from datetime import date, datetime, timedelta

import pytest

from expense_tracker.api import create_app
from expense_tracker.audit import AuditLogger
from expense_tracker.config import (
    AppSettings,
    AuthSettings,
    ClientSettings,
    DatabaseSettings,
    Settings,
)
from expense_tracker.models.expense import ExpenseCategory, ExpenseCreate
from expense_tracker.orchestrator import AppComponents, ExpenseService
from expense_tracker.services.auth import Authenticator, TokenService
from expense_tracker.services.storage import Database, SqlExpenseStorage, SqlUserStorage
from expense_tracker.validation import ExpenseValidator


TEST_SECRET = "test-secret-key-0123456789"


class TickingClock:
    """Returns a strictly increasing timestamp on every call."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self._now = start

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


@pytest.fixture
def settings():
    return Settings.from_parts(
        database=DatabaseSettings(url="sqlite://", connect_attempts=1),
        auth=AuthSettings(secret_key=TEST_SECRET),
        app=AppSettings(
            debug_mode=False,
            api_prefix="/api",
            log_level="WARNING",
            default_page_size=10,
            max_page_size=100,
        ),
        client=ClientSettings(base_url="http://testserver/api"),
    )


@pytest.fixture
def database(settings):
    db = Database.from_settings(settings.database)
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def user_storage(database):
    return SqlUserStorage(database)


@pytest.fixture
def expense_storage(database):
    return SqlExpenseStorage(database, clock=TickingClock())


@pytest.fixture
def owner(user_storage):
    return user_storage.create_user("alice", "alice@example.com", "not-a-real-hash")


@pytest.fixture
def other_owner(user_storage):
    return user_storage.create_user("bob", "bob@example.com", "not-a-real-hash")


@pytest.fixture
def make_expense(expense_storage):
    """Store an expense for an owner with sensible defaults."""

    def _make(owner_id, **overrides):
        fields = {
            "title": "Lunch",
            "amount": 10.0,
            "category": ExpenseCategory.FOOD,
            "date": date(2024, 1, 15),
            "description": "",
        }
        fields.update(overrides)
        return expense_storage.create_expense(owner_id, ExpenseCreate(**fields))

    return _make


@pytest.fixture
def token_service(settings):
    return TokenService(settings.auth)


@pytest.fixture
def authenticator(user_storage, token_service):
    return Authenticator(user_storage, token_service, AuditLogger())


@pytest.fixture
def components(settings, database, authenticator, expense_storage):
    audit_logger = AuditLogger()
    validator = ExpenseValidator()
    return AppComponents(
        settings=settings,
        database=database,
        authenticator=authenticator,
        expenses=ExpenseService(expense_storage, validator, audit_logger),
        validator=validator,
        audit_logger=audit_logger,
    )


@pytest.fixture
def app(components):
    app = create_app(components=components)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register a user over HTTP and return their bearer token."""

    def _register(username="alice", email="alice@example.com", password="secret123"):
        response = client.post(
            "/api/users/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.get_json()
        return response.get_json()["data"]["token"]

    return _register