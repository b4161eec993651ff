"""
HTTP client for the Expense Tracker API.

Used by the Streamlit front end. Holds the bearer token after login and
attaches it to every request. A 401 on an authenticated call discards
the token and raises SessionExpiredError so the UI can return to the
login screen. There is no retry: failures surface to the caller.
"""

from datetime import date
from typing import Any, Optional

import requests

from expense_tracker.config import ClientSettings


class ApiError(Exception):
    """The API answered with success=false, or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[list[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []

    def __str__(self) -> str:
        if self.errors:
            return f"{self.message}: {'; '.join(self.errors)}"
        return self.message


class SessionExpiredError(ApiError):
    """The token was rejected; the user must sign in again."""
    pass


def _date_param(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class ExpenseApiClient:
    """Thin wrapper over requests.Session speaking the envelope format."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: ClientSettings, token: Optional[str] = None) -> "ExpenseApiClient":
        return cls(settings.base_url, timeout=settings.timeout_seconds, token=token)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        auth: bool = True,
    ) -> dict[str, Any]:
        headers = {}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if params:
            params = {k: v for k, v in params.items() if v not in (None, "")}

        try:
            response = self._session.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                params=params,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ApiError(f"Could not reach the server: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = body.get("message") or f"Request failed ({response.status_code})"

        if response.status_code == 401 and auth:
            self.token = None
            raise SessionExpiredError(message, 401)

        if not response.ok or not body.get("success", False):
            raise ApiError(message, response.status_code, body.get("errors"))

        return body

    # Users

    def register(self, username: str, email: str, password: str) -> dict[str, Any]:
        body = self._request(
            "POST",
            "/users/register",
            json={"username": username, "email": email, "password": password},
            auth=False,
        )
        self.token = body["data"]["token"]
        return body["data"]

    def login(self, email: str, password: str) -> dict[str, Any]:
        body = self._request(
            "POST",
            "/users/login",
            json={"email": email, "password": password},
            auth=False,
        )
        self.token = body["data"]["token"]
        return body["data"]

    def logout(self) -> None:
        self.token = None

    def profile(self) -> dict[str, Any]:
        return self._request("GET", "/users/profile")["data"]

    # Expenses

    def categories(self) -> list[str]:
        return self._request("GET", "/categories", auth=False)["data"]

    def list_expenses(
        self,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict[str, Any]:
        """Returns {"items": [...], "pagination": {...}}."""
        body = self._request(
            "GET",
            "/expenses",
            params={
                "category": category,
                "startDate": _date_param(start_date),
                "endDate": _date_param(end_date),
                "search": search,
                "page": page,
                "limit": limit,
            },
        )
        return {"items": body.get("data", []), "pagination": body.get("pagination", {})}

    def get_expense(self, expense_id: str) -> dict[str, Any]:
        return self._request("GET", f"/expenses/{expense_id}")["data"]

    def create_expense(
        self,
        title: str,
        amount: float,
        category: str,
        expense_date: date,
        description: str = "",
    ) -> dict[str, Any]:
        return self._request(
            "POST",
            "/expenses",
            json={
                "title": title,
                "amount": amount,
                "category": category,
                "date": expense_date.isoformat(),
                "description": description,
            },
        )["data"]

    def update_expense(self, expense_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        payload = {
            key: value.isoformat() if isinstance(value, date) else value
            for key, value in changes.items()
        }
        return self._request("PUT", f"/expenses/{expense_id}", json=payload)["data"]

    def delete_expense(self, expense_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"/expenses/{expense_id}")["data"]

    def summary(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[str, Any]:
        return self._request(
            "GET",
            "/expenses/statistics/summary",
            params={"startDate": _date_param(start_date), "endDate": _date_param(end_date)},
        )["data"]

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/health", auth=False)
