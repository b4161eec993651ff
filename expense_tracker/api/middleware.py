"""
Access-Control Middleware

Protected views are wrapped with require_auth. The wrapper resolves the
bearer token to a user and passes an AuthenticatedRequest as the view's
first argument; nothing is stored on the shared request object.
"""

from dataclasses import dataclass
from functools import wraps
from typing import Any, Optional
from uuid import UUID

from flask import current_app, g, request

from expense_tracker.models.expense import ValidationIssue
from expense_tracker.models.user import User
from expense_tracker.orchestrator import AppComponents
from expense_tracker.validation import ExpenseValidationError


EXTENSION_KEY = "expense_tracker"


@dataclass(frozen=True)
class AuthenticatedRequest:
    """The acting user and the id tying this request's audit events together."""

    user: User
    correlation_id: Optional[UUID] = None

    @property
    def user_id(self) -> UUID:
        return self.user.id


def get_components() -> AppComponents:
    return current_app.extensions[EXTENSION_KEY]


def correlation_id() -> Optional[UUID]:
    return g.get("correlation_id")


def bearer_token(header: Optional[str]) -> Optional[str]:
    """Extract the token from an 'Authorization: Bearer <token>' header."""
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def require_auth(view):
    """Reject the request with 401 unless it carries a valid bearer token."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token(request.headers.get("Authorization"))
        # AuthenticationError propagates to the 401 handler
        user = get_components().authenticator.resolve_user(token, correlation_id())
        auth = AuthenticatedRequest(user=user, correlation_id=correlation_id())
        return view(auth, *args, **kwargs)

    return wrapper


def json_body() -> dict[str, Any]:
    """
    The request's JSON object.

    Raises:
        ExpenseValidationError: If the body is missing, malformed, or not
            a JSON object
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ExpenseValidationError([
            ValidationIssue(
                field="body",
                issue_type="invalid_json",
                message="Request body must be a JSON object",
            )
        ])
    return data
