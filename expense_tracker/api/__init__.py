"""
HTTP API Package

Flask application factory, access-control middleware, error handlers
and the route blueprints.
"""

from expense_tracker.api.app import create_app, main
from expense_tracker.api.middleware import AuthenticatedRequest, bearer_token, require_auth

__all__ = ["AuthenticatedRequest", "bearer_token", "create_app", "main", "require_auth"]
