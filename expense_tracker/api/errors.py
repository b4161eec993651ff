"""
Error handlers.

Maps every exception that can escape a view onto the response envelope:

    ExpenseValidationError  400  with the list of field messages
    DuplicateError          400
    AuthenticationError     401
    NotFoundError           404
    HTTPException           its own status (404 unmatched route, 405 ...)
    anything else           500 with a generic message

No exception reaches the WSGI server.
"""

import structlog
from flask import Flask, request
from werkzeug.exceptions import HTTPException

from expense_tracker.api.middleware import correlation_id, get_components
from expense_tracker.api.responses import failure
from expense_tracker.services.auth import AuthenticationError
from expense_tracker.services.storage import DuplicateError, NotFoundError
from expense_tracker.validation import ExpenseValidationError


logger = structlog.get_logger("expense_tracker.api")


def register_error_handlers(app: Flask) -> None:

    @app.errorhandler(ExpenseValidationError)
    def handle_validation(e: ExpenseValidationError):
        return failure("Validation failed", 400, errors=e.messages)

    @app.errorhandler(DuplicateError)
    def handle_duplicate(e: DuplicateError):
        return failure(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def handle_authentication(e: AuthenticationError):
        return failure(str(e), 401)

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        return failure(str(e), 404)

    @app.errorhandler(HTTPException)
    def handle_http(e: HTTPException):
        if e.code == 404:
            return failure(f"Route not found: {request.path}", 404)
        if e.code == 405:
            return failure(f"Method {request.method} not allowed for {request.path}", 405)
        return failure(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        components = get_components()
        logger.exception("unhandled_error", path=request.path, method=request.method)
        components.audit_logger.log_error(
            error_type=type(e).__name__,
            error_message=str(e),
            details={"path": request.path, "method": request.method},
            correlation_id=correlation_id(),
        )
        detail = str(e) if components.settings.app.debug_mode else None
        return failure("Server error", 500, error=detail)
