"""
Expense routes.

Every route here is wrapped in require_auth and passes the acting user's
id to the expense service; no route can reach another user's records.
"""

from uuid import UUID

from flask import Blueprint, request

from expense_tracker.api.middleware import (
    AuthenticatedRequest,
    get_components,
    json_body,
    require_auth,
)
from expense_tracker.api.responses import success
from expense_tracker.orchestrator import EXPENSE_NOT_FOUND
from expense_tracker.services.storage import NotFoundError
from expense_tracker.validation import (
    parse_date_range,
    parse_expense_filter,
    parse_page_params,
)


bp = Blueprint("expenses", __name__)


def parse_expense_id(raw: str) -> UUID:
    """An id that is not a UUID cannot name any expense."""
    try:
        return UUID(raw)
    except ValueError as e:
        raise NotFoundError(EXPENSE_NOT_FOUND) from e


@bp.route("", methods=["POST"])
@require_auth
def create_expense(auth: AuthenticatedRequest):
    expense = get_components().expenses.create(auth.user_id, json_body(), auth.correlation_id)
    return success(expense.to_api_dict(), "Expense created successfully", 201)


@bp.route("", methods=["GET"])
@require_auth
def list_expenses(auth: AuthenticatedRequest):
    components = get_components()
    app_settings = components.settings.app

    filters = parse_expense_filter(request.args)
    page, limit = parse_page_params(
        request.args,
        default_size=app_settings.default_page_size,
        max_size=app_settings.max_page_size,
    )

    result = components.expenses.list(auth.user_id, filters, page, limit, auth.correlation_id)
    return success(
        [item.to_api_dict() for item in result.items],
        pagination=result.pagination.to_api_dict(),
    )


@bp.route("/statistics/summary", methods=["GET"])
@require_auth
def summary(auth: AuthenticatedRequest):
    date_range = parse_date_range(request.args)
    result = get_components().expenses.summarize(auth.user_id, date_range, auth.correlation_id)
    return success(result.to_api_dict())


@bp.route("/<expense_id>", methods=["GET"])
@require_auth
def get_expense(auth: AuthenticatedRequest, expense_id: str):
    expense = get_components().expenses.get(auth.user_id, parse_expense_id(expense_id))
    return success(expense.to_api_dict())


@bp.route("/<expense_id>", methods=["PUT"])
@require_auth
def update_expense(auth: AuthenticatedRequest, expense_id: str):
    expense_uuid = parse_expense_id(expense_id)
    expense = get_components().expenses.update(
        auth.user_id, expense_uuid, json_body(), auth.correlation_id
    )
    return success(expense.to_api_dict(), "Expense updated successfully")


@bp.route("/<expense_id>", methods=["DELETE"])
@require_auth
def delete_expense(auth: AuthenticatedRequest, expense_id: str):
    expense = get_components().expenses.delete(
        auth.user_id, parse_expense_id(expense_id), auth.correlation_id
    )
    return success(expense.to_api_dict(), "Expense deleted successfully")
