"""Unauthenticated routes: health check and the category list."""

from datetime import datetime, timezone

from flask import Blueprint

from expense_tracker.api.responses import success
from expense_tracker.models.expense import ExpenseCategory


bp = Blueprint("system", __name__)


@bp.route("/health", methods=["GET"])
def health():
    return success(
        message="Expense Tracker API is running!",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@bp.route("/categories", methods=["GET"])
def categories():
    return success(ExpenseCategory.values())
