"""Validation of request bodies and query parameters."""

from expense_tracker.validation.validator import (
    ExpenseValidationError,
    ExpenseValidator,
    is_blank,
    is_falsy,
    parse_amount,
    parse_date,
    parse_date_range,
    parse_expense_filter,
    parse_page_params,
)

__all__ = [
    "ExpenseValidationError",
    "ExpenseValidator",
    "is_blank",
    "is_falsy",
    "parse_amount",
    "parse_date",
    "parse_date_range",
    "parse_expense_filter",
    "parse_page_params",
]
