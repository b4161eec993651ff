"""Query execution package."""

from expense_tracker.queries.executor import (
    ExpenseQueryExecutor,
    build_pagination,
    percentage_of,
)

__all__ = ["ExpenseQueryExecutor", "build_pagination", "percentage_of"]
