"""
Query Execution Engine

DESIGN DECISION: Query execution is DETERMINISTIC arithmetic over what
storage returns. Filtering, ordering and per-category sums are pushed
into storage; this module owns the parts with rules of their own:

- Pagination: 1-indexed pages, total pages by ceiling division, and the
  has-next / has-previous flags. A page past the end is empty but still
  reports correct totals.
- Summaries: grand total, per-category share rounded to one decimal
  place, and a zero share (never a division) when the grand total is 0.

Every call is scoped to one owner; the owner's id is passed straight
through to storage.
"""

import math
from uuid import UUID

from expense_tracker.models.expense import (
    CategoryBreakdown,
    DateRange,
    ExpenseFilter,
    ExpensePage,
    ExpenseSummary,
    PaginationInfo,
)
from expense_tracker.services.storage import ExpenseStorageInterface


def build_pagination(page: int, limit: int, total: int) -> PaginationInfo:
    """Pagination block for a page of a result set with `total` matches."""
    total_pages = math.ceil(total / limit) if total else 0
    return PaginationInfo(
        current_page=page,
        total_pages=total_pages,
        total_expenses=total,
        limit=limit,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def percentage_of(part: float, whole: float) -> float:
    if whole == 0:
        return 0.0
    return round(part / whole * 100, 1)


class ExpenseQueryExecutor:
    """
    Executes list and summary queries against expense storage.

    GUARANTEES:
    - Only returns the owner's own data
    - Never invents or estimates
    - An empty result is a valid answer, never an error
    """

    def __init__(self, storage: ExpenseStorageInterface):
        self._storage = storage

    def list(
        self,
        owner_id: UUID,
        filters: ExpenseFilter,
        page: int = 1,
        page_size: int = 10,
    ) -> ExpensePage:
        """
        One page of the owner's expenses matching every filter.

        Args:
            owner_id: Whose expenses to list
            filters: Category / date range / search predicates
            page: 1-indexed page number
            page_size: Items per page

        Returns:
            ExpensePage ordered by date then creation time, newest first
        """
        if page < 1:
            raise ValueError("page must be >= 1")
        if page_size < 1:
            raise ValueError("page_size must be >= 1")

        total = self._storage.count_expenses(owner_id, filters)
        offset = (page - 1) * page_size

        items = []
        if offset < total:
            items = self._storage.list_expenses(
                owner_id,
                filters,
                limit=page_size,
                offset=offset,
            )

        return ExpensePage(
            items=items,
            pagination=build_pagination(page, page_size, total),
        )

    def summarize(self, owner_id: UUID, date_range: DateRange) -> ExpenseSummary:
        """
        Aggregate all the owner's expenses within a date range.

        The breakdown is sorted by descending total; ties are broken by
        category name so the order is stable.
        """
        rows = self._storage.get_category_totals(owner_id, date_range)

        grand_total = sum(total for _, total, _ in rows)
        total_count = sum(count for _, _, count in rows)

        breakdown = [
            CategoryBreakdown(
                category=category,
                total=round(total, 2),
                count=count,
                percentage=percentage_of(total, grand_total),
            )
            for category, total, count in sorted(rows, key=lambda r: (-r[1], r[0]))
        ]

        return ExpenseSummary(
            total_amount=round(grand_total, 2),
            total_count=total_count,
            category_breakdown=breakdown,
        )
