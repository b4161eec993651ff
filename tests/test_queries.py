"""Tests for pagination arithmetic and summary aggregation."""

import pytest
from datetime import date

from expense_tracker.models.expense import DateRange, ExpenseCategory, ExpenseFilter
from expense_tracker.queries import ExpenseQueryExecutor, build_pagination, percentage_of


@pytest.fixture
def executor(expense_storage):
    return ExpenseQueryExecutor(expense_storage)


class TestPaginationArithmetic:
    """Tests for build_pagination."""

    def test_middle_page(self):
        """Page 2 of 3 has both neighbours."""
        info = build_pagination(page=2, limit=1, total=3)
        assert info.total_pages == 3
        assert info.has_next and info.has_prev

    def test_last_page(self):
        """The last page has no next page."""
        info = build_pagination(page=3, limit=1, total=3)
        assert not info.has_next
        assert info.has_prev

    def test_partial_last_page(self):
        """Total pages round up."""
        assert build_pagination(page=1, limit=10, total=11).total_pages == 2

    def test_empty_result(self):
        """No matches means zero pages and no neighbours."""
        info = build_pagination(page=1, limit=10, total=0)
        assert info.total_pages == 0
        assert not info.has_next
        assert not info.has_prev


class TestListQuery:
    """Tests for ExpenseQueryExecutor.list."""

    def test_page_two_of_three(self, executor, make_expense, owner):
        """Page 2 with size 1 returns the second item in sort order."""
        make_expense(owner.id, title="oldest", date=date(2024, 1, 1))
        make_expense(owner.id, title="middle", date=date(2024, 1, 2))
        make_expense(owner.id, title="newest", date=date(2024, 1, 3))

        page = executor.list(owner.id, ExpenseFilter(), page=2, page_size=1)

        assert [e.title for e in page.items] == ["middle"]
        assert page.pagination.has_next
        assert page.pagination.has_prev
        assert page.pagination.total_expenses == 3

    def test_page_three_has_no_next(self, executor, make_expense, owner):
        """The final page reports no next page."""
        for day in (1, 2, 3):
            make_expense(owner.id, date=date(2024, 1, day))

        page = executor.list(owner.id, ExpenseFilter(), page=3, page_size=1)
        assert len(page.items) == 1
        assert not page.pagination.has_next

    def test_page_beyond_last(self, executor, make_expense, owner):
        """A page past the end is empty but totals stay correct."""
        make_expense(owner.id)
        make_expense(owner.id)

        page = executor.list(owner.id, ExpenseFilter(), page=5, page_size=10)
        assert page.items == []
        assert page.pagination.total_expenses == 2
        assert page.pagination.total_pages == 1
        assert page.pagination.current_page == 5
        assert not page.pagination.has_next

    def test_rejects_bad_page(self, executor, owner):
        """Page numbers start at 1."""
        with pytest.raises(ValueError):
            executor.list(owner.id, ExpenseFilter(), page=0)


class TestSummary:
    """Tests for ExpenseQueryExecutor.summarize."""

    def test_empty(self, executor, owner):
        """An empty set sums to zero without dividing by zero."""
        summary = executor.summarize(owner.id, DateRange())
        assert summary.total_amount == 0
        assert summary.total_count == 0
        assert summary.category_breakdown == []

    def test_all_zero_amounts(self, executor, make_expense, owner):
        """Zero-amount expenses get a zero share."""
        make_expense(owner.id, amount=0.0)
        summary = executor.summarize(owner.id, DateRange())
        assert summary.total_count == 1
        assert summary.category_breakdown[0].percentage == 0

    def test_breakdown(self, executor, make_expense, owner):
        """Totals, counts and shares per category, largest first."""
        make_expense(owner.id, amount=30.0, category=ExpenseCategory.FOOD)
        make_expense(owner.id, amount=10.0, category=ExpenseCategory.FOOD)
        make_expense(owner.id, amount=50.0, category=ExpenseCategory.UTILITIES)
        make_expense(owner.id, amount=20.0, category=ExpenseCategory.EDUCATION)

        summary = executor.summarize(owner.id, DateRange())

        assert summary.total_amount == 110.0
        assert summary.total_count == 4
        assert [(b.category, b.total, b.count) for b in summary.category_breakdown] == [
            ("Utilities", 50.0, 1),
            ("Food", 40.0, 2),
            ("Education", 20.0, 1),
        ]
        assert [b.percentage for b in summary.category_breakdown] == [45.5, 36.4, 18.2]

    def test_percentages_sum_to_about_100(self, executor, make_expense, owner):
        """Rounded shares add up to 100 within rounding."""
        for amount, category in (
            (1.0, ExpenseCategory.FOOD),
            (1.0, ExpenseCategory.SHOPPING),
            (1.0, ExpenseCategory.OTHER),
        ):
            make_expense(owner.id, amount=amount, category=category)

        summary = executor.summarize(owner.id, DateRange())
        assert sum(b.percentage for b in summary.category_breakdown) == pytest.approx(100, abs=0.5)

    def test_date_range(self, executor, make_expense, owner):
        """Only expenses inside the range are aggregated."""
        make_expense(owner.id, amount=5.0, date=date(2024, 1, 1))
        make_expense(owner.id, amount=7.0, date=date(2024, 3, 1))

        summary = executor.summarize(owner.id, DateRange(end_date=date(2024, 2, 1)))
        assert summary.total_amount == 5.0
        assert summary.total_count == 1

    def test_percentage_of(self):
        """One decimal place, zero for an empty whole."""
        assert percentage_of(1, 3) == 33.3
        assert percentage_of(5, 0) == 0
