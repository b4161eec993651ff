"""
Core Data Models for Expense Tracker

These models define the strict schemas for all expense data flowing
through the system. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the camelCase JSON the API speaks

DESIGN DECISION: Validated input (ExpenseCreate, ExpenseUpdate) is kept
separate from the stored record (Expense). Storage never sees a raw
request body, and handlers never see an ORM row.
"""

import datetime as dt
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import (
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
)
from pydantic.alias_generators import to_camel


TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

# Category filter value meaning "no category filter"
ALL_CATEGORIES = "All"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: Using explicit categories rather than free text ensures
    consistent categorization and makes the per-category summary meaningful.
    """
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    UTILITIES = "Utilities"
    HEALTHCARE = "Healthcare"
    SHOPPING = "Shopping"
    EDUCATION = "Education"
    OTHER = "Other"

    @classmethod
    def values(cls) -> list[str]:
        return [c.value for c in cls]


class ApiModel(BaseModel):
    """Base for models that are sent over the wire (camelCase keys)."""
    model_config = ConfigDict(
        alias_generator=AliasGenerator(serialization_alias=to_camel),
        from_attributes=True,
    )

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# INPUT MODELS
# =============================================================================

class ExpenseCreate(BaseModel):
    """
    A validated request to create an expense.

    Only built by ExpenseValidator after every field check passed; the
    constraints here are a second line of defence.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(
        ...,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="Short title (required)"
    )
    amount: float = Field(
        ...,
        ge=0,
        description="Amount spent (required, non-negative)"
    )
    category: ExpenseCategory = Field(
        ...,
        description="Expense category (required)"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the expense (required, not in the future)"
    )
    description: str = Field(
        default="",
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Free text notes"
    )


class ExpenseUpdate(BaseModel):
    """
    A validated partial update.

    Each attribute is either present (in model_fields_set) or absent.
    The validator only passes title, amount, category and date when the
    caller sent a value that is not falsy (blank, false or 0), so such a
    value leaves the stored field untouched. description is passed whenever the caller sent
    it at all, so an empty string (or null) clears it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
    )
    amount: Optional[float] = Field(default=None, ge=0)
    category: Optional[ExpenseCategory] = None
    date: Optional[dt.date] = None
    description: Optional[str] = Field(
        default=None,
        max_length=DESCRIPTION_MAX_LENGTH,
    )

    def changes(self) -> dict[str, Any]:
        """Fields to write, keyed by attribute name."""
        changes = self.model_dump(exclude_unset=True)
        if "description" in changes and changes["description"] is None:
            changes["description"] = ""
        return changes

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


# =============================================================================
# STORED RECORD
# =============================================================================

class Expense(ApiModel):
    """
    An expense as persisted.

    Every expense has exactly one owner (user_id); there is no status
    field. Deleting is terminal.
    """

    id: UUID
    user_id: UUID
    title: str
    amount: float
    category: ExpenseCategory
    date: dt.date
    description: str = ""
    created_at: dt.datetime
    updated_at: dt.datetime


# =============================================================================
# QUERY MODELS
# =============================================================================

class DateRange(BaseModel):
    """Inclusive calendar-date bounds; either side may be open."""

    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


class ExpenseFilter(DateRange):
    """
    Predicates for listing expenses. All present predicates must hold.

    The search term matches title OR description, case-insensitively;
    that OR stays inside the search predicate.
    """

    category: Optional[str] = None
    search: Optional[str] = None

    @property
    def category_value(self) -> Optional[str]:
        """Category to filter on, or None when the filter is absent or 'All'."""
        if not self.category or self.category == ALL_CATEGORIES:
            return None
        return self.category

    @property
    def search_term(self) -> Optional[str]:
        if self.search is None:
            return None
        term = self.search.strip()
        return term or None


class PaginationInfo(ApiModel):
    """Where a page sits in the full result set."""

    current_page: int = Field(ge=1)
    total_pages: int = Field(ge=0)
    total_expenses: int = Field(ge=0)
    limit: int = Field(ge=1)
    has_next: bool
    has_prev: bool


class ExpensePage(BaseModel):
    """One page of a filtered expense listing."""

    items: list[Expense] = Field(default_factory=list)
    pagination: PaginationInfo


class CategoryBreakdown(ApiModel):
    """Totals for a single category within a summary."""

    category: str
    total: float
    count: int = Field(ge=0)
    percentage: float = Field(
        ge=0,
        description="Share of the overall total, one decimal place"
    )


class ExpenseSummary(ApiModel):
    """
    Aggregate over every expense matching a date range.

    category_breakdown is ordered by descending total.
    """

    total_amount: float = 0.0
    total_count: int = 0
    category_breakdown: list[CategoryBreakdown] = Field(default_factory=list)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'too_long', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one request body."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]
