"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    ALL_CATEGORIES,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    CategoryBreakdown,
    DateRange,
    Expense,
    ExpenseCategory,
    ExpenseCreate,
    ExpenseFilter,
    ExpensePage,
    ExpenseSummary,
    ExpenseUpdate,
    PaginationInfo,
    ValidationIssue,
    ValidationResult,
)
from expense_tracker.models.user import (
    AuthResult,
    LoginRequest,
    RegisterRequest,
    User,
    UserPublic,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "ALL_CATEGORIES",
    "DESCRIPTION_MAX_LENGTH",
    "TITLE_MAX_LENGTH",
    "CategoryBreakdown",
    "DateRange",
    "Expense",
    "ExpenseCategory",
    "ExpenseCreate",
    "ExpenseFilter",
    "ExpensePage",
    "ExpenseSummary",
    "ExpenseUpdate",
    "PaginationInfo",
    "ValidationIssue",
    "ValidationResult",
    # User models
    "AuthResult",
    "LoginRequest",
    "RegisterRequest",
    "User",
    "UserPublic",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
