"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the
owner-scoped expense flows:
1. Create (validate → persist → audit)
2. Read (single expense, filtered page, summary)
3. Update (validate supplied fields → apply → audit)
4. Delete (remove → audit)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every operation takes the acting user's id; there is no unscoped call
- An expense owned by someone else is reported exactly like a missing one
- Every write is audited

This is the "glue" the HTTP layer calls. The HTTP layer itself only
parses requests and shapes responses.
"""

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from expense_tracker.audit import AuditLogger, create_correlation_id
from expense_tracker.config import Settings, check_secret_key, get_settings
from expense_tracker.models.expense import (
    DateRange,
    Expense,
    ExpenseFilter,
    ExpensePage,
    ExpenseSummary,
)
from expense_tracker.queries import ExpenseQueryExecutor
from expense_tracker.services.auth import Authenticator, TokenService
from expense_tracker.services.storage import (
    Database,
    ExpenseStorageInterface,
    NotFoundError,
    SqlExpenseStorage,
    SqlUserStorage,
)
from expense_tracker.validation import ExpenseValidationError, ExpenseValidator


EXPENSE_NOT_FOUND = "Expense not found"


class ExpenseService:
    """
    Owner-scoped expense operations.

    Flow for writes:
    1. Validate → raw body to ExpenseCreate / ExpenseUpdate
    2. Persist → storage call carrying owner_id
    3. Audit → one event per successful write, one per rejected body
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._validator = validator or ExpenseValidator()
        self._executor = ExpenseQueryExecutor(storage)
        self._audit_logger = audit_logger or AuditLogger()

    def create(
        self,
        owner_id: UUID,
        payload: Any,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Validate and store a new expense for owner_id.

        Raises:
            ExpenseValidationError: If any field is missing or invalid
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            data = self._validator.validate_create(payload)
        except ExpenseValidationError as e:
            self._audit_logger.log_validation_failed("expense", e.messages, owner_id, correlation_id)
            raise

        expense = self._storage.create_expense(owner_id, data)

        self._audit_logger.log_expense_created(
            expense_id=expense.id,
            actor_id=owner_id,
            category=expense.category.value,
            amount=expense.amount,
            correlation_id=correlation_id,
        )
        return expense

    def get(self, owner_id: UUID, expense_id: UUID) -> Expense:
        """
        Raises:
            NotFoundError: If the expense does not exist for this owner
        """
        expense = self._storage.get_expense(owner_id, expense_id)
        if expense is None:
            raise NotFoundError(EXPENSE_NOT_FOUND)
        return expense

    def list(
        self,
        owner_id: UUID,
        filters: ExpenseFilter,
        page: int = 1,
        page_size: int = 10,
        correlation_id: Optional[UUID] = None,
    ) -> ExpensePage:
        result = self._executor.list(owner_id, filters, page, page_size)

        self._audit_logger.log_query_executed(
            actor_id=owner_id,
            page=page,
            result_count=len(result.items),
            total=result.pagination.total_expenses,
            correlation_id=correlation_id,
        )
        return result

    def update(
        self,
        owner_id: UUID,
        expense_id: UUID,
        payload: Any,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Apply the supplied fields that are not falsy (and description, if present).

        Ownership is checked before the body is validated, so a caller
        probing someone else's id always gets NotFoundError.

        Raises:
            NotFoundError: If the expense does not exist for this owner
            ExpenseValidationError: If a supplied field is invalid
        """
        correlation_id = correlation_id or create_correlation_id()
        current = self.get(owner_id, expense_id)

        try:
            update = self._validator.validate_update(payload)
        except ExpenseValidationError as e:
            self._audit_logger.log_validation_failed("expense", e.messages, owner_id, correlation_id)
            raise

        if update.is_empty:
            return current

        changes = update.changes()
        try:
            expense = self._storage.update_expense(owner_id, expense_id, changes)
        except NotFoundError as e:
            raise NotFoundError(EXPENSE_NOT_FOUND) from e

        self._audit_logger.log_expense_updated(
            expense_id=expense_id,
            actor_id=owner_id,
            changed_fields=sorted(changes),
            correlation_id=correlation_id,
        )
        return expense

    def delete(
        self,
        owner_id: UUID,
        expense_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Permanently remove an expense and return what it looked like.

        Raises:
            NotFoundError: If the expense does not exist for this owner
        """
        try:
            expense = self._storage.delete_expense(owner_id, expense_id)
        except NotFoundError as e:
            raise NotFoundError(EXPENSE_NOT_FOUND) from e

        self._audit_logger.log_expense_deleted(expense_id, owner_id, correlation_id)
        return expense

    def summarize(
        self,
        owner_id: UUID,
        date_range: DateRange,
        correlation_id: Optional[UUID] = None,
    ) -> ExpenseSummary:
        summary = self._executor.summarize(owner_id, date_range)

        self._audit_logger.log_summary_computed(
            actor_id=owner_id,
            total_count=summary.total_count,
            category_count=len(summary.category_breakdown),
            correlation_id=correlation_id,
        )
        return summary


@dataclass
class AppComponents:
    """Everything the HTTP layer needs, built once per process."""

    settings: Settings
    database: Database
    authenticator: Authenticator
    expenses: ExpenseService
    validator: ExpenseValidator
    audit_logger: AuditLogger


def create_app_components(
    settings: Optional[Settings] = None,
    create_schema: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Resolved settings; defaults to the process-wide ones
        create_schema: Whether to create missing tables on startup

    Returns:
        AppComponents wired to one database and one audit logger

    Raises:
        InsecureSettingsError: If the development token secret is used
            outside development
    """
    settings = settings or get_settings()
    check_secret_key(settings)

    database = Database.from_settings(settings.database)
    if create_schema:
        database.create_schema()

    audit_logger = AuditLogger()
    validator = ExpenseValidator()

    authenticator = Authenticator(
        users=SqlUserStorage(database),
        tokens=TokenService(settings.auth),
        audit_logger=audit_logger,
    )
    expenses = ExpenseService(
        storage=SqlExpenseStorage(database),
        validator=validator,
        audit_logger=audit_logger,
    )

    return AppComponents(
        settings=settings,
        database=database,
        authenticator=authenticator,
        expenses=expenses,
        validator=validator,
        audit_logger=audit_logger,
    )
