"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap SQLite for PostgreSQL (or a document store) without touching
   business logic
2. Use a throwaway in-memory database for testing
3. Keep owner scoping visible in every signature

Every expense method takes the owner's id. There is no way to reach an
expense through this interface without saying whose it is, and an
expense owned by someone else is indistinguishable from one that does
not exist.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from expense_tracker.models.expense import (
    DateRange,
    Expense,
    ExpenseCreate,
    ExpenseFilter,
)
from expense_tracker.models.user import User


class UserStorageInterface(ABC):
    """
    Abstract interface for user storage operations.

    Users are created and read; never updated or deleted.
    """

    @abstractmethod
    def create_user(
        self,
        username: str,
        email: str,
        password_hash: str,
    ) -> User:
        """
        Persist a new user.

        Args:
            username: Unique username
            email: Unique, already normalized email
            password_hash: Salted one-way hash of the password

        Returns:
            The stored user with generated id and timestamp

        Raises:
            DuplicateError: If the username or email is taken
        """
        pass

    @abstractmethod
    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Retrieve a user by id, or None."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by normalized email, or None."""
        pass

    @abstractmethod
    def user_exists(self, username: str, email: str) -> bool:
        """True if any user has this username OR this email."""
        pass


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation (SQLite, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    def create_expense(self, owner_id: UUID, data: ExpenseCreate) -> Expense:
        """
        Save a new expense for an owner.

        Args:
            owner_id: The owning user's id
            data: Validated expense fields

        Returns:
            The stored expense including id and timestamps

        Raises:
            StorageError: If the save fails
        """
        pass

    @abstractmethod
    def get_expense(self, owner_id: UUID, expense_id: UUID) -> Optional[Expense]:
        """
        Retrieve one of the owner's expenses.

        Returns:
            The expense if it exists and belongs to owner_id, None otherwise
        """
        pass

    @abstractmethod
    def update_expense(
        self,
        owner_id: UUID,
        expense_id: UUID,
        changes: dict[str, Any],
    ) -> Expense:
        """
        Apply changes to one of the owner's expenses.

        Args:
            owner_id: The owning user's id
            expense_id: The expense to change
            changes: Attribute name to new value, already validated

        Returns:
            The expense after the update

        Raises:
            NotFoundError: If no such expense exists for this owner
        """
        pass

    @abstractmethod
    def delete_expense(self, owner_id: UUID, expense_id: UUID) -> Expense:
        """
        Permanently delete one of the owner's expenses.

        Returns:
            A snapshot of the expense as it was before deletion

        Raises:
            NotFoundError: If no such expense exists for this owner
        """
        pass

    @abstractmethod
    def list_expenses(
        self,
        owner_id: UUID,
        filters: ExpenseFilter,
        limit: int,
        offset: int = 0,
    ) -> list[Expense]:
        """
        List the owner's expenses matching every filter predicate.

        Ordered by date descending, then creation time descending.

        Args:
            owner_id: The owning user's id
            filters: Category / date range / search predicates
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            List of matching expenses
        """
        pass

    @abstractmethod
    def count_expenses(self, owner_id: UUID, filters: ExpenseFilter) -> int:
        """Count the owner's expenses matching every filter predicate."""
        pass

    @abstractmethod
    def get_category_totals(
        self,
        owner_id: UUID,
        date_range: DateRange,
    ) -> list[tuple[str, float, int]]:
        """
        Sum and count the owner's expenses per category within a date range.

        Returns:
            (category, total_amount, count) for every category that has
            at least one expense in range; order unspecified
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage (or not owned by the caller)."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
