"""Services package."""

from expense_tracker.services.auth import (
    AuthenticationError,
    Authenticator,
    TokenService,
    check_password,
    hash_password,
)
from expense_tracker.services.storage import (
    ConnectionError,
    Database,
    DuplicateError,
    ExpenseStorageInterface,
    NotFoundError,
    SqlExpenseStorage,
    SqlUserStorage,
    StorageError,
    UserStorageInterface,
)

__all__ = [
    # Auth services
    "AuthenticationError",
    "Authenticator",
    "TokenService",
    "check_password",
    "hash_password",
    # Storage services
    "ConnectionError",
    "Database",
    "DuplicateError",
    "ExpenseStorageInterface",
    "NotFoundError",
    "SqlExpenseStorage",
    "SqlUserStorage",
    "StorageError",
    "UserStorageInterface",
]
