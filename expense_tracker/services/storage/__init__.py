"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements SQLAlchemy as the backend, but designed to be swappable.
"""

from expense_tracker.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
    UserStorageInterface,
)
from expense_tracker.services.storage.sql import (
    Base,
    Database,
    ExpenseRecord,
    SqlExpenseStorage,
    SqlUserStorage,
    UserRecord,
)

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # SQLAlchemy implementation
    "Base",
    "Database",
    "ExpenseRecord",
    "SqlExpenseStorage",
    "SqlUserStorage",
    "UserRecord",
]
