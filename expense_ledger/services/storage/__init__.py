"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
SQLite is the default backend; the in-memory stores back the tests.
"""

from expense_ledger.services.storage.interface import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
)
from expense_ledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryExpenseStorage,
)
from expense_ledger.services.storage.sqlite import (
    SQLiteAuditStorage,
    SQLiteExpenseStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ExpenseStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryExpenseStorage",
    "SQLiteAuditStorage",
    "SQLiteExpenseStorage",
]
