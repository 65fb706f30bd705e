"""Services package."""

from expense_ledger.services.storage import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    InMemoryAuditStorage,
    InMemoryExpenseStorage,
    NotFoundError,
    SQLiteAuditStorage,
    SQLiteExpenseStorage,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "ExpenseStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryExpenseStorage",
    "NotFoundError",
    "SQLiteAuditStorage",
    "SQLiteExpenseStorage",
    "StorageError",
]
