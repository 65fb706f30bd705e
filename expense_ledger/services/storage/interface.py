"""
Abstract Storage Interface

DESIGN DECISION: The ledger engine never talks to storage. It receives an
already-fetched snapshot of records. This interface is what the
orchestrator uses to fetch that snapshot and to apply user changes.
This allows us to:
1. Use in-memory storage for testing
2. Swap SQLite for another backend without touching the ledger
3. Cache derived views keyed on a version counter

The store owns record identity: ids are assigned on create and never
change. The store is also responsible for serializing concurrent writes.
"""

from abc import ABC, abstractmethod
from typing import Optional

from expense_ledger.errors import ExpenseLedgerError
from expense_ledger.models.audit import AuditEvent
from expense_ledger.models.expense import ExpenseInput, ExpenseRecord


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation must implement these methods.
    """

    @property
    @abstractmethod
    def version(self) -> int:
        """
        Monotonic counter bumped on every successful mutation.

        Two snapshots taken at the same version are identical.
        """
        pass

    @abstractmethod
    async def create_expense(self, expense: ExpenseInput) -> ExpenseRecord:
        """
        Insert a new expense.

        Args:
            expense: Validated input

        Returns:
            The stored record, with its newly assigned id

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def get_expense(self, expense_id: int) -> Optional[ExpenseRecord]:
        """
        Retrieve an expense by its id.

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_expense(
        self,
        expense_id: int,
        expense: ExpenseInput,
    ) -> ExpenseRecord:
        """
        Replace every field of an existing expense.

        Args:
            expense_id: Id of the record to replace
            expense: Validated input with the new values

        Returns:
            The updated record (same id)

        Raises:
            NotFoundError: If no record has this id
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def delete_expense(self, expense_id: int) -> bool:
        """
        Delete an expense by id.

        Returns:
            True if a record was deleted, False if none had this id
        """
        pass

    @abstractmethod
    async def list_expenses(self) -> list[ExpenseRecord]:
        """
        Snapshot of every stored expense, newest (highest id) first.
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: int,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(ExpenseLedgerError):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass
