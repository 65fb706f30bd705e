"""
In-Memory Storage Implementation

Used by the test-suite and as the fallback when no database is
configured. Data lives only as long as the process.
"""

from typing import Optional

from expense_ledger.models.audit import AuditEvent
from expense_ledger.models.expense import ExpenseInput, ExpenseRecord
from expense_ledger.services.storage.interface import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    NotFoundError,
)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """Expense store backed by a dict keyed on id."""

    def __init__(self, records: Optional[list[ExpenseRecord]] = None):
        self._records: dict[int, ExpenseRecord] = {}
        self._version = 0
        for record in records or []:
            self._records[record.id] = record
        self._next_id = max(self._records, default=0) + 1

    @property
    def version(self) -> int:
        return self._version

    async def create_expense(self, expense: ExpenseInput) -> ExpenseRecord:
        record = ExpenseRecord.from_input(self._next_id, expense)
        self._records[record.id] = record
        self._next_id += 1
        self._version += 1
        return record

    async def get_expense(self, expense_id: int) -> Optional[ExpenseRecord]:
        return self._records.get(expense_id)

    async def update_expense(
        self,
        expense_id: int,
        expense: ExpenseInput,
    ) -> ExpenseRecord:
        if expense_id not in self._records:
            raise NotFoundError(f"Expense not found: {expense_id}")
        record = ExpenseRecord.from_input(expense_id, expense)
        self._records[expense_id] = record
        self._version += 1
        return record

    async def delete_expense(self, expense_id: int) -> bool:
        if self._records.pop(expense_id, None) is None:
            return False
        self._version += 1
        return True

    async def list_expenses(self) -> list[ExpenseRecord]:
        return [self._records[key] for key in sorted(self._records, reverse=True)]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: int,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events[-limit:])) if limit > 0 else []
