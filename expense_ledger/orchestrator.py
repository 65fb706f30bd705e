"""
Main Orchestrator for the Expense Ledger

This module ties together all the components and defines the
end-to-end flows for:
1. Recording (raw form input → validate → create or update → audit)
2. Deleting (id → delete → audit)
3. Viewing (selection → snapshot → filter → aggregate → view)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches storage without passing the validator
- A rejected submission never touches storage
- Every write is audited
"""

from datetime import date, datetime
from typing import Optional, Union
from uuid import UUID

import structlog

from expense_ledger.audit import AuditLogger, create_correlation_id
from expense_ledger.config import get_settings
from expense_ledger.errors import ExpenseValidationError
from expense_ledger.models.audit import AuditEvent
from expense_ledger.models.expense import (
    ExpenseRecord,
    LedgerQuery,
    LedgerView,
    TimeWindow,
)
from expense_ledger.queries import LedgerViewExecutor
from expense_ledger.services.storage import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    InMemoryAuditStorage,
    InMemoryExpenseStorage,
    SQLiteAuditStorage,
    SQLiteExpenseStorage,
    StorageError,
)
from expense_ledger.validation import ExpenseValidator

logger = structlog.get_logger(__name__)


class ExpenseFlow:
    """
    Orchestrates adding, editing and deleting expenses.

    Flow for save_expense:
    1. Validate → reject with InvalidAmountError / MissingCategoryError
    2. Write → create a new record, or replace editing_id in place
    3. Audit → one event per outcome
    """

    def __init__(
        self,
        expense_storage: ExpenseStorageInterface,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = expense_storage
        self._validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger or AuditLogger()

    async def save_expense(
        self,
        raw_amount: Optional[str],
        raw_category: Optional[str],
        raw_note: Optional[str] = "",
        raw_date: Optional[str] = "",
        editing_id: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ExpenseRecord:
        """
        Validate raw form input and write it.

        Args:
            editing_id: None to add a new expense, an id to replace
                        that expense's fields

        Returns:
            The stored record

        Raises:
            ExpenseValidationError: If the input was rejected (nothing is written)
            NotFoundError: If editing_id does not exist
            StorageError: If the write fails
        """
        correlation_id = correlation_id or create_correlation_id()

        outcome = self._validator.validate(raw_amount, raw_category, raw_note, raw_date)
        try:
            expense = outcome.unwrap()
        except ExpenseValidationError as e:
            await self._audit_logger.log_validation_failed(
                issue=e.issue,
                correlation_id=correlation_id,
                expense_id=editing_id,
            )
            raise

        operation = "create" if editing_id is None else "update"
        try:
            if editing_id is None:
                record = await self._storage.create_expense(expense)
            else:
                record = await self._storage.update_expense(editing_id, expense)
        except StorageError as e:
            await self._audit_logger.log_storage_error(
                operation=operation,
                error_message=str(e),
                correlation_id=correlation_id,
                expense_id=editing_id,
            )
            raise

        if editing_id is None:
            await self._audit_logger.log_expense_created(record, correlation_id)
        else:
            await self._audit_logger.log_expense_updated(record, correlation_id)

        return record

    async def delete_expense(
        self,
        expense_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Delete an expense by id.

        Returns:
            True if it existed
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            found = await self._storage.delete_expense(expense_id)
        except StorageError as e:
            await self._audit_logger.log_storage_error(
                operation="delete",
                error_message=str(e),
                correlation_id=correlation_id,
                expense_id=expense_id,
            )
            raise

        await self._audit_logger.log_expense_deleted(
            expense_id=expense_id,
            found=found,
            correlation_id=correlation_id,
        )
        return found

    async def get_expense(self, expense_id: int) -> Optional[ExpenseRecord]:
        """Fetch one expense, e.g. to pre-fill the form for editing."""
        return await self._storage.get_expense(expense_id)

    async def get_history(self, expense_id: int) -> list[AuditEvent]:
        """Audit trail of one expense: created, updated, rejected edits."""
        return await self._audit_logger.expense_history(expense_id)

    async def recent_activity(self, limit: int = 20) -> list[AuditEvent]:
        return await self._audit_logger.recent_events(limit)


class LedgerFlow:
    """
    Orchestrates deriving the screen's view.

    Called on every selection change and after every write; the
    executor's cache makes repeated calls cheap.
    """

    def __init__(
        self,
        expense_storage: ExpenseStorageInterface,
        executor: Optional[LedgerViewExecutor] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._executor = executor or LedgerViewExecutor(expense_storage)
        self._audit_logger = audit_logger or AuditLogger()

    async def load_view(
        self,
        time_window: Union[TimeWindow, str] = TimeWindow.ALL,
        category_filter: Optional[str] = None,
        now: Optional[Union[date, datetime]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerView:
        """
        Build the view for the current selection.

        Args:
            time_window: all / week / month
            category_filter: a category, or None / "all" for every category
            now: reference instant; defaults to today
        """
        if isinstance(now, datetime):
            now = now.date()
        query = LedgerQuery(
            time_window=TimeWindow(time_window),
            category_filter=category_filter,
            reference_date=now or date.today(),
        )

        view = await self._executor.execute(query)
        await self._audit_logger.log_view_derived(view, correlation_id)
        return view


def create_app_components(
    use_storage: bool = True,
    db_path: Optional[str] = None,
) -> tuple[ExpenseFlow, LedgerFlow, ExpenseStorageInterface]:
    """
    Factory function to create all application components.

    Expense writes are audited to the `audit_events` table of the same
    database. Derived views are only logged locally; they happen on
    every render and are not part of the ledger's history.

    Args:
        use_storage: Whether to open the SQLite database.
                    Set to False for an in-memory ledger.
        db_path: Overrides the configured database path.

    Returns:
        (expense_flow, ledger_flow, expense_storage)
    """
    expense_storage: ExpenseStorageInterface
    audit_storage: AuditStorageInterface
    if use_storage:
        try:
            path = db_path or get_settings().storage.path
            sqlite_storage = SQLiteExpenseStorage(path)
            sqlite_storage.connect()
            sqlite_audit = SQLiteAuditStorage(path)
            sqlite_audit.connect()
            expense_storage, audit_storage = sqlite_storage, sqlite_audit
        except (StorageError, ValueError) as e:
            # Storage not configured - continue without it
            logger.warning("storage_unavailable", error=str(e))
            expense_storage, audit_storage = InMemoryExpenseStorage(), InMemoryAuditStorage()
    else:
        expense_storage, audit_storage = InMemoryExpenseStorage(), InMemoryAuditStorage()

    expense_flow = ExpenseFlow(
        expense_storage=expense_storage,
        audit_logger=AuditLogger(audit_storage),
    )
    ledger_flow = LedgerFlow(
        expense_storage=expense_storage,
        audit_logger=AuditLogger(),  # Local-only logging
    )

    return expense_flow, ledger_flow, expense_storage
