"""
SQLite Storage Implementation

DESIGN DECISION: A single local SQLite file is the default backend:
1. No server to run, the ledger is personal and local
2. The whole table fits in memory, so we always read full snapshots
3. Filtering and aggregation happen in the ledger engine, not in SQL

Expenses and the audit trail live in the same file, in the `expenses`
and `audit_events` tables. Each store holds one connection guarded by a
lock, so it serializes its own writes. Busy/locked errors are retried.

Rows are converted with ExpenseRecord.from_row, so a malformed value
written by another tool degrades instead of breaking the screen.
"""

import sqlite3
import threading
from typing import Any, Optional

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_ledger.config import get_settings
from expense_ledger.models.audit import AuditEvent
from expense_ledger.models.expense import ExpenseInput, ExpenseRecord
from expense_ledger.services.storage.interface import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
)

logger = structlog.get_logger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS expenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    amount REAL NOT NULL,
    category TEXT NOT NULL,
    note TEXT,
    date TEXT
);
CREATE TABLE IF NOT EXISTS audit_events (
    event_id TEXT PRIMARY KEY,
    timestamp TEXT NOT NULL,
    event_type TEXT NOT NULL,
    severity TEXT NOT NULL,
    entity_type TEXT,
    entity_id TEXT,
    correlation_id TEXT,
    description TEXT NOT NULL,
    details TEXT,
    error_message TEXT,
    is_user_action TEXT
);
CREATE INDEX IF NOT EXISTS idx_audit_entity ON audit_events (entity_type, entity_id);
"""

_COLUMNS = "id, amount, category, note, date"

_AUDIT_COLUMNS = (
    "event_id, timestamp, event_type, severity, entity_type, entity_id, "
    "correlation_id, description, details, error_message, is_user_action"
)

_retry_when_busy = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    retry=retry_if_exception_type(sqlite3.OperationalError),
    reraise=True,
)


def _input_params(expense: ExpenseInput) -> tuple:
    return (float(expense.amount), expense.category, expense.note, expense.date)


class _SQLiteStore:
    """Connection handling shared by the SQLite stores."""

    def __init__(self, path: Optional[str] = None):
        self._path = path or get_settings().storage.path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def connect(self) -> sqlite3.Connection:
        """Open the database and create the tables if needed."""
        if self._conn is None:
            try:
                conn = sqlite3.connect(self._path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                conn.executescript(SCHEMA_SQL)
                conn.commit()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to open expense database {self._path}: {e}")
            self._conn = conn
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @_retry_when_busy
    def _write(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        conn = self.connect()
        with self._lock:
            try:
                cursor = conn.execute(sql, params)
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise
        return cursor

    @_retry_when_busy
    def _read(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        conn = self.connect()
        with self._lock:
            return [dict(row) for row in conn.execute(sql, params).fetchall()]


class SQLiteExpenseStorage(_SQLiteStore, ExpenseStorageInterface):
    """Expense store backed by a SQLite database file."""

    def __init__(self, path: Optional[str] = None):
        super().__init__(path)
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def _mutate(self, sql: str, params: tuple) -> sqlite3.Cursor:
        cursor = self._write(sql, params)
        if cursor.rowcount:
            self._version += 1
        return cursor

    async def create_expense(self, expense: ExpenseInput) -> ExpenseRecord:
        try:
            cursor = self._mutate(
                "INSERT INTO expenses (amount, category, note, date) VALUES (?, ?, ?, ?);",
                _input_params(expense),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to save expense: {e}")
        return ExpenseRecord.from_input(cursor.lastrowid, expense)

    async def get_expense(self, expense_id: int) -> Optional[ExpenseRecord]:
        try:
            rows = self._read(
                f"SELECT {_COLUMNS} FROM expenses WHERE id = ?;",
                (expense_id,),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get expense: {e}")
        return ExpenseRecord.from_row(rows[0]) if rows else None

    async def update_expense(
        self,
        expense_id: int,
        expense: ExpenseInput,
    ) -> ExpenseRecord:
        try:
            cursor = self._mutate(
                "UPDATE expenses SET amount = ?, category = ?, note = ?, date = ? WHERE id = ?;",
                _input_params(expense) + (expense_id,),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to update expense: {e}")
        if cursor.rowcount == 0:
            raise NotFoundError(f"Expense not found: {expense_id}")
        return ExpenseRecord.from_input(expense_id, expense)

    async def delete_expense(self, expense_id: int) -> bool:
        try:
            cursor = self._mutate("DELETE FROM expenses WHERE id = ?;", (expense_id,))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete expense: {e}")
        return cursor.rowcount > 0

    async def list_expenses(self) -> list[ExpenseRecord]:
        try:
            rows = self._read(f"SELECT {_COLUMNS} FROM expenses ORDER BY id DESC;")
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list expenses: {e}")
        return [ExpenseRecord.from_row(row) for row in rows]


class SQLiteAuditStorage(_SQLiteStore, AuditStorageInterface):
    """
    Audit trail kept in the `audit_events` table.

    Append-only. Rows that no longer parse are skipped on read.
    """

    def _to_events(self, rows: list[dict[str, Any]]) -> list[AuditEvent]:
        events = []
        for row in rows:
            try:
                events.append(AuditEvent.from_row(list(row.values())))
            except ValueError as e:
                logger.warning("audit_row_skipped", event_id=row.get("event_id"), error=str(e))
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            self._write(
                f"INSERT INTO audit_events ({_AUDIT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);",
                tuple(event.to_row()),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write audit event: {e}")
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: int,
    ) -> list[AuditEvent]:
        try:
            rows = self._read(
                f"SELECT {_AUDIT_COLUMNS} FROM audit_events "
                "WHERE entity_type = ? AND entity_id = ? ORDER BY rowid;",
                (entity_type, str(entity_id)),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get audit events: {e}")
        return self._to_events(rows)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        if limit <= 0:
            return []
        try:
            rows = self._read(
                f"SELECT {_AUDIT_COLUMNS} FROM audit_events ORDER BY rowid DESC LIMIT ?;",
                (limit,),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get audit events: {e}")
        return self._to_events(rows)
