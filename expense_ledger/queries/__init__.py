"""Ledger view execution package."""

from expense_ledger.queries.executor import LedgerViewExecutor, QueryExecutionError

__all__ = ["LedgerViewExecutor", "QueryExecutionError"]
