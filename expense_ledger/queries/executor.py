"""
Ledger View Execution

DESIGN DECISION: Deriving a view is DETERMINISTIC and PURE.
build_view() takes a snapshot of records plus what the user selected and
returns one immutable LedgerView. It never touches storage.

execute() is the convenience path for callers holding a store: it fetches
the snapshot, builds the view, and memoizes the result keyed on the
store's version. Any write to the store bumps the version, so a cached
view is never stale.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Optional

import structlog

from expense_ledger.ledger.aggregator import (
    sorted_category_totals,
    total,
    totals_by_category,
)
from expense_ledger.ledger.pipeline import filter_by_category, filter_by_window
from expense_ledger.models.expense import ExpenseRecord, LedgerQuery, LedgerView
from expense_ledger.services.storage import ExpenseStorageInterface, StorageError

logger = structlog.get_logger(__name__)

# Views kept per store version; reset whenever the version moves
MAX_CACHED_VIEWS = 32


class QueryExecutionError(StorageError):
    """The record snapshot could not be fetched."""
    pass


def _as_record(record: Any) -> ExpenseRecord:
    if isinstance(record, ExpenseRecord):
        return record
    if isinstance(record, Mapping):
        return ExpenseRecord.from_row(record)
    return ExpenseRecord.model_validate(record, from_attributes=True)


class LedgerViewExecutor:
    """
    Builds LedgerViews from record snapshots.

    GUARANTEES:
    - Same records + same query => same view
    - Never raises on malformed amounts or dates
    - Record order in the view is the snapshot's order
    """

    def __init__(self, storage: Optional[ExpenseStorageInterface] = None):
        self._storage = storage
        self._cache: dict[tuple, LedgerView] = {}
        self._cache_version: Optional[int] = None

    def build_view(
        self,
        records: Iterable[Any],
        query: LedgerQuery,
    ) -> LedgerView:
        """
        Derive the full view for one query.

        The category breakdown is computed on the time-filtered records;
        the record list and visible total also apply the category filter.
        """
        snapshot = [_as_record(record) for record in records]

        time_filtered = filter_by_window(snapshot, query.time_window, query.reference_date)
        visible = filter_by_category(time_filtered, query.category_filter)

        by_category = totals_by_category(time_filtered)
        breakdown = sorted_category_totals(by_category)

        return LedgerView(
            time_window=query.time_window,
            category_filter=query.category_filter,
            reference_date=query.reference_date,
            records=tuple(visible),
            visible_total=total(visible),
            window_total=total(time_filtered),
            totals_by_category=by_category,
            category_breakdown=tuple(breakdown),
            categories=tuple(row.category for row in breakdown),
        )

    async def execute(self, query: LedgerQuery) -> LedgerView:
        """
        Fetch the current snapshot from storage and build the view.

        Raises:
            QueryExecutionError: If no storage is configured or the
                snapshot could not be read
        """
        if self._storage is None:
            raise QueryExecutionError("No expense storage configured")

        version = self._storage.version
        if version != self._cache_version:
            self._cache.clear()
            self._cache_version = version

        key = (query.time_window, query.category_filter, query.reference_date)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            records = await self._storage.list_expenses()
        except StorageError as e:
            raise QueryExecutionError(f"Failed to load expenses: {e}") from e

        view = self.build_view(records, query)
        if len(self._cache) >= MAX_CACHED_VIEWS:
            self._cache.clear()
        self._cache[key] = view

        logger.debug(
            "ledger_view_built",
            version=version,
            time_window=query.time_window.value,
            category_filter=query.category_filter,
            record_count=view.record_count,
        )
        return view

    def clear_cache(self) -> None:
        self._cache.clear()
        self._cache_version = None
