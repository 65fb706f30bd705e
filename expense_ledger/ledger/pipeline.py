"""
Filter Pipeline

Derives the visible subset of a record snapshot: first the time window,
then the category. Both steps preserve the caller's order and the two
filters commute.

Records may be ExpenseRecord instances or plain mappings (e.g. rows
straight from the store).
"""

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, Optional, TypeVar, Union

from expense_ledger.ledger.windows import in_window
from expense_ledger.models.expense import ALL_CATEGORIES, TimeWindow

R = TypeVar("R")


def record_field(record: Any, name: str) -> Any:
    """Read a field from a record object or a row mapping."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def is_all_categories(category_filter: Optional[str]) -> bool:
    return category_filter is None or category_filter == ALL_CATEGORIES


def filter_by_window(
    records: Iterable[R],
    time_window: Union[TimeWindow, str],
    now: date,
) -> list[R]:
    """Keep records whose date falls in time_window."""
    window = TimeWindow(time_window)
    return [
        record for record in records
        if in_window(record_field(record, "date"), window, now)
    ]


def filter_by_category(
    records: Iterable[R],
    category_filter: Optional[str],
) -> list[R]:
    """Keep records whose category equals category_filter exactly."""
    if is_all_categories(category_filter):
        return list(records)
    return [
        record for record in records
        if record_field(record, "category") == category_filter
    ]


def filter_expenses(
    records: Iterable[R],
    time_window: Union[TimeWindow, str] = TimeWindow.ALL,
    category_filter: Optional[str] = None,
    now: Optional[date] = None,
) -> list[R]:
    """
    The visible subset: time window first, then category.

    now defaults to today's date.
    """
    if now is None:
        now = date.today()
    time_filtered = filter_by_window(records, time_window, now)
    return filter_by_category(time_filtered, category_filter)
