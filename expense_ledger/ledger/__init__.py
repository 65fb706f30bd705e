"""Ledger engine: window classification, filtering and aggregation."""

from expense_ledger.ledger.aggregator import (
    category_of,
    percentage_shares,
    sorted_category_totals,
    total,
    totals_by_category,
)
from expense_ledger.ledger.pipeline import (
    filter_by_category,
    filter_by_window,
    filter_expenses,
    record_field,
)
from expense_ledger.ledger.windows import in_window, week_start

__all__ = [
    "category_of",
    "filter_by_category",
    "filter_by_window",
    "filter_expenses",
    "in_window",
    "percentage_shares",
    "record_field",
    "sorted_category_totals",
    "total",
    "totals_by_category",
    "week_start",
]
