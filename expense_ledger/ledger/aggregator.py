"""
Aggregator

Totals, per-category totals and percentage shares over any subset of
records. Every function here is total: malformed amounts count as 0 and
an empty input yields an empty (or zero) result.
"""

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from expense_ledger.ledger.pipeline import record_field
from expense_ledger.models.expense import (
    OTHER_CATEGORY,
    ZERO,
    CategoryTotal,
    coerce_amount,
)

_ONE_DECIMAL = Decimal("0.1")


def total(records: Iterable[Any]) -> Decimal:
    """Sum of amounts. Non-numeric or missing amounts contribute 0."""
    return sum(
        (coerce_amount(record_field(record, "amount")) for record in records),
        ZERO,
    )


def category_of(record: Any) -> str:
    """Grouping key for a record. Absent or empty categories are 'Other'."""
    category = record_field(record, "category")
    if category is None or category == "":
        return OTHER_CATEGORY
    return str(category)


def totals_by_category(records: Iterable[Any]) -> dict[str, Decimal]:
    """Sum of amounts per category."""
    totals: dict[str, Decimal] = {}
    for record in records:
        key = category_of(record)
        amount = coerce_amount(record_field(record, "amount"))
        totals[key] = totals.get(key, ZERO) + amount
    return totals


def percentage_shares(totals: Mapping[str, Any]) -> dict[str, float]:
    """
    Each category's share of the grand total, in percent.

    Rounded half-up to one decimal place. If the grand total is 0
    every share is 0.0.
    """
    amounts = {category: coerce_amount(value) for category, value in totals.items()}
    grand_total = sum(amounts.values(), ZERO)

    if grand_total == 0:
        return {category: 0.0 for category in amounts}

    return {
        category: float(
            (Decimal(100) * amount / grand_total).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
        )
        for category, amount in amounts.items()
    }


def sorted_category_totals(totals: Mapping[str, Any]) -> list[CategoryTotal]:
    """
    Breakdown rows, largest total first.

    Ties are broken by category name so the order is reproducible.
    """
    shares = percentage_shares(totals)
    ordered = sorted(
        totals.items(),
        key=lambda item: (-coerce_amount(item[1]), item[0]),
    )
    return [
        CategoryTotal(
            category=category,
            total=coerce_amount(amount),
            share=shares[category],
        )
        for category, amount in ordered
    ]
