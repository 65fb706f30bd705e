"""
Record Validator

Turns the raw strings from the expense form into an ExpenseInput, or
rejects them.

HARD FAILURES (the only two):
- Amount is not a number, or is not greater than zero
- Category is blank after trimming

EVERYTHING ELSE IS NORMALIZED, NOT REJECTED:
- Notes are trimmed; a blank note is stored as absent
- A date already in YYYY-MM-DD form is kept as typed
- Any other date is parsed leniently and rewritten as YYYY-MM-DD (UTC)
- A date that cannot be parsed is dropped. A typo in the date must
  never stop someone from recording an expense.

Validation is pure: no storage access, no logging.
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from expense_ledger.ledger.dates import parse_generic_datetime, to_utc_date
from expense_ledger.models.expense import (
    ISO_DATE_PATTERN,
    ExpenseInput,
    ValidationErrorKind,
    ValidationIssue,
    ValidationOutcome,
)

_ISO_DATE_RE = re.compile(ISO_DATE_PATTERN)


def parse_amount(raw_amount: Optional[str]) -> Optional[Decimal]:
    """
    Parse a positive, finite decimal amount. None if it is not one.

    Amounts are stored as REAL, so anything that overflows a float or
    underflows it to 0 is rejected too.
    """
    text = (raw_amount or "").strip()
    if not text:
        return None
    try:
        amount = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    as_float = float(amount)
    if not math.isfinite(as_float) or as_float == 0:
        return None
    return amount


def normalize_date(raw_date: Optional[str]) -> Optional[str]:
    """
    Normalize a raw date to YYYY-MM-DD, or None.

    Input that already looks like YYYY-MM-DD is returned unchanged,
    even if it is not a real calendar day.
    """
    if not raw_date:
        return None
    if _ISO_DATE_RE.fullmatch(raw_date):
        return raw_date

    parsed = parse_generic_datetime(raw_date)
    if parsed is None:
        return None
    try:
        return to_utc_date(parsed).isoformat()
    except (OverflowError, ValueError):
        # Offset out of range, or the UTC date falls outside year 1..9999
        return None


def normalize_note(raw_note: Optional[str]) -> Optional[str]:
    note = (raw_note or "").strip()
    return note or None


class ExpenseValidator:
    """
    Validates raw expense form input.

    Stateless; one instance can be shared freely.
    """

    def validate(
        self,
        raw_amount: Optional[str],
        raw_category: Optional[str],
        raw_note: Optional[str] = "",
        raw_date: Optional[str] = "",
    ) -> ValidationOutcome:
        """
        Validate one submission.

        Returns an outcome carrying either the ExpenseInput or the
        first issue found (amount is checked before category).
        """
        amount = parse_amount(raw_amount)
        if amount is None:
            return ValidationOutcome(issue=ValidationIssue(
                field="amount",
                kind=ValidationErrorKind.INVALID_AMOUNT,
                message="Amount must be a number greater than zero",
                raw_value=raw_amount,
            ))

        category = (raw_category or "").strip()
        if not category:
            return ValidationOutcome(issue=ValidationIssue(
                field="category",
                kind=ValidationErrorKind.MISSING_CATEGORY,
                message="Category is required",
                raw_value=raw_category,
            ))

        return ValidationOutcome(expense=ExpenseInput(
            amount=amount,
            category=category,
            note=normalize_note(raw_note),
            date=normalize_date(raw_date),
        ))


_default_validator = ExpenseValidator()


def validate_expense(
    raw_amount: Optional[str],
    raw_category: Optional[str],
    raw_note: Optional[str] = "",
    raw_date: Optional[str] = "",
) -> ValidationOutcome:
    """Validate with the shared validator."""
    return _default_validator.validate(raw_amount, raw_category, raw_note, raw_date)
