"""Input validation package."""

from expense_ledger.validation.validator import (
    ExpenseValidator,
    normalize_date,
    parse_amount,
    validate_expense,
)

__all__ = ["ExpenseValidator", "normalize_date", "parse_amount", "validate_expense"]
