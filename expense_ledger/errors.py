"""
Exception hierarchy for the Expense Ledger.

Only two things can go wrong in the core: an amount that is not a
positive number, and a category that is blank. Everything else
(malformed dates, malformed stored amounts) degrades to a neutral
default instead of raising.

Storage errors live with the storage interface but share the same base
class so the UI can catch ``ExpenseLedgerError`` once.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from expense_ledger.models.expense import ValidationIssue


class ExpenseLedgerError(Exception):
    """Base exception for the ledger."""
    pass


class ExpenseValidationError(ExpenseLedgerError):
    """Raw input was rejected by the record validator."""

    def __init__(self, issue: "ValidationIssue"):
        super().__init__(issue.message)
        self.issue = issue


class InvalidAmountError(ExpenseValidationError):
    """Amount is not a number or is not greater than zero."""
    pass


class MissingCategoryError(ExpenseValidationError):
    """Category is empty after trimming."""
    pass
