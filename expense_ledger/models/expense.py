"""
Core Data Models for the Expense Ledger

These models define the schemas for all data flowing through the ledger:
raw input that passed validation, records read back from the store, and
the derived views handed to presentation.

DESIGN DECISION: Validated input is strict, stored records are lenient.
The validator guarantees invariants for everything we write. Records we
read back are a snapshot of whatever the store holds, so ExpenseRecord
coerces malformed values to neutral defaults instead of raising.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from expense_ledger.errors import (
    ExpenseValidationError,
    InvalidAmountError,
    MissingCategoryError,
)


# Label for records whose category is absent or empty
OTHER_CATEGORY = "Other"

# Category filter value that disables category filtering
ALL_CATEGORIES = "all"

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

ZERO = Decimal("0")


def coerce_amount(value: Any) -> Decimal:
    """
    Coerce a stored amount to Decimal.

    Missing, non-numeric or non-finite values become 0. Never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not amount.is_finite():
        return ZERO
    return amount


def _blank_to_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    return text or None


# =============================================================================
# ENUMS
# =============================================================================

class TimeWindow(str, Enum):
    """
    Time windows a user can view the ledger through.

    WEEK is the trailing 7 days including today.
    MONTH is the current calendar month.
    """
    ALL = "all"
    WEEK = "week"
    MONTH = "month"

    @property
    def label(self) -> str:
        """Display label for the window."""
        return _WINDOW_LABELS[self]


_WINDOW_LABELS = {
    TimeWindow.ALL: "All",
    TimeWindow.WEEK: "This Week",
    TimeWindow.MONTH: "This Month",
}


class ValidationErrorKind(str, Enum):
    """The only two hard validation failures."""
    INVALID_AMOUNT = "invalid_amount"
    MISSING_CATEGORY = "missing_category"


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ExpenseInput(BaseModel):
    """
    Validated user input, ready to be written to the store.

    Produced only by the record validator. The same shape is used
    for creating a new expense and for replacing an existing one.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent (currency-agnostic)"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Free-form category, case-sensitive"
    )
    note: Optional[str] = Field(
        default=None,
        description="Optional note, never an empty string"
    )
    date: Optional[str] = Field(
        default=None,
        pattern=ISO_DATE_PATTERN,
        description="ISO date (YYYY-MM-DD) or absent"
    )

    @field_validator('note', mode='before')
    @classmethod
    def normalize_note(cls, v: Any) -> Optional[str]:
        """Blank notes are stored as absent."""
        return _blank_to_none(v)


class ExpenseRecord(BaseModel):
    """
    An expense as read back from the store.

    The id is assigned by the store and never changes. Field values are
    not re-validated: use from_row() to build one from a raw storage row.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        description="Store-assigned identifier"
    )
    amount: Decimal = Field(
        default=ZERO,
        description="Amount spent"
    )
    category: str = Field(
        default="",
        description="Category as stored"
    )
    note: Optional[str] = None
    date: Optional[str] = Field(
        default=None,
        description="Date as stored, may not be a valid ISO date"
    )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ExpenseRecord":
        """Build a record from a storage row, coercing malformed values."""
        category = row.get("category")
        return cls(
            id=int(row["id"]),
            amount=coerce_amount(row.get("amount")),
            category="" if category is None else str(category),
            note=_blank_to_none(row.get("note")),
            date=_blank_to_none(row.get("date")),
        )

    @classmethod
    def from_input(cls, expense_id: int, expense: ExpenseInput) -> "ExpenseRecord":
        """Attach a store-assigned id to validated input."""
        return cls(id=expense_id, **expense.model_dump())


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """Why a raw input was rejected."""
    model_config = ConfigDict(frozen=True)

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    kind: ValidationErrorKind
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    raw_value: Optional[str] = None


class ValidationOutcome(BaseModel):
    """
    Result of validating raw input.

    Exactly one of expense / issue is set.
    """
    model_config = ConfigDict(frozen=True)

    expense: Optional[ExpenseInput] = None
    issue: Optional[ValidationIssue] = None

    @model_validator(mode='after')
    def exactly_one(self) -> 'ValidationOutcome':
        if (self.expense is None) == (self.issue is None):
            raise ValueError("Outcome must carry either an expense or an issue")
        return self

    @property
    def is_valid(self) -> bool:
        return self.expense is not None

    def unwrap(self) -> ExpenseInput:
        """Return the validated input or raise the matching error."""
        if self.expense is not None:
            return self.expense
        if self.issue.kind == ValidationErrorKind.INVALID_AMOUNT:
            raise InvalidAmountError(self.issue)
        if self.issue.kind == ValidationErrorKind.MISSING_CATEGORY:
            raise MissingCategoryError(self.issue)
        raise ExpenseValidationError(self.issue)


# =============================================================================
# DERIVED VIEW MODELS
# =============================================================================

class CategoryTotal(BaseModel):
    """One row of the per-category breakdown."""
    model_config = ConfigDict(frozen=True)

    category: str
    total: Decimal
    share: float = Field(
        ...,
        description="Percentage of the window total, one decimal place"
    )


class LedgerQuery(BaseModel):
    """
    What the user is currently looking at.

    A category filter of None or "all" shows every category.
    """
    model_config = ConfigDict(frozen=True)

    time_window: TimeWindow = TimeWindow.ALL
    category_filter: Optional[str] = None
    reference_date: date = Field(
        default_factory=date.today,
        description="The 'today' windows are computed against"
    )

    @field_validator('category_filter', mode='before')
    @classmethod
    def normalize_category_filter(cls, v: Any) -> Optional[str]:
        if v is None or v == "" or v == ALL_CATEGORIES:
            return None
        return v


class LedgerView(BaseModel):
    """
    Everything presentation needs for one screen render.

    The breakdown (totals_by_category, category_breakdown, window_total)
    is computed over the time-filtered records, so every category stays
    listed while one of them is selected. records and visible_total
    reflect both filters.
    """
    model_config = ConfigDict(frozen=True)

    time_window: TimeWindow
    category_filter: Optional[str] = None
    reference_date: date

    records: tuple[ExpenseRecord, ...] = ()
    visible_total: Decimal = ZERO

    window_total: Decimal = ZERO
    totals_by_category: dict[str, Decimal] = Field(default_factory=dict)
    category_breakdown: tuple[CategoryTotal, ...] = ()
    categories: tuple[str, ...] = ()

    @property
    def window_label(self) -> str:
        return self.time_window.label

    @property
    def record_count(self) -> int:
        return len(self.records)
