"""
Tests for the Expense Ledger

Test strategy:
1. Unit tests for individual components (models, validator, ledger engine)
2. Integration tests for flows (with in-memory or temporary SQLite storage)
3. No network, no shared database files
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from expense_ledger.errors import InvalidAmountError, MissingCategoryError
from expense_ledger.models.expense import (
    CategoryTotal,
    ExpenseInput,
    ExpenseRecord,
    LedgerQuery,
    LedgerView,
    TimeWindow,
    ValidationErrorKind,
    ValidationIssue,
    ValidationOutcome,
    coerce_amount,
)
from expense_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestExpenseModels:
    """Tests for expense-related Pydantic models."""

    def test_expense_input_creation(self):
        """Test ExpenseInput model creation."""
        expense = ExpenseInput(
            amount=Decimal("12.50"),
            category="Food",
            note="Lunch",
            date="2024-03-01",
        )
        assert expense.amount == Decimal("12.50")
        assert expense.category == "Food"
        assert expense.date == "2024-03-01"

    def test_expense_input_strips_whitespace(self):
        """Test that whitespace is stripped from category."""
        expense = ExpenseInput(amount=Decimal("1"), category="  Food  ")
        assert expense.category == "Food"

    def test_expense_input_blank_note_is_absent(self):
        """Test that a blank note is stored as None, not an empty string."""
        expense = ExpenseInput(amount=Decimal("1"), category="Food", note="   ")
        assert expense.note is None

    def test_expense_input_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValueError):
            ExpenseInput(amount=Decimal("0"), category="Food")
        with pytest.raises(ValueError):
            ExpenseInput(amount=Decimal("-3"), category="Food")

    def test_expense_input_rejects_blank_category(self):
        with pytest.raises(ValueError):
            ExpenseInput(amount=Decimal("1"), category="   ")

    def test_expense_input_rejects_non_iso_date(self):
        with pytest.raises(ValueError):
            ExpenseInput(amount=Decimal("1"), category="Food", date="03/01/2024")

    def test_expense_input_is_immutable(self):
        expense = ExpenseInput(amount=Decimal("1"), category="Food")
        with pytest.raises(ValidationError):
            expense.category = "Rent"

    def test_record_from_row(self):
        """Test building a record from a storage row."""
        record = ExpenseRecord.from_row({
            "id": 7,
            "amount": 12.5,
            "category": "Food",
            "note": None,
            "date": "2024-03-01",
        })
        assert record.id == 7
        assert record.amount == Decimal("12.5")
        assert record.note is None

    def test_record_from_row_coerces_malformed_values(self):
        """Test that malformed stored values degrade instead of raising."""
        record = ExpenseRecord.from_row({
            "id": "3",
            "amount": "not a number",
            "category": None,
            "note": "",
            "date": "  ",
        })
        assert record.id == 3
        assert record.amount == Decimal("0")
        assert record.category == ""
        assert record.note is None
        assert record.date is None

    def test_record_from_row_accepts_date_objects(self):
        record = ExpenseRecord.from_row({"id": 1, "amount": 1, "category": "A", "date": date(2024, 3, 1)})
        assert record.date == "2024-03-01"

    def test_record_from_input(self):
        expense = ExpenseInput(amount=Decimal("5"), category="Books", note="Novel")
        record = ExpenseRecord.from_input(42, expense)
        assert record.id == 42
        assert record.category == "Books"
        assert record.note == "Novel"


class TestCoerceAmount:
    """Tests for amount coercion."""

    @pytest.mark.parametrize("value,expected", [
        (10, Decimal("10")),
        (0.1, Decimal("0.1")),
        ("12.5", Decimal("12.5")),
        (" 3 ", Decimal("3")),
        (Decimal("7.25"), Decimal("7.25")),
    ])
    def test_numeric_values(self, value, expected):
        assert coerce_amount(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", float("nan"), float("inf"), True, [1]])
    def test_malformed_values_become_zero(self, value):
        assert coerce_amount(value) == Decimal("0")


class TestValidationOutcome:
    """Tests for the validation Result type."""

    def _issue(self, kind: ValidationErrorKind) -> ValidationIssue:
        return ValidationIssue(field="amount", kind=kind, message="bad")

    def test_requires_exactly_one_side(self):
        with pytest.raises(ValueError):
            ValidationOutcome()
        with pytest.raises(ValueError):
            ValidationOutcome(
                expense=ExpenseInput(amount=Decimal("1"), category="A"),
                issue=self._issue(ValidationErrorKind.INVALID_AMOUNT),
            )

    def test_unwrap_valid(self):
        expense = ExpenseInput(amount=Decimal("1"), category="A")
        outcome = ValidationOutcome(expense=expense)
        assert outcome.is_valid is True
        assert outcome.unwrap() == expense

    def test_unwrap_invalid_amount(self):
        outcome = ValidationOutcome(issue=self._issue(ValidationErrorKind.INVALID_AMOUNT))
        assert outcome.is_valid is False
        with pytest.raises(InvalidAmountError) as exc_info:
            outcome.unwrap()
        assert exc_info.value.issue.kind == ValidationErrorKind.INVALID_AMOUNT

    def test_unwrap_missing_category(self):
        outcome = ValidationOutcome(issue=self._issue(ValidationErrorKind.MISSING_CATEGORY))
        with pytest.raises(MissingCategoryError):
            outcome.unwrap()


class TestViewModels:
    """Tests for query and view models."""

    def test_time_window_labels(self):
        assert TimeWindow.ALL.label == "All"
        assert TimeWindow.WEEK.label == "This Week"
        assert TimeWindow.MONTH.label == "This Month"

    def test_time_window_from_string(self):
        assert TimeWindow("week") is TimeWindow.WEEK

    @pytest.mark.parametrize("value", [None, "", "all"])
    def test_query_all_categories_normalized_to_none(self, value):
        query = LedgerQuery(category_filter=value)
        assert query.category_filter is None

    def test_query_keeps_category(self):
        query = LedgerQuery(time_window="month", category_filter="Food")
        assert query.time_window == TimeWindow.MONTH
        assert query.category_filter == "Food"

    def test_query_defaults_to_today(self):
        assert LedgerQuery().reference_date == date.today()

    def test_view_properties(self):
        view = LedgerView(
            time_window=TimeWindow.WEEK,
            reference_date=date(2024, 3, 15),
            records=(ExpenseRecord(id=1, amount=Decimal("2"), category="A"),),
            category_breakdown=(CategoryTotal(category="A", total=Decimal("2"), share=100.0),),
        )
        assert view.window_label == "This Week"
        assert view.record_count == 1


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            description="Expense saved",
        )
        assert event.event_type == AuditEventType.EXPENSE_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            description="Expense saved",
            entity_id=5,
            details={"category": "Food", "amount": "12.5"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_created"
        assert log_dict["entity_id"] == 5
        assert log_dict["details"]["category"] == "Food"

    def test_audit_event_to_row(self):
        """Test conversion to a flat row."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            description="Expense deleted",
            is_user_action=True,
        )
        row = event.to_row()
        assert len(row) == 11
        assert row[2] == "expense_deleted"
        assert row[10] == "True"

    def test_audit_event_from_row(self):
        """Test that an event survives a trip through its flat row."""
        event = AuditEventBuilder.storage_error(
            operation="update",
            error_message="Expense not found: 4",
            correlation_id=uuid4(),
            expense_id=4,
        )
        restored = AuditEvent.from_row(event.to_row())
        assert restored == event
        assert restored.entity_id == 4

    def test_audit_event_from_bad_row(self):
        """Test that a row that is not an event is rejected."""
        with pytest.raises(ValueError):
            AuditEvent.from_row(["not-a-uuid", "2024-03-01T00:00:00", "expense_created"])

    def test_builder_expense_created(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.expense_created(
            expense_id=9,
            category="Food",
            amount="12.5",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.EXPENSE_CREATED
        assert event.entity_id == 9
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_builder_validation_failed_is_warning(self):
        event = AuditEventBuilder.validation_failed(
            field="amount",
            kind="invalid_amount",
            message="Amount must be a number greater than zero",
            correlation_id=uuid4(),
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.details["kind"] == "invalid_amount"

    def test_builder_delete_not_found_is_warning(self):
        event = AuditEventBuilder.expense_deleted(expense_id=3, found=False, correlation_id=uuid4())
        assert event.severity == AuditSeverity.WARNING
        assert "not found" in event.description


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
