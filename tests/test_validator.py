"""Tests for the record validator."""

import pytest
from decimal import Decimal

from expense_ledger.models.expense import ValidationErrorKind
from expense_ledger.validation import (
    ExpenseValidator,
    normalize_date,
    parse_amount,
    validate_expense,
)


class TestAmount:
    """Amount parsing and rejection."""

    @pytest.mark.parametrize("raw", ["0", "-5", "-0.01", "0.00", "abc", "", "   ", "NaN", "Infinity", "1,000", "12abc"])
    def test_invalid_amounts_rejected(self, raw):
        outcome = validate_expense(raw, "Food", "", "")
        assert outcome.is_valid is False
        assert outcome.issue.kind == ValidationErrorKind.INVALID_AMOUNT
        assert outcome.issue.field == "amount"

    @pytest.mark.parametrize("raw", ["1e400", "1e-400"])
    def test_amounts_outside_float_range_rejected(self, raw):
        outcome = validate_expense(raw, "Food")
        assert outcome.issue.kind == ValidationErrorKind.INVALID_AMOUNT

    def test_none_amount_rejected(self):
        outcome = validate_expense(None, "Food")
        assert outcome.issue.kind == ValidationErrorKind.INVALID_AMOUNT

    @pytest.mark.parametrize("raw,expected", [
        ("12.5", Decimal("12.5")),
        (" 7 ", Decimal("7")),
        ("0.01", Decimal("0.01")),
    ])
    def test_valid_amounts(self, raw, expected):
        assert parse_amount(raw) == expected

    def test_amount_checked_before_category(self):
        outcome = validate_expense("-1", "   ")
        assert outcome.issue.kind == ValidationErrorKind.INVALID_AMOUNT


class TestCategory:
    """Category trimming and rejection."""

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
    def test_blank_category_rejected(self, raw):
        outcome = validate_expense("10", raw)
        assert outcome.is_valid is False
        assert outcome.issue.kind == ValidationErrorKind.MISSING_CATEGORY
        assert outcome.issue.field == "category"

    def test_category_trimmed(self):
        outcome = validate_expense("10", "  Food  ")
        assert outcome.expense.category == "Food"

    def test_category_case_preserved(self):
        outcome = validate_expense("10", "food")
        assert outcome.expense.category == "food"


class TestNote:

    def test_blank_note_is_absent(self):
        assert validate_expense("1", "Food", "   ").expense.note is None

    def test_note_trimmed(self):
        assert validate_expense("1", "Food", "  lunch with Sam ").expense.note == "lunch with Sam"


class TestDateNormalization:
    """Dates are normalized, never rejected."""

    def test_empty_date_is_absent(self):
        assert normalize_date("") is None
        assert normalize_date(None) is None

    def test_iso_date_kept_as_is(self):
        assert normalize_date("2024-03-01") == "2024-03-01"

    def test_iso_shaped_date_kept_even_if_not_a_real_day(self):
        assert normalize_date("2024-13-45") == "2024-13-45"

    @pytest.mark.parametrize("raw,expected", [
        ("March 5, 2024", "2024-03-05"),
        ("2024/03/05", "2024-03-05"),
        ("5 Mar 2024 10:30", "2024-03-05"),
        ("2024-03-05T10:30:00", "2024-03-05"),
    ])
    def test_generic_dates_reformatted(self, raw, expected):
        assert normalize_date(raw) == expected

    def test_timezone_aware_date_converted_to_utc(self):
        assert normalize_date("2024-03-05T23:30:00-05:00") == "2024-03-06"

    @pytest.mark.parametrize("raw", [
        "not-a-date",
        "yesterday-ish",
        "no date here",
        "0001-01-01T00:00:00+01:00",
        "9999-12-31T23:00:00-05:00",
        "2024-03-05 10:00 +25:00",
    ])
    def test_unparseable_date_is_absent(self, raw):
        assert normalize_date(raw) is None

    def test_out_of_range_date_does_not_fail_validation(self):
        outcome = validate_expense("10", "Food", "", "0001-01-01T00:00:00+01:00")
        assert outcome.is_valid is True
        assert outcome.expense.date is None

    @pytest.mark.parametrize("raw,expected", [
        ("5", "2001-01-05"),
        ("March", "2001-03-01"),
    ])
    def test_partial_dates_do_not_depend_on_today(self, raw, expected):
        assert normalize_date(raw) == expected


class TestValidate:
    """End-to-end validation."""

    def test_valid_submission(self):
        outcome = validate_expense("12.5", "Food", "", "2024-03-01")
        assert outcome.is_valid is True
        expense = outcome.expense
        assert expense.amount == Decimal("12.5")
        assert expense.category == "Food"
        assert expense.note is None
        assert expense.date == "2024-03-01"

    def test_unparseable_date_does_not_fail_validation(self):
        outcome = validate_expense("12.5", "Food", "", "not-a-date")
        assert outcome.is_valid is True
        assert outcome.expense.date is None

    def test_validator_is_pure(self):
        validator = ExpenseValidator()
        first = validator.validate("3", "Rent", "x", "2024-01-01")
        second = validator.validate("3", "Rent", "x", "2024-01-01")
        assert first == second

    def test_raw_value_kept_on_issue(self):
        outcome = validate_expense("abc", "Food")
        assert outcome.issue.raw_value == "abc"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
