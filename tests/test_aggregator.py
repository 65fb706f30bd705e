"""Tests for totals, per-category totals and percentage shares."""

import pytest
from decimal import Decimal

from expense_ledger.ledger.aggregator import (
    category_of,
    percentage_shares,
    sorted_category_totals,
    total,
    totals_by_category,
)
from expense_ledger.models.expense import ExpenseRecord


def make_record(id, amount, category):
    return ExpenseRecord(id=id, amount=Decimal(str(amount)), category=category)


class TestTotal:

    def test_sum_of_amounts(self):
        records = [make_record(1, 10, "Food"), make_record(2, 5, "Food"), make_record(3, 20, "Books")]
        assert total(records) == Decimal("35")

    def test_empty_is_zero(self):
        assert total([]) == Decimal("0")

    def test_no_float_drift(self):
        records = [make_record(1, "0.1", "A"), make_record(2, "0.2", "A")]
        assert total(records) == Decimal("0.3")

    def test_malformed_amounts_count_as_zero(self):
        rows = [
            {"id": 1, "amount": "abc", "category": "Food"},
            {"id": 2, "category": "Food"},
            {"id": 3, "amount": None, "category": "Food"},
            {"id": 4, "amount": 4.5, "category": "Food"},
        ]
        assert total(rows) == Decimal("4.5")


class TestTotalsByCategory:

    def test_groups_by_category(self):
        records = [make_record(1, 10, "Food"), make_record(2, 5, "Food"), make_record(3, 20, "Books")]
        assert totals_by_category(records) == {"Food": Decimal("15"), "Books": Decimal("20")}

    def test_repeated_category_summed(self):
        records = [make_record(1, 10, "Food"), make_record(2, 5, "Food"), make_record(3, 3, "Rent")]
        assert totals_by_category(records) == {"Food": Decimal("15"), "Rent": Decimal("3")}

    def test_empty_input(self):
        assert totals_by_category([]) == {}

    def test_missing_category_is_other(self):
        rows = [
            {"id": 1, "amount": 2, "category": ""},
            {"id": 2, "amount": 3},
            {"id": 3, "amount": 5, "category": None},
        ]
        assert totals_by_category(rows) == {"Other": Decimal("10")}

    def test_case_sensitive_groups(self):
        records = [make_record(1, 1, "Food"), make_record(2, 2, "food")]
        assert totals_by_category(records) == {"Food": Decimal("1"), "food": Decimal("2")}

    def test_category_of(self):
        assert category_of({"category": "Rent"}) == "Rent"
        assert category_of({"category": ""}) == "Other"

    def test_sum_of_groups_equals_total(self):
        records = [
            make_record(1, "3.10", "Food"),
            make_record(2, "7.45", "Books"),
            make_record(3, "0.45", "Food"),
        ]
        assert sum(totals_by_category(records).values()) == total(records)


class TestPercentageShares:

    def test_spending_split(self):
        shares = percentage_shares({"Food": Decimal("15"), "Books": Decimal("20")})
        assert shares == {"Food": 42.9, "Books": 57.1}

    def test_quarters(self):
        assert percentage_shares({"Food": 15, "Rent": 5}) == {"Food": 75.0, "Rent": 25.0}

    def test_thirds(self):
        assert percentage_shares({"A": 1, "B": 2}) == {"A": 33.3, "B": 66.7}

    def test_rounds_half_up(self):
        assert percentage_shares({"A": 1, "B": 1999}) == {"A": 0.1, "B": 100.0}

    def test_single_category(self):
        assert percentage_shares({"Rent": Decimal("800")}) == {"Rent": 100.0}

    def test_zero_grand_total(self):
        assert percentage_shares({"A": 0, "B": Decimal("0")}) == {"A": 0.0, "B": 0.0}

    def test_empty(self):
        assert percentage_shares({}) == {}


class TestSortedCategoryTotals:

    def test_descending_with_name_tie_break(self):
        rows = sorted_category_totals({"Rent": 5, "Books": 5, "Food": 10})
        assert [row.category for row in rows] == ["Food", "Books", "Rent"]
        assert rows[0].total == Decimal("10")
        assert rows[0].share == 50.0

    def test_empty(self):
        assert sorted_category_totals({}) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
