"""
Tests for entry, account and common schemas.

Tag union normalization, field validation messages and the flattened
field-error payload.

Reference: backend/app/schemas/entries.py, backend/app/schemas/common.py
"""
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from backend.app.schemas.accounts import ACCreateItem
from backend.app.schemas.common import EntryFilters, DateRangeModel, flatten_validation_errors, validate_tags_list
from backend.app.schemas.entries import EXCreateItem, INCreateItem
from backend.app.utils.datetime_utils import Period


def valid_expense(**overrides) -> dict:
    data = {"title": "Lunch", "amount": "12.50", "date": "2026-10-19", "account_id": 1}
    data.update(overrides)
    return data


def field_errors_of(model, data) -> dict:
    with pytest.raises(ValidationError) as exc_info:
        model(**data)
    return flatten_validation_errors(exc_info.value.errors()).field_errors


# ============================================================================
# TAGS
# ============================================================================

class TestTagUnion:

    @pytest.mark.parametrize("raw, expected", [
        (None, []),
        ("", []),
        ("Food", ["Food"]),
        (" Food, Travel,,Food ", ["Food", "Travel"]),
        (["Food", "  ", "Rent", "Food"], ["Food", "Rent"]),
        ([], []),
        ])
    def test_normalization(self, raw, expected):
        assert validate_tags_list(raw) == expected

    def test_comma_string_and_array_are_equivalent(self):
        from_string = EXCreateItem(**valid_expense(tags="Food, Travel"))
        from_array = EXCreateItem(**valid_expense(tags=["Food", "Travel"]))

        assert from_string.tags == from_array.tags == ["Food", "Travel"]

    def test_tags_default_empty(self):
        assert EXCreateItem(**valid_expense()).tags == []

    def test_non_string_items_rejected(self):
        errors = field_errors_of(EXCreateItem, valid_expense(tags=["Food", 3]))

        assert "tags" in errors


# ============================================================================
# FIELDS
# ============================================================================

class TestEntryFields:

    def test_valid_payload(self):
        item = EXCreateItem(**valid_expense(description="  "))

        assert item.amount == Decimal("12.50")
        assert item.date == date(2026, 10, 19)
        assert item.description is None

    def test_timestamp_date_is_accepted(self):
        item = INCreateItem(**valid_expense(date="2026-10-19T23:15:00.000Z"))

        assert item.date == date(2026, 10, 19)

    def test_zero_amount_allowed(self):
        assert EXCreateItem(**valid_expense(amount=0)).amount == Decimal("0")

    @pytest.mark.parametrize("field, value, message", [
        ("title", "   ", "Title is required"),
        ("amount", "abc", "Amount must be a number"),
        ("amount", "-0.01", "Amount should be greater than 0"),
        ("amount", "1e30", "Amount is too large"),
        ("amount", "1000000000000", "Amount is too large"),
        ("date", "19/10/2026", "Invalid date"),
        ("account_id", "", "Account is required"),
        ])
    def test_field_messages(self, field, value, message):
        errors = field_errors_of(EXCreateItem, valid_expense(**{field: value}))

        assert errors == {field: [message]}

    def test_unknown_fields_rejected(self):
        errors = field_errors_of(INCreateItem, valid_expense(tags=["Food"]))

        assert "tags" in errors

    def test_account_name_required(self):
        assert field_errors_of(ACCreateItem, {"name": " "}) == {"name": ["Name is required"]}

    def test_largest_storable_amount_accepted(self):
        assert EXCreateItem(**valid_expense(amount="999999999999.999999")).amount == Decimal("999999999999.999999")

    def test_initial_balance_too_large(self):
        errors = field_errors_of(ACCreateItem, {"name": "Savings", "initial_balance": "1e13"})

        assert errors == {"initial_balance": ["Amount is too large"]}


# ============================================================================
# FILTERS
# ============================================================================

class TestFilters:

    def test_defaults(self):
        filters = EntryFilters()

        assert filters.account_id is None
        assert filters.period == Period.ALL
        assert filters.date_range().is_unbounded()

    def test_period_from_string(self):
        assert EntryFilters(period="last-7-days").period == Period.LAST_7_DAYS

    def test_date_range_rejects_inverted_bounds(self):
        with pytest.raises(ValidationError, match="must be after start date"):
            DateRangeModel(start=date(2026, 3, 2), end=date(2026, 3, 1))

    def test_flatten_keeps_form_level_errors(self):
        flat = flatten_validation_errors([
            {"loc": ("body",), "msg": "JSON decode error"},
            {"loc": ("query", "period"), "msg": "Input should be 'all'"},
            ])

        assert flat.form_errors == ["JSON decode error"]
        assert flat.field_errors == {"period": ["Input should be 'all'"]}
