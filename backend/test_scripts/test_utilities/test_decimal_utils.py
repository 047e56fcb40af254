"""
Test decimal precision utilities.
All test is independent of the others, so help use pytest features.
"""
from decimal import Decimal

import pytest

from backend.app.db.models import Account, Expense, Income, Tag
from backend.app.utils.decimal_utils import (
    get_model_column_precision,
    truncate_to_db_precision,
    truncate_amount,
    )


def test_money_columns_share_precision():
    for model, column in [(Account, "balance"), (Expense, "amount"), (Income, "amount")]:
        assert get_model_column_precision(model, column) == (18, 6)


def test_invalid_column():
    with pytest.raises(ValueError, match="Column 'invalid' not found"):
        get_model_column_precision(Expense, "invalid")


def test_non_numeric_column():
    with pytest.raises(ValueError, match="not Numeric type"):
        get_model_column_precision(Tag, "name")


def test_truncation_rounds_down():
    assert truncate_to_db_precision(Decimal("175.1234569"), Account, "balance") == Decimal("175.123456")


def test_truncate_amount():
    truncated = truncate_amount(Decimal("0.0000009"))

    assert truncated == Decimal("0")
    assert truncate_amount(Decimal("30")) == Decimal("30.000000")
