"""
Decimal precision utilities for Ledgerly.

All money columns in the database use NUMERIC(precision, scale).
Amounts are truncated to the column scale before they are stored or
compared, so that "did the amount change?" checks during an expense edit
compare exactly what the database holds.

Usage:
    from backend.app.utils.decimal_utils import truncate_amount

    truncate_amount(Decimal("12.3456789"))
    # Returns: Decimal("12.345678")
"""
from decimal import Decimal, ROUND_DOWN
from typing import Type, Tuple

from sqlalchemy import Numeric
from sqlmodel import SQLModel

from backend.app.db.models import Expense


def get_model_column_precision(model: Type[SQLModel], column_name: str) -> Tuple[int, int]:
    """
    Get (precision, scale) for a numeric column from a SQLModel table.

    Args:
        model: SQLModel class (e.g., Account, Expense)
        column_name: Column name (e.g., "balance", "amount")

    Returns:
        Tuple of (precision, scale), e.g. (18, 6)

    Raises:
        ValueError: If column not found or not a Numeric type
    """
    if not hasattr(model, '__table__'):
        raise ValueError(f"Model {model.__name__} has no __table__ attribute")

    table = model.__table__

    if column_name not in table.columns:
        raise ValueError(f"Column '{column_name}' not found in {model.__name__}")

    column_type = table.columns[column_name].type

    if not isinstance(column_type, Numeric):
        raise ValueError(
            f"Column '{column_name}' in {model.__name__} is not Numeric type "
            f"(found: {type(column_type).__name__})"
            )

    if column_type.precision is None or column_type.scale is None:
        raise ValueError(f"Column '{column_name}' in {model.__name__} has undefined precision/scale")

    return column_type.precision, column_type.scale


def truncate_to_db_precision(value: Decimal, model: Type[SQLModel], column_name: str) -> Decimal:
    """
    Truncate decimal to match database column scale.

    Uses ROUND_DOWN to match SQLite truncation behavior.

    Example:
        >>> truncate_to_db_precision(Decimal("175.123456789"), Expense, "amount")
        Decimal('175.123456')
    """
    _, scale = get_model_column_precision(model, column_name)
    quantizer = Decimal(10) ** -scale
    return value.quantize(quantizer, rounding=ROUND_DOWN)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def truncate_amount(value: Decimal) -> Decimal:
    """Truncate an entry amount to the precision of expenses.amount / incomes.amount."""
    return truncate_to_db_precision(value, Expense, "amount")
