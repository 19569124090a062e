"""Decimal and count coercion for ledger amounts read from adapters."""

from collections.abc import Iterable
from decimal import Decimal

ZERO = Decimal("0")


def coerce_decimal(value) -> Decimal:
    """Normalize a raw amount to Decimal.

    Args:
        value: Amount from a SQL row, a mapping or a piecash split.

    Returns:
        Decimal: The amount; None becomes zero.

    Raises:
        decimal.InvalidOperation: If the value is not numeric.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def sum_decimals(values: Iterable) -> Decimal:
    """Sum raw amounts after coercing each one."""
    return sum((coerce_decimal(value) for value in values), ZERO)


def coerce_count(value) -> int:
    """Normalize a raw row count; None becomes zero.

    Raises:
        ValueError: If the value is not an integer or is negative.
    """
    if value is None:
        return 0
    count = int(value)
    if count < 0:
        raise ValueError(f"Negative count: {value}")
    return count


__all__ = ["ZERO", "coerce_decimal", "sum_decimals", "coerce_count"]
