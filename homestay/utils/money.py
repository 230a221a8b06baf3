"""
Fixed-point money helpers.

All amounts are ``Decimal``. Rounding is ROUND_HALF_UP to the currency's
minor unit (exponent 0 for VND, 2 for USD).
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

Number = Union[Decimal, int, str]


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal without passing through binary float."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        raise TypeError("Monetary values must not be floats")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid monetary value: {value!r}") from e


def quantum(minor_units: int) -> Decimal:
    """Smallest representable amount for a currency, e.g. Decimal('0.01')."""
    return Decimal(1).scaleb(-minor_units)


def round_money(amount: Number, minor_units: int = 0) -> Decimal:
    """Round half-up to the currency minor unit."""
    return to_decimal(amount).quantize(quantum(minor_units), rounding=ROUND_HALF_UP)
