"""
Money helpers.

All amounts are Decimals quantized to cents; rates to four places.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from referral_core.config.constants import MONEY_QUANTUM, RATE_QUANTUM, ZERO


def to_decimal(value: Any) -> Decimal:
    """
    Convert driver or user values to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary
    expansion. None becomes zero.

    Raises:
        InvalidOperation: If the value is not numeric
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"Boolean is not a monetary value: {value!r}")
    return Decimal(str(value).strip())


def quantize_money(value: Decimal) -> Decimal:
    """Round half-up to cents."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def quantize_rate(value: Decimal) -> Decimal:
    """Round half-up to the stored rate precision."""
    return value.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


def has_more_than_cents(value: Decimal) -> bool:
    """True if the amount carries sub-cent precision."""
    return value != value.quantize(MONEY_QUANTUM)
