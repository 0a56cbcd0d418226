"""Token amount conversions.

Amounts are kept as ``Decimal`` in whole-token units and as ``int`` in base
units (the integer the token contract stores). Floats never enter the math.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

Number = Union[Decimal, int, str]


def to_base_units(amount: Number, decimals: int) -> int:
    """Scale a whole-token amount to base units.

    Args:
        amount: Amount in whole tokens, e.g. "0.1"
        decimals: Token decimal precision, e.g. 18

    Returns:
        Integer amount in base units

    Raises:
        ValueError: If the amount is negative, not a number, or has more
            fractional digits than the token supports
    """
    if decimals < 0:
        raise ValueError(f"Invalid decimals: {decimals}")
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}") from None
    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid amount: {amount!r}")

    # Integer math on the digit tuple; Decimal arithmetic would round past 28 digits
    _, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits)) or "0")
    shift = exponent + decimals
    if shift >= 0:
        return coefficient * 10**shift

    scaled, remainder = divmod(coefficient, 10**-shift)
    if remainder:
        raise ValueError(f"{amount} has more than {decimals} decimal places")
    return scaled


def from_base_units(value: Number, decimals: int) -> Decimal:
    """Convert a base-unit integer (or its string form) to whole tokens."""
    return Decimal(f"{int(value)}E-{decimals}")


def bps_to_percent(bps: Number) -> Decimal:
    """Convert basis points to a percentage (6000 -> 60)."""
    return Decimal(str(bps)) / Decimal(100)
