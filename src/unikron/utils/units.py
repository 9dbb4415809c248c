"""Amount parsing and smallest-unit conversion.

All conversions go through Decimal with a context wide enough for
uint256 values, so nothing is ever rounded through a float.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

# uint256 has 78 decimal digits; leave room for fractional places
_PRECISION = 100


def parse_amount(value: Union[str, Decimal, int, float, None]) -> Optional[Decimal]:
    """Parse a user supplied amount.

    Returns None for empty, unparsable, negative or non-finite input.
    Zero is returned as Decimal("0"); callers decide whether zero is valid.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            amount = Decimal(text)
        except (InvalidOperation, ValueError):
            return None

    if not amount.is_finite() or amount < 0:
        return None
    return amount


def is_positive_amount(value: Union[str, Decimal, None]) -> bool:
    """Check that value parses to a finite decimal greater than zero."""
    amount = parse_amount(value)
    return amount is not None and amount > 0


def to_smallest_unit(value: Union[str, Decimal], decimals: int) -> int:
    """Convert a human amount to an integer number of smallest units.

    Raises:
        ValueError: amount is invalid or has more fractional digits
            than the token supports
    """
    amount = parse_amount(value)
    if amount is None:
        raise ValueError(f"Invalid amount: {value!r}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = amount.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"Amount {value} has more than {decimals} decimal places")
        return int(scaled)


def from_smallest_unit(value: Union[int, str], decimals: int) -> str:
    """Convert smallest units back to a human decimal string.

    Trailing zeros are dropped and no exponent notation is produced
    (e.g. 1500000 with 6 decimals -> "1.5").
    """
    try:
        raw = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid integer amount: {value!r}")

    if not raw.is_finite() or raw != raw.to_integral_value():
        raise ValueError(f"Invalid integer amount: {value!r}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        human = raw.scaleb(-decimals).normalize()
        return format(human, "f")


def format_fixed(amount: Decimal, decimals: int) -> str:
    """Render an amount with exactly ``decimals`` fractional digits (half-up)."""
    with localcontext() as ctx:
        # Quantize needs room for every integer digit plus the fraction
        ctx.prec = max(_PRECISION, amount.adjusted() + decimals + 2)
        quantum = Decimal(1).scaleb(-decimals)
        return format(amount.quantize(quantum, rounding=ROUND_HALF_UP), "f")
