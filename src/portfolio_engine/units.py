from __future__ import annotations

import re
from decimal import MAX_PREC, ROUND_FLOOR, Context, Decimal, InvalidOperation

DEFAULT_DECIMALS = 8
MAX_DECIMALS = 32
# u256 max has 78 digits
MAX_RAW_AMOUNT_DIGITS = 78

# scaling by a power of ten must never round, whatever the digit count
_EXACT = Context(prec=MAX_PREC)

_RAW_AMOUNT_RE = re.compile(r"[0-9]{1,%d}" % MAX_RAW_AMOUNT_DIGITS)


def is_raw_amount(value: object) -> bool:
    """Return True if ``value`` is a non-negative integer amount.

    Accepts non-negative ints and strings made only of ASCII digits, up to
    ``MAX_RAW_AMOUNT_DIGITS`` digits. Rejects None, bools, empty strings,
    ``"null"``/``"undefined"``/``"NaN"``, signs, whitespace, fractional and
    oversized values.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return 0 <= value < 10**MAX_RAW_AMOUNT_DIGITS
    if not isinstance(value, str):
        return False
    return _RAW_AMOUNT_RE.fullmatch(value) is not None


def from_minimal_units(raw_amount: int | str, decimals: int) -> Decimal:
    """Scale an integer amount down by ``10**decimals``.

    Args:
        raw_amount: Amount in the token's smallest unit.
        decimals: Decimal precision of the token.

    Returns:
        The exact human-readable quantity as a Decimal.
    """
    return Decimal(raw_amount).scaleb(-decimals, context=_EXACT)


def parse_decimal(value: object) -> Decimal:
    """Parse a human-readable number into a finite Decimal.

    Raises:
        ValueError: If ``value`` is not numeric or not finite
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")
    try:
        # str() keeps float inputs at their shortest repr (1.5 -> "1.5")
        parsed = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e
    if not parsed.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return parsed


def to_minimal_units(amount: object, decimals: int) -> int:
    """Convert a human-readable amount to the token's smallest unit.

    Computes ``floor(amount * 10**decimals)`` with Decimal arithmetic.

    Raises:
        ValueError: If ``amount`` is not a finite number
    """
    scaled = parse_decimal(amount).scaleb(decimals, context=_EXACT)
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))
