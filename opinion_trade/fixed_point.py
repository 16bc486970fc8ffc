"""Exact fixed-point arithmetic for prices, share counts and base-unit amounts.

Decimal text is parsed into an integer plus a count of decimal places,
combined as integers, and only rendered back to text at the boundary.
Floats are rejected everywhere.
"""

import re
from decimal import Decimal
from typing import Union

from opinion_trade.constants import COLLATERAL_TOKEN_DECIMALS, MARKET_PRICE_DECIMALS
from opinion_trade.errors import FixedPointError

DecimalLike = Union[str, int, Decimal]

AMOUNT_DECIMALS = 18
MAX_UINT256 = 2**256 - 1
# Digits in MAX_UINT256
MAX_INTEGER_DIGITS = 78
MAX_FRACTION_DIGITS = 78

_DECIMAL_RE = re.compile(r"^([0-9]*)(?:\.([0-9]*))?$")
_UINT_RE = re.compile(r"^[0-9]+$")


def _as_text(value: DecimalLike) -> str:
    if isinstance(value, bool) or isinstance(value, float):
        raise FixedPointError(
            f"Expected decimal text, got {type(value).__name__} {value!r}"
        )
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise FixedPointError(f"Not a finite number: {value!r}")
        return format(value, "f")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    raise FixedPointError(f"Expected decimal text, got {type(value).__name__}")


def scale_to_integer(value: DecimalLike) -> tuple[int, int]:
    """
    Split decimal text into an integer and its decimal-place count.

    "1.50" -> (150, 2), "7" -> (7, 0), "0.5" -> (5, 1)

    Raises:
        FixedPointError: If the text is empty, negative or non-numeric, or
            has more digits on either side of the point than a uint256 holds
    """
    text = _as_text(value)
    if text.startswith("-"):
        raise FixedPointError(f"Negative values are not supported: {text!r}")
    match = _DECIMAL_RE.match(text)
    if match is None:
        raise FixedPointError(f"Not a decimal number: {text!r}")
    integer_part, fraction_part = match.group(1), match.group(2) or ""
    if not integer_part and not fraction_part:
        raise FixedPointError(f"Not a decimal number: {text!r}")
    if len(integer_part.lstrip("0")) > MAX_INTEGER_DIGITS:
        raise FixedPointError(
            f"Value has more than {MAX_INTEGER_DIGITS} integer digits and exceeds uint256"
        )
    if len(fraction_part) > MAX_FRACTION_DIGITS:
        raise FixedPointError(
            f"Value has more than {MAX_FRACTION_DIGITS} decimal places"
        )
    return int((integer_part + fraction_part).lstrip("0") or "0"), len(fraction_part)


def format_scaled(value: int, places: int, trim: bool = True) -> str:
    """Render a scaled integer as decimal text, trimming trailing zeros."""
    if places == 0:
        return str(value)
    integer_part, fraction_part = divmod(value, 10**places)
    fraction = str(fraction_part).rjust(places, "0")
    if trim:
        fraction = fraction.rstrip("0")
        if not fraction:
            return str(integer_part)
    return f"{integer_part}.{fraction}"


def amount_from_shares_and_price(shares: DecimalLike, price: DecimalLike) -> str:
    """
    Compute ``shares * price / 100`` exactly.

    The product keeps the decimal places of both operands and is rescaled
    to 18 decimal places (truncating anything beyond), so that
    ``amount / shares == price / 100`` holds for all practical inputs.

    Args:
        shares: Number of shares, e.g. "1.5"
        price: Price on the 0-100 scale, e.g. "99.11"

    Returns:
        Decimal text with trailing zeros removed, e.g. "1.48665"
    """
    shares_value, shares_places = scale_to_integer(shares)
    price_value, price_places = scale_to_integer(price)

    product = shares_value * price_value
    divisor = 100 * 10 ** (shares_places + price_places)
    scaled = product * 10**AMOUNT_DECIMALS // divisor

    return format_scaled(scaled, AMOUNT_DECIMALS)


def price_to_market_fraction(percentage: DecimalLike) -> str:
    """
    Convert a 0-100 price to the market's 0-1 price with 3 decimal places.

    Digits beyond the third place are truncated, never rounded:
    "99.11" -> "0.991", "99.1" -> "0.991", "1" -> "0.010".
    """
    value, places = scale_to_integer(percentage)
    scaled = value * 10**MARKET_PRICE_DECIMALS // (100 * 10**places)
    return format_scaled(scaled, MARKET_PRICE_DECIMALS, trim=False)


def scale_price(price: DecimalLike, multiplier: int) -> str:
    """Multiply a decimal price by an integer constant without rounding."""
    value, places = scale_to_integer(price)
    return format_scaled(value * multiplier, places)


def to_base_units(amount: DecimalLike, decimals: int = COLLATERAL_TOKEN_DECIMALS) -> str:
    """
    Convert human-readable decimal text to base units ("wei").

    Args:
        amount: Decimal text, e.g. "9.9"
        decimals: Token decimals (default: 18)

    Returns:
        Base-unit integer as decimal text, e.g. "9900000000000000000"

    Raises:
        FixedPointError: If the amount is not numeric, carries non-zero digits
            beyond `decimals`, or does not fit in a uint256
    """
    try:
        value, places = scale_to_integer(amount)
    except FixedPointError as e:
        raise FixedPointError(f"Failed to convert amount to base units: {e}") from e

    if places <= decimals:
        base_units = value * 10 ** (decimals - places)
    else:
        excess = 10 ** (places - decimals)
        if value % excess:
            raise FixedPointError(
                f"Failed to convert amount to base units: {amount!r} has more "
                f"than {decimals} decimal places"
            )
        base_units = value // excess

    if base_units > MAX_UINT256:
        raise FixedPointError(
            f"Failed to convert amount to base units: {amount!r} exceeds uint256"
        )
    return str(base_units)


def from_base_units(base_units: Union[str, int], decimals: int = COLLATERAL_TOKEN_DECIMALS) -> str:
    """
    Convert base units back to decimal text.

    The result always carries a fractional part ("1.0", "9.9").
    """
    text = _as_text(base_units)
    if not _UINT_RE.match(text):
        raise FixedPointError(
            f"Failed to convert base units to amount: {base_units!r} is not a "
            f"non-negative integer"
        )
    if len(text.lstrip("0")) > MAX_INTEGER_DIGITS:
        raise FixedPointError(
            f"Failed to convert base units to amount: {base_units!r} exceeds uint256"
        )
    rendered = format_scaled(int(text.lstrip("0") or "0"), decimals)
    return rendered if "." in rendered else f"{rendered}.0"
