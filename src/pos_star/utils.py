"""Shared utilities for the POS star-schema pipeline.

This module provides:

- Money helpers: exact conversion between integer cents and Decimal amounts
- Ratio helpers: presentation-time rounding with empty-group guarding
- Naming helpers: turning store locations into column-safe slugs
- Date parsing: standardized date string parsing

Examples:
    >>> cents_to_decimal(1050)
    Decimal('10.50')
    >>> divide(10, 3)
    Decimal('3.33')
    >>> divide(5, 0) is None
    True
    >>> column_slug("Hell's Kitchen")
    'hells_kitchen'

"""

from __future__ import annotations

import numbers
import re
import unicodedata
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from pos_star.exceptions import DivisionUndefined

CENT = Decimal("0.01")
HUNDRED = Decimal(100)


def parse_date(s: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Raises:
        ValueError: If the date string is not in YYYY-MM-DD format.

    Examples:
        >>> parse_date("2023-01-15")
        datetime.date(2023, 1, 15)

    """
    return datetime.strptime(s, "%Y-%m-%d").date()


def _as_decimal(value: Decimal | numbers.Integral) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, numbers.Integral):
        return Decimal(int(value))
    raise TypeError(f"Expected an integer or Decimal, got {type(value).__name__}")


def cents_to_decimal(cents: numbers.Integral) -> Decimal:
    """Convert integer cents to an exact 2-decimal Decimal amount.

    Examples:
        >>> cents_to_decimal(300)
        Decimal('3.00')

    """
    return Decimal(int(cents)).scaleb(-2)


def quantize(value: Decimal) -> Decimal:
    """Round a Decimal half-up to 2 fractional digits (presentation only)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def divide(
    numerator: Decimal | numbers.Integral,
    denominator: Decimal | numbers.Integral,
    *,
    strict: bool = False,
) -> Decimal | None:
    """Divide and round for presentation, guarding empty groups.

    Args:
        numerator: Integer or Decimal numerator.
        denominator: Integer or Decimal denominator.
        strict: If True, raise DivisionUndefined on a zero denominator
            instead of returning None.

    Returns:
        Quotient rounded half-up to 2 decimals, or None when undefined.

    Raises:
        DivisionUndefined: If strict and the denominator is zero.

    """
    den = _as_decimal(denominator)
    if den == 0:
        if strict:
            raise DivisionUndefined(f"Ratio {numerator}/{denominator} is undefined")
        return None
    return quantize(_as_decimal(numerator) / den)


def percent(
    part: Decimal | numbers.Integral,
    whole: Decimal | numbers.Integral,
    *,
    strict: bool = False,
) -> Decimal | None:
    """Share of ``part`` in ``whole`` as a percentage, rounded to 2 decimals."""
    return divide(_as_decimal(part) * HUNDRED, whole, strict=strict)


def column_slug(value: str) -> str:
    """Convert a label into a lowercase, underscore-separated column name.

    Returns "unknown" if the result would be empty.

    Examples:
        >>> column_slug("Lower Manhattan")
        'lower_manhattan'
        >>> column_slug("Hell's Kitchen")
        'hells_kitchen'

    """
    value = unicodedata.normalize("NFKD", value)
    value = "".join(ch for ch in value if not unicodedata.combining(ch))
    value = re.sub(r"['’]", "", value)
    value = re.sub(r"[^\w]+", "_", value.lower(), flags=re.U)
    value = re.sub(r"_+", "_", value).strip("_")
    return value or "unknown"
