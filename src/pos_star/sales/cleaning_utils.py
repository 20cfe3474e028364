"""Field parsers for cleaning raw POS line records.

Each parser takes one raw string value and returns the typed value, or
raises ParseError naming the field, the value and the reason. Parsers never
guess: a value that does not match the expected shape is rejected rather
than coerced.

Key utilities:
- Text normalization: strip invisible characters, collapse whitespace
- Integer parsing: unsigned identifiers and positive quantities
- Money parsing: exact integer cents, at most 2 fractional digits
- Date and time parsing: configurable strptime formats

Examples:
    >>> strip_invisibles("  Hell's Kitchen ")
    "Hell's Kitchen"
    >>> to_cents("unit_price", "3.1")
    310
    >>> to_time("transaction_time", "07:06:11")
    datetime.time(7, 6, 11)
"""

from __future__ import annotations

import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

import pandas as pd

from pos_star.exceptions import ParseError

# Unicode characters that should be stripped from text
NBSP = "\u00a0"  # Non-breaking space
NNBSP = "\u202f"  # Narrow non-breaking space
ZW = "".join(chr(c) for c in (0x200B, 0x200C, 0x200D, 0xFEFF))  # Zero-width characters

_UNSIGNED_RE = re.compile(r"^\+?\d+$")
_PRICE_RE = re.compile(r"^\+?(\d+)(?:\.(\d*))?$|^\+?\.(\d+)$")
_CURRENCY_PREFIX_RE = re.compile(r"^[$€£]\s*")


def strip_invisibles(x: Any) -> Optional[str]:
    """Remove invisible and problematic whitespace characters from text.

    Strips carriage returns, non-breaking and zero-width characters, turns
    tabs into spaces and collapses runs of whitespace.

    Returns:
        Cleaned string or None if input is None/NaN.

    """
    if x is None or (isinstance(x, float) and pd.isna(x)):
        return None
    s = str(x)
    s = s.replace("\r", "").replace("\t", " ").replace(NBSP, " ").replace(NNBSP, " ")
    s = re.sub(r"[%s]" % re.escape(ZW), "", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def is_blank(x: Any) -> bool:
    """True if the value is null or only whitespace/invisible characters."""
    s = strip_invisibles(x)
    return s is None or s == ""


def to_text(field: str, x: Any, *, required: bool = False) -> str:
    """Trim a text field; blank values are an error only when required."""
    s = strip_invisibles(x)
    if s is None:
        s = ""
    if required and not s:
        raise ParseError(field, x, "value is blank")
    return s


def to_unsigned(field: str, x: Any) -> int:
    """Parse a non-negative integer identifier.

    Examples:
        >>> to_unsigned("store_id", " 5 ")
        5

    """
    s = strip_invisibles(x)
    if not s:
        raise ParseError(field, x, "value is blank")
    if not _UNSIGNED_RE.match(s):
        raise ParseError(field, x, "not a non-negative integer")
    return int(s)


def to_quantity(field: str, x: Any) -> int:
    """Parse a strictly positive integer quantity."""
    n = to_unsigned(field, x)
    if n <= 0:
        raise ParseError(field, x, "quantity must be positive")
    return n


def to_cents(field: str, x: Any) -> int:
    """Parse a non-negative money amount into exact integer cents.

    A leading currency symbol is accepted. Values with more than two
    fractional digits are rejected, never rounded.

    Examples:
        >>> to_cents("unit_price", "$4.75")
        475
        >>> to_cents("unit_price", "3")
        300

    """
    s = strip_invisibles(x)
    if not s:
        raise ParseError(field, x, "value is blank")
    s = _CURRENCY_PREFIX_RE.sub("", s)
    if s.startswith("-"):
        raise ParseError(field, x, "amount must be non-negative")
    if not _PRICE_RE.match(s):
        raise ParseError(field, x, "not a decimal amount")
    try:
        cents = Decimal(s.lstrip("+")) * 100
    except InvalidOperation as e:
        raise ParseError(field, x, "not a decimal amount") from e
    # "4.500" is accepted, "4.505" is not
    if cents != cents.to_integral_value():
        raise ParseError(field, x, "more than 2 fractional digits")
    return int(cents)


def to_date(field: str, x: Any, formats: Iterable[str]) -> date:
    """Parse a calendar date, trying each strptime format in order."""
    s = strip_invisibles(x)
    if not s:
        raise ParseError(field, x, "value is blank")
    for fmt in formats:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            pass
    raise ParseError(field, x, f"date does not match any of {list(formats)}")


def to_time(
    field: str, x: Any, formats: Iterable[str] = ("%H:%M:%S", "%H:%M:%S.%f", "%H:%M")
) -> time:
    """Parse a time of day, trying each strptime format in order."""
    s = strip_invisibles(x)
    if not s:
        raise ParseError(field, x, "value is blank")
    for fmt in formats:
        try:
            return datetime.strptime(s, fmt).time()
        except ValueError:
            pass
    raise ParseError(field, x, f"time does not match any of {list(formats)}")
