"""Utility functions for the prepayment planner.

This module provides helpers for parsing user input into Python data types:
plain numbers, amounts with shorthand suffixes and per-year prepayment
entries. All helpers raise ``ValueError`` on bad input; the command line and
web layers translate that into their own error reporting.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, getcontext
from typing import Iterable, List, Tuple

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

# Longest suffixes first so that "cr" is not mistaken for a bare "r".
AMOUNT_SUFFIXES = (
    ("cr", Decimal("10000000")),
    ("k", Decimal("1000")),
    ("m", Decimal("1000000")),
    ("l", Decimal("100000")),
)


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and surrounding whitespace and handles
    both integer and float-like strings. It raises ``ValueError`` if
    conversion fails or the value is not finite.
    """
    try:
        result = Decimal(str(value).replace(",", "").strip())
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse an amount with an optional shorthand suffix.

    Accepts plain numbers ("2500000") and shorthand with ``k`` (thousand),
    ``m`` (million), ``l`` (lakh) or ``cr`` (crore) suffixes, e.g. "25l"
    meaning 2,500,000.
    """
    text = str(value).strip().lower().replace(",", "")
    factor = Decimal("1")
    for suffix, multiplier in AMOUNT_SUFFIXES:
        if text.endswith(suffix):
            factor = multiplier
            text = text[: -len(suffix)]
            break
    try:
        return decimal_from_str(text) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc


def parse_yearly_prepayments(values: Iterable[str], years: int) -> Tuple[Decimal, ...]:
    """Build the per-year prepayment tuple from ``YEAR:AMOUNT`` strings.

    Years are 1-based. Missing years are zero. A year beyond the tenure is
    rejected, as is a malformed entry.
    """
    amounts: List[Decimal] = [Decimal("0")] * max(0, years)
    for item in values:
        parts = item.split(":")
        if len(parts) != 2:
            raise ValueError(f"Yearly prepayment must be in YEAR:AMOUNT format; got {item}")
        year_str, amount_str = parts
        try:
            year = int(year_str)
        except ValueError as exc:
            raise ValueError(f"Invalid year in yearly prepayment: {item}") from exc
        if year < 1 or year > len(amounts):
            raise ValueError(f"Yearly prepayment year must be between 1 and {len(amounts)}; got {year}")
        amounts[year - 1] += parse_amount(amount_str)
    return tuple(amounts)
