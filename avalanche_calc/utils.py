"""Utility functions for the avalanche calculator.

This module provides helpers for parsing user input into Python data types,
for calendar month arithmetic (adding months, converting a ``YYYY-MM`` string
to a 1-based simulation month index) and for rounding money to cents.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Optional, Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

CENT = Decimal("0.01")


def parse_year_month(ym: str) -> date:
    """Parse a YYYY-MM string into a ``date`` object (first day of month).

    Parameters
    ----------
    ym: str
        A string in the form ``"YYYY-MM"``. The day component, if present,
        will be ignored.

    Returns
    -------
    date
        A date object representing the first day of the specified month.

    Raises
    ------
    ValueError
        If the string is not a valid year-month.
    """
    try:
        parts = ym.strip().split("-")
        if len(parts) < 2:
            raise ValueError
        return date(int(parts[0]), int(parts[1]), 1)
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Invalid year-month string: {ym}") from exc


def first_of_month(dt: Optional[date] = None) -> date:
    """Return the first day of the month containing ``dt`` (today by default)."""
    dt = dt or date.today()
    return dt.replace(day=1)


def add_months(dt: date, months: int) -> date:
    """Return the first day of the month ``months`` after ``dt``'s month."""
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    return date(year, month, 1)


def month_label(start: date, month: int) -> str:
    """Calendar label (``YYYY-MM``) of simulation month ``month`` (1-based)."""
    return add_months(start, month - 1).strftime("%Y-%m")


def month_index_for(ym: Union[str, date], start: date) -> int:
    """Convert a calendar month into a 1-based simulation month index.

    Index 1 is ``start``'s month; earlier months yield indices below 1.
    """
    target = parse_year_month(ym) if isinstance(ym, str) else ym
    return (target.year - start.year) * 12 + (target.month - start.month) + 1


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.replace(",", "").strip()
        return Decimal(cleaned)
    except (AttributeError, InvalidOperation) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def to_decimal(value: object) -> Decimal:
    """Coerce an int, float, string or ``Decimal`` into a ``Decimal``.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather than
    its binary expansion. NaN and infinities are preserved.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value}")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        return decimal_from_str(value)
    raise ValueError(f"Invalid numeric value: {value!r}")


def round_money(value: Decimal) -> Decimal:
    """Round to cents, halves away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
