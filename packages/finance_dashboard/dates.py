"""Date normalization for statement and ledger dates.

Canonical dates are civil calendar dates serialized as ``YYYY-MM-DD``. Parsing
works on :class:`datetime.date` only (no times, no timezones), so a date never
shifts by a day because of the host's local timezone.

Accepted string patterns, tried in order:

1. ``YYYY-M-D`` (the canonical format; 1-2 digit month/day tolerated)
2. ``D/M/YY`` or ``D/M/YYYY`` (two-digit years are 2000+year)
3. ``D-Mon-YY`` or ``D-Mon-YYYY`` (English month abbreviation, any case)

A string matching none of them is handed to :func:`dateutil.parser.parse`,
day first like pattern 2 unless the string starts with a year. The fallback
only accepts strings that name a complete date: dateutil fills missing fields
from its ``default``, so the string is parsed against two different defaults
and rejected when the results disagree. A string that matches a pattern but
names an impossible day (e.g. 31 April) is rejected outright.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from dateutil import parser as date_parser

_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_SLASH_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})$")
_MON_RE = re.compile(r"^(\d{1,2})-([a-zA-Z]{3})-(\d{2,4})$")
_YEAR_FIRST_RE = re.compile(r"^\d{4}\D")

_MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}


def _build(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _expand_year(year: int) -> int:
    return year + 2000 if year < 100 else year


# Any two defaults differing in year, month and day expose a partial string
_FALLBACK_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _parse_complete(s: str) -> date | None:
    # Year-first strings (ISO timestamps) stay Y-M-D
    dayfirst = not _YEAR_FIRST_RE.match(s)
    try:
        first, second = (
            date_parser.parse(s, dayfirst=dayfirst, default=d).date()
            for d in _FALLBACK_DEFAULTS
        )
    except (ValueError, OverflowError):
        return None
    return first if first == second else None


def parse_date(value: Any) -> date | None:
    """Parse ``value`` into a calendar date, or return ``None``.

    ``date`` and ``datetime`` inputs (e.g. spreadsheet date cells) are reduced
    to their calendar date. Strings are matched against the fixed patterns
    described in the module docstring. Anything else yields ``None``; this
    function never raises for bad input.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s:
        return None

    m = _ISO_RE.match(s)
    if m:
        return _build(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _SLASH_RE.match(s)
    if m:
        day, month, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        return _build(_expand_year(year), month, day)

    m = _MON_RE.match(s)
    if m:
        month_num = _MONTHS.get(m.group(2).lower())
        if month_num is not None:
            return _build(_expand_year(int(m.group(3))), month_num, int(m.group(1)))

    return _parse_complete(s)


def format_date(value: date) -> str:
    """Return the canonical ``YYYY-MM-DD`` form of ``value``."""

    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def normalize_date(value: Any) -> str | None:
    """Parse then format; ``None`` when ``value`` is unparseable."""

    parsed = parse_date(value)
    return format_date(parsed) if parsed is not None else None


def format_display_date(date_str: str) -> str:
    """Convert ``YYYY-MM-DD`` to ``MM/DD/YYYY`` by splitting the string.

    Input that is not in the canonical shape is returned unchanged.
    """

    parts = date_str.split("-")
    if len(parts) != 3:
        return date_str
    year, month, day = parts
    if len(year) != 4 or len(month) != 2 or len(day) != 2:
        return date_str
    return f"{month}/{day}/{year}"


def month_key(date_str: str) -> str:
    """Return the ``YYYY-MM`` prefix of a canonical date string."""

    return date_str[:7]


def days_between(start: str, end: str) -> int | None:
    """Whole days from ``start`` to ``end``; ``None`` if either date is unparseable."""

    a, b = parse_date(start), parse_date(end)
    if a is None or b is None:
        return None
    return (b - a).days


__all__ = [
    "parse_date",
    "format_date",
    "normalize_date",
    "format_display_date",
    "month_key",
    "days_between",
]
