"""Date and time normalization for vendor exports.

Every vendor writes dates differently.  Trades are keyed on a single
``YYYY-MM-DD`` form and an ``HH:MM`` time so that rows from different
exports sort and group identically.
"""

from __future__ import annotations

import re
from datetime import date

_ISO = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_SLASHED = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})")
_DASHED = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})")
_DAY_MON_YEAR = re.compile(r"^(\d{1,2})[- ]([A-Za-z]{3})[A-Za-z]*[- ](\d{4})")
_TIME = re.compile(r"(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?\s*([AaPp][Mm])?")
_DATETIME = re.compile(r"^(\S+?)(?:T|\s+)(\d{1,2}:\d{2}.*)$")

MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")


def _valid(year: int, month: int, day: int) -> bool:
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def _fmt(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def normalize_trade_date(value: str | None) -> tuple[str, bool]:
    """Normalize a vendor date string to ``YYYY-MM-DD``.

    Returns ``(normalized, recognized)``.  Slashed numeric dates are read
    month-first and fall back to day-first when that is not a real date;
    dashed numeric dates are read day-first.  Anything else is truncated
    to its first 10 characters and reported as unrecognized so the caller
    can surface a data-quality warning.
    """
    if not value:
        return "", False
    text = value.strip()

    m = _ISO.match(text)
    if m:
        return text[:10], _valid(*(int(g) for g in m.groups()))

    m = _SLASHED.match(text)
    if m:
        first, second, year = (int(g) for g in m.groups())
        if _valid(year, first, second):
            return _fmt(year, first, second), True
        if _valid(year, second, first):
            return _fmt(year, second, first), True

    m = _DASHED.match(text)
    if m:
        day, month, year = (int(g) for g in m.groups())
        if _valid(year, month, day):
            return _fmt(year, month, day), True

    m = _DAY_MON_YEAR.match(text)
    if m:
        day, mon, year = m.groups()
        abbr = mon.lower()
        if abbr in MONTHS and _valid(int(year), MONTHS.index(abbr) + 1, int(day)):
            return _fmt(int(year), MONTHS.index(abbr) + 1, int(day)), True

    return text[:10], False


def normalize_time(value: str | None) -> str:
    """Extract ``HH:MM`` from a vendor time string, or ``""`` when absent."""
    if not value:
        return ""
    m = _TIME.search(value)
    if not m:
        return ""
    hour, minute, meridiem = int(m.group(1)), m.group(2), m.group(3)
    if meridiem:
        hour = hour % 12 + (12 if meridiem.lower() == "pm" else 0)
    if hour > 23:
        return ""
    return f"{hour:02d}:{minute}"


def split_datetime(value: str) -> tuple[str, str]:
    """Split a combined execution timestamp into date and time parts.

    Accepts ``2024-01-05T09:16:00`` and ``05/01/2024 09:16`` forms.  A value
    without a time component is returned whole as the date part.
    """
    text = value.strip()
    m = _DATETIME.match(text)
    if m:
        return m.group(1), m.group(2).strip()
    return text, ""
