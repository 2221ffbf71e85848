"""Date and time-of-day normalisation for event listings."""

import re
from datetime import date
from typing import Any, Optional

# Sorts after every valid minute-of-day value
TIME_TBA = float("inf")

_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
_US_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$", re.ASCII)
_TIME_RE = re.compile(r"^(\d{1,2})?(?::(\d{2}))?\s*(am|pm)?$", re.IGNORECASE | re.ASCII)


def normalize_date(value: Any) -> Optional[str]:
    """
    Return `value` as a canonical YYYY-MM-DD string, or None.

    Accepts YYYY-MM-DD (returned unchanged) and M/D/YYYY or MM/DD/YYYY.
    Only the shape is checked, so "2024-13-40" passes through as-is.
    """
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None
    if _ISO_RE.match(s):
        return s
    m = _US_RE.match(s)
    if m:
        month, day, year = m.groups()
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return None


def parse_time(value: Any) -> int | float:
    """
    Convert a clock string ("7:00 PM", "7 PM", "19:00") to minutes since
    midnight. Anything unparseable returns TIME_TBA.
    """
    if not isinstance(value, str):
        return TIME_TBA
    m = _TIME_RE.match(value.strip())
    if not m or m.group(1) is None:
        return TIME_TBA

    hour = int(m.group(1))
    minute = int(m.group(2)) if m.group(2) else 0
    suffix = (m.group(3) or "").lower()

    if minute > 59:
        return TIME_TBA

    if not suffix:
        if hour > 23:
            return TIME_TBA
        return hour * 60 + minute

    if not 1 <= hour <= 12:
        return TIME_TBA
    if hour == 12:
        hour = 0
    if suffix == "pm":
        hour += 12
    return hour * 60 + minute


def today_iso() -> str:
    """Local calendar date as YYYY-MM-DD."""
    return date.today().isoformat()


def format_date_label(yyyy_mm_dd: str) -> str:
    """'2025-03-01' -> 'Sat, Mar 1'. Dates that don't parse are returned as-is."""
    try:
        d = date.fromisoformat(yyyy_mm_dd)
    except (TypeError, ValueError):
        return yyyy_mm_dd
    return f"{d.strftime('%a, %b')} {d.day}"
