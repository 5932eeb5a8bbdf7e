"""Display date formatting.

Watched dates and season dates are stored as human-readable text in the
form "Jan 5, 2024" (abbreviated month, unpadded day, full year). The
month names are fixed English abbreviations so the stored text doesn't
depend on the process locale.
"""

from __future__ import annotations

import re
from datetime import date, datetime

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

EPOCH = date(1970, 1, 1)

_DISPLAY_RE = re.compile(r"^([A-Za-z]{3})[a-z]*\.?\s+(\d{1,2}),?\s+(\d{4})$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


def format_display_date(value: date) -> str:
    """Format a date as "<Mon> <Day>, <Year>", e.g. "Jan 5, 2024"."""
    return f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.day}, {value.year}"


def parse_display_date(text: str | None) -> date | None:
    """Parse display text ("Jan 5, 2024") or ISO text ("2024-01-05").

    Returns:
        The parsed date, or None when the text is empty or unparseable.
    """
    if not text:
        return None
    text = text.strip()

    match = _DISPLAY_RE.match(text)
    if match:
        month_name, day, year = match.groups()
        try:
            month = MONTH_ABBREVIATIONS.index(month_name.title()) + 1
            return date(int(year), month, int(day))
        except ValueError:
            return None

    match = _ISO_RE.match(text)
    if match:
        try:
            return date(*(int(part) for part in match.groups()))
        except ValueError:
            return None

    return None


def normalize_date(value: date | datetime | str | None) -> str | None:
    """Convert user input into stored display text.

    Accepts a date/datetime, ISO text or display text. Blank input
    yields None. Text that can't be parsed is rejected with ValueError
    rather than stored verbatim.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return format_display_date(value.date())
    if isinstance(value, date):
        return format_display_date(value)
    if not value.strip():
        return None

    parsed = parse_display_date(value)
    if parsed is None:
        raise ValueError(f"Unrecognized date: '{value}'")
    return format_display_date(parsed)


def to_iso(text: str | None) -> str:
    """Convert a stored display date back to "YYYY-MM-DD" for form prefill.

    Returns an empty string when the text can't be parsed.
    """
    parsed = parse_display_date(text)
    return parsed.isoformat() if parsed else ""


def sort_date(text: str | None) -> date:
    """Date used for ordering; missing or unparseable dates sort as epoch."""
    return parse_display_date(text) or EPOCH
