"""Calendar date normalization helpers.

Log and activity dates are chosen by users as plain calendar days. They are
stored as the instant at UTC midnight of that same (year, month, day), so a
day picked as "Feb 5" reads back as "Feb 5" whatever the reader's timezone.

The two directions read aware datetimes differently. Inputs are user-facing
values, so ``to_storage_instant`` keeps their wall-clock day. Stored values
are instants, so ``from_storage_instant`` reads their UTC day. Always pass a
user value through ``to_storage_instant`` before ``from_storage_instant``.
"""

from __future__ import annotations

import datetime
from typing import Any

from .errors import InvalidDateError

DISPLAY_DATE_FORMAT = "%b %d, %Y"
INPUT_DATE_FORMAT = "%Y-%m-%d"

_STRING_FORMATS = (
    INPUT_DATE_FORMAT,
    DISPLAY_DATE_FORMAT,
    "%m/%d/%Y",
)


def parse_calendar_date(value: Any) -> datetime.date:
    """Return the calendar day a user-facing value denotes.

    Datetimes keep their own wall-clock day; no timezone conversion happens.
    """
    if isinstance(value, datetime.datetime):
        return datetime.date(value.year, value.month, value.day)
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(f"Invalid date: {value!r}")

    text = value.strip()
    for fmt in _STRING_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    iso_text = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        parsed = datetime.datetime.fromisoformat(iso_text)
    except ValueError:
        raise InvalidDateError(f"Invalid date: {value!r}") from None
    return datetime.date(parsed.year, parsed.month, parsed.day)


def to_storage_instant(value: Any) -> datetime.datetime:
    """Map a calendar date to the UTC midnight instant of the same day.

    Accepts the values ``parse_calendar_date`` accepts. An aware datetime
    keeps its wall-clock day.
    """
    day = parse_calendar_date(value)
    return datetime.datetime(
        day.year, day.month, day.day, tzinfo=datetime.timezone.utc
    )


def from_storage_instant(instant: Any) -> datetime.date:
    """Extract the UTC calendar day from a stored instant.

    Aware datetimes are converted to UTC first and naive ones are read as
    UTC. Values from ``to_storage_instant`` always map back to their day.
    """
    if isinstance(instant, datetime.datetime):
        if instant.tzinfo is not None:
            instant = instant.astimezone(datetime.timezone.utc)
        return datetime.date(instant.year, instant.month, instant.day)
    if isinstance(instant, datetime.date):
        return instant
    raise InvalidDateError(f"Not a stored date: {instant!r}")


def is_date_in_range(date: Any, start: Any, end: Any) -> bool:
    """Return True if ``date`` falls within [start, end], inclusive."""
    day = from_storage_instant(to_storage_instant(date))
    return (
        from_storage_instant(to_storage_instant(start))
        <= day
        <= from_storage_instant(to_storage_instant(end))
    )


def ranges_overlap(start1: Any, end1: Any, start2: Any, end2: Any) -> bool:
    """Two inclusive ranges overlap iff start1 <= end2 and start2 <= end1."""
    s1, e1 = to_storage_instant(start1), to_storage_instant(end1)
    s2, e2 = to_storage_instant(start2), to_storage_instant(end2)
    return s1 <= e2 and s2 <= e1


def utcnow() -> datetime.datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def format_date_for_display(value: Any) -> str:
    """Format a date like 'Apr 7, 2025'."""
    if not value:
        return ""
    day = from_storage_instant(to_storage_instant(value))
    return f"{day:%b} {day.day}, {day.year}"


def format_date_range(start: Any, end: Any) -> str:
    """Format a date range for display."""
    if not start or not end:
        return ""
    return f"{format_date_for_display(start)} - {format_date_for_display(end)}"


def to_iso_string(value: Any) -> str:
    """Serialize a stored timestamp for JSON output."""
    if not value:
        return ""
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        return value.astimezone(datetime.timezone.utc).isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, str):
        return value
    return ""
