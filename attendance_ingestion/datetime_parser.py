"""
Date/time cell parsing for terminal exports.

Exports from different terminals (and from spreadsheets re-saved by hand)
carry timestamps in several layouts.  ``parse_date_time`` tries the known
layouts in a fixed order and falls back to a tolerant regex.  It never
raises: an unparseable cell yields ``None`` and the caller records a row
error.

Architecture: attendance_ingestion. ZERO I/O.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

# Tried in order; the first layout that parses wins.
DATE_TIME_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
)

_DATE_PART = re.compile(r"(\d{1,4})[/\-](\d{1,2})[/\-](\d{1,4})")
_TIME_PART = re.compile(r"(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([aApP][mM])?")

_TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p")


def _from_parts(text: str) -> datetime | None:
    date_match = _DATE_PART.search(text)
    time_match = _TIME_PART.search(text, date_match.end() if date_match else 0)
    if date_match is None or time_match is None:
        return None

    first, second, third = date_match.groups()
    if len(first) == 4:
        year, month, day = int(first), int(second), int(third)
    else:
        month, day, year = int(first), int(second), int(third)

    hour = int(time_match.group(1))
    minute = int(time_match.group(2))
    second_value = int(time_match.group(3) or 0)
    meridiem = (time_match.group(4) or "").lower()
    if meridiem == "pm" and hour < 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0

    try:
        return datetime(year, month, day, hour, minute, second_value)
    except ValueError:
        return None


def parse_date_time(value: str | datetime | None) -> datetime | None:
    """Parse a date/time cell into a naive ``datetime``.

    ``datetime`` cells (already typed by the spreadsheet reader) are
    returned without their timezone.  Returns ``None`` when nothing
    matches.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)

    text = str(value).strip()
    if not text:
        return None

    for fmt in DATE_TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    parsed = _from_parts(text)
    if parsed is not None:
        return parsed

    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        return None


def parse_wall_clock(text: str) -> time | None:
    """Parse ``HH:MM`` (24-hour) or ``h:MM AM`` into a ``time``."""
    text = text.strip().upper()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def parse_shift_times(
    work_date: date,
    time_in: str,
    time_out: str,
    shift_type: str | None = None,
) -> tuple[datetime, datetime]:
    """Build a check-in/check-out pair from wall-clock strings.

    Night check-outs before noon, and any check-out not after the
    check-in, roll to the next day.

    Raises:
        ValueError: If either time string cannot be parsed.
    """
    start = parse_wall_clock(time_in)
    end = parse_wall_clock(time_out)
    if start is None or end is None:
        raise ValueError(f"Unparseable shift times: {time_in!r} - {time_out!r}")

    check_in = datetime.combine(work_date, start)
    check_out = datetime.combine(work_date, end)
    if shift_type == "night" and check_out.hour < 12:
        check_out += timedelta(days=1)
    elif check_out <= check_in:
        check_out += timedelta(days=1)
    return check_in, check_out
