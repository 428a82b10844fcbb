"""
Domain calendar-date utilities (pure).

Centralized string-to-date conversion for the scheduling engine.

Contract excerpts implemented here:
- Sale dates cross every boundary as `YYYY-MM-DD` calendar days, no time of day.
- A parsed date is the calendar day written in the string. It is never routed
  through a UTC instant, so the host timezone cannot move it a day backward.
- All day arithmetic downstream (adding days, differencing days) operates on
  values produced here.

No other module may parse a date string directly.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union

DateLike = Union[str, date, datetime]


def parse_local_date(value: DateLike) -> date:
    """
    Normalize a calendar-date value to a `date`.

    Accepts:
    - 'YYYY-MM-DD'
    - an ISO datetime string ('2024-01-16T00:00:00Z'); only the date part before
      the 'T' is read, the offset is ignored on purpose
    - `date` / `datetime` (a datetime keeps its own wall-clock calendar day)

    Raises:
        ValueError: malformed or out-of-range date string
        TypeError: unsupported input type
    """

    # datetime is a subclass of date; check it first.
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip().split("T", 1)[0]
        # Exactly YYYY-MM-DD; fromisoformat also takes "20240105" on 3.11+.
        if len(text) != 10 or text[4] != "-" or text[7] != "-":
            raise ValueError(f"Invalid calendar date {value!r}, expected YYYY-MM-DD")
        try:
            return date.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid calendar date {value!r}, expected YYYY-MM-DD") from None
    raise TypeError(f"Unsupported date type: {type(value)!r}")


def format_date(value: DateLike) -> str:
    """Serialize a calendar day as 'YYYY-MM-DD'."""

    return parse_local_date(value).isoformat()


def add_days(value: DateLike, days: int) -> date:
    return parse_local_date(value) + timedelta(days=days)


def days_between(start: DateLike, end: DateLike) -> int:
    """Signed whole-day difference `end - start` (0 for the same day)."""

    return (parse_local_date(end) - parse_local_date(start)).days


__all__ = [
    "DateLike",
    "add_days",
    "days_between",
    "format_date",
    "parse_local_date",
]
