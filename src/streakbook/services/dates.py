"""Calendar-day keys and day arithmetic.

A day key is a zero-padded ``YYYY-MM-DD`` string for a *local* calendar day,
so lexicographic order matches chronological order.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from ..errors import ValidationError

SECONDS_PER_DAY = 24 * 60 * 60


def today_key() -> str:
    """Return the current local calendar day as a key."""

    return date.today().isoformat()


def day_key(moment: date | datetime) -> str:
    """Canonicalize a date or datetime to its local calendar-day key."""

    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            moment = moment.astimezone()
        return moment.date().isoformat()
    return moment.isoformat()


def parse_day_key(key: str) -> date:
    """Parse a day key, rejecting anything that is not ``YYYY-MM-DD``."""

    if not isinstance(key, str) or len(key) != 10:
        raise ValidationError(f"Invalid day key: {key!r}", field="day")
    try:
        parsed = date.fromisoformat(key)
    except ValueError as exc:
        raise ValidationError(f"Invalid day key: {key!r}", field="day") from exc
    # fromisoformat also takes week dates such as 2024-W01-1.
    if parsed.isoformat() != key:
        raise ValidationError(f"Invalid day key: {key!r}", field="day")
    return parsed


def days_between(key_a: str, key_b: str) -> int:
    """Return the number of calendar days from ``key_b`` to ``key_a`` (A - B)."""

    start = datetime.combine(parse_day_key(key_b), datetime.min.time())
    end = datetime.combine(parse_day_key(key_a), datetime.min.time())
    return round((end - start).total_seconds() / SECONDS_PER_DAY)


def shift_day_key(key: str, days: int) -> str:
    """Return the key ``days`` calendar days after ``key`` (negative goes back)."""

    return (parse_day_key(key) + timedelta(days=days)).isoformat()


def is_adjacent(key_a: str, key_b: str) -> bool:
    return abs(days_between(key_a, key_b)) == 1


def months_before(day: date, months: int) -> date:
    """Step back whole months, clamping the day to the target month's length."""

    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


__all__ = [
    "day_key",
    "days_between",
    "is_adjacent",
    "months_before",
    "parse_day_key",
    "shift_day_key",
    "today_key",
]
