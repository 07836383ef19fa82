"""Habit statistics derived from the raw completion log.

Every function here is pure: it takes a habit id plus an immutable snapshot
of logs and never touches the stores. ``today`` defaults to the current local
day key and exists so callers can evaluate the log "as of" another day.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable

from ..models.habit import DayStatus, HabitLog
from .dates import days_between, months_before, parse_day_key, shift_day_key, today_key


def _completed_days(habit_id: str, logs: Iterable[HabitLog]) -> list[str]:
    """Return distinct completed day keys for a habit, most recent first."""

    days = {log.day for log in logs if log.habit_id == habit_id and log.completed}
    return sorted(days, reverse=True)


def calculate_streak(habit_id: str, logs: Iterable[HabitLog], *, today: str | None = None) -> int:
    """Return the current streak of consecutive completed days.

    A streak is alive only while the most recent completion is today or
    yesterday; today is not over yet, so missing it does not break the run.
    A run that ended two or more days ago reports 0, however long it was.
    """

    days = _completed_days(habit_id, logs)
    if not days:
        return 0

    today = today or today_key()
    most_recent = days[0]
    if most_recent not in (today, shift_day_key(today, -1)):
        return 0

    streak = 1
    for current, previous in zip(days, days[1:]):
        if days_between(current, previous) != 1:
            break
        streak += 1
    return streak


def calculate_longest_streak(habit_id: str, logs: Iterable[HabitLog]) -> int:
    """Return the longest run of consecutive completed days in the history."""

    days = sorted(_completed_days(habit_id, logs))
    longest = 0
    run = 0
    last_day: str | None = None
    for day in days:
        if last_day is not None and days_between(day, last_day) == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        last_day = day
    return longest


def calculate_completion_rate(habit_id: str, logs: Iterable[HabitLog]) -> float:
    """Return the percentage (0-100) of logged days marked completed.

    Days without any log are untracked and stay out of the denominator;
    explicit ``completed=False`` records count as missed.
    """

    habit_logs = [log for log in logs if log.habit_id == habit_id]
    if not habit_logs:
        return 0.0
    completed = sum(1 for log in habit_logs if log.completed)
    return completed / len(habit_logs) * 100


def is_completed_today(habit_id: str, logs: Iterable[HabitLog], *, today: str | None = None) -> bool:
    today = today or today_key()
    return any(
        log.habit_id == habit_id and log.day == today and log.completed for log in logs
    )


def build_history(
    habit_id: str,
    logs: Iterable[HabitLog],
    *,
    months: int = 3,
    today: str | None = None,
) -> list[DayStatus]:
    """Return one status per day from ``months`` months ago through today."""

    end = parse_day_key(today or today_key())
    start = months_before(end, months)
    completed = set(_completed_days(habit_id, logs))

    history: list[DayStatus] = []
    cursor = start
    while cursor <= end:
        key = cursor.isoformat()
        history.append(DayStatus(day=key, completed=key in completed))
        cursor += timedelta(days=1)
    return history


def group_weeks(days: list[DayStatus], size: int = 7) -> list[list[DayStatus]]:
    """Split a history into consecutive rows of ``size`` days."""

    return [days[i : i + size] for i in range(0, len(days), size)]


__all__ = [
    "build_history",
    "calculate_completion_rate",
    "calculate_longest_streak",
    "calculate_streak",
    "group_weeks",
    "is_completed_today",
]
