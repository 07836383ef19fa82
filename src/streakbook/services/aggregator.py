"""Join habits with their logs and statistics into read projections."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Sequence

from ..models.habit import Habit, HabitLog, HabitWithStats
from . import stats
from .dates import today_key


def project_habit(habit: Habit, logs: Sequence[HabitLog], *, today: str | None = None) -> HabitWithStats:
    """Attach streak, completed-today and completion rate to one habit."""

    today = today or today_key()
    return HabitWithStats(
        **habit.model_dump(),
        streak=stats.calculate_streak(habit.id, logs, today=today),
        completed_today=stats.is_completed_today(habit.id, logs, today=today),
        completion_rate=stats.calculate_completion_rate(habit.id, logs),
    )


def project_habits(
    habits: Iterable[Habit],
    logs: Iterable[HabitLog],
    *,
    today: str | None = None,
) -> list[HabitWithStats]:
    """Project every habit, preserving the input order."""

    today = today or today_key()
    by_habit: dict[str, list[HabitLog]] = defaultdict(list)
    for log in logs:
        by_habit[log.habit_id].append(log)
    return [project_habit(habit, by_habit.get(habit.id, []), today=today) for habit in habits]


__all__ = ["project_habit", "project_habits"]
