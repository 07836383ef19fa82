"""In-memory habit and log collections for the active user.

Both stores hold exactly one user's data. They are filled wholesale from the
persistence port on sign-in and emptied on sign-out; the habit service is the
only writer.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..errors import ValidationError
from ..models.habit import Habit, HabitLog


class HabitStore:
    """Ordered collection of habit definitions keyed by id."""

    def __init__(self) -> None:
        self._habits: dict[str, Habit] = {}

    def __len__(self) -> int:
        return len(self._habits)

    def __contains__(self, habit_id: object) -> bool:
        return habit_id in self._habits

    def all(self) -> list[Habit]:
        """Return habits in insertion order."""
        return list(self._habits.values())

    def get(self, habit_id: str) -> Optional[Habit]:
        return self._habits.get(habit_id)

    def add(self, habit: Habit) -> Habit:
        """Append a habit, rejecting empty or duplicate ids."""
        if not habit.id:
            raise ValidationError("Habit id must not be empty", field="id")
        if habit.id in self._habits:
            raise ValidationError(f"Duplicate habit id {habit.id!r}", field="id")
        self._habits[habit.id] = habit
        return habit

    def replace(self, habit: Habit) -> Habit:
        """Swap in a new version of an existing habit, keeping its position."""
        if habit.id not in self._habits:
            raise KeyError(habit.id)
        self._habits[habit.id] = habit
        return habit

    def remove(self, habit_id: str) -> Optional[Habit]:
        return self._habits.pop(habit_id, None)

    def load(self, habits: Iterable[Habit]) -> None:
        """Replace the whole collection; later duplicates of an id are dropped."""
        loaded: dict[str, Habit] = {}
        for habit in habits:
            if habit.id and habit.id not in loaded:
                loaded[habit.id] = habit
        self._habits = loaded

    def clear(self) -> None:
        self._habits = {}


class LogStore:
    """Completion records with at most one entry per (habit, day)."""

    def __init__(self) -> None:
        self._logs: dict[tuple[str, str], HabitLog] = {}

    def __len__(self) -> int:
        return len(self._logs)

    def all(self) -> list[HabitLog]:
        return list(self._logs.values())

    def for_habit(self, habit_id: str) -> list[HabitLog]:
        return [log for log in self._logs.values() if log.habit_id == habit_id]

    def get(self, habit_id: str, day: str) -> Optional[HabitLog]:
        return self._logs.get((habit_id, day))

    def upsert(self, log: HabitLog) -> HabitLog:
        """Insert a log or overwrite the one already recorded for its day."""
        self._logs[log.key] = log
        return log

    def remove_habit(self, habit_id: str) -> int:
        """Drop every log of a habit and return how many were removed."""
        kept = {key: log for key, log in self._logs.items() if log.habit_id != habit_id}
        removed = len(self._logs) - len(kept)
        self._logs = kept
        return removed

    def load(self, logs: Iterable[HabitLog]) -> None:
        """Replace the whole collection; the last record for a (habit, day) wins."""
        loaded: dict[tuple[str, str], HabitLog] = {}
        for log in logs:
            loaded[log.key] = log
        self._logs = loaded

    def clear(self) -> None:
        self._logs = {}


__all__ = ["HabitStore", "LogStore"]
