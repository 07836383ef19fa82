"""Habit tracking data structures.

These are SQLModel data models rather than tables: the habit and log
collections are persisted as JSON blobs per user, so the models only need
validation and a lossless ``model_dump(mode="json")`` / ``model_validate``
round-trip.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel

DAILY = "daily"
WEEKLY = "weekly"
FREQUENCIES = (DAILY, WEEKLY)
# Fields fixed at creation; updates silently skip them.
IDENTITY_FIELDS = frozenset({"id", "user_id", "created_at"})
TITLE_MAX_LENGTH = 80
DESCRIPTION_MAX_LENGTH = 255


class Habit(SQLModel):
    """A user-defined habit the app tracks per calendar day."""

    id: str
    user_id: str
    title: str = Field(max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    frequency: str = Field(default=DAILY)
    # Days of week 0-6, only meaningful when frequency is weekly.
    target_days: Optional[list[int]] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    reminder_time: Optional[str] = None
    # Opaque token handed back by the reminder scheduler.
    reminder_id: Optional[str] = None


class HabitLog(SQLModel):
    """Completion record for one habit on one calendar day."""

    habit_id: str
    day: str
    completed: bool = True

    @property
    def key(self) -> tuple[str, str]:
        return (self.habit_id, self.day)


class HabitWithStats(Habit):
    """Read-only projection of a habit plus its derived statistics."""

    streak: int = 0
    completed_today: bool = False
    completion_rate: float = 0.0


class DayStatus(SQLModel):
    """One cell of a habit's calendar history."""

    day: str
    completed: bool = False


__all__ = [
    "DAILY",
    "DESCRIPTION_MAX_LENGTH",
    "FREQUENCIES",
    "IDENTITY_FIELDS",
    "TITLE_MAX_LENGTH",
    "WEEKLY",
    "DayStatus",
    "Habit",
    "HabitLog",
    "HabitWithStats",
]
