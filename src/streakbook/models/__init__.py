"""SQLModel exports."""

from .blob import StoredBlob
from .habit import DayStatus, Habit, HabitLog, HabitWithStats
from .user import User

__all__ = [
    "DayStatus",
    "Habit",
    "HabitLog",
    "HabitWithStats",
    "StoredBlob",
    "User",
]
