"""Exception taxonomy surfaced to callers of the habit engine."""

from __future__ import annotations


class StreakbookError(Exception):
    """Base class for every error raised by streakbook."""


class ValidationError(StreakbookError):
    """A required field is missing or a value is out of range."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(StreakbookError):
    """The referenced habit does not exist for the active user."""

    def __init__(self, habit_id: str):
        super().__init__(f"Habit {habit_id!r} not found")
        self.habit_id = habit_id


class UnauthenticatedError(StreakbookError):
    """A habit or log operation was attempted with no active user."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class InvalidCredentialsError(UnauthenticatedError):
    """Sign-in failed because the email/password pair did not match."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


__all__ = [
    "InvalidCredentialsError",
    "NotFoundError",
    "StreakbookError",
    "UnauthenticatedError",
    "ValidationError",
]
