"""Reminder scheduling protocol."""

from __future__ import annotations

from typing import Optional, Protocol


class ReminderScheduler(Protocol):
    """Schedules daily habit reminders and hands back opaque tokens."""

    def schedule(self, habit_id: str, title: str, time: str) -> Optional[str]:
        """Schedule a daily reminder at ``time`` (``HH:mm``) and return its token."""
        ...

    def cancel(self, token: str) -> None:
        """Cancel a reminder previously returned by ``schedule``."""
        ...
