"""Service module exports."""

from . import aggregator, auth, dates, habits, reminders, stats, stores

__all__ = [
    "aggregator",
    "auth",
    "dates",
    "habits",
    "reminders",
    "stats",
    "stores",
]
