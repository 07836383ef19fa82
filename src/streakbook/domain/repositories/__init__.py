"""Repository protocols for the persistence and notification ports."""

from .reminder import ReminderScheduler
from .storage import BlobStore

__all__ = ["BlobStore", "ReminderScheduler"]
