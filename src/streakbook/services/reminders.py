"""Daily habit reminders on top of APScheduler cron jobs."""

from __future__ import annotations

import logging
import re
import uuid
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from ..errors import ValidationError

logger = logging.getLogger("streakbook.reminders")

_TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")

Notifier = Callable[[str, str], None]


def parse_reminder_time(time: str) -> tuple[int, int]:
    """Split an ``HH:mm`` string into (hour, minute)."""

    match = _TIME_PATTERN.match(time or "")
    if not match:
        raise ValidationError(f"Reminder time must be HH:mm, got {time!r}", field="reminder_time")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValidationError(f"Reminder time out of range: {time!r}", field="reminder_time")
    return hour, minute


def log_reminder(habit_id: str, title: str) -> None:
    """Default notifier: emit the reminder through the package logger."""

    logger.info(f"Time to complete your habit: {title}", extra={"habit_id": habit_id})


class CronReminderScheduler:
    """Registers one repeating daily job per reminder.

    The job id doubles as the opaque token stored on the habit.
    """

    def __init__(
        self,
        scheduler: Optional[BackgroundScheduler] = None,
        *,
        notify: Notifier = log_reminder,
    ):
        self.scheduler = scheduler or BackgroundScheduler()
        self.notify = notify

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Reminder scheduler started")

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")

    def schedule(self, habit_id: str, title: str, time: str) -> Optional[str]:
        hour, minute = parse_reminder_time(time)
        token = f"reminder-{uuid.uuid4().hex}"
        self.scheduler.add_job(
            func=self.notify,
            trigger=CronTrigger(hour=hour, minute=minute),
            args=[habit_id, title],
            id=token,
            name=f"Habit reminder: {title}",
            replace_existing=True,
        )
        logger.info(f"Scheduled reminder {token} at {time}", extra={"habit_id": habit_id})
        return token

    def cancel(self, token: str) -> None:
        if self.scheduler.get_job(token) is None:
            logger.warning(f"Reminder {token} is not scheduled")
            return
        self.scheduler.remove_job(token)
        logger.info(f"Cancelled reminder {token}")

    def scheduled_tokens(self) -> list[str]:
        return [job.id for job in self.scheduler.get_jobs()]


__all__ = ["CronReminderScheduler", "log_reminder", "parse_reminder_time"]
