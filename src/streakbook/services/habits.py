"""Habit service: the only write path into the habit and log stores.

Every mutation updates the in-memory stores completely before the blob store
is asked to persist, so reads issued right after a call always observe the
new state. A failed save is logged and recorded on
``last_persistence_error``; it never rolls the in-memory state back.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from pydantic import ValidationError as PydanticValidationError
from sqlmodel import SQLModel

from ..domain.repositories import BlobStore, ReminderScheduler
from ..errors import NotFoundError, UnauthenticatedError, ValidationError
from ..models.habit import (
    DAILY,
    DESCRIPTION_MAX_LENGTH,
    FREQUENCIES,
    IDENTITY_FIELDS,
    TITLE_MAX_LENGTH,
    WEEKLY,
    DayStatus,
    Habit,
    HabitLog,
    HabitWithStats,
)
from . import stats
from .aggregator import project_habit, project_habits
from .dates import parse_day_key, today_key
from .reminders import parse_reminder_time
from .stores import HabitStore, LogStore

logger = logging.getLogger("streakbook.habits")

ModelT = TypeVar("ModelT", bound=SQLModel)

EDITABLE_FIELDS = frozenset(
    {"title", "description", "frequency", "target_days", "reminder_time", "reminder_id"}
)


def habits_key(user_id: str) -> str:
    return f"habits_{user_id}"


def logs_key(user_id: str) -> str:
    return f"logs_{user_id}"


def _require_text(fields: dict[str, Any], name: str, max_length: int) -> None:
    value = fields.get(name)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name.capitalize()} is required", field=name)
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(
            f"{name.capitalize()} must be at most {max_length} characters", field=name
        )
    fields[name] = value


def _clean_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate editable habit fields in place and return them."""

    for name, max_length in (("title", TITLE_MAX_LENGTH), ("description", DESCRIPTION_MAX_LENGTH)):
        if name in fields:
            _require_text(fields, name, max_length)

    if "frequency" in fields and fields["frequency"] not in FREQUENCIES:
        raise ValidationError(
            f"Frequency must be one of {', '.join(FREQUENCIES)}", field="frequency"
        )

    if fields.get("target_days") is not None:
        try:
            days = sorted({int(day) for day in fields["target_days"]})
        except (TypeError, ValueError) as exc:
            raise ValidationError("Target days must be integers 0-6", field="target_days") from exc
        if any(day < 0 or day > 6 for day in days):
            raise ValidationError("Target days must be integers 0-6", field="target_days")
        fields["target_days"] = days

    if fields.get("reminder_time") is not None:
        parse_reminder_time(fields["reminder_time"])

    return fields


def _build(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(f"Invalid {model.__name__}: {first.get('msg')}", field=field) from exc


class HabitService:
    """Holds the active user's habits and logs and applies every mutation."""

    def __init__(
        self,
        blob_store: BlobStore,
        *,
        reminders: Optional[ReminderScheduler] = None,
        clock: Callable[[], str] = today_key,
        history_months: int = 3,
    ):
        self.blob_store = blob_store
        self.reminders = reminders
        self.clock = clock
        self.history_months = history_months
        self.habits = HabitStore()
        self.logs = LogStore()
        self.user_id: Optional[str] = None
        self.last_persistence_error: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Session scoping
    # ------------------------------------------------------------------
    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user_id(self) -> str:
        """Return the active user id or raise if nobody is signed in."""

        if self.user_id is None:
            raise UnauthenticatedError()
        return self.user_id

    def switch_user(self, user_id: Optional[str]) -> None:
        """Swap both stores to ``user_id``'s data with a full reload.

        The stores are emptied first so the previous user's data is never
        visible while the new user's blobs load.
        """

        self.habits.clear()
        self.logs.clear()
        self.user_id = None
        if user_id is None:
            logger.info("Habit stores cleared (signed out)")
            return

        user_id = str(user_id)
        habits = [
            habit
            for habit in self._load_collection(habits_key(user_id), Habit)
            if habit.user_id == user_id
        ]
        known = {habit.id for habit in habits}
        logs = [log for log in self._load_collection(logs_key(user_id), HabitLog) if log.habit_id in known]

        self.habits.load(habits)
        self.logs.load(logs)
        self.user_id = user_id
        logger.info(
            "Loaded habit data",
            extra={"user_id": user_id, "habits": len(self.habits), "logs": len(self.logs)},
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list_habits(self) -> list[HabitWithStats]:
        """Return every habit with fresh statistics, in creation order."""

        self.require_user_id()
        return project_habits(self.habits.all(), self.logs.all(), today=self.clock())

    def get_habit(self, habit_id: str) -> Optional[HabitWithStats]:
        self.require_user_id()
        habit = self.habits.get(habit_id)
        if habit is None:
            return None
        return project_habit(habit, self.logs.for_habit(habit_id), today=self.clock())

    def get_logs(self, habit_id: Optional[str] = None) -> list[HabitLog]:
        self.require_user_id()
        if habit_id is None:
            return self.logs.all()
        return self.logs.for_habit(habit_id)

    def get_history(self, habit_id: str, months: Optional[int] = None) -> list[DayStatus]:
        """Return the calendar history for a habit, oldest day first."""

        self.require_user_id()
        self._get_existing(habit_id)
        return stats.build_history(
            habit_id,
            self.logs.for_habit(habit_id),
            months=months or self.history_months,
            today=self.clock(),
        )

    def get_longest_streak(self, habit_id: str) -> int:
        self.require_user_id()
        self._get_existing(habit_id)
        return stats.calculate_longest_streak(habit_id, self.logs.for_habit(habit_id))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_habit(
        self,
        title: str,
        description: str,
        frequency: str = DAILY,
        target_days: Optional[Sequence[int]] = None,
        reminder_time: Optional[str] = None,
    ) -> Habit:
        """Validate and append a new habit. No logs are created."""

        user_id = self.require_user_id()
        fields = {
            "title": title,
            "description": description,
            "frequency": frequency,
            "target_days": list(target_days) if target_days is not None else None,
            "reminder_time": reminder_time,
        }
        _clean_fields(fields)
        if fields["frequency"] != WEEKLY:
            fields["target_days"] = None

        habit_id = uuid.uuid4().hex
        habit = _build(
            Habit,
            {
                **fields,
                "id": habit_id,
                "user_id": user_id,
                "created_at": datetime.now(timezone.utc),
            },
        )
        if reminder_time and self.reminders is not None:
            habit.reminder_id = self.reminders.schedule(habit_id, habit.title, reminder_time)

        self.habits.add(habit)
        logger.info("Created habit", extra={"habit_id": habit.id, "user_id": user_id})
        self._persist_habits()
        return habit

    def update_habit(self, habit_id: str, **changes: Any) -> Habit:
        """Merge ``changes`` into a habit; identity fields are ignored."""

        self.require_user_id()
        existing = self._get_existing(habit_id)

        changes = {key: value for key, value in changes.items() if key not in IDENTITY_FIELDS}
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown habit field(s): {', '.join(sorted(unknown))}", field=sorted(unknown)[0]
            )
        _clean_fields(changes)

        merged = existing.model_dump()
        merged.update(changes)
        if merged["frequency"] != WEEKLY:
            merged["target_days"] = None

        # Validate fully before touching the reminder scheduler.
        updated = _build(Habit, merged)

        if "reminder_id" not in changes and (
            "reminder_time" in changes
            or (existing.reminder_id and updated.title != existing.title)
        ):
            updated.reminder_id = self._reschedule(existing, updated)

        self.habits.replace(updated)
        logger.info("Updated habit", extra={"habit_id": habit_id, "fields": sorted(changes)})
        self._persist_habits()
        return updated

    def delete_habit(self, habit_id: str) -> None:
        """Remove a habit together with all of its logs."""

        self.require_user_id()
        habit = self._get_existing(habit_id)

        # Both stores change before anything else runs.
        self.habits.remove(habit_id)
        removed = self.logs.remove_habit(habit_id)

        if habit.reminder_id and self.reminders is not None:
            self.reminders.cancel(habit.reminder_id)
        logger.info("Deleted habit", extra={"habit_id": habit_id, "logs_removed": removed})
        self._persist_habits()
        self._persist_logs()

    def toggle_habit_completion(self, habit_id: str, day: Optional[str] = None) -> HabitLog:
        """Flip the completion for ``day`` (default today) and return the log.

        An existing record is flipped in place and kept even when it becomes
        ``completed=False``; otherwise a completed record is inserted.
        """

        self.require_user_id()
        self._get_existing(habit_id)
        day = day or self.clock()
        parse_day_key(day)

        existing = self.logs.get(habit_id, day)
        if existing is not None:
            log = HabitLog(habit_id=habit_id, day=day, completed=not existing.completed)
        else:
            log = HabitLog(habit_id=habit_id, day=day, completed=True)
        self.logs.upsert(log)
        logger.info(
            "Toggled habit completion",
            extra={"habit_id": habit_id, "day": day, "completed": log.completed},
        )
        self._persist_logs()
        return log

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _get_existing(self, habit_id: str) -> Habit:
        habit = self.habits.get(habit_id)
        if habit is None:
            raise NotFoundError(habit_id)
        return habit

    def _reschedule(self, existing: Habit, updated: Habit) -> Optional[str]:
        if self.reminders is None:
            return existing.reminder_id
        if existing.reminder_id:
            self.reminders.cancel(existing.reminder_id)
        if updated.reminder_time:
            return self.reminders.schedule(existing.id, updated.title, updated.reminder_time)
        return None

    def _load_collection(self, key: str, model: type[ModelT]) -> list[ModelT]:
        try:
            blob = self.blob_store.load(key)
        except Exception:
            logger.error(f"Failed to load {key}", exc_info=True)
            return []
        if not blob:
            return []
        try:
            rows = json.loads(blob)
            if not isinstance(rows, list):
                raise TypeError(f"expected a JSON array, got {type(rows).__name__}")
            return [model.model_validate(row) for row in rows]
        except (ValueError, TypeError, PydanticValidationError):
            logger.error(f"Discarding unreadable blob {key}", exc_info=True)
            return []

    def _persist_habits(self) -> None:
        if self.user_id is not None:
            self._persist(habits_key(self.user_id), self.habits.all())

    def _persist_logs(self) -> None:
        if self.user_id is not None:
            self._persist(logs_key(self.user_id), self.logs.all())

    def _persist(self, key: str, rows: Iterable[SQLModel]) -> None:
        blob = json.dumps([row.model_dump(mode="json") for row in rows])
        try:
            self.blob_store.save(key, blob)
        except Exception as exc:
            self.last_persistence_error = exc
            logger.error(f"Failed to save {key}", exc_info=True)
            return
        self.last_persistence_error = None


__all__ = ["HabitService", "habits_key", "logs_key"]
