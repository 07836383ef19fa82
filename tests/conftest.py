"""Pytest configuration and shared fixtures for Streakbook tests.

Fixtures provide an isolated SQLite database, an in-memory blob store and a
habit service signed in as a test user with a pinned "today", so streak
assertions never depend on the real calendar.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from streakbook import models  # noqa: F401  (registers tables)
from streakbook.infra.database import create_session_factory
from streakbook.infra.repositories import InMemoryBlobStore
from streakbook.models.habit import HabitLog
from streakbook.services.habits import HabitService

TODAY = "2024-01-10"
USER_ID = "1"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one repositories receive in the app."""
    return create_session_factory(db_engine)


# =============================================================================
# Habit Fixtures
# =============================================================================


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def clock():
    """Mutable clock: set ``clock.today`` to move the service's notion of today."""

    class _Clock:
        today = TODAY

        def __call__(self) -> str:
            return self.today

    return _Clock()


@pytest.fixture
def habit_service(blob_store, clock) -> HabitService:
    """Habit service signed in as USER_ID with today pinned to TODAY."""
    service = HabitService(blob_store, clock=clock)
    service.switch_user(USER_ID)
    return service


@pytest.fixture
def habit_factory(habit_service):
    """Factory for creating habits through the service.

    Returns:
        Callable: Function that creates and stores Habit instances
    """

    def _create_habit(
        title: str = "Test Habit",
        description: str = "Test habit description",
        frequency: str = "daily",
        **kwargs,
    ):
        return habit_service.create_habit(title, description, frequency=frequency, **kwargs)

    return _create_habit


def make_logs(habit_id: str, days: dict[str, bool]) -> list[HabitLog]:
    """Build logs for one habit from a {day: completed} mapping."""
    return [HabitLog(habit_id=habit_id, day=day, completed=done) for day, done in days.items()]
