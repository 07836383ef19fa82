"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelBlobStore
from .services.auth import AuthSession
from .services.habits import HabitService
from .services.reminders import CronReminderScheduler


@dataclass
class AppContext:
    """Centralized application context with services and state."""

    config: BaseConfig
    engine: object
    session_factory: Callable[[], Session]
    blob_store: SQLModelBlobStore
    auth: AuthSession
    habit_service: HabitService
    reminders: Optional[CronReminderScheduler] = None

    def close(self) -> None:
        if self.reminders is not None:
            self.reminders.stop()
        self.engine.dispose()


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    with_reminders: Optional[bool] = None,
    start_reminders: bool = False,
    restore_session: bool = True,
) -> AppContext:
    """Create and initialize the application context.

    The habit service follows the auth session: every sign-in, sign-out or
    restored session triggers a full reload of the habit and log stores.
    """

    if config is None:
        config = BaseConfig()
    if with_reminders is None:
        with_reminders = config.REMINDERS_ENABLED

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)
    blob_store = SQLModelBlobStore(session_factory)

    reminders = CronReminderScheduler() if with_reminders else None
    if reminders is not None and start_reminders:
        reminders.start()

    habit_service = HabitService(
        blob_store,
        reminders=reminders,
        history_months=config.HISTORY_MONTHS,
    )
    auth = AuthSession(session_factory, blob_store)
    auth.subscribe(habit_service.switch_user)
    if restore_session:
        auth.restore()

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        blob_store=blob_store,
        auth=auth,
        habit_service=habit_service,
        reminders=reminders,
    )
