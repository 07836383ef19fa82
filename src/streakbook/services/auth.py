"""Authentication and the signed-in user session."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from sqlmodel import Session, select

from ..domain.repositories import BlobStore
from ..errors import InvalidCredentialsError, ValidationError
from ..models.user import User

SessionFactory = Callable[[], Session]
UserListener = Callable[[Optional[str]], None]

logger = logging.getLogger("streakbook.auth")

_hasher = PasswordHasher()
SESSION_KEY = "session_user"


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user_by_email(email: str, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by email (case-insensitive)."""
    email = _normalize_email(email)
    with session_factory() as session:
        user = session.exec(select(User).where(User.email == email)).first()
        if user:
            session.expunge(user)
        return user


def get_user(user_id: int, session_factory: SessionFactory) -> Optional[User]:
    with session_factory() as session:
        user = session.get(User, user_id)
        if user:
            session.expunge(user)
        return user


def create_user(
    *,
    name: str,
    email: str,
    password: str,
    session_factory: SessionFactory,
) -> User:
    """Create a new user with a hashed password."""

    name = (name or "").strip()
    email = _normalize_email(email)
    if not name:
        raise ValidationError("Name is required", field="name")
    if not email or "@" not in email:
        raise ValidationError("A valid email is required", field="email")
    if not password:
        raise ValidationError("Password is required", field="password")

    password_hash = _hasher.hash(password)
    with session_factory() as session:
        existing = session.exec(select(User).where(User.email == email)).first()
        if existing:
            raise ValidationError("User already exists", field="email")
        user = User(name=name, email=email, password_hash=password_hash)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


def authenticate(
    *,
    email: str,
    password: str,
    session_factory: SessionFactory,
) -> Optional[User]:
    """Validate credentials and return the user when correct."""

    email = _normalize_email(email)
    if not email:
        return None
    with session_factory() as session:
        user = session.exec(select(User).where(User.email == email)).first()
        if user is None:
            return None
        try:
            _hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHash, VerificationError):
            return None

        user.last_login = datetime.now(timezone.utc)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


class AuthSession:
    """Tracks the signed-in user and tells subscribers when it changes.

    Subscribers receive the new user id as a string, or None on sign-out.
    The signed-in user id is remembered in the blob store so ``restore``
    can resume the session on the next start.
    """

    def __init__(self, session_factory: SessionFactory, blob_store: BlobStore):
        self.session_factory = session_factory
        self.blob_store = blob_store
        self.current_user: Optional[User] = None
        self._listeners: list[UserListener] = []

    @property
    def user_id(self) -> Optional[str]:
        if self.current_user is None or self.current_user.id is None:
            return None
        return str(self.current_user.id)

    def subscribe(self, listener: UserListener) -> None:
        self._listeners.append(listener)

    def sign_up(self, name: str, email: str, password: str) -> User:
        user = create_user(
            name=name, email=email, password=password, session_factory=self.session_factory
        )
        logger.info("Registered user", extra={"user_id": user.id})
        self._set_user(user)
        return user

    def sign_in(self, email: str, password: str) -> User:
        user = authenticate(email=email, password=password, session_factory=self.session_factory)
        if user is None:
            logger.warning("Sign in failed", extra={"email": _normalize_email(email)})
            raise InvalidCredentialsError()
        logger.info("Signed in", extra={"user_id": user.id})
        self._set_user(user)
        return user

    def sign_out(self) -> None:
        self.blob_store.delete(SESSION_KEY)
        logger.info("Signed out", extra={"user_id": self.user_id})
        self.current_user = None
        self._notify()

    def restore(self) -> Optional[User]:
        """Resume the remembered session, if its user still exists."""

        blob = self.blob_store.load(SESSION_KEY)
        if not blob:
            return None
        try:
            user_id = int(json.loads(blob)["id"])
        except (ValueError, KeyError, TypeError):
            logger.error("Discarding unreadable session record", exc_info=True)
            self.blob_store.delete(SESSION_KEY)
            return None

        user = get_user(user_id, self.session_factory)
        if user is None:
            self.blob_store.delete(SESSION_KEY)
            return None
        self.current_user = user
        self._notify()
        return user

    def _set_user(self, user: User) -> None:
        self.blob_store.save(SESSION_KEY, json.dumps({"id": user.id, "email": user.email, "name": user.name}))
        self.current_user = user
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self.user_id)


__all__ = [
    "AuthSession",
    "SESSION_KEY",
    "authenticate",
    "create_user",
    "get_user",
    "get_user_by_email",
]
