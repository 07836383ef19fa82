"""Blob store implementations for the persistence port."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.blob import StoredBlob


class SQLModelBlobStore:
    """SQLModel-based blob store, one row per key."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def load(self, key: str) -> Optional[str]:
        with self.session_factory() as session:
            row = session.exec(select(StoredBlob).where(StoredBlob.key == key)).first()
            return row.value if row else None

    def save(self, key: str, blob: str) -> None:
        with self.session_factory() as session:
            row = session.exec(select(StoredBlob).where(StoredBlob.key == key)).first()
            if row:
                row.value = blob
                row.updated_at = datetime.now(timezone.utc)
            else:
                row = StoredBlob(key=key, value=blob)
            session.add(row)
            session.commit()

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            row = session.exec(select(StoredBlob).where(StoredBlob.key == key)).first()
            if row:
                session.delete(row)
                session.commit()


class InMemoryBlobStore:
    """Dictionary-backed blob store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.blobs: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        self.blobs[key] = blob

    def delete(self, key: str) -> None:
        self.blobs.pop(key, None)


__all__ = ["InMemoryBlobStore", "SQLModelBlobStore"]
