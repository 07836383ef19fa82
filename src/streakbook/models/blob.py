"""Key/value rows holding serialized per-user collections."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


class StoredBlob(SQLModel, table=True):
    """Opaque JSON payload stored under a string key (e.g. ``habits_1``)."""

    __tablename__: ClassVar[str] = "stored_blob"

    key: str = Field(primary_key=True, max_length=128)
    value: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
