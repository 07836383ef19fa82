"""Blob storage protocol."""

from __future__ import annotations

from typing import Optional, Protocol


class BlobStore(Protocol):
    """Key/value persistence for serialized per-user collections."""

    def load(self, key: str) -> Optional[str]:
        """Return the blob stored under ``key`` or None when absent."""
        ...

    def save(self, key: str, blob: str) -> None:
        """Store ``blob`` under ``key``; raise on failure."""
        ...

    def delete(self, key: str) -> None:
        """Remove the blob stored under ``key`` if present."""
        ...
