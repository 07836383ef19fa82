"""Repository implementations."""

from .blob import InMemoryBlobStore, SQLModelBlobStore

__all__ = ["InMemoryBlobStore", "SQLModelBlobStore"]
