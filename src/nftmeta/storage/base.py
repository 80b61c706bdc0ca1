"""
Abstract Storage Backend for nftmeta.

Key/value persistence underneath the metadata cache. Records are grouped
in named collections so several caches can share one backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    Implementations must return copies, so callers may mutate what they get
    back without touching stored state.
    """

    @abstractmethod
    async def save(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
    ) -> None:
        """
        Save data to storage, replacing any existing record.

        Args:
            collection: Collection name
            key: Unique key for the record
            data: Data to store (must be JSON-serializable)
        """
        ...

    @abstractmethod
    async def get(
        self,
        collection: str,
        key: str,
    ) -> dict[str, Any] | None:
        """
        Get data from storage.

        Returns:
            Data dict or None if not found
        """
        ...

    @abstractmethod
    async def delete(
        self,
        collection: str,
        key: str,
    ) -> bool:
        """
        Delete data from storage.

        Returns:
            True if deleted, False if not found
        """
        ...

    @abstractmethod
    async def count(self, collection: str) -> int:
        """Count records in a collection."""
        ...

    async def health_check(self) -> bool:
        """Check if storage is healthy and connected."""
        return True


# Storage backend registry for dependency injection
_STORAGE_BACKENDS: dict[str, type[StorageBackend]] = {}


def register_storage_backend(name: str, backend_class: type[StorageBackend]) -> None:
    """Register a storage backend by name."""
    _STORAGE_BACKENDS[name] = backend_class


def get_storage_backend(name: str) -> type[StorageBackend] | None:
    """Get a registered storage backend by name."""
    return _STORAGE_BACKENDS.get(name)


def list_storage_backends() -> list[str]:
    """List all registered storage backend names."""
    return list(_STORAGE_BACKENDS.keys())
