"""
In-Memory Storage Backend.

Default backend. Data lives in process dicts and is lost on restart.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from nftmeta.storage.base import StorageBackend, register_storage_backend


class InMemoryStorage(StorageBackend):
    """
    In-memory storage backend.

    Values are deep-copied on the way in and out.
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, dict[str, Any]]] = {}

    def _ensure_collection(self, collection: str) -> dict[str, dict[str, Any]]:
        """Ensure collection exists and return it."""
        if collection not in self._data:
            self._data[collection] = {}
        return self._data[collection]

    async def save(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
    ) -> None:
        coll = self._ensure_collection(collection)
        coll[key] = deepcopy(data)

    async def get(
        self,
        collection: str,
        key: str,
    ) -> dict[str, Any] | None:
        coll = self._ensure_collection(collection)
        data = coll.get(key)
        return deepcopy(data) if data is not None else None

    async def delete(
        self,
        collection: str,
        key: str,
    ) -> bool:
        coll = self._ensure_collection(collection)
        if key in coll:
            del coll[key]
            return True
        return False

    async def count(self, collection: str) -> int:
        return len(self._ensure_collection(collection))

    async def health_check(self) -> bool:
        """Always healthy for in-memory."""
        return True


# Register as default backend
register_storage_backend("memory", InMemoryStorage)
