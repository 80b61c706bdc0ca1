"""
Storage backends for nftmeta.

Configuration via environment:
    NFTMETA_STORAGE_BACKEND=memory

Example:
    >>> from nftmeta.storage import get_storage, InMemoryStorage
    >>>
    >>> storage = get_storage()
    >>> storage = InMemoryStorage()
"""

from __future__ import annotations

import os

from nftmeta.storage.base import (
    StorageBackend,
    get_storage_backend,
    list_storage_backends,
    register_storage_backend,
)
from nftmeta.storage.memory import InMemoryStorage


def get_storage(backend_name: str | None = None) -> StorageBackend:
    """
    Get storage backend from environment or by name.

    Args:
        backend_name: Backend name, or None to read from NFTMETA_STORAGE_BACKEND env

    Returns:
        StorageBackend instance

    Raises:
        ValueError: If backend name is unknown
    """
    if backend_name is None:
        backend_name = os.environ.get("NFTMETA_STORAGE_BACKEND", "memory")

    backend_class = get_storage_backend(backend_name)

    if backend_class is None:
        available = list_storage_backends()
        raise ValueError(
            f"Unknown storage backend: '{backend_name}'. Available: {', '.join(available)}"
        )

    return backend_class()


__all__ = [
    "StorageBackend",
    "InMemoryStorage",
    "get_storage",
    "get_storage_backend",
    "list_storage_backends",
    "register_storage_backend",
]
