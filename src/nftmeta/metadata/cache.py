"""
Metadata Cache — TTL-based caching of normalized results and failures.

Uses StorageBackend with key pattern ``nft:{chain}:{contract}:{token}:{mode}``.
Positive entries hold a normalized result; negative entries hold a failure
marker and short-circuit upstream calls until they expire. Expiry is lazy:
an expired entry is removed when it is next read.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

from nftmeta.core.logging import get_logger
from nftmeta.core.types import Chain, Mode, TokenRef
from nftmeta.storage.base import StorageBackend
from nftmeta.tokens.identifiers import canonical_token_id, normalize_contract

logger = get_logger("metadata.cache")

COLLECTION = "nft_metadata_cache"


def _now_ms() -> float:
    return time.time() * 1000


@dataclass(frozen=True)
class CacheKey:
    """
    Identity of a cache entry.

    ``token_id`` is the canonical hex form, so ``"10"`` and ``"0xa"`` share
    an entry. ``mode`` is part of the key because lite and full results
    carry different fields.
    """

    chain_id: int
    contract: str
    token_id: str
    mode: Mode

    @classmethod
    def for_token(cls, chain: Chain | int, token: TokenRef, mode: Mode) -> CacheKey:
        return cls(
            chain_id=int(chain),
            contract=normalize_contract(token.contract),
            token_id=canonical_token_id(token.token_id),
            mode=Mode(mode),
        )

    def render(self) -> str:
        return f"nft:{self.chain_id}:{self.contract}:{self.token_id}:{self.mode.value}"


@dataclass
class CacheEntry:
    """A stored value with its absolute expiry (epoch milliseconds)."""

    value: dict[str, Any]
    expires_at: float
    is_negative: bool = False

    def is_expired(self, now_ms: float) -> bool:
        return now_ms > self.expires_at


class MetadataCache:
    """
    TTL-based cache backed by StorageBackend.

    Constructed once per process and passed to the orchestrators.
    """

    def __init__(
        self,
        storage: StorageBackend,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        """
        Args:
            storage: Backend holding the entries
            clock: Returns the current time in epoch milliseconds
        """
        self._storage = storage
        self._clock = clock

    async def get(self, key: CacheKey) -> CacheEntry | None:
        """
        Get an entry if not expired.

        Returns None on miss or expiry; expired entries are deleted.
        """
        raw_key = key.render()
        stored = await self._storage.get(COLLECTION, raw_key)
        if stored is None:
            return None

        entry = CacheEntry(
            value=stored.get("value") or {},
            expires_at=stored.get("expires_at", 0),
            is_negative=bool(stored.get("is_negative", False)),
        )
        if entry.is_expired(self._clock()):
            await self._storage.delete(COLLECTION, raw_key)
            logger.debug(f"Cache entry expired: {raw_key}")
            return None

        return entry

    async def set(
        self,
        key: CacheKey,
        value: dict[str, Any],
        ttl_ms: float,
        is_negative: bool = False,
    ) -> None:
        """Store ``value`` for ``ttl_ms`` milliseconds, overwriting any entry."""
        await self._storage.save(COLLECTION, key.render(), {
            "value": value,
            "expires_at": self._clock() + ttl_ms,
            "is_negative": is_negative,
        })

    async def size(self) -> int:
        """Number of stored entries, including expired ones not yet read."""
        return await self._storage.count(COLLECTION)


__all__ = ["CacheEntry", "CacheKey", "MetadataCache"]
