"""
Type definitions for nftmeta.

Enums and small data classes shared by the cache, the provider and the
orchestrators.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_TIMEOUT_MS = 2000
MAX_TIMEOUT_MS = 5000


class Chain(int, Enum):
    """Chains whose NFT data can be served."""

    ETHEREUM = 1
    BASE = 8453

    @property
    def host(self) -> str:
        """Provider host prefix for this chain."""
        return _CHAIN_HOSTS[self]

    @classmethod
    def from_id(cls, value: Any) -> Chain | None:
        """Return the chain for an integer id (or integer-like string), else None."""
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = value.strip()
            if not value.isdigit():
                return None
            value = int(value)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            return None
        for member in cls:
            if member.value == value:
                return member
        return None


_CHAIN_HOSTS = {
    Chain.ETHEREUM: "eth-mainnet",
    Chain.BASE: "base-mainnet",
}


class Mode(str, Enum):
    """Which field set a normalized result carries."""

    LITE = "lite"
    FULL = "full"


@dataclass(frozen=True)
class TokenRef:
    """A (contract, tokenId) pair as requested by the caller."""

    contract: str
    token_id: str

    def to_dict(self) -> dict[str, str]:
        return {"contract": self.contract, "tokenId": self.token_id}


@dataclass(frozen=True)
class FetchOptions:
    """Per-request options."""

    mode: Mode = Mode.LITE
    refresh: bool = False
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @classmethod
    def from_dict(
        cls,
        options: dict[str, Any] | None,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_timeout_ms: int = MAX_TIMEOUT_MS,
    ) -> FetchOptions:
        """
        Parse the ``options`` object of a request.

        Unknown modes fall back to lite, ``refresh`` must be literally true,
        and ``timeoutMs`` is clamped to ``[0, max_timeout_ms]`` with
        non-numeric values replaced by the default.
        """
        if not isinstance(options, dict):
            options = {}

        mode = Mode.FULL if options.get("mode") == Mode.FULL.value else Mode.LITE
        refresh = options.get("refresh") is True
        timeout_ms = clamp_timeout(options.get("timeoutMs"), default_timeout_ms, max_timeout_ms)
        return cls(mode=mode, refresh=refresh, timeout_ms=timeout_ms)


def clamp_timeout(
    value: Any,
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    max_timeout_ms: int = MAX_TIMEOUT_MS,
) -> int:
    """Coerce a timeout to an int in ``[0, max_timeout_ms]``."""
    if isinstance(value, bool) or value is None:
        return default_timeout_ms
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default_timeout_ms
    if not math.isfinite(number):
        return default_timeout_ms
    return int(max(0, min(max_timeout_ms, number)))
