"""
Base upstream provider interface.

A provider turns (chain, contract, token id) into raw, provider-shaped
records. It does no caching and no normalization. Failures are raised as
NetworkError carrying the HTTP status (None for transport failures and
timeouts); a missing credential is a ConfigurationError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from nftmeta.core.types import Chain, TokenRef


class MetadataProvider(ABC):
    """Abstract base class for NFT metadata providers."""

    @abstractmethod
    async def fetch_one(
        self,
        chain: Chain,
        contract: str,
        token_id: str,
        timeout_ms: int,
        refresh: bool = False,
    ) -> dict[str, Any]:
        """
        Fetch the raw record for one token.

        Args:
            chain: Chain to query
            contract: Canonical contract address
            token_id: Decimal or hex token id
            timeout_ms: Deadline for the whole call; 0 disables it
            refresh: Ask the provider to bypass its own cache

        Raises:
            NetworkError: On transport failure, timeout or non-2xx status
            ConfigurationError: If the provider is not configured
        """
        ...

    @abstractmethod
    async def fetch_many(
        self,
        chain: Chain,
        tokens: Sequence[TokenRef],
        timeout_ms: int,
        refresh: bool = False,
    ) -> dict[str, Any]:
        """
        Fetch raw records for several tokens in one call.

        Returns:
            ``{"records": [...]}`` in whatever order the provider chose; some
            requested tokens may be absent.
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        return None
