"""
NftMetadataClient — main entry point.

Wires configuration, storage, cache, provider and orchestration together.
Accepts either typed arguments or the raw request bodies a front end
receives.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Sequence

import httpx

from nftmeta.core.config import Config
from nftmeta.core.logging import configure_logging, get_logger
from nftmeta.core.types import Chain, FetchOptions, TokenRef
from nftmeta.metadata.cache import MetadataCache
from nftmeta.metadata.requests import parse_batch_request, parse_single_request
from nftmeta.metadata.service import MetadataService
from nftmeta.storage import StorageBackend, get_storage
from nftmeta.upstream.alchemy import AlchemyProvider
from nftmeta.upstream.base import MetadataProvider

SERVICE_NAME = "nft-metadata-api"


class NftMetadataClient:
    """
    Normalized, cached NFT metadata.

    Example:
        >>> async with NftMetadataClient() as client:
        ...     nft = await client.get_metadata(1, "0xbc4c...", "1")
        ...     batch = await client.handle_batch({"chainId": 8453, "tokens": [...]})
    """

    def __init__(
        self,
        config: Config | None = None,
        provider: MetadataProvider | None = None,
        storage: StorageBackend | None = None,
        http_client: httpx.AsyncClient | None = None,
        configure_logs: bool = True,
    ) -> None:
        """
        Args:
            config: Configuration (defaults to ``Config.from_env()``)
            provider: Upstream provider (defaults to Alchemy with the configured key)
            storage: Cache storage (defaults to the configured backend)
            http_client: Shared httpx client for the default provider
            configure_logs: Install the package log handler at the configured level
        """
        self._config = config or Config.from_env()

        if configure_logs:
            configure_logging(level=self._config.log_level)
        self._logger = get_logger("client")

        if not self._config.alchemy_api_key and provider is None:
            self._logger.warning("ALCHEMY_API_KEY not set. Uncached lookups will fail.")

        self._storage = storage or get_storage(self._config.storage_backend)
        self._cache = MetadataCache(self._storage)
        self._provider = provider or AlchemyProvider(
            api_key=self._config.alchemy_api_key,
            base_url=self._config.alchemy_base_url,
            http_client=http_client,
        )
        self._service = MetadataService(self._provider, self._cache, self._config)
        self._logger.info(
            f"Initialized nftmeta client (key: {self._config.masked_api_key()}, "
            f"storage: {self._config.storage_backend})"
        )

    @property
    def config(self) -> Config:
        return self._config

    @property
    def cache(self) -> MetadataCache:
        return self._cache

    @property
    def service(self) -> MetadataService:
        return self._service

    async def __aenter__(self) -> NftMetadataClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the provider's HTTP resources."""
        await self._provider.close()

    # ─── Typed API ───────────────────────────────────────────────────

    async def get_metadata(
        self,
        chain_id: Chain | int,
        contract: str,
        token_id: str,
        options: FetchOptions | dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Normalized metadata for one token. See MetadataService.get_metadata."""
        return await self._service.get_metadata(
            chain_id, contract, token_id, self._options(options)
        )

    async def get_metadata_batch(
        self,
        chain_id: Chain | int,
        tokens: Sequence[TokenRef | dict[str, Any]],
        options: FetchOptions | dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Normalized metadata for many tokens. See MetadataService.get_metadata_batch."""
        return await self._service.get_metadata_batch(chain_id, tokens, self._options(options))

    # ─── Request Bodies ──────────────────────────────────────────────

    async def handle_single(self, body: Any) -> dict[str, Any]:
        """Serve a ``{chainId, contract, tokenId, options?}`` request body."""
        request = parse_single_request(
            body,
            default_timeout_ms=self._config.default_timeout_ms,
            max_timeout_ms=self._config.max_timeout_ms,
        )
        return await self._service.get_metadata(
            request.chain, request.token.contract, request.token.token_id, request.options
        )

    async def handle_batch(self, body: Any) -> dict[str, Any]:
        """Serve a ``{chainId, tokens, options?}`` request body."""
        request = parse_batch_request(
            body,
            limit=self._config.max_batch_tokens,
            default_timeout_ms=self._config.default_timeout_ms,
            max_timeout_ms=self._config.max_timeout_ms,
        )
        return await self._service.get_metadata_batch(
            request.chain, request.tokens, request.options
        )

    async def health(self) -> dict[str, Any]:
        """Service status and cache size."""
        from nftmeta import __version__

        healthy = await self._storage.health_check()
        return {
            "service": SERVICE_NAME,
            "status": "online" if healthy else "degraded",
            "version": __version__,
            "cacheEntries": await self._cache.size(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def _options(self, options: FetchOptions | dict[str, Any] | None) -> FetchOptions:
        if isinstance(options, FetchOptions):
            return options
        return FetchOptions.from_dict(
            options,
            default_timeout_ms=self._config.default_timeout_ms,
            max_timeout_ms=self._config.max_timeout_ms,
        )


__all__ = ["NftMetadataClient"]
