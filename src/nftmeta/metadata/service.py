"""
Metadata Service — cache-aware single and batch lookups.

Orchestrates: validate → cache probe → upstream fetch → normalize → cache
write. Single lookups raise on failure; batch lookups contain failures in
the affected result slot and keep the input order.

Concurrent requests for the same key may both miss and both fetch; the
second write simply overwrites the first.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any, Sequence

from nftmeta.core.exceptions import ErrorCode, NetworkError, UpstreamError
from nftmeta.core.logging import get_logger
from nftmeta.core.types import Chain, FetchOptions, Mode, TokenRef, clamp_timeout
from nftmeta.metadata.cache import CacheKey, MetadataCache
from nftmeta.metadata.normalizer import failure_result, normalize_nft_result
from nftmeta.metadata.reconcile import TokenLookup
from nftmeta.metadata.requests import require_chain, require_token, require_tokens
from nftmeta.metadata.types import NftMetadata

if TYPE_CHECKING:
    from nftmeta.core.config import Config
    from nftmeta.upstream.base import MetadataProvider

logger = get_logger("metadata.service")

UPSTREAM_FAILURE_MESSAGE = "Failed to fetch metadata for token"
CACHED_FAILURE_MESSAGE = "Cached upstream failure"
NOT_FOUND_MESSAGE = "Token not found in batch response"


class MetadataService:
    """
    Single-item and batch orchestration over one cache and one provider.

    The cache is injected so every service in a process can share it.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        cache: MetadataCache,
        config: Config,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._config = config

    # ─── Single ──────────────────────────────────────────────────────

    async def get_metadata(
        self,
        chain_id: Chain | int,
        contract: str,
        token_id: str,
        options: FetchOptions | None = None,
    ) -> dict[str, Any]:
        """
        Normalized metadata for one token.

        Steps:
        1. Validate chain and identifiers
        2. Unless ``refresh``: serve a positive hit, or fail fast on a negative one
        3. Fetch upstream, normalize, cache with the mode TTL
        4. On upstream failure, cache the failure and raise UpstreamError

        Raises:
            ValidationError: Bad chain, contract or token id
            ConfigurationError: Provider credential missing (not cached)
            UpstreamError: Upstream failed now or within the negative TTL
        """
        chain = require_chain(chain_id)
        token = require_token(contract, token_id)
        options = self._resolve_options(options)
        key = CacheKey.for_token(chain, token, options.mode)

        if not options.refresh:
            entry = await self._cache.get(key)
            if entry is not None:
                if entry.is_negative:
                    logger.debug(f"Negative cache hit: {key.render()}")
                    raise UpstreamError(
                        "Failed to fetch metadata",
                        hint="Cached failure. Try again later or use refresh=true",
                        cached=True,
                    )
                logger.debug(f"Cache hit: {key.render()}")
                return _relabel(entry.value, token)

        try:
            record = await self._provider.fetch_one(
                chain, token.contract, token.token_id, options.timeout_ms, refresh=options.refresh
            )
        except NetworkError as e:
            logger.warning(
                f"Upstream fetch failed for {token.contract}/{token.token_id} on chain "
                f"{chain.value}: {e.message} (status={e.status_code})"
            )
            await self._store_failure(key, ErrorCode.UPSTREAM_ERROR)
            raise UpstreamError(
                "Failed to fetch metadata",
                hint="Try again or set options.timeoutMs=0 to wait for the provider",
            ) from e

        result = normalize_nft_result(chain.value, token.contract, token.token_id, record, options.mode)
        value = result.to_dict()
        await self._cache.set(key, value, self._config.ttl_for_mode(options.mode))
        return value

    # ─── Batch ───────────────────────────────────────────────────────

    async def get_metadata_batch(
        self,
        chain_id: Chain | int,
        tokens: Sequence[TokenRef | dict[str, Any]],
        options: FetchOptions | None = None,
    ) -> dict[str, Any]:
        """
        Normalized metadata for up to ``max_batch_tokens`` tokens, in input order.

        Cache hits fill their slot directly. The remaining tokens go upstream
        in one bulk call; when the bulk endpoint is unavailable each of them
        is fetched on its own, sequentially. Per-token failures stay in their
        slot.

        Returns:
            ``{"chainId", "count", "mode", "results"}``

        Raises:
            ValidationError: Bad chain, token list size, contract or token id
            ConfigurationError: Provider credential missing
            UpstreamError: The bulk call failed in a way that rules out fallback
        """
        chain = require_chain(chain_id)
        refs = require_tokens(tokens, limit=self._config.max_batch_tokens)
        options = self._resolve_options(options)

        results: list[dict[str, Any] | None] = [None] * len(refs)
        missing: list[tuple[int, TokenRef]] = []

        for index, token in enumerate(refs):
            if options.refresh:
                missing.append((index, token))
                continue

            entry = await self._cache.get(CacheKey.for_token(chain, token, options.mode))
            if entry is None:
                missing.append((index, token))
            elif entry.is_negative:
                code = entry.value.get("code") or ErrorCode.UPSTREAM_ERROR.value
                results[index] = failure_result(
                    chain.value, token.contract, token.token_id, code,
                    CACHED_FAILURE_MESSAGE, options.mode,
                ).to_dict()
            else:
                results[index] = _relabel(entry.value, token)

        if missing:
            logger.debug(
                f"Batch on chain {chain.value}: {len(refs) - len(missing)} cached, "
                f"{len(missing)} to fetch"
            )
            fetched = await self._fetch_missing(chain, [t for _, t in missing], options)
            for (index, token), result in zip(missing, fetched):
                results[index] = result.to_dict()
                await self._store_result(chain, token, options.mode, result)

        return {
            "chainId": chain.value,
            "count": len(results),
            "mode": options.mode.value,
            "results": results,
        }

    async def _fetch_missing(
        self,
        chain: Chain,
        tokens: list[TokenRef],
        options: FetchOptions,
    ) -> list[NftMetadata]:
        """Results for ``tokens`` in the same order, via bulk call or fallback."""
        try:
            payload = await self._provider.fetch_many(
                chain, tokens, options.timeout_ms, refresh=options.refresh
            )
        except NetworkError as e:
            if not e.is_endpoint_unavailable():
                logger.warning(
                    f"Bulk fetch failed on chain {chain.value}: {e.message} (status={e.status_code})"
                )
                raise UpstreamError(
                    "Failed to fetch metadata in batch",
                    hint="Try again or lower options.timeoutMs",
                ) from e
            logger.info(
                f"Bulk endpoint unavailable (status={e.status_code}); "
                f"fetching {len(tokens)} tokens one by one"
            )
            return await self._fetch_each(chain, tokens, options)

        records = payload.get("records") if isinstance(payload, dict) else None
        lookup = TokenLookup.from_records(records if isinstance(records, list) else [])

        results = []
        for token in tokens:
            record = lookup.find(token)
            if record is None:
                results.append(failure_result(
                    chain.value, token.contract, token.token_id,
                    ErrorCode.TOKEN_NOT_FOUND, NOT_FOUND_MESSAGE, options.mode,
                ))
            else:
                results.append(normalize_nft_result(
                    chain.value, token.contract, token.token_id, record, options.mode
                ))
        return results

    async def _fetch_each(
        self,
        chain: Chain,
        tokens: list[TokenRef],
        options: FetchOptions,
    ) -> list[NftMetadata]:
        """Sequential per-token fetches; one failure never stops the rest."""
        results = []
        for token in tokens:
            try:
                record = await self._provider.fetch_one(
                    chain, token.contract, token.token_id, options.timeout_ms,
                    refresh=options.refresh,
                )
            except NetworkError as e:
                logger.warning(
                    f"Fallback fetch failed for {token.contract}/{token.token_id}: "
                    f"{e.message} (status={e.status_code})"
                )
                results.append(failure_result(
                    chain.value, token.contract, token.token_id,
                    ErrorCode.UPSTREAM_ERROR, UPSTREAM_FAILURE_MESSAGE, options.mode,
                ))
                continue
            results.append(normalize_nft_result(
                chain.value, token.contract, token.token_id, record, options.mode
            ))
        return results

    # ─── Cache Writes ────────────────────────────────────────────────

    async def _store_result(
        self,
        chain: Chain,
        token: TokenRef,
        mode: Mode,
        result: NftMetadata,
    ) -> None:
        key = CacheKey.for_token(chain, token, mode)
        if result.ok:
            await self._cache.set(key, result.to_dict(), self._config.ttl_for_mode(mode))
        else:
            await self._store_failure(key, result.errors[0].code)

    async def _store_failure(self, key: CacheKey, code: ErrorCode | str) -> None:
        code_value = code.value if isinstance(code, ErrorCode) else code
        await self._cache.set(
            key, {"error": True, "code": code_value}, self._config.negative_ttl_ms, is_negative=True
        )

    def _resolve_options(self, options: FetchOptions | None) -> FetchOptions:
        """Default missing options and clamp the deadline to the configured bounds."""
        if options is None:
            return FetchOptions(timeout_ms=self._config.default_timeout_ms)
        timeout_ms = clamp_timeout(
            options.timeout_ms, self._config.default_timeout_ms, self._config.max_timeout_ms
        )
        if timeout_ms != options.timeout_ms:
            options = replace(options, timeout_ms=timeout_ms)
        return options


def _relabel(value: dict[str, Any], token: TokenRef) -> dict[str, Any]:
    """A cached result answered under the caller's own token id spelling."""
    if value.get("tokenId") == token.token_id:
        return value
    return {**value, "tokenId": token.token_id}


__all__ = ["MetadataService"]
