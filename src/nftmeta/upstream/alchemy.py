"""
Alchemy NFT API v3 provider.

Reads token metadata through ``getNFTMetadata`` and
``getNFTMetadataBatch`` using httpx. The API key is part of the URL path,
so URLs are masked before they reach logs or exceptions.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Sequence

import httpx

from nftmeta.core.exceptions import ConfigurationError, NetworkError, UnsupportedChainError
from nftmeta.core.logging import get_logger
from nftmeta.core.types import DEFAULT_TIMEOUT_MS, Chain, TokenRef
from nftmeta.tokens.identifiers import to_hex_token_id
from nftmeta.upstream.base import MetadataProvider

logger = get_logger("upstream.alchemy")

DEFAULT_BASE_URL = "https://{host}.g.alchemy.com/nft/v3"
TOKEN_TYPE = "ERC721"


class AlchemyProvider(MetadataProvider):
    """
    Alchemy NFT API client.

    Usage:
        provider = AlchemyProvider(api_key="KEY")
        record = await provider.fetch_one(Chain.ETHEREUM, "0xbc4c...", "1", timeout_ms=2000)
        batch = await provider.fetch_many(Chain.BASE, tokens, timeout_ms=2000)
        await provider.close()
    """

    HTTP_TIMEOUT = 10.0  # seconds, upper bound when a request sets no deadline

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            api_key: Alchemy API key. Checked on every call, not here.
            base_url: URL template with a ``{host}`` placeholder
            http_client: Shared httpx client (for connection pooling and tests)
        """
        self._api_key = api_key
        self._base_url = base_url
        self._http_client = http_client
        self._owns_client = False

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.HTTP_TIMEOUT)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    # ─── URL Helpers ─────────────────────────────────────────────────

    def _endpoint(self, chain: Chain, method: str) -> str:
        if not isinstance(chain, Chain):
            raise UnsupportedChainError(f"chainId {chain} not supported", chain_id=chain)
        if not self._api_key:
            raise ConfigurationError(
                "ALCHEMY_API_KEY is required",
                hint="Set the ALCHEMY_API_KEY environment variable",
            )
        base = self._base_url.format(host=chain.host).rstrip("/")
        return f"{base}/{self._api_key}/{method}"

    def _mask(self, url: str) -> str:
        if self._api_key:
            return url.replace(self._api_key, "****")
        return url

    # ─── Transport ───────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        url: str,
        timeout_ms: int,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Send one request and decode its JSON body.

        ``timeout_ms`` bounds the whole exchange; on expiry the request is
        cancelled and reported as a NetworkError without status.
        """
        client = await self._get_client()
        safe_url = self._mask(url)
        call = client.request(method, url, headers={"accept": "application/json"}, **kwargs)

        try:
            if timeout_ms and timeout_ms > 0:
                response = await asyncio.wait_for(call, timeout=timeout_ms / 1000)
            else:
                response = await call
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"Alchemy request timed out after {timeout_ms}ms: {safe_url}")
            raise NetworkError("alchemy_timeout", url=safe_url) from e
        except httpx.HTTPError as e:
            logger.warning(f"Alchemy transport error: {type(e).__name__} ({safe_url})")
            raise NetworkError("alchemy_transport_error", url=safe_url) from e

        payload = _decode_body(response.text)
        if not response.is_success:
            logger.warning(f"Alchemy HTTP {response.status_code}: {safe_url}")
            raise NetworkError(
                f"alchemy_error_{response.status_code}",
                status_code=response.status_code,
                url=safe_url,
                details={"payload": payload},
            )
        return payload

    # ─── MetadataProvider ────────────────────────────────────────────

    async def fetch_one(
        self,
        chain: Chain,
        contract: str,
        token_id: str,
        timeout_ms: int,
        refresh: bool = False,
    ) -> dict[str, Any]:
        url = self._endpoint(chain, "getNFTMetadata")
        params = {
            "contractAddress": contract,
            "tokenId": to_hex_token_id(token_id),
            "tokenType": TOKEN_TYPE,
        }
        if refresh:
            params["refreshCache"] = "true"
        if timeout_ms is not None and timeout_ms >= 0:
            params["tokenUriTimeoutInMs"] = str(timeout_ms)

        return await self._request("GET", url, timeout_ms, params=params)

    async def fetch_many(
        self,
        chain: Chain,
        tokens: Sequence[TokenRef],
        timeout_ms: int,
        refresh: bool = False,
    ) -> dict[str, Any]:
        url = self._endpoint(chain, "getNFTMetadataBatch")
        body = {
            "tokens": [
                {
                    "contractAddress": token.contract,
                    "tokenId": to_hex_token_id(token.token_id),
                    "tokenType": TOKEN_TYPE,
                }
                for token in tokens
            ],
            "refreshCache": bool(refresh),
            "tokenUriTimeoutInMs": timeout_ms if timeout_ms is not None else DEFAULT_TIMEOUT_MS,
        }

        payload = await self._request("POST", url, timeout_ms, json=body)
        rows = payload.get("nfts")
        return {"records": rows if isinstance(rows, list) else []}


def _decode_body(text: str) -> dict[str, Any]:
    """Parse a JSON body; non-JSON text is wrapped as ``{"raw": text}``."""
    if not text:
        return {}
    try:
        payload = json.loads(text)
    except ValueError:
        return {"raw": text}
    return payload if isinstance(payload, dict) else {"raw": payload}


__all__ = ["AlchemyProvider"]
