"""Tests for the Alchemy provider over a mocked httpx transport."""

import asyncio
import json

import httpx
import pytest

from nftmeta.core.exceptions import ConfigurationError, NetworkError
from nftmeta.core.types import Chain, TokenRef
from nftmeta.upstream.alchemy import AlchemyProvider

from conftest import BAYC


def make_provider(handler, api_key: str | None = "secret-key") -> AlchemyProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AlchemyProvider(api_key=api_key, http_client=client)


class TestFetchOne:
    """Tests for getNFTMetadata."""

    @pytest.mark.asyncio
    async def test_request_shape(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={"title": "Ape"})

        provider = make_provider(handler)
        record = await provider.fetch_one(Chain.ETHEREUM, BAYC, "255", timeout_ms=1500)

        request = seen["request"]
        assert record == {"title": "Ape"}
        assert request.method == "GET"
        assert request.url.host == "eth-mainnet.g.alchemy.com"
        assert request.url.path == "/nft/v3/secret-key/getNFTMetadata"
        assert request.url.params["contractAddress"] == BAYC
        assert request.url.params["tokenId"] == "0xff"
        assert request.url.params["tokenType"] == "ERC721"
        assert request.url.params["tokenUriTimeoutInMs"] == "1500"
        assert "refreshCache" not in request.url.params

    @pytest.mark.asyncio
    async def test_refresh_and_base_host(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={})

        provider = make_provider(handler)
        await provider.fetch_one(Chain.BASE, BAYC, "0x1", timeout_ms=0, refresh=True)
        assert seen["request"].url.host == "base-mainnet.g.alchemy.com"
        assert seen["request"].url.params["refreshCache"] == "true"
        assert seen["request"].url.params["tokenUriTimeoutInMs"] == "0"

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status(self) -> None:
        provider = make_provider(lambda r: httpx.Response(429, json={"error": "slow down"}))
        with pytest.raises(NetworkError) as exc_info:
            await provider.fetch_one(Chain.ETHEREUM, BAYC, "1", timeout_ms=1000)
        error = exc_info.value
        assert error.status_code == 429
        assert error.is_rate_limited() is True
        assert error.details["payload"] == {"error": "slow down"}
        assert "secret-key" not in error.url

    @pytest.mark.asyncio
    async def test_non_json_body_wrapped(self) -> None:
        provider = make_provider(lambda r: httpx.Response(502, text="Bad Gateway"))
        with pytest.raises(NetworkError) as exc_info:
            await provider.fetch_one(Chain.ETHEREUM, BAYC, "1", timeout_ms=1000)
        assert exc_info.value.details["payload"] == {"raw": "Bad Gateway"}
        assert exc_info.value.is_server_error() is True

    @pytest.mark.asyncio
    async def test_transport_error_has_no_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        provider = make_provider(handler)
        with pytest.raises(NetworkError) as exc_info:
            await provider.fetch_one(Chain.ETHEREUM, BAYC, "1", timeout_ms=1000)
        assert exc_info.value.status_code is None
        assert exc_info.value.is_endpoint_unavailable() is True

    @pytest.mark.asyncio
    async def test_deadline_cancels_request(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, json={})

        provider = make_provider(handler)
        with pytest.raises(NetworkError) as exc_info:
            await provider.fetch_one(Chain.ETHEREUM, BAYC, "1", timeout_ms=20)
        assert exc_info.value.message == "alchemy_timeout"

    @pytest.mark.asyncio
    async def test_missing_api_key(self) -> None:
        calls = []
        provider = make_provider(lambda r: calls.append(r) or httpx.Response(200), api_key=None)
        with pytest.raises(ConfigurationError):
            await provider.fetch_one(Chain.ETHEREUM, BAYC, "1", timeout_ms=1000)
        assert calls == []
        assert provider.is_configured is False


class TestFetchMany:
    """Tests for getNFTMetadataBatch."""

    @pytest.mark.asyncio
    async def test_request_and_response(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={"nfts": [{"tokenId": "1"}]})

        provider = make_provider(handler)
        result = await provider.fetch_many(
            Chain.ETHEREUM, [TokenRef(BAYC, "1"), TokenRef(BAYC, "0xA")], timeout_ms=2000
        )

        request = seen["request"]
        assert result == {"records": [{"tokenId": "1"}]}
        assert request.method == "POST"
        assert request.url.path == "/nft/v3/secret-key/getNFTMetadataBatch"
        assert json.loads(request.content) == {
            "tokens": [
                {"contractAddress": BAYC, "tokenId": "0x1", "tokenType": "ERC721"},
                {"contractAddress": BAYC, "tokenId": "0xa", "tokenType": "ERC721"},
            ],
            "refreshCache": False,
            "tokenUriTimeoutInMs": 2000,
        }

    @pytest.mark.asyncio
    async def test_missing_nfts_key(self) -> None:
        provider = make_provider(lambda r: httpx.Response(200, json={"unexpected": True}))
        result = await provider.fetch_many(Chain.ETHEREUM, [TokenRef(BAYC, "1")], timeout_ms=2000)
        assert result == {"records": []}

    @pytest.mark.asyncio
    async def test_not_found_is_endpoint_unavailable(self) -> None:
        provider = make_provider(lambda r: httpx.Response(404))
        with pytest.raises(NetworkError) as exc_info:
            await provider.fetch_many(Chain.ETHEREUM, [TokenRef(BAYC, "1")], timeout_ms=2000)
        assert exc_info.value.is_endpoint_unavailable() is True


class TestLifecycle:
    """Client ownership."""

    @pytest.mark.asyncio
    async def test_shared_client_not_closed(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        provider = AlchemyProvider(api_key="k", http_client=client)
        await provider.close()
        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self) -> None:
        provider = AlchemyProvider(api_key="k")
        client = await provider._get_client()
        await provider.close()
        assert client.is_closed is True
