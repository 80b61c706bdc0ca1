from typing import Any, Sequence

import pytest

from nftmeta.core.config import Config
from nftmeta.core.exceptions import NetworkError
from nftmeta.core.types import Chain, TokenRef
from nftmeta.metadata.cache import MetadataCache
from nftmeta.metadata.service import MetadataService
from nftmeta.storage.memory import InMemoryStorage
from nftmeta.tokens.identifiers import canonical_token_id
from nftmeta.upstream.base import MetadataProvider

BAYC = "0xbc4ca0eda7647a8ab7c2061c2e118a18a936f13d"
AZUKI = "0xed5af388653567af2f388e6224dc7c4b3241c544"


def make_record(contract: str, token_id: str, title: str | None = None, **extra: Any) -> dict[str, Any]:
    """A v2-shaped upstream record."""
    record = {
        "contract": {"address": contract},
        "tokenId": token_id,
        "tokenType": "ERC721",
        "title": title if title is not None else f"Token {token_id}",
        "metadata": {
            "name": f"Meta {token_id}",
            "description": "A token",
            "attributes": [{"trait_type": "Fur", "value": "Gold"}],
        },
        "media": [{"gateway": "https://cdn.example/1.png", "raw": "ipfs://img/1.png", "format": "png"}],
        "tokenUri": {"raw": f"ipfs://meta/{token_id}"},
        "contractMetadata": {"name": "Collection", "symbol": "COL", "openSea": {"collectionSlug": "col"}},
        "timeLastUpdated": "2024-01-01T00:00:00Z",
    }
    record.update(extra)
    return record


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeProvider(MetadataProvider):
    """
    In-memory provider.

    Records are keyed by (contract, canonical token id). Tokens listed in
    ``failing`` raise on fetch_one; ``bulk_error`` is raised by fetch_many.
    """

    def __init__(self) -> None:
        self.records: dict[tuple[str, str], dict[str, Any]] = {}
        self.failing: set[tuple[str, str]] = set()
        self.bulk_error: NetworkError | None = None
        self.bulk_reverse = False
        self.bulk_token_format = None
        self.one_calls: list[tuple[Chain, str, str, int, bool]] = []
        self.many_calls: list[tuple[Chain, list[TokenRef], int, bool]] = []

    def add(self, contract: str, token_id: str, **kwargs: Any) -> dict[str, Any]:
        record = make_record(contract, token_id, **kwargs)
        self.records[(contract, canonical_token_id(token_id))] = record
        return record

    def fail(self, contract: str, token_id: str) -> None:
        self.failing.add((contract, canonical_token_id(token_id)))

    async def fetch_one(self, chain, contract, token_id, timeout_ms, refresh=False):
        self.one_calls.append((chain, contract, token_id, timeout_ms, refresh))
        key = (contract, canonical_token_id(token_id))
        if key in self.failing:
            raise NetworkError("alchemy_error_500", status_code=500)
        if key not in self.records:
            raise NetworkError("alchemy_error_404", status_code=404)
        return dict(self.records[key])

    async def fetch_many(self, chain, tokens: Sequence[TokenRef], timeout_ms, refresh=False):
        self.many_calls.append((chain, list(tokens), timeout_ms, refresh))
        if self.bulk_error is not None:
            raise self.bulk_error
        rows = []
        for token in tokens:
            key = (token.contract, canonical_token_id(token.token_id))
            if key in self.records:
                row = dict(self.records[key])
                if self.bulk_token_format is not None:
                    row["tokenId"] = self.bulk_token_format(token.token_id)
                rows.append(row)
        if self.bulk_reverse:
            rows.reverse()
        return {"records": rows}

    @property
    def call_count(self) -> int:
        return len(self.one_calls) + len(self.many_calls)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def cache(storage, clock):
    return MetadataCache(storage, clock=clock)


@pytest.fixture
def config():
    return Config(
        alchemy_api_key="test-key",
        lite_ttl_ms=12 * 60 * 60 * 1000,
        full_ttl_ms=4 * 60 * 60 * 1000,
        negative_ttl_ms=5 * 60 * 1000,
    )


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def service(provider, cache, config):
    return MetadataService(provider, cache, config)
