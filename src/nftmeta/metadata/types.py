"""
Normalized NFT metadata model.

Every result served to callers has the same shape: all keys present, values
possibly null. ``owners`` and ``mint`` exist only in full mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from nftmeta.core.types import Mode


@dataclass
class MediaInfo:
    url: str | None = None
    original_url: str | None = None
    content_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "originalUrl": self.original_url,
            "contentType": self.content_type,
        }


@dataclass
class AnimationInfo:
    url: str | None = None
    content_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "contentType": self.content_type}


@dataclass
class NftAttribute:
    trait_type: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"trait_type": self.trait_type, "value": self.value}


@dataclass
class CollectionInfo:
    name: str | None = None
    slug: str | None = None
    external_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "slug": self.slug, "externalUrl": self.external_url}


@dataclass
class TokenUriInfo:
    raw: str | None = None
    gateway: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"raw": self.raw, "gateway": self.gateway}


@dataclass
class ContractInfo:
    token_type: str | None = None
    symbol: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"tokenType": self.token_type, "symbol": self.symbol}


@dataclass
class SpamInfo:
    is_spam: bool | None = None
    classifications: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"isSpam": self.is_spam, "classifications": list(self.classifications)}


@dataclass
class ResultIssue:
    """An entry of a result's ``errors`` or ``warnings`` list."""

    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


@dataclass
class NftMetadata:
    """
    Normalized metadata for one token.

    ``token_id`` is the caller's input string, not the re-hexed form.
    """

    chain_id: int
    contract: str
    token_id: str
    mode: Mode = Mode.LITE
    name: str | None = None
    description: str | None = None
    image: MediaInfo = field(default_factory=MediaInfo)
    animation: AnimationInfo = field(default_factory=AnimationInfo)
    attributes: list[NftAttribute] = field(default_factory=list)
    collection: CollectionInfo = field(default_factory=CollectionInfo)
    token_uri: TokenUriInfo = field(default_factory=TokenUriInfo)
    contract_metadata: ContractInfo = field(default_factory=ContractInfo)
    time_last_updated: str | None = None
    spam_info: SpamInfo = field(default_factory=SpamInfo)
    errors: list[ResultIssue] = field(default_factory=list)
    warnings: list[ResultIssue] = field(default_factory=list)
    # Full mode only
    owners: list[Any] = field(default_factory=list)
    mint: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Render the wire shape; lite mode omits ``owners`` and ``mint``."""
        data: dict[str, Any] = {
            "chainId": self.chain_id,
            "contract": self.contract,
            "tokenId": self.token_id,
            "name": self.name,
            "description": self.description,
            "image": self.image.to_dict(),
            "animation": self.animation.to_dict(),
            "attributes": [a.to_dict() for a in self.attributes],
            "collection": self.collection.to_dict(),
            "tokenUri": self.token_uri.to_dict(),
            "contractMetadata": self.contract_metadata.to_dict(),
            "timeLastUpdated": self.time_last_updated,
            "spamInfo": self.spam_info.to_dict(),
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }
        if self.mode == Mode.FULL:
            data["owners"] = list(self.owners)
            data["mint"] = self.mint
        return data
