"""
Upstream record → NftMetadata.

Provider payloads are loosely shaped: fields move between API versions,
nested objects go missing, lists arrive as null. Each accessor here reads
one field defensively and falls back to an explicit default, so
normalization never raises on a malformed record.
"""

from __future__ import annotations

from typing import Any

from nftmeta.core.exceptions import ErrorCode
from nftmeta.core.types import Mode
from nftmeta.metadata.types import (
    AnimationInfo,
    CollectionInfo,
    ContractInfo,
    MediaInfo,
    NftAttribute,
    NftMetadata,
    ResultIssue,
    SpamInfo,
    TokenUriInfo,
)
from nftmeta.tokens.identifiers import to_hex_token_id

IPFS_SCHEME = "ipfs://"
IPFS_GATEWAY = "https://ipfs.io/ipfs/"
TOKEN_URI_BASE = "https://token-uri.g.alchemy.com/nft/v3"
OPENSEA_COLLECTION_URL = "https://opensea.io/collection/"


def _section(data: Any, *path: str) -> dict[str, Any]:
    """Walk nested dicts; any missing or non-dict step yields ``{}``."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return {}
        current = current.get(key)
    return current if isinstance(current, dict) else {}


def _text(data: dict[str, Any], key: str) -> str | None:
    """Non-empty value of ``key`` or None."""
    value = data.get(key)
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def _first_text(*candidates: str | None) -> str | None:
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def _list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else []


def _hex_or_raw(token_id: str) -> str:
    try:
        return to_hex_token_id(token_id)
    except ValueError:
        return str(token_id).strip().lower()


def _metadata_section(record: dict[str, Any]) -> dict[str, Any]:
    """Token metadata lives at ``metadata`` (v2) or ``raw.metadata`` (v3)."""
    if isinstance(record.get("metadata"), dict):
        return record["metadata"]
    return _section(record, "raw", "metadata")


def normalize_attributes(attributes: Any) -> list[NftAttribute]:
    """Keep entries with a non-empty trait label; values pass through untouched."""
    result = []
    for item in _list(attributes):
        if not isinstance(item, dict):
            continue
        label = item.get("trait_type") or item.get("traitType") or ""
        label = str(label)
        if not label:
            continue
        result.append(NftAttribute(trait_type=label, value=item.get("value")))
    return result


def normalize_media(media: Any) -> MediaInfo:
    """Image fields come from the first media entry only."""
    entries = _list(media)
    first = entries[0] if entries and isinstance(entries[0], dict) else {}
    return MediaInfo(
        url=_first_text(_text(first, "gateway"), _text(first, "thumbnail")),
        original_url=_text(first, "raw"),
        content_type=_text(first, "format"),
    )


def ipfs_to_gateway(uri: str) -> str:
    """Rewrite an ``ipfs://`` URI to the public gateway; the path is kept verbatim."""
    return f"{IPFS_GATEWAY}{uri[len(IPFS_SCHEME):]}"


def normalize_token_uri(token_uri: Any, contract: str, token_id_hex: str) -> TokenUriInfo:
    """
    Resolve the token URI pair.

    Gateway preference: provider gateway, IPFS rewrite of the raw URI, the
    raw URI itself, then the provider's canonical metadata URL.
    """
    if isinstance(token_uri, str):
        token_uri = {"raw": token_uri}
    section = token_uri if isinstance(token_uri, dict) else {}

    raw = _text(section, "raw")
    gateway = _text(section, "gateway")
    if not gateway:
        if raw and raw.startswith(IPFS_SCHEME):
            gateway = ipfs_to_gateway(raw)
        elif raw:
            gateway = raw
        else:
            gateway = f"{TOKEN_URI_BASE}/{contract}/{token_id_hex}"
    return TokenUriInfo(raw=raw, gateway=gateway)


def normalize_collection(record: dict[str, Any]) -> CollectionInfo:
    contract_meta = _section(record, "contractMetadata")
    slug = _first_text(
        _text(_section(contract_meta, "openSea"), "collectionSlug"),
        _text(_section(record, "contract", "openSeaMetadata"), "collectionSlug"),
    )
    return CollectionInfo(
        name=_first_text(_text(contract_meta, "name"), _text(_section(record, "contract"), "name")),
        slug=slug,
        external_url=f"{OPENSEA_COLLECTION_URL}{slug}" if slug else None,
    )


def normalize_nft_result(
    chain_id: int,
    contract: str,
    token_id: str,
    record: dict[str, Any] | None,
    mode: Mode,
) -> NftMetadata:
    """
    Map a raw provider record into the stable NftMetadata shape.

    Args:
        chain_id: Chain the request was made for
        contract: Canonical contract address
        token_id: Token id exactly as the caller supplied it
        record: Raw provider record (may be None or sparse)
        mode: Requested mode; full adds ``owners`` and ``mint``
    """
    record = record if isinstance(record, dict) else {}
    metadata = _metadata_section(record)
    contract_meta = _section(record, "contractMetadata")
    spam = _section(record, "spamInfo")

    mint = record.get("mint")

    return NftMetadata(
        chain_id=chain_id,
        contract=contract,
        token_id=str(token_id),
        mode=mode,
        name=_first_text(_text(record, "title"), _text(metadata, "name"), _text(record, "name")),
        description=_first_text(_text(metadata, "description"), _text(record, "description")),
        image=normalize_media(record.get("media")),
        animation=AnimationInfo(url=_text(metadata, "animation_url")),
        attributes=normalize_attributes(metadata.get("attributes")),
        collection=normalize_collection(record),
        token_uri=normalize_token_uri(record.get("tokenUri"), contract, _hex_or_raw(token_id)),
        contract_metadata=ContractInfo(
            token_type=_first_text(_text(record, "tokenType"), _text(contract_meta, "tokenType")),
            symbol=_text(contract_meta, "symbol"),
        ),
        time_last_updated=_text(record, "timeLastUpdated"),
        spam_info=SpamInfo(
            is_spam=spam.get("isSpam"),
            classifications=_list(spam.get("classifications")),
        ),
        owners=_list(record.get("owners")),
        mint=mint if isinstance(mint, dict) else None,
    )


def failure_result(
    chain_id: int,
    contract: str,
    token_id: str,
    code: ErrorCode | str,
    message: str,
    mode: Mode = Mode.LITE,
) -> NftMetadata:
    """A full-shaped result with no data and one error entry."""
    code_value = code.value if isinstance(code, ErrorCode) else str(code)
    return NftMetadata(
        chain_id=chain_id,
        contract=contract,
        token_id=str(token_id),
        mode=mode,
        errors=[ResultIssue(code=code_value, message=message)],
    )
