"""Metadata module — normalization, caching and orchestration."""

from nftmeta.metadata.cache import CacheEntry, CacheKey, MetadataCache
from nftmeta.metadata.normalizer import failure_result, normalize_nft_result
from nftmeta.metadata.reconcile import TokenLookup
from nftmeta.metadata.requests import (
    BatchRequest,
    SingleRequest,
    parse_batch_request,
    parse_single_request,
)
from nftmeta.metadata.service import MetadataService
from nftmeta.metadata.types import NftMetadata

__all__ = [
    "BatchRequest",
    "CacheEntry",
    "CacheKey",
    "MetadataCache",
    "MetadataService",
    "NftMetadata",
    "SingleRequest",
    "TokenLookup",
    "failure_result",
    "normalize_nft_result",
    "parse_batch_request",
    "parse_single_request",
]
