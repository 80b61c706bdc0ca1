"""
nftmeta - Normalized, cached NFT metadata

Fetches NFT metadata from an upstream provider, normalizes its response
shapes into one stable schema, and caches successes and failures with
separate TTLs.

Usage:
    >>> from nftmeta import NftMetadataClient
    >>>
    >>> async with NftMetadataClient() as client:
    ...     nft = await client.get_metadata(
    ...         chain_id=1,
    ...         contract="0xbc4ca0eda7647a8ab7c2061c2e118a18a936f13d",
    ...         token_id="1",
    ...         options={"mode": "full"},
    ...     )
"""

__version__ = "1.1.0"

from nftmeta.client import NftMetadataClient
from nftmeta.core.config import Config
from nftmeta.core.exceptions import (
    ConfigurationError,
    ErrorCode,
    InvalidContractError,
    InvalidTokenIdError,
    NetworkError,
    NftMetaError,
    TokensLimitExceededError,
    UnsupportedChainError,
    UpstreamError,
    ValidationError,
)
from nftmeta.core.types import Chain, FetchOptions, Mode, TokenRef
from nftmeta.metadata import MetadataCache, MetadataService, NftMetadata
from nftmeta.storage import InMemoryStorage, StorageBackend
from nftmeta.upstream import AlchemyProvider, MetadataProvider

__all__ = [
    # Main Client
    "NftMetadataClient",
    # Config
    "Config",
    # Types
    "Chain",
    "FetchOptions",
    "Mode",
    "TokenRef",
    "NftMetadata",
    # Components
    "MetadataCache",
    "MetadataService",
    "InMemoryStorage",
    "StorageBackend",
    "AlchemyProvider",
    "MetadataProvider",
    # Exceptions
    "ErrorCode",
    "NftMetaError",
    "ConfigurationError",
    "ValidationError",
    "UnsupportedChainError",
    "InvalidContractError",
    "InvalidTokenIdError",
    "TokensLimitExceededError",
    "UpstreamError",
    "NetworkError",
]
