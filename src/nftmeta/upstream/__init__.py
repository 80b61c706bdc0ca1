"""Upstream NFT data providers."""

from nftmeta.upstream.alchemy import AlchemyProvider
from nftmeta.upstream.base import MetadataProvider

__all__ = ["AlchemyProvider", "MetadataProvider"]
