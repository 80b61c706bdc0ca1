"""
Bulk response reconciliation.

Providers do not agree on how a token id comes back in a bulk response:
decimal, hex, upper-case hex, or hex with leading zeros. Each record is
indexed under every spelling of its id, so a requested token is found with
a plain dict lookup.
"""

from __future__ import annotations

from typing import Any, Iterable

from nftmeta.core.logging import get_logger
from nftmeta.core.types import TokenRef
from nftmeta.tokens.identifiers import (
    canonical_token_id,
    normalize_contract,
    normalize_token_id,
    to_decimal_token_id,
    to_hex_token_id,
)

logger = get_logger("metadata.reconcile")


def _aliases(token_id: Any) -> list[str]:
    """All spellings a token id can be matched by."""
    normalized = normalize_token_id(token_id)
    aliases = [normalized]
    try:
        aliases += [
            to_decimal_token_id(normalized),
            to_hex_token_id(normalized),
            canonical_token_id(normalized),
        ]
    except ValueError:
        pass
    return aliases


def record_contract(record: dict[str, Any]) -> str:
    """Contract address of a bulk record (v3 nests it, v2 flattens it)."""
    contract = record.get("contract")
    address = contract.get("address") if isinstance(contract, dict) else None
    return normalize_contract(address or record.get("contractAddress") or "")


def record_token_id(record: dict[str, Any]) -> str:
    token_id = record.get("tokenId")
    if token_id is None and isinstance(record.get("id"), dict):
        token_id = record["id"].get("tokenId")
    return normalize_token_id(token_id)


class TokenLookup:
    """Records keyed by ``(contract, token id alias)``."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], dict[str, Any]] = {}

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> TokenLookup:
        lookup = cls()
        for record in records:
            if isinstance(record, dict):
                lookup.add(record)
        return lookup

    def add(self, record: dict[str, Any]) -> None:
        contract = record_contract(record)
        token_id = record_token_id(record)
        if not contract or not token_id:
            logger.debug("Skipping bulk record without contract or token id")
            return
        for alias in _aliases(token_id):
            # First record wins for duplicated ids
            self._records.setdefault((contract, alias), record)

    def find(self, token: TokenRef) -> dict[str, Any] | None:
        """Record for ``token``, tried as decimal first and then as hex."""
        contract = normalize_contract(token.contract)
        for alias in _aliases(token.token_id):
            record = self._records.get((contract, alias))
            if record is not None:
                return record
        return None

    def __len__(self) -> int:
        return len({id(r) for r in self._records.values()})


__all__ = ["TokenLookup", "record_contract", "record_token_id"]
