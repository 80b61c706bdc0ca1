"""Token identity — contract and token id canonicalization."""

from nftmeta.tokens.identifiers import (
    canonical_token_id,
    is_valid_contract,
    is_valid_token_id,
    normalize_contract,
    normalize_token_id,
    to_decimal_token_id,
    to_hex_token_id,
    token_id_value,
)

__all__ = [
    "canonical_token_id",
    "is_valid_contract",
    "is_valid_token_id",
    "normalize_contract",
    "normalize_token_id",
    "to_decimal_token_id",
    "to_hex_token_id",
    "token_id_value",
]
