"""
Contract address and token id canonicalization.

Token ids arrive as decimal (``"1234"``) or 0x-prefixed hex (``"0x4d2"``)
strings and can exceed 64 bits, so conversions go through Python ints.
Every function here is pure.
"""

from __future__ import annotations

import re
from typing import Any

_CONTRACT_RE = re.compile(r"^0x[0-9a-f]{40}$")
# Bounded to the uint256 range: 2**256 - 1 has 78 decimal or 64 hex digits
_DECIMAL_RE = re.compile(r"^[0-9]{1,78}$")
_HEX_RE = re.compile(r"^0x[0-9a-f]{1,64}$")
UINT256_MAX = 2**256 - 1


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def normalize_contract(contract: Any) -> str:
    """Lowercase and trim a contract address."""
    return _as_text(contract).strip().lower()


def is_valid_contract(contract: str) -> bool:
    """True iff ``contract`` is ``0x`` followed by exactly 40 lowercase hex digits."""
    return bool(_CONTRACT_RE.match(contract))


def normalize_token_id(token_id: Any) -> str:
    """Lowercase and trim a token id."""
    return _as_text(token_id).strip().lower()


def is_valid_token_id(token_id: str) -> bool:
    """True iff the normalized id is decimal or 0x-prefixed hex within uint256."""
    normalized = normalize_token_id(token_id)
    if not (_DECIMAL_RE.match(normalized) or _HEX_RE.match(normalized)):
        return False
    return token_id_value(normalized) <= UINT256_MAX


def to_hex_token_id(token_id: Any) -> str:
    """
    Convert a token id to its 0x-prefixed hex form.

    Hex input passes through unchanged (apart from normalization), so the
    conversion is idempotent.

    Raises:
        ValueError: If the id is neither decimal nor hex.
    """
    normalized = normalize_token_id(token_id)
    if _HEX_RE.match(normalized):
        return normalized
    if not _DECIMAL_RE.match(normalized):
        raise ValueError(f"Invalid token id: {token_id!r}")
    return hex(int(normalized))


def to_decimal_token_id(token_id: Any) -> str:
    """Convert a token id to its decimal string form (no leading zeros)."""
    return str(token_id_value(token_id))


def canonical_token_id(token_id: Any) -> str:
    """
    Canonical hex form used for equality: ``0x`` + hex digits, no leading zeros.

    ``"1"``, ``"0x1"``, ``"0x0001"`` and ``"0X01"`` all map to ``"0x1"``.
    """
    return hex(token_id_value(token_id))


def token_id_value(token_id: Any) -> int:
    """Integer value of a decimal or hex token id."""
    normalized = normalize_token_id(token_id)
    if _HEX_RE.match(normalized):
        return int(normalized, 16)
    if _DECIMAL_RE.match(normalized):
        return int(normalized)
    raise ValueError(f"Invalid token id: {token_id!r}")
