"""
Request validation.

Pure checks run before any cache or network work. Failures raise a
ValidationError subclass and are never cached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from nftmeta.core.exceptions import (
    InvalidContractError,
    InvalidTokenIdError,
    TokensLimitExceededError,
    UnsupportedChainError,
)
from nftmeta.core.types import Chain, FetchOptions, TokenRef
from nftmeta.tokens.identifiers import is_valid_contract, is_valid_token_id, normalize_contract

MAX_BATCH_TOKENS = 100

_SUPPORTED = ", ".join(str(c.value) for c in Chain)


def require_chain(chain_id: Any) -> Chain:
    """Resolve a supported chain or raise UnsupportedChainError."""
    chain = Chain.from_id(chain_id)
    if chain is None:
        raise UnsupportedChainError(
            f"chainId {chain_id} not supported. Use one of: {_SUPPORTED}.",
            chain_id=chain_id,
            hint=f"Supported chains: {_SUPPORTED}",
        )
    return chain


def require_token(contract: Any, token_id: Any, batch: bool = False) -> TokenRef:
    """
    Canonicalize and validate one token.

    The contract is lowercased; the token id keeps the caller's spelling
    (trimmed) so results echo it back.
    """
    contract_norm = normalize_contract(contract)
    token_text = "" if token_id is None else str(token_id).strip()
    prefix = "every token." if batch else ""

    if not is_valid_contract(contract_norm):
        raise InvalidContractError(
            f"{prefix}contract must be a valid 0x address",
            hint="Expected 0x followed by 40 hex characters",
        )
    if not is_valid_token_id(token_text):
        raise InvalidTokenIdError(
            f"{prefix}tokenId must be decimal or hex string",
            hint="Use a decimal string like '1234' or hex like '0x4d2'",
        )
    return TokenRef(contract=contract_norm, token_id=token_text)


def require_tokens(tokens: Any, limit: int = MAX_BATCH_TOKENS) -> list[TokenRef]:
    """Validate a batch token list; the size check runs before any per-token check."""
    if not isinstance(tokens, Sequence) or isinstance(tokens, (str, bytes)):
        raise TokensLimitExceededError(
            f"tokens must contain between 1 and {limit} entries", count=None, limit=limit
        )
    if not 1 <= len(tokens) <= limit:
        raise TokensLimitExceededError(
            f"tokens must contain between 1 and {limit} entries", count=len(tokens), limit=limit
        )

    refs = []
    for token in tokens:
        if isinstance(token, TokenRef):
            refs.append(require_token(token.contract, token.token_id, batch=True))
        elif isinstance(token, dict):
            refs.append(require_token(token.get("contract"), token.get("tokenId"), batch=True))
        else:
            refs.append(require_token(None, None, batch=True))
    return refs


@dataclass(frozen=True)
class SingleRequest:
    chain: Chain
    token: TokenRef
    options: FetchOptions = field(default_factory=FetchOptions)


@dataclass(frozen=True)
class BatchRequest:
    chain: Chain
    tokens: list[TokenRef]
    options: FetchOptions = field(default_factory=FetchOptions)


def parse_single_request(
    body: Any,
    default_timeout_ms: int | None = None,
    max_timeout_ms: int | None = None,
) -> SingleRequest:
    """Validate ``{chainId, contract, tokenId, options?}``."""
    body = body if isinstance(body, dict) else {}
    chain = require_chain(body.get("chainId"))
    token = require_token(body.get("contract"), body.get("tokenId"))
    return SingleRequest(
        chain=chain,
        token=token,
        options=_parse_options(body.get("options"), default_timeout_ms, max_timeout_ms),
    )


def parse_batch_request(
    body: Any,
    limit: int = MAX_BATCH_TOKENS,
    default_timeout_ms: int | None = None,
    max_timeout_ms: int | None = None,
) -> BatchRequest:
    """Validate ``{chainId, tokens: [...], options?}``."""
    body = body if isinstance(body, dict) else {}
    chain = require_chain(body.get("chainId"))
    tokens = require_tokens(body.get("tokens"), limit=limit)
    return BatchRequest(
        chain=chain,
        tokens=tokens,
        options=_parse_options(body.get("options"), default_timeout_ms, max_timeout_ms),
    )


def _parse_options(
    options: Any,
    default_timeout_ms: int | None,
    max_timeout_ms: int | None,
) -> FetchOptions:
    kwargs = {}
    if default_timeout_ms is not None:
        kwargs["default_timeout_ms"] = default_timeout_ms
    if max_timeout_ms is not None:
        kwargs["max_timeout_ms"] = max_timeout_ms
    return FetchOptions.from_dict(options, **kwargs)


__all__ = [
    "BatchRequest",
    "MAX_BATCH_TOKENS",
    "SingleRequest",
    "parse_batch_request",
    "parse_single_request",
    "require_chain",
    "require_token",
    "require_tokens",
]
