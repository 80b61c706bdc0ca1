"""
Exception hierarchy for nftmeta.

All package-specific exceptions inherit from NftMetaError. Every error
carries a machine-readable code and a human hint; ``to_dict()`` renders
the user-facing envelope and never includes ``details`` (which may hold
raw upstream payloads).
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    UNSUPPORTED_CHAIN = "UNSUPPORTED_CHAIN"
    INVALID_CONTRACT = "INVALID_CONTRACT"
    INVALID_TOKEN_ID = "INVALID_TOKEN_ID"
    TOKENS_LIMIT_EXCEEDED = "TOKENS_LIMIT_EXCEEDED"
    CONFIG_ERROR = "CONFIG_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"


class NftMetaError(Exception):
    """
    Base exception for all nftmeta errors.

    Example:
        >>> try:
        ...     await client.get_metadata(1, contract, "1")
        ... except NftMetaError as e:
        ...     body = e.to_dict()
    """

    code: ErrorCode = ErrorCode.UPSTREAM_ERROR
    http_status: int = 500

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Render the user-facing error envelope."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "hint": self.hint,
            }
        }


class ConfigurationError(NftMetaError):
    """
    Configuration is missing or invalid.

    Raised per request when the upstream credential is not set. Never cached.
    """

    code = ErrorCode.CONFIG_ERROR
    http_status = 500


class ValidationError(NftMetaError):
    """
    Request validation failed.

    Raised before any cache or network work. Never cached.
    """

    code = ErrorCode.INVALID_CONTRACT
    http_status = 400


class UnsupportedChainError(ValidationError):
    """Chain id is not in the supported allowlist."""

    code = ErrorCode.UNSUPPORTED_CHAIN

    def __init__(self, message: str, chain_id: Any = None, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)
        self.chain_id = chain_id


class InvalidContractError(ValidationError):
    """Contract address is not a 0x-prefixed 40 hex digit string."""

    code = ErrorCode.INVALID_CONTRACT


class InvalidTokenIdError(ValidationError):
    """Token id is neither a decimal nor a 0x-prefixed hex string."""

    code = ErrorCode.INVALID_TOKEN_ID


class TokensLimitExceededError(ValidationError):
    """Batch request has too few or too many tokens."""

    code = ErrorCode.TOKENS_LIMIT_EXCEEDED

    def __init__(self, message: str, count: int | None = None, limit: int | None = None) -> None:
        super().__init__(message)
        self.count = count
        self.limit = limit


class UpstreamError(NftMetaError):
    """
    Metadata could not be obtained from the upstream provider.

    The message is deliberately generic; the provider's own error text stays
    in the exception chain and in logs only.
    """

    code = ErrorCode.UPSTREAM_ERROR
    http_status = 502

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        cached: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, hint=hint, details=details)
        self.cached = cached


class NetworkError(NftMetaError):
    """
    Network or API communication error raised by upstream providers.

    Raised when:
    - HTTP request fails (timeout, connection error)
    - Provider returns a non-2xx status
    """

    code = ErrorCode.UPSTREAM_ERROR
    http_status = 502

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code
        self.url = url

    def is_rate_limited(self) -> bool:
        """Check if this is a rate limit error."""
        return self.status_code == 429

    def is_server_error(self) -> bool:
        """Check if this is a server-side error."""
        return self.status_code is not None and 500 <= self.status_code < 600

    def is_endpoint_unavailable(self) -> bool:
        """Check if the endpoint itself is missing or unreachable."""
        return self.status_code is None or self.status_code in (404, 405)
