"""
Configuration management for nftmeta.

Handles loading configuration from environment variables (optionally
seeded from a ``.env`` file) and validation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any

from dotenv import load_dotenv

from nftmeta.core.types import DEFAULT_TIMEOUT_MS, MAX_TIMEOUT_MS, Mode

HOUR_MS = 60 * 60 * 1000
MINUTE_MS = 60 * 1000


def _get_env_var(name: str, default: str | None = None, required: bool = False) -> str | None:
    """Get environment variable with optional default."""
    value = os.environ.get(name, default)
    if required and not value:
        raise ValueError(f"Required environment variable {name} is not set")
    return value


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env_var(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(float(raw))
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class Config:
    """Package configuration."""

    # Checked per request, not here: a missing key is a CONFIG_ERROR response
    alchemy_api_key: str | None = None
    alchemy_base_url: str = "https://{host}.g.alchemy.com/nft/v3"

    # Cache TTLs (milliseconds)
    lite_ttl_ms: int = 12 * HOUR_MS
    full_ttl_ms: int = 4 * HOUR_MS
    negative_ttl_ms: int = 5 * MINUTE_MS

    # Request limits
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_timeout_ms: int = MAX_TIMEOUT_MS
    max_batch_tokens: int = 100

    storage_backend: str = "memory"
    log_level: str = "INFO"
    env: str = "development"

    def __post_init__(self) -> None:
        for name in ("lite_ttl_ms", "full_ttl_ms", "negative_ttl_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.max_batch_tokens < 1:
            raise ValueError("max_batch_tokens must be at least 1")
        if not 0 <= self.default_timeout_ms <= self.max_timeout_ms:
            raise ValueError("default_timeout_ms must be within [0, max_timeout_ms]")

    @classmethod
    def from_env(cls, env_file: str | None = None, **overrides: Any) -> Config:
        """
        Load configuration from environment variables.

        Args:
            env_file: Optional path to a ``.env`` file loaded first. Variables
                already present in the environment win.
            **overrides: Explicit values that take precedence over the environment.
        """
        if env_file:
            load_dotenv(env_file, override=False)

        values: dict[str, Any] = {
            "alchemy_api_key": _get_env_var("ALCHEMY_API_KEY") or None,
            "alchemy_base_url": _get_env_var("NFTMETA_ALCHEMY_BASE_URL", default=cls.alchemy_base_url),
            "lite_ttl_ms": _get_env_int("CACHE_LITE_TTL_MS", cls.lite_ttl_ms),
            "full_ttl_ms": _get_env_int("CACHE_FULL_TTL_MS", cls.full_ttl_ms),
            "negative_ttl_ms": _get_env_int("NEGATIVE_CACHE_TTL_MS", cls.negative_ttl_ms),
            "storage_backend": _get_env_var("NFTMETA_STORAGE_BACKEND", default=cls.storage_backend),
            "log_level": _get_env_var("NFTMETA_LOG_LEVEL", default=cls.log_level),
            "env": _get_env_var("NFTMETA_ENV", default=cls.env),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_updates(self, **updates: Any) -> Config:
        """Create a new Config with updated values."""
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update(updates)
        return Config(**current)

    def ttl_for_mode(self, mode: Mode) -> int:
        """TTL of a successful entry; full data goes stale sooner."""
        return self.full_ttl_ms if mode == Mode.FULL else self.lite_ttl_ms

    def masked_api_key(self) -> str:
        """Return API key with most characters masked for safe logging."""
        if not self.alchemy_api_key or len(self.alchemy_api_key) <= 8:
            return "****"
        return self.alchemy_api_key[:4] + "..." + self.alchemy_api_key[-4:]
