"""Unit tests for config module."""

import os
from unittest.mock import patch

import pytest

from nftmeta.core.config import Config
from nftmeta.core.types import Mode


class TestConfig:
    """Tests for Config class."""

    def test_defaults(self) -> None:
        """Test default TTLs and limits."""
        config = Config()

        assert config.alchemy_api_key is None
        assert config.lite_ttl_ms == 43_200_000
        assert config.full_ttl_ms == 14_400_000
        assert config.negative_ttl_ms == 300_000
        assert config.default_timeout_ms == 2000
        assert config.max_timeout_ms == 5000
        assert config.max_batch_tokens == 100
        assert config.storage_backend == "memory"

    def test_config_is_immutable(self) -> None:
        """Test that config is frozen (immutable)."""
        config = Config(alchemy_api_key="key")

        with pytest.raises(AttributeError):
            config.alchemy_api_key = "other"  # type: ignore

    @pytest.mark.parametrize("field", ["lite_ttl_ms", "full_ttl_ms", "negative_ttl_ms"])
    def test_non_positive_ttl_raises(self, field) -> None:
        with pytest.raises(ValueError, match=f"{field} must be positive"):
            Config(**{field: 0})

    def test_batch_limit_raises(self) -> None:
        with pytest.raises(ValueError, match="max_batch_tokens"):
            Config(max_batch_tokens=0)

    def test_default_timeout_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="default_timeout_ms"):
            Config(default_timeout_ms=6000)

    def test_ttl_for_mode(self) -> None:
        config = Config(lite_ttl_ms=10, full_ttl_ms=5)
        assert config.ttl_for_mode(Mode.LITE) == 10
        assert config.ttl_for_mode(Mode.FULL) == 5

    def test_with_updates(self) -> None:
        """Test creating new config with updates."""
        original = Config(alchemy_api_key="key")
        updated = original.with_updates(negative_ttl_ms=1000)

        assert original.negative_ttl_ms == 300_000
        assert updated.negative_ttl_ms == 1000
        assert updated.alchemy_api_key == "key"

    def test_with_updates_validates(self) -> None:
        with pytest.raises(ValueError):
            Config().with_updates(lite_ttl_ms=-1)

    def test_masked_api_key(self) -> None:
        assert Config(alchemy_api_key="abcd1234efgh5678").masked_api_key() == "abcd...5678"
        assert Config(alchemy_api_key="short").masked_api_key() == "****"
        assert Config().masked_api_key() == "****"


class TestConfigFromEnv:
    """Tests for Config.from_env."""

    def test_from_env(self) -> None:
        env = {
            "ALCHEMY_API_KEY": "env-key",
            "CACHE_LITE_TTL_MS": "1000",
            "CACHE_FULL_TTL_MS": "500",
            "NEGATIVE_CACHE_TTL_MS": "50",
            "NFTMETA_LOG_LEVEL": "DEBUG",
            "NFTMETA_ENV": "production",
        }
        with patch.dict(os.environ, env, clear=True):
            config = Config.from_env()

        assert config.alchemy_api_key == "env-key"
        assert config.lite_ttl_ms == 1000
        assert config.full_ttl_ms == 500
        assert config.negative_ttl_ms == 50
        assert config.log_level == "DEBUG"
        assert config.env == "production"

    def test_empty_env_uses_defaults(self) -> None:
        with patch.dict(os.environ, {"ALCHEMY_API_KEY": "", "CACHE_LITE_TTL_MS": " "}, clear=True):
            config = Config.from_env()

        assert config.alchemy_api_key is None
        assert config.lite_ttl_ms == 43_200_000

    def test_non_numeric_ttl_raises(self) -> None:
        with patch.dict(os.environ, {"CACHE_FULL_TTL_MS": "soon"}, clear=True):
            with pytest.raises(ValueError, match="CACHE_FULL_TTL_MS"):
                Config.from_env()

    def test_overrides_win(self) -> None:
        with patch.dict(os.environ, {"ALCHEMY_API_KEY": "env-key"}, clear=True):
            config = Config.from_env(alchemy_api_key="explicit", negative_ttl_ms=None)

        assert config.alchemy_api_key == "explicit"
        assert config.negative_ttl_ms == 300_000

    def test_env_file(self, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ALCHEMY_API_KEY=file-key\nNEGATIVE_CACHE_TTL_MS=1234\n")

        with patch.dict(os.environ, {}, clear=True):
            config = Config.from_env(env_file=str(env_file))

        assert config.alchemy_api_key == "file-key"
        assert config.negative_ttl_ms == 1234

    def test_environment_beats_env_file(self, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ALCHEMY_API_KEY=file-key\n")

        with patch.dict(os.environ, {"ALCHEMY_API_KEY": "env-key"}, clear=True):
            config = Config.from_env(env_file=str(env_file))

        assert config.alchemy_api_key == "env-key"
