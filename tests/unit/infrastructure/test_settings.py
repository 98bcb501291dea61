"""Unit tests for infrastructure settings."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from permcache.infrastructure.settings import CacheSettings, SpiceDBSettings

CACHE_ENV = (
    "PERMCACHE_ENABLED",
    "PERMCACHE_BATCH_SIZE",
    "PERMCACHE_FLUSH_INTERVAL",
    "PERMCACHE_TTL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in CACHE_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestCacheSettings:
    """Tests for cache settings defaults and validation."""

    def test_defaults(self, clean_env):
        """Write-behind is off by default with conservative batching."""
        settings = CacheSettings()
        assert settings.enabled is False
        assert settings.batch_size == 100
        assert settings.flush_interval == timedelta(seconds=5)
        assert settings.ttl == timedelta(seconds=300)

    def test_reads_environment(self, clean_env):
        clean_env.setenv("PERMCACHE_ENABLED", "true")
        clean_env.setenv("PERMCACHE_BATCH_SIZE", "25")
        clean_env.setenv("PERMCACHE_FLUSH_INTERVAL", "PT2S")

        settings = CacheSettings()

        assert settings.enabled is True
        assert settings.batch_size == 25
        assert settings.flush_interval == timedelta(seconds=2)

    def test_batch_size_must_be_positive(self, clean_env):
        with pytest.raises(ValidationError):
            CacheSettings(batch_size=0)

    def test_flush_interval_must_be_positive(self, clean_env):
        with pytest.raises(ValidationError) as exc_info:
            CacheSettings(flush_interval=timedelta(0))

        assert "flush_interval" in str(exc_info.value)

    def test_ttl_must_not_be_negative(self, clean_env):
        with pytest.raises(ValidationError):
            CacheSettings(ttl=timedelta(seconds=-1))

    def test_zero_ttl_is_allowed(self, clean_env):
        """A zero TTL disables read caching without being an error."""
        assert CacheSettings(ttl=timedelta(0)).ttl == timedelta(0)


class TestSpiceDBSettings:
    def test_defaults(self, monkeypatch):
        for name in ("SPICEDB_ENDPOINT", "SPICEDB_USE_TLS", "SPICEDB_CERT_PATH"):
            monkeypatch.delenv(name, raising=False)

        settings = SpiceDBSettings()

        assert settings.endpoint == "localhost:50051"
        assert settings.use_tls is False
        assert settings.cert_path is None

    def test_preshared_key_is_secret(self, monkeypatch):
        monkeypatch.setenv("SPICEDB_PRESHARED_KEY", "s3cret")

        settings = SpiceDBSettings()

        assert settings.preshared_key.get_secret_value() == "s3cret"
        assert "s3cret" not in repr(settings)
