"""Cache and SpiceDB settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Read-through and write-behind cache settings.

    Environment variables:
        PERMCACHE_ENABLED: Enable write-behind buffering (default: false)
        PERMCACHE_BATCH_SIZE: Maximum operations per flush batch (default: 100)
        PERMCACHE_FLUSH_INTERVAL: Time between scheduled flushes as an ISO 8601
            duration (default: PT5S)
        PERMCACHE_TTL: Lifetime of a cached check as an ISO 8601 duration
            (default: PT300S)
    """

    model_config = SettingsConfigDict(
        env_prefix="PERMCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(
        default=False,
        description="Enable write-behind buffering of grants and revokes",
    )
    batch_size: int = Field(
        default=100,
        description="Maximum operations sent per flush batch",
        ge=1,
    )
    flush_interval: timedelta = Field(
        default=timedelta(seconds=5),
        description="Time between scheduled flush attempts",
    )
    ttl: timedelta = Field(
        default=timedelta(seconds=300),
        description="Lifetime of a cached permission check",
    )

    @field_validator("flush_interval")
    @classmethod
    def validate_flush_interval(cls, value: timedelta) -> timedelta:
        """Flush interval must be positive."""
        if value <= timedelta(0):
            raise ValueError(f"flush_interval must be positive, got {value}")
        return value

    @field_validator("ttl")
    @classmethod
    def validate_ttl(cls, value: timedelta) -> timedelta:
        """TTL must not be negative."""
        if value < timedelta(0):
            raise ValueError(f"ttl must not be negative, got {value}")
        return value


class SpiceDBSettings(BaseSettings):
    """SpiceDB connection settings.

    Environment variables:
        SPICEDB_ENDPOINT: gRPC endpoint (default: localhost:50051)
        SPICEDB_PRESHARED_KEY: Pre-shared key (required in production)
        SPICEDB_USE_TLS: Use a TLS channel (default: false)
        SPICEDB_CERT_PATH: CA certificate for TLS (optional)
    """

    model_config = SettingsConfigDict(
        env_prefix="SPICEDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    endpoint: str = Field(default="localhost:50051", description="gRPC endpoint")
    preshared_key: SecretStr = Field(
        default=SecretStr(""),
        description="Pre-shared key for authentication",
    )
    use_tls: bool = Field(default=False, description="Use a TLS channel")
    cert_path: str | None = Field(default=None, description="CA certificate path")


@lru_cache
def get_cache_settings() -> CacheSettings:
    """Get cached cache settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return CacheSettings()


@lru_cache
def get_spicedb_settings() -> SpiceDBSettings:
    """Get cached SpiceDB settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return SpiceDBSettings()
