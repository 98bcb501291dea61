"""Unit tests for permission cache wiring."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from permcache.cache.application.write_behind import WriteBehindState
from permcache.infrastructure.dependencies import (
    build_permission_cache,
    get_spicedb_client,
)
from permcache.infrastructure.settings import CacheSettings, SpiceDBSettings
from permcache.shared_kernel.authorization.spicedb import SpiceDBAuthorizationClient


class TestBuildPermissionCache:
    """Tests for build_permission_cache."""

    def test_components_share_stats(self):
        cache = build_permission_cache(
            AsyncMock(), CacheSettings(enabled=True, batch_size=10)
        )

        assert cache.read_cache.stats is cache.stats
        assert cache.write_behind.state is WriteBehindState.IDLE
        assert cache.write_behind.batch_size == 10

    def test_uses_ttl_from_settings(self):
        cache = build_permission_cache(
            AsyncMock(), CacheSettings(ttl=timedelta(seconds=30))
        )

        assert cache.read_cache.ttl == timedelta(seconds=30)

    def test_disabled_settings_build_disabled_write_behind(self):
        cache = build_permission_cache(AsyncMock(), CacheSettings(enabled=False))

        assert cache.write_behind.state is WriteBehindState.DISABLED

    @pytest.mark.asyncio
    async def test_checks_are_recorded_for_warming(self):
        client = AsyncMock()
        client.check.return_value = True
        cache = build_permission_cache(client, CacheSettings())

        await cache.read_cache.check("user:alice", "viewer", "document:1")

        assert len(cache.activity_log) == 1
        assert await cache.warmer.warm_from_activity(10) == 1


class TestGetSpiceDBClient:
    def test_builds_client_from_settings(self):
        settings = SpiceDBSettings(endpoint="spicedb:50051", preshared_key="key")
        with patch(
            "permcache.infrastructure.dependencies.get_spicedb_settings",
            return_value=settings,
        ):
            client = get_spicedb_client()

        assert isinstance(client, SpiceDBAuthorizationClient)
        assert client._endpoint == "spicedb:50051"
        assert client._preshared_key == "key"
        assert client._client is None
