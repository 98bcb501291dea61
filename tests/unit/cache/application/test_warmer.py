"""Unit tests for CacheWarmer."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from permcache.cache.application.read_through import ReadThroughCache
from permcache.cache.application.warmer import CacheWarmer
from permcache.cache.infrastructure.activity_log import InMemoryActivityLog
from permcache.shared_kernel.authorization.exceptions import RemoteUnavailableError
from permcache.shared_kernel.authorization.types import TupleKey


@pytest.fixture
def probe() -> MagicMock:
    return MagicMock()


@pytest.fixture
def warmer(read_cache, probe) -> CacheWarmer:
    return CacheWarmer(read_cache, probe=probe)


class TestWarmBatch:
    @pytest.mark.asyncio
    async def test_warms_full_cross_product(self, warmer, read_cache, mock_client):
        warmed = await warmer.warm_batch(
            ["user:alice", "user:bob"], ["viewer", "editor"], ["document:1"]
        )

        assert warmed == 4
        assert mock_client.check.await_count == 4
        assert read_cache.contains("user:bob", "editor", "document:1")

    @pytest.mark.asyncio
    async def test_warmed_entries_are_hits(self, warmer, read_cache, mock_client):
        await warmer.warm_batch(["user:alice"], ["viewer"], ["document:1"])

        result = await read_cache.check("user:alice", "viewer", "document:1")

        assert result.from_cache is True
        mock_client.check.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_checks_are_skipped(
        self, warmer, read_cache, mock_client, probe
    ):
        async def flaky(user, relation, object, **kwargs):
            if object == "document:2":
                raise RemoteUnavailableError("down")
            return True

        mock_client.check.side_effect = flaky

        warmed = await warmer.warm_batch(
            ["user:alice"], ["viewer"], ["document:1", "document:2", "document:3"]
        )

        assert warmed == 2
        assert not read_cache.contains("user:alice", "viewer", "document:2")
        probe.warm_check_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_counts_warmed_in_stats(self, warmer, stats, probe):
        await warmer.warm_batch(["user:alice"], ["viewer"], ["document:1"])

        assert stats.snapshot().warmed == 1
        probe.cache_warmed.assert_called_once_with("batch", requested=1, warmed=1)

    @pytest.mark.asyncio
    async def test_zero_ttl_warms_nothing(self, mock_client, probe):
        cache = ReadThroughCache(mock_client, timedelta(0), probe=MagicMock())
        warmer = CacheWarmer(cache, probe=probe)

        assert await warmer.warm_batch(["user:alice"], ["viewer"], ["document:1"]) == 0


class TestWarmForUser:
    @pytest.mark.asyncio
    async def test_warms_every_relation_on_every_object(self, warmer, read_cache):
        warmed = await warmer.warm_for_user(
            "user:alice", ["viewer", "editor"], ["document:1", "document:2"]
        )

        assert warmed == 4
        assert read_cache.contains("user:alice", "editor", "document:2")


class TestWarmFromActivity:
    @pytest.mark.asyncio
    async def test_without_activity_log_warms_nothing(self, warmer, mock_client):
        assert await warmer.warm_from_activity(10) == 0
        mock_client.check.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_warms_most_frequent_tuples(self, read_cache, probe):
        log = InMemoryActivityLog()
        hot = TupleKey("user:alice", "viewer", "document:hot")
        cold = TupleKey("user:alice", "viewer", "document:cold")
        for tuple_key in (hot, hot, cold):
            log.record(tuple_key)
        warmer = CacheWarmer(read_cache, activity_log=log, probe=probe)

        warmed = await warmer.warm_from_activity(limit=1)

        assert warmed == 1
        assert read_cache.contains(hot.user, hot.relation, hot.object)
        assert not read_cache.contains(cold.user, cold.relation, cold.object)


class TestWarmRelated:
    @pytest.mark.asyncio
    async def test_warms_objects_discovered_by_listing(
        self, warmer, read_cache, mock_client
    ):
        mock_client.list_objects.return_value = ["document:1", "document:2"]

        warmed = await warmer.warm_related("user:alice", "document:0", ["viewer"])

        assert warmed == 2
        mock_client.list_objects.assert_awaited_once()
        assert mock_client.list_objects.call_args.args[2] == "document"
        assert read_cache.contains("user:alice", "viewer", "document:2")


class TestInvalidate:
    @pytest.mark.asyncio
    async def test_passes_through_to_read_cache(self, warmer, read_cache):
        await warmer.warm_batch(["user:alice", "user:bob"], ["viewer"], ["document:1"])

        assert warmer.invalidate(user="user:alice") == 1
        assert read_cache.contains("user:bob", "viewer", "document:1")


class TestWarmingIsNotActivity:
    @pytest.mark.asyncio
    async def test_warm_checks_are_not_logged_or_counted(self, mock_client, probe):
        log = InMemoryActivityLog()
        cache = ReadThroughCache(mock_client, activity_log=log, probe=MagicMock())
        warmer = CacheWarmer(cache, activity_log=log, probe=probe)

        warmed = await warmer.warm_batch(["user:alice"], ["viewer"], ["document:1"])

        assert warmed == 1
        assert len(log) == 0
        stats = cache.get_stats()
        assert (stats.hits, stats.misses) == (0, 0)

    @pytest.mark.asyncio
    async def test_warming_from_activity_does_not_boost_ranking(
        self, mock_client, probe
    ):
        log = InMemoryActivityLog()
        older = TupleKey("user:alice", "viewer", "document:1")
        newer = TupleKey("user:alice", "viewer", "document:2")
        for tuple_key in (older, older, newer, newer):
            log.record(tuple_key)
        cache = ReadThroughCache(mock_client, activity_log=log, probe=MagicMock())
        warmer = CacheWarmer(cache, activity_log=log, probe=probe)

        assert await warmer.warm_from_activity(limit=2) == 2

        assert log.recent_checks(2) == [newer, older]

    @pytest.mark.asyncio
    async def test_already_cached_tuple_is_not_fetched_again(
        self, warmer, read_cache, mock_client
    ):
        await read_cache.check("user:alice", "viewer", "document:1")

        warmed = await warmer.warm_batch(["user:alice"], ["viewer"], ["document:1"])

        assert warmed == 1
        mock_client.check.assert_awaited_once()
