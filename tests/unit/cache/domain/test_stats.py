"""Unit tests for cache statistics."""

import threading

import pytest

from permcache.cache.domain.stats import CacheStats, StatsRegistry


class TestCacheStats:
    """Tests for the CacheStats snapshot."""

    def test_hit_rate_is_zero_without_activity(self):
        assert CacheStats().hit_rate == 0.0

    def test_hit_rate_is_hits_over_total(self):
        assert CacheStats(hits=3, misses=1).hit_rate == pytest.approx(0.75)


class TestStatsRegistry:
    """Tests for StatsRegistry."""

    def test_records_hits_and_misses(self):
        stats = StatsRegistry()
        stats.record_hit()
        stats.record_hit()
        stats.record_miss()

        snapshot = stats.snapshot()
        assert snapshot.hits == 2
        assert snapshot.misses == 1
        assert snapshot.hit_rate == pytest.approx(2 / 3)

    def test_records_flush_counts(self):
        stats = StatsRegistry()
        stats.record_flushed(writes=3, deletes=2)
        stats.record_flushed(writes=1)
        stats.record_flush_error()

        snapshot = stats.snapshot()
        assert snapshot.flushed_writes == 4
        assert snapshot.flushed_deletes == 2
        assert snapshot.flush_errors == 1

    def test_records_bulk_counters(self):
        stats = StatsRegistry()
        stats.record_invalidations(5)
        stats.record_expirations(2)
        stats.record_warmed(7)
        stats.record_warmed(0)

        snapshot = stats.snapshot()
        assert snapshot.invalidations == 5
        assert snapshot.expirations == 2
        assert snapshot.warmed == 7

    def test_snapshot_is_immutable_point_in_time(self):
        stats = StatsRegistry()
        before = stats.snapshot()
        stats.record_hit()
        assert before.hits == 0
        assert stats.snapshot().hits == 1

    def test_reset_zeroes_counters(self):
        stats = StatsRegistry()
        stats.record_hit()
        stats.record_flushed(writes=1)
        stats.reset()
        assert stats.snapshot() == CacheStats()

    def test_concurrent_increments_are_not_lost(self):
        stats = StatsRegistry()

        def hammer():
            for _ in range(1000):
                stats.record_hit()

        threads = [threading.Thread(target=hammer) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert stats.snapshot().hits == 8000
