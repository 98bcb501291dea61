"""Fixtures for cache tests with a mocked authorization client."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from permcache.cache.application.read_through import ReadThroughCache
from permcache.cache.domain.stats import StatsRegistry
from permcache.cache.infrastructure.entry_store import InMemoryEntryStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def mock_client() -> AsyncMock:
    """Authorization client that allows every check and accepts every write."""
    client = AsyncMock()
    client.check.return_value = True
    client.list_objects.return_value = []
    return client


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stats() -> StatsRegistry:
    return StatsRegistry()


@pytest.fixture
def read_cache(mock_client, clock, stats) -> ReadThroughCache:
    return ReadThroughCache(
        mock_client,
        timedelta(seconds=60),
        store=InMemoryEntryStore(clock=clock),
        stats=stats,
        probe=MagicMock(),
    )
