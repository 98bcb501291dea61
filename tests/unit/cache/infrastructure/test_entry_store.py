"""Unit tests for the in-memory entry store."""

from permcache.cache.domain.keys import CacheKey, ListCacheKey
from permcache.cache.infrastructure.entry_store import InMemoryEntryStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _key(user: str = "user:alice", object: str = "document:1") -> CacheKey:
    return CacheKey("default", user, "viewer", object)


class TestGetAndPut:
    def test_miss_on_empty_store(self):
        entry, expired = InMemoryEntryStore().get(_key())
        assert entry is None
        assert expired is False

    def test_hit_after_put(self):
        store = InMemoryEntryStore()
        store.put(_key(), True, ttl=60)

        entry, expired = store.get(_key())
        assert entry is not None
        assert entry.value is True
        assert expired is False

    def test_expired_entry_is_removed_on_lookup(self):
        clock = FakeClock()
        store = InMemoryEntryStore(clock=clock)
        store.put(_key(), True, ttl=60)
        clock.advance(60)

        entry, expired = store.get(_key())
        assert entry is None
        assert expired is True
        assert len(store) == 0

    def test_put_discards_fetch_invalidated_in_flight(self):
        store = InMemoryEntryStore()
        fetch = store.begin_fetch(_key())
        store.remove_matching(user="user:alice")

        assert store.put(_key(), True, ttl=60, fetch=fetch) is None
        assert len(store) == 0
        assert store.in_flight() == 0

    def test_unrelated_invalidation_keeps_fetch(self):
        store = InMemoryEntryStore()
        fetch = store.begin_fetch(_key())
        removed = store.remove_matching(user="user:bob")

        assert removed == 0
        assert store.put(_key(), True, ttl=60, fetch=fetch) is not None

    def test_put_without_invalidation_is_stored(self):
        store = InMemoryEntryStore()
        fetch = store.begin_fetch(_key())

        assert store.put(_key(), True, ttl=60, fetch=fetch) is not None
        assert store.in_flight() == 0

    def test_cancel_fetch_forgets_it(self):
        store = InMemoryEntryStore()
        fetch = store.begin_fetch(_key())
        store.remove_matching()

        store.cancel_fetch(fetch)

        assert store.in_flight() == 0


class TestRemoval:
    def test_remove_matching_counts_removed_entries(self):
        store = InMemoryEntryStore()
        store.put(_key("user:alice", "document:1"), True, ttl=60)
        store.put(_key("user:alice", "document:2"), False, ttl=60)
        store.put(_key("user:bob", "document:1"), True, ttl=60)

        assert store.remove_matching(user="user:alice") == 2
        assert len(store) == 1

    def test_remove_matching_includes_listings_of_object_type(self):
        store = InMemoryEntryStore()
        store.put(ListCacheKey("default", "user:alice", "viewer", "document"), (), 60)
        store.put(_key(), True, ttl=60)

        assert store.remove_matching(object="document:1") == 2

    def test_purge_expired(self):
        clock = FakeClock()
        store = InMemoryEntryStore(clock=clock)
        store.put(_key(object="document:1"), True, ttl=10)
        store.put(_key(object="document:2"), True, ttl=100)
        clock.advance(50)

        assert store.purge_expired() == 1
        assert len(store) == 1

    def test_clear(self):
        store = InMemoryEntryStore()
        store.put(_key(), True, ttl=60)
        fetch = store.begin_fetch(_key(object="document:2"))

        assert store.clear() == 1
        assert store.put(_key(object="document:2"), True, ttl=60, fetch=fetch) is None
