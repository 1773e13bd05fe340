"""Tests for the staleness policy engine."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from alfred_feeds.cache.policy import CachedFetch, OfflineModeError, with_cache
from alfred_feeds.config.settings import CachePolicy

CACHE_KEY = "github-cache.json"


def _cached(store, fetch_fn, **kwargs) -> CachedFetch:
    return with_cache(fetch_fn, "github", CACHE_KEY, store=store, **kwargs)


class TestOfflineOnly:
    """offline-only: live first, cache only as a fallback."""

    @pytest.mark.asyncio
    async def test_success_returns_fresh_and_writes_cache(self, store):
        """Should return the live result and persist it."""
        fetch = AsyncMock(return_value=[{"n": 1}])

        result = await _cached(store, fetch)()

        assert result == [{"n": 1}]
        assert store.read(CACHE_KEY) == [{"n": 1}]

    @pytest.mark.asyncio
    async def test_success_ignores_existing_cache(self, store):
        """Should fetch live even when a cache exists."""
        store.write(CACHE_KEY, [{"n": 0}])
        fetch = AsyncMock(return_value=[{"n": 1}])

        result = await _cached(store, fetch)()

        assert result == [{"n": 1}]
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_with_cache_serves_cache(self, store):
        """Should serve the cached result without raising."""
        store.write(CACHE_KEY, [{"n": 0}])
        fetch = AsyncMock(side_effect=RuntimeError("network down"))

        result = await _cached(store, fetch)()

        assert result == [{"n": 0}]

    @pytest.mark.asyncio
    async def test_failure_without_cache_raises_original_error(self, store):
        """Should propagate the fetch error when nothing is cached."""
        fetch = AsyncMock(side_effect=RuntimeError("network down"))

        with pytest.raises(RuntimeError, match="network down"):
            await _cached(store, fetch)()

    @pytest.mark.asyncio
    async def test_fallback_applies_stale_annotation(self, store):
        """Should annotate every record served from the fallback."""
        store.write(CACHE_KEY, [{"title": "a"}, {"title": "b"}])
        fetch = AsyncMock(side_effect=RuntimeError("boom"))

        result = await _cached(
            store,
            fetch,
            annotate_stale=lambda r: {**r, "stale": True},
        )()

        assert result == [{"title": "a", "stale": True}, {"title": "b", "stale": True}]

    @pytest.mark.asyncio
    async def test_empty_result_not_cached(self, store):
        """Should return an empty result without clobbering the cache."""
        store.write(CACHE_KEY, [{"n": 0}])
        fetch = AsyncMock(return_value=[])

        result = await _cached(store, fetch)()

        assert result == []
        assert store.read(CACHE_KEY) == [{"n": 0}]

    @pytest.mark.asyncio
    async def test_timeout_falls_back_to_cache(self, store):
        """Should treat a fetch exceeding the timeout as a failure."""
        store.write(CACHE_KEY, [{"n": 0}])

        async def slow_fetch():
            await asyncio.sleep(1)
            return [{"n": 1}]

        result = await _cached(store, slow_fetch, timeout=0.01)()

        assert result == [{"n": 0}]

    @pytest.mark.asyncio
    async def test_parse_applied_to_cached_values(self, store):
        """Should convert cached JSON values with parse."""
        store.write(CACHE_KEY, [{"n": 2}])
        fetch = AsyncMock(side_effect=RuntimeError("boom"))

        result = await _cached(store, fetch, parse=lambda v: v["n"])()

        assert result == [2]

    @pytest.mark.asyncio
    async def test_unparseable_cache_is_a_miss(self, store):
        """Should re-raise the fetch error when the cache cannot be parsed."""
        store.write(CACHE_KEY, [{"unexpected": True}])
        fetch = AsyncMock(side_effect=RuntimeError("boom"))

        def parse(value):
            raise ValueError("bad record")

        with pytest.raises(RuntimeError, match="boom"):
            await _cached(store, fetch, parse=parse)()


class TestOfflineFlag:
    """OFFLINE=1 skips the network regardless of policy."""

    @pytest.mark.asyncio
    async def test_offline_serves_cache_without_fetching(self, store):
        store.write(CACHE_KEY, [{"n": 0}])
        fetch = AsyncMock(return_value=[{"n": 1}])

        result = await _cached(store, fetch, offline=True)()

        assert result == [{"n": 0}]
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_offline_without_cache_raises(self, store):
        fetch = AsyncMock(return_value=[{"n": 1}])

        with pytest.raises(OfflineModeError):
            await _cached(store, fetch, offline=True)()

        fetch.assert_not_awaited()


class TestCacheOnly:
    """cache-only: cache immediately, refresh in the background."""

    @pytest.mark.asyncio
    async def test_cache_hit_returns_cache_and_spawns_once(self, store, spawner):
        """Should not fetch and should spawn exactly one refresh per call."""
        store.write(CACHE_KEY, [{"n": 0}])
        fetch = AsyncMock(return_value=[{"n": 1}])
        cached = _cached(store, fetch, policy=CachePolicy.CACHE_ONLY, spawner=spawner)

        assert await cached() == [{"n": 0}]
        assert await cached() == [{"n": 0}]

        fetch.assert_not_awaited()
        assert spawner.calls == [("github", CACHE_KEY), ("github", CACHE_KEY)]

    @pytest.mark.asyncio
    async def test_cache_miss_fetches_synchronously(self, store, spawner):
        """Should block on the live fetch and persist it when nothing is cached."""
        fetch = AsyncMock(return_value=[{"n": 1}])
        cached = _cached(store, fetch, policy=CachePolicy.CACHE_ONLY, spawner=spawner)

        assert await cached() == [{"n": 1}]

        assert spawner.calls == []
        assert store.read(CACHE_KEY) == [{"n": 1}]

    @pytest.mark.asyncio
    async def test_cache_miss_and_fetch_failure_raises(self, store, spawner):
        fetch = AsyncMock(side_effect=RuntimeError("boom"))
        cached = _cached(store, fetch, policy=CachePolicy.CACHE_ONLY, spawner=spawner)

        with pytest.raises(RuntimeError):
            await cached()

    @pytest.mark.asyncio
    async def test_cache_hit_without_spawner(self, store):
        """Should still serve the cache when no spawner is configured."""
        store.write(CACHE_KEY, [{"n": 0}])
        fetch = AsyncMock(return_value=[{"n": 1}])

        result = await _cached(store, fetch, policy=CachePolicy.CACHE_ONLY)()

        assert result == [{"n": 0}]


class TestCachedFetch:
    """Tests for the wrapper itself."""

    def test_exposes_unwrapped_fetch(self, store):
        fetch = AsyncMock(return_value=[])

        cached = _cached(store, fetch)

        assert cached.fetch is fetch

    def test_policy_accepts_string(self, store):
        cached = _cached(store, AsyncMock(), policy="cache-only")

        assert cached.policy is CachePolicy.CACHE_ONLY
