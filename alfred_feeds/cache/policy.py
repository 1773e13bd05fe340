"""
Staleness policy engine.

Wraps a zero-argument async fetch function with the workflow's caching
rules:

- offline-only: always fetch live; serve the disk cache only when the
  fetch fails (or the OFFLINE flag is set).
- cache-only: serve the disk cache immediately when it exists and
  schedule a background refresh; block on a live fetch only when there
  is no cache yet.

Successful non-empty results are persisted after every live fetch. When
every option is exhausted (fetch failed and no cache) the original error
propagates to the caller.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Generic, Protocol, TypeVar

import structlog
from pydantic import ValidationError

from alfred_feeds.cache.store import DiskCacheStore
from alfred_feeds.config.settings import CachePolicy

T = TypeVar("T")

FetchFn = Callable[[], Awaitable[Sequence[T]]]


class OfflineModeError(Exception):
    """Raised when offline mode is forced and there is nothing cached."""


class Spawner(Protocol):
    """Anything able to start an out-of-band refresh of one cache entry."""

    def spawn(self, source_key: str, cache_key: str) -> None: ...


class CachedFetch(Generic[T]):
    """
    Callable wrapper applying a CachePolicy to a fetch function.

    The unwrapped function stays reachable as ``.fetch`` so a background
    refresh entry point can call it directly without re-wrapping.

    Usage:
        cached = with_cache(fetch_items, "github", "github-cache.json",
                            store=store, policy=CachePolicy.CACHE_ONLY,
                            spawner=spawner)
        items = await cached()
    """

    def __init__(
        self,
        fetch_fn: FetchFn,
        source_key: str,
        cache_key: str,
        *,
        store: DiskCacheStore,
        policy: CachePolicy = CachePolicy.OFFLINE_ONLY,
        spawner: Spawner | None = None,
        offline: bool = False,
        parse: Callable[[Any], T] | None = None,
        annotate_stale: Callable[[T], T] | None = None,
        timeout: float | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        """
        Args:
            fetch_fn: Async function returning the fresh result set
            source_key: Name the refresh entry point knows the source by
            cache_key: Cache file name inside the store
            store: Disk cache store
            policy: Caching policy for this invocation
            spawner: Background refresh spawner (used by cache-only)
            offline: Skip the network entirely and serve the cache
            parse: Converts one cached JSON value back into a record
            annotate_stale: Applied to each record served by the fallback
            timeout: Upper bound in seconds for one live fetch
            logger: Structured logger
        """
        self._fetch_fn = fetch_fn
        self.source_key = source_key
        self.cache_key = cache_key
        self._store = store
        self._policy = CachePolicy(policy)
        self._spawner = spawner
        self._offline = offline
        self._parse = parse
        self._annotate_stale = annotate_stale
        self._timeout = timeout
        self._logger = (logger or structlog.get_logger(__name__)).bind(
            source=source_key, cache_key=cache_key
        )

    @property
    def fetch(self) -> FetchFn:
        """The original, unwrapped fetch function."""
        return self._fetch_fn

    @property
    def policy(self) -> CachePolicy:
        return self._policy

    async def __call__(self) -> list[T]:
        try:
            if self._offline:
                raise OfflineModeError("Offline mode")

            if self._policy is CachePolicy.CACHE_ONLY:
                cached = self._read()
                if cached is not None:
                    self._schedule_refresh()
                    return cached

            return await self._fetch_and_store()

        except Exception as e:
            cached = self._read()
            if cached is None:
                raise

            self._logger.warning(
                "Serving cached result after fetch failure",
                event_type="cache_fallback",
                error=str(e) or type(e).__name__,
                count=len(cached),
            )
            if self._annotate_stale is not None:
                cached = [self._annotate_stale(record) for record in cached]
            return cached

    async def _fetch_and_store(self) -> list[T]:
        if self._timeout is not None:
            result = await asyncio.wait_for(self._fetch_fn(), timeout=self._timeout)
        else:
            result = await self._fetch_fn()

        result = list(result)
        self._store.write(self.cache_key, result)
        return result

    def _read(self) -> list[T] | None:
        cached = self._store.read(self.cache_key)
        if cached is None or self._parse is None:
            return cached

        try:
            return [self._parse(value) for value in cached]
        except (ValidationError, TypeError, ValueError) as e:
            self._logger.warning("Discarding unreadable cache entry", error=str(e))
            return None

    def _schedule_refresh(self) -> None:
        if self._spawner is None:
            self._logger.debug("No spawner configured, skipping background refresh")
            return
        self._spawner.spawn(self.source_key, self.cache_key)


def with_cache(
    fetch_fn: FetchFn,
    source_key: str,
    cache_key: str,
    **kwargs: Any,
) -> CachedFetch:
    """Wrap ``fetch_fn`` in a CachedFetch; see CachedFetch for the options."""
    return CachedFetch(fetch_fn, source_key, cache_key, **kwargs)
