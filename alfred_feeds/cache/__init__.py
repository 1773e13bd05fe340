"""Cache layer - disk store, staleness policy and background refresh."""

from alfred_feeds.cache.policy import CachedFetch, OfflineModeError, with_cache
from alfred_feeds.cache.refresh import (
    RefreshLock,
    RefreshOutcome,
    RefreshSpawner,
    is_throttled,
    lock_path,
    run_refresh,
)
from alfred_feeds.cache.store import DiskCacheStore

__all__ = [
    "CachedFetch",
    "DiskCacheStore",
    "OfflineModeError",
    "RefreshLock",
    "RefreshOutcome",
    "RefreshSpawner",
    "is_throttled",
    "lock_path",
    "run_refresh",
    "with_cache",
]
