"""Construction of filters from settings, by key or source code."""

import structlog

from alfred_feeds.adapters import (
    CursorAdapter,
    FigmaAdapter,
    GitHubAdapter,
    LinearAdapter,
    LoomAdapter,
    VercelAdapter,
)
from alfred_feeds.adapters.base_adapter import BaseAdapter
from alfred_feeds.cache.policy import Spawner
from alfred_feeds.cache.store import DiskCacheStore
from alfred_feeds.config.settings import Settings
from alfred_feeds.filters.base_filter import BaseFilter
from alfred_feeds.filters.cursor_filter import CursorFilter
from alfred_feeds.filters.figma_filter import FigmaFilter
from alfred_feeds.filters.github_filter import GitHubFilter
from alfred_feeds.filters.linear_filter import LinearFilter
from alfred_feeds.filters.loom_filter import LoomFilter
from alfred_feeds.filters.vercel_filter import VercelFilter

FILTERS: dict[str, tuple[type[BaseFilter], type[BaseAdapter]]] = {
    "github": (GitHubFilter, GitHubAdapter),
    "linear": (LinearFilter, LinearAdapter),
    "vercel": (VercelFilter, VercelAdapter),
    "figma": (FigmaFilter, FigmaAdapter),
    "loom": (LoomFilter, LoomAdapter),
    "cursor": (CursorFilter, CursorAdapter),
}


def resolve_key(name: str) -> str:
    """
    Filter key for a key (``github``) or source code (``gh``).

    Raises:
        KeyError: if nothing matches
    """
    name = name.strip().lower()
    if name in FILTERS:
        return name
    if name == "ln":
        name = "li"
    for key, (filter_cls, _) in FILTERS.items():
        if filter_cls.source.value == name:
            return key
    raise KeyError(f"Unknown source: {name}")


def build_filter(
    name: str,
    settings: Settings,
    store: DiskCacheStore,
    spawner: Spawner | None = None,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> BaseFilter:
    """Build the filter for ``name`` (key or source code) with its adapter."""
    filter_cls, adapter_cls = FILTERS[resolve_key(name)]
    return filter_cls(
        settings,
        adapter_cls(settings),
        store,
        spawner=spawner,
        logger=logger,
    )


def build_filters(
    names: list[str],
    settings: Settings,
    store: DiskCacheStore,
    spawner: Spawner | None = None,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> list[BaseFilter]:
    """Build filters for ``names``; unknown names are logged and skipped."""
    log = logger or structlog.get_logger(__name__)
    filters = []
    for name in names:
        try:
            filters.append(build_filter(name, settings, store, spawner, logger))
        except KeyError:
            log.warning("Ignoring unknown source in root feed", source=name)
    return filters
