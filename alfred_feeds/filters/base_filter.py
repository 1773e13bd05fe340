"""
Base filter: one service's adapter behind the staleness policy engine.

A filter turns adapter records into DisplayItems, appends its
navigation item, applies the user's query, and turns any failure into a
FilterError carrying a renderable placeholder item so callers never need
to know the service's internals.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import structlog

from alfred_feeds.adapters.base_adapter import BaseAdapter, MissingConfigError
from alfred_feeds.cache.policy import CachedFetch, OfflineModeError, Spawner, with_cache
from alfred_feeds.cache.store import DiskCacheStore
from alfred_feeds.config.settings import Settings
from alfred_feeds.filters.formatting import (
    create_error_item,
    create_navigation_item,
    emoji_or_fallback,
    filter_by_query,
    join_title,
    sort_by_date_descending,
)
from alfred_feeds.filters.schemas import DisplayItem, SourceCode


class FilterError(Exception):
    """A filter could not produce results; ``item`` is its placeholder."""

    def __init__(self, message: str, item: DisplayItem):
        super().__init__(message)
        self.item = item


class BaseFilter(ABC):
    """
    Abstract base class for service filters.

    Subclasses set the class attributes below and implement to_items()
    and navigation_url. By default the cached payload is the list of
    mapped DisplayItems (navigation item included); a filter that needs
    the raw records at display time overrides fetch_data(),
    parse_cached() and present() instead.
    """

    key: str
    source: SourceCode
    cache_key: str
    label: str
    icon_path: str
    config_hint: str
    config_url: str
    navigation_uid: str | None = None
    error_uid: str | None = None

    def __init__(
        self,
        settings: Settings,
        adapter: BaseAdapter,
        store: DiskCacheStore,
        spawner: Spawner | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        self._settings = settings
        self._adapter = adapter
        self._logger = (logger or structlog.get_logger(__name__)).bind(source=self.source.value)
        self._cached = with_cache(
            self.fetch_data,
            self.key,
            self.cache_key,
            store=store,
            policy=settings.cache_policy,
            spawner=spawner,
            offline=settings.offline,
            parse=self.parse_cached,
            annotate_stale=self.annotate_stale if settings.mark_stale_results else None,
            timeout=settings.fetch_timeout_seconds,
            logger=self._logger,
        )

    @property
    def cached(self) -> CachedFetch:
        """Policy-wrapped fetch; ``cached.fetch`` is the unwrapped one."""
        return self._cached

    @property
    @abstractmethod
    def navigation_url(self) -> str:
        """Where the navigation item (and most error items) lead."""
        ...

    @abstractmethod
    def to_items(self, records: Sequence[Any]) -> list[DisplayItem]:
        """Map adapter records to dated DisplayItems."""
        ...

    async def fetch_data(self) -> list[Any]:
        """Live fetch producing the payload that gets cached."""
        records = await self._adapter.fetch_all()
        return self.build_items(records)

    def parse_cached(self, value: Any) -> Any:
        return DisplayItem.model_validate(value)

    def annotate_stale(self, item: Any) -> Any:
        """Prefix titles of items served from the fallback cache."""
        if not isinstance(item, DisplayItem):
            return item
        return item.model_copy(
            update={"title": join_title(self._settings.stale_marker, item.title)}
        )

    def present(self, data: Sequence[Any]) -> list[DisplayItem]:
        """Turn the (possibly cached) payload into display items."""
        return list(data)

    def build_items(self, records: Sequence[Any]) -> list[DisplayItem]:
        return sort_by_date_descending([*self.to_items(records), self.navigation_item()])

    def navigation_item(self) -> DisplayItem:
        return create_navigation_item(
            title=self.label,
            arg=self.navigation_url,
            icon_path=self.icon_path,
            source=self.source,
            uid=self.navigation_uid,
        )

    def error_item(self, exc: BaseException) -> DisplayItem:
        """Placeholder for ``exc``; configuration errors get a remediation link."""
        if isinstance(exc, MissingConfigError):
            subtitle = f"Configure Workflow with {self.config_hint} ({exc.setting})"
            arg = self.config_url
        elif isinstance(exc, OfflineModeError):
            subtitle = "Offline, and nothing has been cached yet"
            arg = self.navigation_url
        else:
            subtitle = f"Could not load: {exc}" if str(exc) else f"Could not load ({type(exc).__name__})"
            arg = self.navigation_url

        return create_error_item(
            title=self.label,
            subtitle=subtitle,
            arg=arg,
            icon_path=self.icon_path,
            source=self.source,
            uid=self.error_uid,
        )

    def status_glyph(self, emoji: str | None, fallback: str) -> str:
        return emoji_or_fallback(emoji, fallback, production=self._settings.is_production)

    async def filter(self, query: str = "") -> list[DisplayItem]:
        """
        Items for ``query``, newest first, navigation item last.

        Raises:
            FilterError: when neither a live fetch nor the cache produced data
        """
        try:
            items = self.present(await self._cached())
        except Exception as e:
            self._logger.error(
                "Filter failed",
                error=str(e) or type(e).__name__,
                error_type=type(e).__name__,
            )
            raise FilterError(str(e) or type(e).__name__, self.error_item(e)) from e

        return filter_by_query(items, query)
