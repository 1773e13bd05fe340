"""
Root aggregator - one ranked feed across every filter.

All filters run concurrently; a failing filter contributes its
placeholder item and never fails the whole feed. The merged list is
ordered by date, newest first, once every filter has finished.
"""

import asyncio
import re
from collections.abc import Sequence
from datetime import datetime, timezone

import structlog

from alfred_feeds.filters.base_filter import BaseFilter, FilterError
from alfred_feeds.filters.formatting import sort_by_date_descending
from alfred_feeds.filters.schemas import DisplayItem, Icon, SourceCode

_SOURCE_PREFIX = re.compile(r"^\s*(?P<source>gh|li|ln|vc|fg|lm|cr)\b\s*(?P<rest>.*)$", re.IGNORECASE)


def parse_root_query(text: str | None) -> tuple[SourceCode | None, str]:
    """
    Split a root query into an optional source code and the search text.

    ``"gh login"`` -> (SourceCode.GITHUB, "login"); ``ln`` is accepted
    for Linear.
    """
    match = _SOURCE_PREFIX.match(text or "")
    if not match:
        return None, (text or "").strip()

    code = match.group("source").lower()
    if code == "ln":
        code = SourceCode.LINEAR.value
    return SourceCode(code), match.group("rest").strip()


def unknown_error_item(exc: BaseException) -> DisplayItem:
    """Placeholder for an error nothing closer to the source could handle."""
    return DisplayItem(
        title="Unknown error",
        subtitle=str(exc) or type(exc).__name__,
        icon=Icon(path="./icon.png"),
        source=SourceCode.ROOT,
        date=datetime.now(timezone.utc),
    )


class RootAggregator:
    """
    Fan-out/fan-in over a set of filters.

    Usage:
        aggregator = RootAggregator(build_filters(keys, settings, store, spawner))
        items = await aggregator.aggregate(SourceCode.GITHUB, "login")
    """

    def __init__(
        self,
        filters: Sequence[BaseFilter],
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        self._filters = list(filters)
        self._logger = logger or structlog.get_logger(__name__)

    @property
    def filters(self) -> list[BaseFilter]:
        return list(self._filters)

    async def aggregate(
        self,
        source_filter: SourceCode | str | None = None,
        query: str = "",
    ) -> list[DisplayItem]:
        """
        Merged items of every filter.

        Args:
            source_filter: Keep only items from this source
            query: Search words passed to every filter

        Returns:
            Items sorted by date descending (ties keep filter order)
        """
        results = await asyncio.gather(
            *(f.filter(query) for f in self._filters),
            return_exceptions=True,
        )

        items: list[DisplayItem] = []
        for source_filter_obj, result in zip(self._filters, results):
            if isinstance(result, FilterError):
                # Placeholder keeps the failing source visible and actionable
                items.append(result.item)
            elif isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                self._logger.error(
                    "Filter raised unexpectedly, dropping its results",
                    source=source_filter_obj.source.value,
                    error=str(result) or type(result).__name__,
                )
            else:
                items.extend(result)

        if source_filter is not None:
            wanted = SourceCode(source_filter).value
            items = [item for item in items if item.source == wanted]

        self._logger.debug(
            "Aggregated root feed",
            filters=len(self._filters),
            items=len(items),
            source_filter=source_filter,
        )
        return sort_by_date_descending(items)
