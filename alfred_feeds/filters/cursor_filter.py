"""
Cursor usage filter.

Unlike the other filters this one caches the raw usage events rather
than display items, and groups them into "sprints" at display time:
runs of requests no more than 15 minutes apart.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from alfred_feeds.adapters.schemas import UsageEvent
from alfred_feeds.filters.base_filter import BaseFilter
from alfred_feeds.filters.formatting import format_subtitle, sort_by_date_descending
from alfred_feeds.filters.schemas import DisplayItem, Icon, SourceCode

SPRINT_GAP_MS = 15 * 60 * 1000
EXPENSIVE_SPRINT_USD = 3.0
DASHBOARD_URL = "https://www.cursor.com/dashboard?tab=usage"

_MODEL_SUFFIX = re.compile(r"(-thinking|-\d+(\.\d+)?)")


@dataclass
class Sprint:
    """Consecutive usage events, newest first."""

    events: list[UsageEvent] = field(default_factory=list)

    @property
    def last_active_at(self) -> datetime:
        return self.events[0].occurred_at

    @property
    def cost(self) -> float:
        return sum(e.cost for e in self.events)

    @property
    def models(self) -> list[str]:
        """Distinct model families, opus first, versions stripped."""
        names: list[str] = []
        for event in self.events:
            if event.model == "Unknown":
                continue
            name = _MODEL_SUFFIX.sub("", event.model)
            if name not in names:
                names.append(name)
        return sorted(names, key=lambda n: "opus" not in n)


def group_into_sprints(events: Sequence[UsageEvent]) -> list[Sprint]:
    """Split events into sprints wherever two requests are more than 15 minutes apart."""
    sprints: list[Sprint] = []
    current: Sprint | None = None
    earliest_ms = 0

    for event in sorted(events, key=lambda e: e.timestamp_ms, reverse=True):
        if current is not None and earliest_ms - event.timestamp_ms <= SPRINT_GAP_MS:
            current.events.append(event)
            earliest_ms = min(earliest_ms, event.timestamp_ms)
            continue

        current = Sprint(events=[event])
        earliest_ms = event.timestamp_ms
        sprints.append(current)

    return sprints


def describe_models(models: list[str]) -> str:
    if len(models) > 2:
        return f"{', '.join(models[:2])} +{len(models) - 2}"
    return ", ".join(models)


class CursorFilter(BaseFilter):
    key = "cursor"
    source = SourceCode.CURSOR
    cache_key = "cursor-cache.json"
    label = "Cursor usage"
    icon_path = "./icons/cursor.png"
    config_hint = "your Cursor session token"
    config_url = DASHBOARD_URL

    @property
    def navigation_url(self) -> str:
        return DASHBOARD_URL

    async def fetch_data(self) -> list[Any]:
        return await self._adapter.fetch_all()

    def parse_cached(self, value: Any) -> Any:
        return UsageEvent.model_validate(value)

    def present(self, data: Sequence[Any]) -> list[DisplayItem]:
        return self.build_items(data)

    def to_items(self, records: Sequence[UsageEvent]) -> list[DisplayItem]:
        items = []
        for sprint in group_into_sprints(records):
            cost = sprint.cost
            flame = "🔥" if cost > EXPENSIVE_SPRINT_USD else ""
            items.append(
                DisplayItem(
                    title=f"💰{flame} ${cost:.2f} - {len(sprint.events)} requests",
                    subtitle=format_subtitle(describe_models(sprint.models), sprint.last_active_at),
                    arg=DASHBOARD_URL,
                    icon=Icon(path=self.icon_path),
                    source=self.source,
                    date=sprint.last_active_at,
                )
            )
        return sort_by_date_descending(items)
