"""Loom videos filter."""

from collections.abc import Sequence

from alfred_feeds.adapters.schemas import LoomVideo
from alfred_feeds.filters.base_filter import BaseFilter
from alfred_feeds.filters.formatting import format_subtitle
from alfred_feeds.filters.schemas import DisplayItem, Icon, SourceCode


class LoomFilter(BaseFilter):
    key = "loom"
    source = SourceCode.LOOM
    cache_key = "loom-cache.json"
    label = "Loom videos"
    icon_path = "./icons/loom.png"
    config_hint = "your Loom browser session cookie"
    config_url = "https://www.loom.com/looms/videos"
    navigation_uid = "loom-navigation"
    error_uid = "loom-error"

    @property
    def navigation_url(self) -> str:
        return "https://www.loom.com/looms/videos"

    def to_items(self, records: Sequence[LoomVideo]) -> list[DisplayItem]:
        return [
            DisplayItem(
                title=f"🎥 {v.name}",
                subtitle=format_subtitle(v.owner, v.created_at),
                arg=f"https://www.loom.com/share/{v.id}",
                icon=Icon(path=self.icon_path),
                source=self.source,
                date=v.created_at,
                uid=f"loom-video-{v.id}",
            )
            for v in records
        ]
