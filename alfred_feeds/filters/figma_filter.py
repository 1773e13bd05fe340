"""Figma comments filter."""

from collections.abc import Sequence

from alfred_feeds.adapters.schemas import FigmaComment
from alfred_feeds.filters.base_filter import BaseFilter
from alfred_feeds.filters.formatting import format_subtitle, join_title
from alfred_feeds.filters.schemas import DisplayItem, Icon, SourceCode


class FigmaFilter(BaseFilter):
    key = "figma"
    source = SourceCode.FIGMA
    cache_key = "figma-cache.json"
    label = "Figma comments"
    icon_path = "./icons/figma.png"
    config_hint = "your Figma Personal Access Token"
    config_url = "https://www.figma.com/"
    navigation_uid = "figma-navigation"
    error_uid = "figma-error"

    @property
    def navigation_url(self) -> str:
        return f"https://www.figma.com/file/{self._settings.figma_file or ''}"

    def to_items(self, records: Sequence[FigmaComment]) -> list[DisplayItem]:
        return [
            DisplayItem(
                title=join_title("✅" if c.resolved_at else "💬", c.message),
                subtitle=format_subtitle(c.author, c.created_at),
                arg=f"{self.navigation_url}?node-id={c.node_id}",
                icon=Icon(path=self.icon_path),
                source=self.source,
                date=c.created_at,
                uid=f"figma-comment-{c.id}",
            )
            for c in records
        ]
