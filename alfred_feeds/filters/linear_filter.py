"""Linear issues filter."""

from collections.abc import Sequence

from alfred_feeds.adapters.schemas import LinearIssue
from alfred_feeds.filters.base_filter import BaseFilter
from alfred_feeds.filters.formatting import format_subtitle, join_title
from alfred_feeds.filters.schemas import DisplayItem, Icon, SourceCode

STATE_GLYPHS = {
    "backlog": "⚪️",
    "unstarted": "⚪️",
    "todo": "⚪️",
    "started": "🔵",
    "in progress": "🔵",
    "in review": "🔵",
    "done": "🟢",
    "completed": "🟢",
    "canceled": "🔴",
    "duplicate": "🔴",
}

PRIORITY_GLYPHS = {
    0: "🧊",
    1: "🚨",
    2: "1️⃣",
    3: "2️⃣",
    4: "3️⃣",
}


class LinearFilter(BaseFilter):
    key = "linear"
    source = SourceCode.LINEAR
    cache_key = "linear-cache.json"
    label = "Linear issues"
    icon_path = "./icons/linear.png"
    config_hint = "your Linear API Key"

    @property
    def config_url(self) -> str:  # type: ignore[override]
        return f"https://linear.app/{self._settings.linear_team or ''}/settings/account/security/api-keys/new"

    @property
    def navigation_url(self) -> str:
        return f"https://linear.app/{self._settings.linear_team or ''}"

    def to_items(self, records: Sequence[LinearIssue]) -> list[DisplayItem]:
        items = []
        for issue in records:
            state = issue.state.lower()
            items.append(
                DisplayItem(
                    title=join_title(
                        self.status_glyph(STATE_GLYPHS.get(state), state),
                        issue.identifier,
                        PRIORITY_GLYPHS.get(issue.priority),
                        issue.title,
                    ),
                    subtitle=format_subtitle(issue.assignee or "Unassigned", issue.updated_at),
                    arg=issue.url,
                    icon=Icon(path=self.icon_path),
                    source=self.source,
                    date=issue.updated_at,
                )
            )
        return items
