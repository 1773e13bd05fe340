"""GitHub pull requests filter."""

from collections.abc import Sequence

from alfred_feeds.adapters.schemas import PullRequest
from alfred_feeds.filters.base_filter import BaseFilter
from alfred_feeds.filters.formatting import format_subtitle, join_title
from alfred_feeds.filters.schemas import DisplayItem, Icon, SourceCode


class GitHubFilter(BaseFilter):
    key = "github"
    source = SourceCode.GITHUB
    cache_key = "github-cache.json"
    label = "GitHub pull requests"
    icon_path = "./icons/github.png"
    config_hint = "your GitHub API Key"
    config_url = "https://github.com/settings/tokens"

    @property
    def navigation_url(self) -> str:
        if not self._settings.github_repo:
            return "https://github.com/pulls"
        return f"https://github.com/{self._settings.github_repo}/pulls"

    def state_glyph(self, pr: PullRequest) -> str:
        if pr.state == "open":
            return "🔵"
        if pr.state == "closed":
            return "🟢" if pr.merged_at else "🔴"
        return self.status_glyph(None, pr.state)

    def to_items(self, records: Sequence[PullRequest]) -> list[DisplayItem]:
        return [
            DisplayItem(
                title=join_title(self.state_glyph(pr), pr.head_ref, pr.title),
                subtitle=format_subtitle(pr.author, pr.updated_at),
                arg=pr.html_url,
                icon=Icon(path=self.icon_path),
                source=self.source,
                date=pr.updated_at,
            )
            for pr in records
        ]
