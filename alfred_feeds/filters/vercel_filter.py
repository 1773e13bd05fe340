"""Vercel deployments filter."""

from collections.abc import Sequence

from alfred_feeds.adapters.schemas import Deployment
from alfred_feeds.filters.base_filter import BaseFilter
from alfred_feeds.filters.formatting import format_subtitle, join_title
from alfred_feeds.filters.schemas import DisplayItem, Icon, SourceCode

STATE_GLYPHS = {
    "READY": "🚀",
    "BUILDING": "📦",
    "ERROR": "❌",
    "CANCELED": "❌",
}


def latest_per_branch(deployments: Sequence[Deployment]) -> list[Deployment]:
    """
    Collapse the deployment history of each branch.

    Per branch, newest first: deployments older than the branch's most
    recent READY one are dropped, and of consecutive deployments in the
    same state only the newest is kept.
    """
    ordered = sorted(deployments, key=lambda d: d.created_at, reverse=True)
    ordered = sorted(ordered, key=lambda d: d.commit_ref or "")

    latest_ready = {}
    for d in ordered:
        if d.ready_state == "READY":
            latest_ready.setdefault(d.commit_ref, d.created_at)

    kept: list[Deployment] = []
    previous: Deployment | None = None
    for d in ordered:
        prev, previous = previous, d
        ready_at = latest_ready.get(d.commit_ref)
        if ready_at is not None and d.created_at < ready_at:
            continue
        if prev is None or prev.commit_ref != d.commit_ref or prev.ready_state != d.ready_state:
            kept.append(d)
    return kept


class VercelFilter(BaseFilter):
    key = "vercel"
    source = SourceCode.VERCEL
    cache_key = "vercel-cache.json"
    label = "Vercel deployments"
    icon_path = "./icons/vercel.png"
    config_hint = "your Vercel API Key"
    config_url = "https://vercel.com/account/settings/tokens"
    navigation_uid = "vercel-navigation"
    error_uid = "vercel-error"

    @property
    def navigation_url(self) -> str:
        return f"https://vercel.com/{self._settings.vercel_project or ''}/deployments"

    def to_items(self, records: Sequence[Deployment]) -> list[DisplayItem]:
        return [
            DisplayItem(
                title=join_title(
                    self.status_glyph(STATE_GLYPHS.get(d.ready_state), d.ready_state),
                    d.commit_ref,
                    d.commit_message,
                ),
                subtitle=format_subtitle(d.creator or "Unknown", d.created_at),
                arg=f"https://{d.url}",
                icon=Icon(path=self.icon_path),
                source=self.source,
                date=d.created_at,
                uid=f"vercel-deployment-{d.uid}",
            )
            for d in latest_per_branch(records)
        ]
