"""Pytest fixtures for alfred-feeds tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from alfred_feeds.cache.store import DiskCacheStore
from alfred_feeds.config.settings import CachePolicy, Settings
from alfred_feeds.filters.schemas import DisplayItem, Icon, SourceCode


class RecordingSpawner:
    """Spawner double that records every requested refresh."""

    def __init__(self):
        self.calls: list[tuple[str, str | None]] = []

    def spawn(self, source_key: str, cache_key: str | None = None) -> None:
        self.calls.append((source_key, cache_key))


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        _env_file=None,
        environment="development",
        log_level="DEBUG",
        offline=False,
        cache_policy=CachePolicy.OFFLINE_ONLY,
        data_dir=tmp_path / "user-data",
        log_dir=tmp_path / "logs",
        fetch_timeout_seconds=5.0,
        max_http_retries=0,
        dry_run=False,
        github_api_key="gh-token",
        github_repo="acme/web",
        linear_api_key="lin-token",
        linear_team="acme",
        vercel_api_key="vc-token",
        vercel_project="acme/web",
        figma_api_key="fg-token",
        figma_file="FILE123",
        loom_connect_sid="sid",
        cursor_session_token="cursor-token",
        cursor_team_id="1",
        cursor_user_id="2",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with every service configured and state under tmp_path."""
    return make_settings(tmp_path)


@pytest.fixture
def store(test_settings: Settings) -> DiskCacheStore:
    return DiskCacheStore(test_settings.data_dir)


@pytest.fixture
def spawner() -> RecordingSpawner:
    return RecordingSpawner()


def make_item(
    title: str,
    source: SourceCode = SourceCode.GITHUB,
    date: datetime | None = None,
    subtitle: str = "",
) -> DisplayItem:
    return DisplayItem(
        title=title,
        subtitle=subtitle,
        arg=f"https://example.com/{title}",
        icon=Icon(path="./icon.png"),
        source=source,
        date=date or datetime(2026, 10, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_items() -> list[DisplayItem]:
    return [
        make_item("Fix login redirect", date=datetime(2026, 10, 3, tzinfo=timezone.utc)),
        make_item("Add dark mode", date=datetime(2026, 10, 2, tzinfo=timezone.utc)),
    ]
