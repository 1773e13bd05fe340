"""
Command-line interface for alfred-feeds.

Every Alfred script filter and action of the workflow is one command
here. Filter commands print a single ``{"items": [...]}`` document on
stdout and nothing else; logs go to stderr and ``logs/``.

Usage:
    alfred-feeds filter github login       # One service
    alfred-feeds root gh login             # Merged feed, optional source prefix
    alfred-feeds refresh github            # Background refresh (spawned)
    alfred-feeds issue-preview -eng Fix login redirect
    alfred-feeds create-issue -eng Fix login redirect
"""

import asyncio
import json
import os

import click
import structlog

from alfred_feeds.aggregator import RootAggregator, parse_root_query, unknown_error_item
from alfred_feeds.cache import DiskCacheStore, RefreshLock, RefreshSpawner, lock_path, run_refresh
from alfred_feeds.config.settings import get_settings
from alfred_feeds.filters import FilterError, build_filter, build_filters, items_document, resolve_key
from alfred_feeds.filters.schemas import DisplayItem
from alfred_feeds.issues import METADATA_REFRESH_KEY, IssueService, IssueWorkflowError, PrefsStore
from alfred_feeds.issues.service import preview_error_item
from alfred_feeds.observability.logging import setup_logging

logger = structlog.get_logger(__name__)


def _emit(items: list[DisplayItem]) -> None:
    click.echo(json.dumps(items_document(items), ensure_ascii=False))


def _issue_service(spawner: RefreshSpawner | None = None) -> IssueService:
    settings = get_settings()
    return IssueService(settings, PrefsStore(settings.data_dir), spawner=spawner)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Alfred Feeds - launcher results from GitHub, Linear, Vercel, Figma, Loom and Cursor."""
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command("filter")
@click.argument("source")
@click.argument("query", nargs=-1)
def filter_command(source: str, query: tuple[str, ...]) -> None:
    """Print the items of one SOURCE (key such as github, or code such as gh)."""
    settings = get_settings()
    store = DiskCacheStore(settings.data_dir)

    try:
        source_filter = build_filter(source, settings, store, RefreshSpawner())
    except KeyError:
        raise click.BadParameter(f"Unknown source: {source}", param_hint="SOURCE")

    try:
        items = asyncio.run(source_filter.filter(" ".join(query)))
    except FilterError as e:
        items = [e.item]
    _emit(items)


@main.command()
@click.argument("query", nargs=-1)
def root(query: tuple[str, ...]) -> None:
    """Print the merged feed of every configured source.

    A leading source code (gh, li, vc, fg, lm, cr) restricts the feed to
    that source; the remaining words filter the items.
    """
    settings = get_settings()
    store = DiskCacheStore(settings.data_dir)

    try:
        source, text = parse_root_query(" ".join(query))
        filters = build_filters(settings.root_source_keys, settings, store, RefreshSpawner())
        items = asyncio.run(RootAggregator(filters).aggregate(source, text))
    except Exception as e:
        logger.error("Root feed failed", error=str(e), exc_info=True)
        items = [unknown_error_item(e)]
    _emit(items)


@main.command()
@click.argument("source")
@click.option("--cache-key", default=None, help="Cache file to refresh")
def refresh(source: str, cache_key: str | None) -> None:
    """Refresh the cache of SOURCE in the background process."""
    settings = get_settings()

    if source == METADATA_REFRESH_KEY:
        key = source
    else:
        try:
            key = resolve_key(source)
        except KeyError:
            raise click.BadParameter(f"Unknown source: {source}", param_hint="SOURCE")

    setup_logging(settings, log_file=f"{key}-refresh.log")
    log = logger.bind(source=key)
    lock = RefreshLock(
        lock_path(settings.data_dir, key),
        stale_after=settings.refresh_lock_stale_seconds,
        logger=log,
    )

    if key == METADATA_REFRESH_KEY:
        outcome = asyncio.run(_issue_service().refresh(lock))
    else:
        store = DiskCacheStore(settings.data_dir, logger=log)
        # No spawner: a refresh must never start another refresh
        source_filter = build_filter(key, settings, store, logger=log)
        outcome = asyncio.run(
            run_refresh(
                source_filter.cached.fetch,
                store=store,
                cache_key=cache_key or source_filter.cache_key,
                lock=lock,
                throttle_seconds=settings.refresh_throttle_seconds,
                logger=log,
            )
        )

    log.info("Refresh finished", outcome=outcome.value)


@main.command("issue-preview")
@click.argument("words", nargs=-1)
def issue_preview(words: tuple[str, ...]) -> None:
    """Print the preview item for a create-issue command line."""
    service = _issue_service(RefreshSpawner())

    try:
        item = asyncio.run(service.preview(" ".join(words)))
    except Exception as e:
        logger.error("Issue preview failed", error=str(e), exc_info=True)
        item = preview_error_item()
    _emit([item])


@main.command("create-issue")
@click.argument("words", nargs=-1)
def create_issue(words: tuple[str, ...]) -> None:
    """Create a Linear issue and print its identifier."""
    service = _issue_service(RefreshSpawner())
    message: str

    try:
        issue = asyncio.run(service.create(" ".join(words)))
        message = issue.identifier
    except IssueWorkflowError as e:
        message = str(e)
    except Exception as e:
        logger.error("Issue creation failed unexpectedly", error=str(e), exc_info=True)
        message = "An unexpected error occurred."
    click.echo(message)


if __name__ == "__main__":
    main()
