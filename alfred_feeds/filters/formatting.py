"""
Formatting helpers shared by every filter.

Relative dates, the ``⮑ user • date`` subtitle, the multi-word query
filter and constructors for the epoch-dated navigation and error items.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from alfred_feeds.filters.schemas import EPOCH, DisplayItem, Icon, SourceCode

WARNING_GLYPH = "⚠️"
UNKNOWN_GLYPH = "❓"


def format_relative_date(date: datetime, now: datetime | None = None) -> str:
    """
    Human-friendly age of ``date``.

    Today / Yesterday / N days ago / N weeks ago / N months ago, then a
    full date after a year.
    """
    now = now or datetime.now(timezone.utc)
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    diff_days = (now - date).days

    if diff_days <= 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return f"{diff_days} days ago"
    if diff_days < 30:
        weeks = diff_days // 7
        return f"{weeks} {'week' if weeks == 1 else 'weeks'} ago"
    if diff_days < 365:
        months = diff_days // 30
        return f"{months} {'month' if months == 1 else 'months'} ago"
    return f"{date:%B} {date.day}, {date.year}"


def format_subtitle(
    user: str | None,
    date: datetime,
    additional: Sequence[str] = (),
    now: datetime | None = None,
) -> str:
    """``⮑ user • extra • date``; empty parts are dropped."""
    fields = [f for f in (user, *additional, format_relative_date(date, now)) if f]
    return "\t⮑ " + " • ".join(fields)


def emoji_or_fallback(emoji: str | None, fallback: str, production: bool = False) -> str:
    """Known glyphs pass through; unknown states show as text, or ❓ in production."""
    if emoji:
        return emoji
    return UNKNOWN_GLYPH if production else fallback


def join_title(*parts: str | None) -> str:
    """Space-join the non-empty title parts."""
    return " ".join(p for p in parts if p)


def sort_by_date_descending(items: Iterable[DisplayItem]) -> list[DisplayItem]:
    """Newest first; ties keep their input order."""
    return sorted(items, key=lambda item: item.date, reverse=True)


def filter_by_query(items: Sequence[DisplayItem], query: str | None) -> list[DisplayItem]:
    """
    Keep items matching every word of ``query``.

    Words are whitespace separated and matched case-insensitively as
    substrings of ``title + " " + subtitle``, in any order. An empty
    query returns the items unchanged.
    """
    words = (query or "").lower().split()
    if not words:
        return list(items)

    return [
        item
        for item in items
        if all(word in f"{item.title} {item.subtitle}".lower() for word in words)
    ]


def create_navigation_item(
    *,
    title: str,
    arg: str,
    icon_path: str,
    source: SourceCode,
    subtitle: str = "",
    uid: str | None = None,
) -> DisplayItem:
    """Epoch-dated fallback action (e.g. "open dashboard") that sorts last."""
    return DisplayItem(
        title=title,
        subtitle=subtitle,
        arg=arg,
        icon=Icon(path=icon_path),
        source=source,
        date=EPOCH,
        uid=uid,
    )


def create_error_item(
    *,
    title: str,
    subtitle: str,
    arg: str | None,
    icon_path: str,
    source: SourceCode,
    uid: str | None = None,
) -> DisplayItem:
    """Epoch-dated placeholder rendered in place of a failed source."""
    return DisplayItem(
        title=join_title(WARNING_GLYPH, title),
        subtitle=subtitle,
        arg=arg,
        icon=Icon(path=icon_path),
        source=source,
        date=EPOCH,
        uid=uid,
    )
