"""Tests for shared formatting helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from alfred_feeds.filters.formatting import (
    create_error_item,
    create_navigation_item,
    emoji_or_fallback,
    filter_by_query,
    format_relative_date,
    format_subtitle,
    join_title,
    sort_by_date_descending,
)
from alfred_feeds.filters.schemas import EPOCH, DisplayItem, SourceCode, items_document

from conftest import make_item

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class TestFormatRelativeDate:
    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(hours=2), "Today"),
            (timedelta(days=1), "Yesterday"),
            (timedelta(days=3), "3 days ago"),
            (timedelta(days=7), "1 week ago"),
            (timedelta(days=15), "2 weeks ago"),
            (timedelta(days=31), "1 month ago"),
            (timedelta(days=90), "3 months ago"),
        ],
    )
    def test_relative(self, delta, expected):
        assert format_relative_date(NOW - delta, NOW) == expected

    def test_older_than_a_year(self):
        assert format_relative_date(datetime(2024, 3, 5, tzinfo=timezone.utc), NOW) == "March 5, 2024"


class TestFormatSubtitle:
    def test_user_and_date(self):
        assert format_subtitle("alice", NOW, now=NOW) == "\t⮑ alice • Today"

    def test_additional_fields_and_empty_user(self):
        subtitle = format_subtitle(None, NOW - timedelta(days=1), ["main", ""], now=NOW)

        assert subtitle == "\t⮑ main • Yesterday"


class TestGlyphs:
    def test_emoji_in_development(self):
        assert emoji_or_fallback("🔵", "open") == "🔵"
        assert emoji_or_fallback(None, "draft") == "draft"

    def test_unknown_glyph_in_production(self):
        assert emoji_or_fallback(None, "draft", production=True) == "❓"

    def test_known_glyph_kept_in_production(self):
        assert emoji_or_fallback("🟢", "done", production=True) == "🟢"

    def test_join_title_drops_empty_parts(self):
        assert join_title("🔵", None, "", "Fix login") == "🔵 Fix login"


class TestFilterByQuery:
    """Multi-word, order-independent, case-insensitive substring filter."""

    @pytest.fixture
    def items(self):
        return [
            make_item("Fix login redirect", subtitle="alice"),
            make_item("Add dark mode", subtitle="bob"),
        ]

    def test_words_in_any_order(self, items):
        assert [i.title for i in filter_by_query(items, "redirect fix")] == ["Fix login redirect"]

    def test_case_insensitive(self, items):
        assert [i.title for i in filter_by_query(items, "LOGIN")] == ["Fix login redirect"]

    def test_matches_subtitle(self, items):
        assert [i.title for i in filter_by_query(items, "bob dark")] == ["Add dark mode"]

    def test_all_words_required(self, items):
        assert filter_by_query(items, "fix xyz") == []

    def test_empty_query_keeps_everything(self, items):
        assert filter_by_query(items, "") == items
        assert filter_by_query(items, "   ") == items


class TestItems:
    def test_sort_newest_first_and_stable(self):
        a = make_item("a", date=datetime(2026, 10, 1, tzinfo=timezone.utc))
        b = make_item("b", date=datetime(2026, 10, 3, tzinfo=timezone.utc))
        c = make_item("c", date=datetime(2026, 10, 1, tzinfo=timezone.utc))

        assert [i.title for i in sort_by_date_descending([a, b, c])] == ["b", "a", "c"]

    def test_navigation_item_is_epoch_dated(self):
        item = create_navigation_item(
            title="GitHub pull requests",
            arg="https://github.com/acme/web/pulls",
            icon_path="./icons/github.png",
            source=SourceCode.GITHUB,
        )

        assert item.date == EPOCH
        assert item.is_placeholder

    def test_error_item_has_warning_prefix(self):
        item = create_error_item(
            title="GitHub pull requests",
            subtitle="Could not load",
            arg=None,
            icon_path="./icons/github.png",
            source=SourceCode.GITHUB,
        )

        assert item.title == "⚠️ GitHub pull requests"
        assert item.date == EPOCH

    def test_alfred_document_omits_unset_fields(self):
        item = DisplayItem(title="Loom videos", source=SourceCode.LOOM)

        document = items_document([item])

        assert document == {
            "items": [
                {
                    "title": "Loom videos",
                    "subtitle": "",
                    "source": "lm",
                    "date": "1970-01-01T00:00:00Z",
                }
            ]
        }

    def test_naive_dates_are_utc(self):
        item = DisplayItem(title="x", source=SourceCode.GITHUB, date=datetime(2026, 10, 1))

        assert item.date.tzinfo is not None
