"""Filters - per-service display items behind the cache policy."""

from alfred_feeds.filters.base_filter import BaseFilter, FilterError
from alfred_feeds.filters.formatting import filter_by_query, sort_by_date_descending
from alfred_feeds.filters.registry import FILTERS, build_filter, build_filters, resolve_key
from alfred_feeds.filters.schemas import EPOCH, DisplayItem, SourceCode, items_document

__all__ = [
    "EPOCH",
    "FILTERS",
    "BaseFilter",
    "DisplayItem",
    "FilterError",
    "SourceCode",
    "build_filter",
    "build_filters",
    "filter_by_query",
    "items_document",
    "resolve_key",
    "sort_by_date_descending",
]
