"""Root aggregator - merged feed across all filters."""

from alfred_feeds.aggregator.service import RootAggregator, parse_root_query, unknown_error_item

__all__ = ["RootAggregator", "parse_root_query", "unknown_error_item"]
