"""Observability layer - structured logging."""

from alfred_feeds.observability.logging import CappedFileHandler, setup_logging

__all__ = ["CappedFileHandler", "setup_logging"]
