"""Service adapters - request construction and raw-to-record mapping."""

from alfred_feeds.adapters.base_adapter import BaseAdapter, MissingConfigError
from alfred_feeds.adapters.cursor_adapter import CursorAdapter
from alfred_feeds.adapters.figma_adapter import FigmaAdapter
from alfred_feeds.adapters.github_adapter import GitHubAdapter
from alfred_feeds.adapters.http_client import (
    HTTPClient,
    HTTPClientError,
    RateLimitError,
    RetryConfig,
)
from alfred_feeds.adapters.linear_adapter import LinearAdapter
from alfred_feeds.adapters.loom_adapter import LoomAdapter
from alfred_feeds.adapters.vercel_adapter import VercelAdapter

__all__ = [
    "BaseAdapter",
    "CursorAdapter",
    "FigmaAdapter",
    "GitHubAdapter",
    "HTTPClient",
    "HTTPClientError",
    "LinearAdapter",
    "LoomAdapter",
    "MissingConfigError",
    "RateLimitError",
    "RetryConfig",
    "VercelAdapter",
]
