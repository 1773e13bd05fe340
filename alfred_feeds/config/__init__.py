"""Configuration."""

from alfred_feeds.config.settings import CachePolicy, Settings, get_settings

__all__ = ["CachePolicy", "Settings", "get_settings"]
