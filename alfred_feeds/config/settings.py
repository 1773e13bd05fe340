"""Application settings using Pydantic Settings for environment-based configuration."""

import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class CachePolicy(str, Enum):
    """When a stale on-disk result is preferred over a live fetch."""

    OFFLINE_ONLY = "offline-only"
    CACHE_ONLY = "cache-only"


ALL_SOURCES = "github,linear,vercel,figma,loom,cursor"


class Settings(BaseSettings):
    """
    Central configuration for the workflow scripts.

    All settings can be overridden via environment variables (Alfred passes
    workflow variables through the environment). Prefix is not used so the
    standard names (GITHUB_API_KEY, OFFLINE, CACHE_POLICY) work as-is.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Cache behaviour
    offline: bool = False
    cache_policy: CachePolicy = CachePolicy.OFFLINE_ONLY
    data_dir: Path = Path("user-data")
    log_dir: Path = Path("logs")
    refresh_throttle_seconds: float = Field(default=5.0, ge=0.0)
    issue_metadata_throttle_seconds: float = Field(default=15.0, ge=0.0)
    refresh_lock_stale_seconds: float = Field(default=120.0, gt=0.0)
    fetch_timeout_seconds: float | None = Field(default=20.0, gt=0.0)
    mark_stale_results: bool = True
    stale_marker: str = "📴"

    # Log files (size cap triggers a trim to the last max_log_lines)
    max_log_bytes: int = Field(default=1024 * 1024, ge=1024)
    max_log_lines: int = Field(default=1000, ge=10)

    # Root feed
    root_sources: str = ALL_SOURCES

    # HTTP
    max_http_retries: int = Field(default=1, ge=0, le=10)
    http_timeout_seconds: float = Field(default=15.0, gt=0.0)

    # Create issue
    dry_run: bool = False

    # GitHub
    github_api_key: str | None = None
    github_repo: str | None = None

    # Linear
    linear_api_key: str | None = None
    linear_team: str | None = None

    # Vercel
    vercel_api_key: str | None = None
    vercel_project: str | None = None

    # Figma
    figma_api_key: str | None = None
    figma_file: str | None = None

    # Loom (browser session cookie)
    loom_connect_sid: str | None = None

    # Cursor (dashboard session)
    cursor_session_token: str | None = None
    cursor_team_id: str | None = None
    cursor_user_id: str | None = None

    @field_validator("cache_policy", mode="before")
    @classmethod
    def default_unknown_policy(cls, v: object) -> object:
        """Unset or unknown policies fall back to offline-only."""
        if isinstance(v, CachePolicy):
            return v
        value = str(v or "").strip().lower()
        if value not in {p.value for p in CachePolicy}:
            if value:
                logger.warning("Unknown CACHE_POLICY %r, using offline-only", v)
            return CachePolicy.OFFLINE_ONLY
        return value

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def root_source_keys(self) -> list[str]:
        """Filter keys included in the root feed, in declaration order."""
        return [k.strip().lower() for k in self.root_sources.split(",") if k.strip()]

    @property
    def github_configured(self) -> bool:
        return bool(self.github_api_key and self.github_repo)

    @property
    def linear_configured(self) -> bool:
        return bool(self.linear_api_key and self.linear_team)

    @property
    def vercel_configured(self) -> bool:
        return bool(self.vercel_api_key)

    @property
    def figma_configured(self) -> bool:
        return bool(self.figma_api_key and self.figma_file)

    @property
    def loom_configured(self) -> bool:
        return bool(self.loom_connect_sid)

    @property
    def cursor_configured(self) -> bool:
        return bool(
            self.cursor_session_token and self.cursor_team_id and self.cursor_user_id
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    Clear cache with get_settings.cache_clear() if needed.
    """
    return Settings()
