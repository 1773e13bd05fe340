"""
Base adapter interface and shared functionality for service adapters.

Each adapter implements _fetch_raw() (request construction and
pagination) and _transform() (raw payload -> typed record). The base
class provides:
- Required-setting validation before any request is made
- The HTTP client lifecycle and retry configuration
- Per-record error isolation and logging
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from alfred_feeds.adapters.http_client import HTTPClient, RetryConfig
from alfred_feeds.config.settings import Settings

logger = logging.getLogger(__name__)

R = TypeVar("R")


class MissingConfigError(Exception):
    """A credential or identifier the adapter needs is not configured."""

    def __init__(self, setting: str):
        super().__init__(f"Missing {setting} env var")
        self.setting = setting


class BaseAdapter(ABC, Generic[R]):
    """
    Abstract base class for service adapters.

    Subclasses must implement:
        - name: short service name
        - required_settings: Settings attribute names that must be set
        - _fetch_raw(): all raw records, with pagination exhausted
        - _transform(): convert one raw record to a typed record

    fetch_all() is the only entry point the filter layer uses. It raises
    on any unrecoverable failure (missing config, non-2xx response,
    malformed page); individual malformed records are skipped.
    """

    required_settings: tuple[str, ...] = ()

    def __init__(self, settings: Settings, retry_config: RetryConfig | None = None):
        self._settings = settings
        self._retry_config = retry_config or RetryConfig(
            max_retries=settings.max_http_retries
        )

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable adapter name."""
        ...

    @abstractmethod
    async def _fetch_raw(self, client: HTTPClient) -> list[dict[str, Any]]:
        """
        Fetch every raw record from the service.

        Args:
            client: Open HTTP client

        Returns:
            Raw records as dictionaries
        """
        ...

    @abstractmethod
    def _transform(self, raw: dict[str, Any]) -> R | None:
        """
        Transform one raw record.

        Returns:
            Typed record, or None if the record should be dropped
        """
        ...

    def _require(self, setting: str) -> str:
        value = getattr(self._settings, setting, None)
        if not value:
            raise MissingConfigError(setting.upper())
        return value

    def validate_config(self) -> None:
        """Raise MissingConfigError for the first missing required setting."""
        for setting in self.required_settings:
            self._require(setting)

    async def fetch_all(self) -> list[R]:
        """Fetch, validate and return all records from the service."""
        self.validate_config()
        start_time = time.monotonic()
        filtered = 0
        errors = 0

        async with HTTPClient(
            self._retry_config, timeout=self._settings.http_timeout_seconds
        ) as client:
            raw_records = await self._fetch_raw(client)

        records: list[R] = []
        for raw in raw_records:
            try:
                record = self._transform(raw)
            except ValidationError as e:
                errors += 1
                logger.warning(f"Skipping malformed {self.name} record: {e}")
                continue

            if record is None:
                filtered += 1
                continue
            records.append(record)

        logger.info(
            f"{self.name} completed: "
            f"fetched={len(records)}, "
            f"filtered={filtered}, "
            f"errors={errors}, "
            f"elapsed={time.monotonic() - start_time:.2f}s"
        )
        return records
