"""
Disk-backed store for the last good result set of each source.

One JSON array per cache key inside the data directory. Freshness is
the file's modification time; there is no explicit timestamp field.
Writes overwrite the file in place and are not coordinated between
processes, so a torn write reads back as a cache miss.
"""

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog
from pydantic_core import to_jsonable_python


class DiskCacheStore:
    """
    Key-value persistence of result sets, keyed by file name.

    Read and write failures are logged and swallowed: a broken cache
    must degrade to a cache miss, never to a failed command.

    Usage:
        store = DiskCacheStore(Path("user-data"))
        store.write("github-cache.json", items)
        cached = store.read("github-cache.json")
    """

    def __init__(
        self,
        data_dir: Path,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        self._data_dir = Path(data_dir)
        self._logger = logger or structlog.get_logger(__name__)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path(self, key: str) -> Path:
        """Location of the cache file for ``key``."""
        return self._data_dir / key

    def write(self, key: str, records: Sequence[Any]) -> bool:
        """
        Persist ``records`` under ``key``.

        An empty sequence is not written so a transient empty response
        cannot clobber the last good result.

        Returns:
            True if the file was written
        """
        if not records:
            self._logger.debug("Skipping cache write for empty result", cache_key=key)
            return False

        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(to_jsonable_python(list(records)), ensure_ascii=False)
            self.path(key).write_text(payload, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            self._logger.error("Cache write failed", cache_key=key, error=str(e))
            return False

        self._logger.debug("Cache written", cache_key=key, count=len(records))
        return True

    def read(self, key: str) -> list[Any] | None:
        """
        Load the cached records for ``key``.

        Returns:
            The cached list, or None on a missing file, invalid JSON,
            non-array content or an empty array
        """
        path = self.path(key)
        if not path.exists():
            return None

        try:
            cached = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self._logger.warning("Cache read failed", cache_key=key, error=str(e))
            return None

        if not isinstance(cached, list) or not cached:
            return None
        return cached

    def mtime(self, key: str) -> float | None:
        """Modification time of the cache file (epoch seconds), if it exists."""
        try:
            return self.path(key).stat().st_mtime
        except OSError:
            return None
