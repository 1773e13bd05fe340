"""
Background refresh of cache entries.

Two halves:

- RefreshSpawner runs in the foreground process. It launches
  ``python -m alfred_feeds refresh <source>`` fully detached (own
  session, no inherited stdio) and returns without waiting.
- run_refresh runs inside that child. It takes an exclusive lock file so
  overlapping refreshes of one source exit immediately, skips the fetch
  when the cache was written within the throttle window, and otherwise
  fetches and writes the cache. A failed fetch is logged and leaves the
  cache untouched. There are no retries; the next foreground invocation
  is the retry.
"""

import os
import subprocess
import sys
import time
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum
from pathlib import Path
from typing import Any

import structlog

from alfred_feeds.cache.store import DiskCacheStore

LOCK_DIR_NAME = ".locks"


class RefreshOutcome(str, Enum):
    """How one refresh run ended."""

    SKIPPED_RUNNING = "skipped_running"
    SKIPPED_THROTTLED = "skipped_throttled"
    REFRESHED = "refreshed"
    FAILED = "failed"


class RefreshLock:
    """
    Exclusive-create lock file holding the owner's PID.

    A lock whose owner is no longer alive, or which is older than
    ``stale_after`` seconds, is considered abandoned and taken over.

    Usage:
        lock = RefreshLock(data_dir / ".locks" / "github.lock")
        with lock as acquired:
            if acquired:
                ...
    """

    def __init__(
        self,
        path: Path,
        stale_after: float = 120.0,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        self.path = Path(path)
        self.stale_after = stale_after
        self._held = False
        self._logger = logger or structlog.get_logger(__name__)

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> bool:
        """Take the lock. Returns False if another live owner holds it."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        for attempt in range(2):
            try:
                fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
            except FileExistsError:
                if attempt == 0 and self._is_abandoned():
                    self._logger.warning("Removing abandoned refresh lock", lock=str(self.path))
                    self.path.unlink(missing_ok=True)
                    continue
                return False

            with os.fdopen(fd, "w") as f:
                f.write(str(os.getpid()))
            self._held = True
            return True

        return False

    def release(self) -> None:
        if self._held:
            self.path.unlink(missing_ok=True)
            self._held = False

    def _is_abandoned(self) -> bool:
        try:
            age = time.time() - self.path.stat().st_mtime
            content = self.path.read_text().strip()
            if not content:
                raise ValueError("lock has no pid yet")
            pid = int(content)
        except (OSError, ValueError):
            # Unreadable or half-written lock; only trust its age
            try:
                return time.time() - self.path.stat().st_mtime > self.stale_after
            except OSError:
                return True

        if age > self.stale_after:
            return True
        return not _pid_alive(pid)

    def __enter__(self) -> bool:
        return self.acquire()

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.release()


def _pid_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)  # signal 0 only checks existence
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def lock_path(data_dir: Path, source_key: str) -> Path:
    """Lock file used for refreshes of ``source_key``."""
    return Path(data_dir) / LOCK_DIR_NAME / f"{source_key}.lock"


def is_throttled(
    store: DiskCacheStore,
    cache_key: str,
    window: float,
    now: float | None = None,
) -> bool:
    """True if the cache file was modified less than ``window`` seconds ago."""
    mtime = store.mtime(cache_key)
    if mtime is None:
        return False
    now = time.time() if now is None else now
    return (now - mtime) < window


async def run_refresh(
    fetch_fn: Callable[[], Awaitable[Sequence[Any]]],
    *,
    store: DiskCacheStore,
    cache_key: str,
    lock: RefreshLock,
    throttle_seconds: float,
    write: Callable[[Sequence[Any]], Any] | None = None,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> RefreshOutcome:
    """
    Refresh one cache entry: CHECK_RUNNING -> CHECK_THROTTLE -> FETCH.

    Args:
        fetch_fn: Unwrapped fetch function of the source
        store: Disk cache store holding the entry
        cache_key: Cache file name
        lock: Lock guarding refreshes of this source
        throttle_seconds: Skip the fetch if the cache is younger than this
        write: Custom persistence for the result (defaults to store.write)
        logger: Structured logger

    Returns:
        RefreshOutcome describing what happened
    """
    log = (logger or structlog.get_logger(__name__)).bind(cache_key=cache_key)

    if not lock.acquire():
        log.info("Refresh already running, exiting")
        return RefreshOutcome.SKIPPED_RUNNING

    try:
        if is_throttled(store, cache_key, throttle_seconds):
            age = time.time() - (store.mtime(cache_key) or 0)
            log.info(
                "Skipping fetch, cache modified recently",
                age_seconds=round(age, 1),
                throttle_seconds=throttle_seconds,
            )
            return RefreshOutcome.SKIPPED_THROTTLED

        log.info("Fetch")
        try:
            result = await fetch_fn()
        except Exception as e:
            log.error("Fetch failure", error=str(e) or type(e).__name__, exc_info=True)
            return RefreshOutcome.FAILED

        if write is not None:
            write(result)
        else:
            store.write(cache_key, result)
        log.info("Fetch success, cache written", count=len(result))
        return RefreshOutcome.REFRESHED

    finally:
        lock.release()


class RefreshSpawner:
    """
    Starts detached refresh processes.

    The child is ``<python> -m alfred_feeds refresh <source> --cache-key
    <key>`` in its own session with stdin/stdout/stderr on /dev/null, so
    it outlives the Alfred script and never writes into its output. The
    child logs to its own capped log file instead.
    """

    def __init__(
        self,
        cwd: Path | None = None,
        python: str | None = None,
        module: str = "alfred_feeds",
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        self._cwd = Path(cwd) if cwd is not None else Path.cwd()
        self._python = python or sys.executable
        self._module = module
        self._logger = logger or structlog.get_logger(__name__)

    def command(self, source_key: str, cache_key: str | None = None) -> list[str]:
        """Command line of the refresh process for ``source_key``."""
        cmd = [self._python, "-m", self._module, "refresh", source_key]
        if cache_key:
            cmd += ["--cache-key", cache_key]
        return cmd

    def spawn(self, source_key: str, cache_key: str | None = None) -> None:
        """Fire and forget a refresh of ``source_key``."""
        cmd = self.command(source_key, cache_key)
        try:
            subprocess.Popen(
                cmd,
                cwd=str(self._cwd),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
                close_fds=True,
            )
        except OSError as e:
            self._logger.error(
                "Failed to spawn background refresh",
                source=source_key,
                error=str(e),
            )
            return

        self._logger.debug("Spawned background refresh", source=source_key, cache_key=cache_key)
