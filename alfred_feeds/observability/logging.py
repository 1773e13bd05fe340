"""
Structured logging configuration using structlog.

Provides JSON-formatted logs for production and pretty console
logs for development. Supports contextual logging with bound
fields (e.g., source, cache_key).

Standard output belongs to Alfred (it must only ever carry the items
JSON document), so every handler here writes to stderr or to a capped
file under the logs directory.
"""

import logging
import sys
from pathlib import Path

import structlog
from structlog.types import Processor

from alfred_feeds.config.settings import Settings, get_settings

ERROR_LOG_FILE = "error.log"


class CappedFileHandler(logging.FileHandler):
    """
    Append-only file handler with a size cap.

    After each record, if the file is larger than ``max_bytes`` it is
    rewritten with only its last ``max_lines`` lines (oldest lines are
    dropped first).
    """

    def __init__(
        self,
        filename: str | Path,
        max_bytes: int = 1024 * 1024,
        max_lines: int = 1000,
        encoding: str = "utf-8",
    ):
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(path, mode="a", encoding=encoding)
        self.max_bytes = max_bytes
        self.max_lines = max_lines

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        try:
            self._trim_if_needed()
        except OSError:
            self.handleError(record)

    def _trim_if_needed(self) -> None:
        path = Path(self.baseFilename)
        if path.stat().st_size <= self.max_bytes:
            return

        self.acquire()
        try:
            lines = path.read_text(encoding=self.encoding, errors="replace").splitlines()
            kept = lines[-self.max_lines:]
            if self.stream is not None:
                self.stream.close()
                self.stream = None  # reopened lazily on next emit
            path.write_text("\n".join(kept) + "\n", encoding=self.encoding)
        finally:
            self.release()


def setup_logging(settings: Settings | None = None, log_file: str | None = None) -> None:
    """
    Configure structured logging for the workflow scripts.

    In production: JSON-formatted logs
    In development: Pretty console output on stderr

    Warnings and errors are always appended to ``logs/error.log``. When
    ``log_file`` is given (background refresh processes, whose standard
    streams are discarded) every record also goes to ``logs/<log_file>``.

    Usage:
        setup_logging()
        logger = structlog.get_logger()
        logger.info("Fetched", source="gh", count=12)
    """
    settings = settings or get_settings()

    # Common processors for all environments
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_production:
        renderer: Processor = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    error_handler = CappedFileHandler(
        settings.log_dir / ERROR_LOG_FILE,
        max_bytes=settings.max_log_bytes,
        max_lines=settings.max_log_lines,
    )
    error_handler.setLevel(logging.WARNING)
    handlers.append(error_handler)

    if log_file:
        handlers.append(
            CappedFileHandler(
                settings.log_dir / log_file,
                max_bytes=settings.max_log_bytes,
                max_lines=settings.max_log_lines,
            )
        )

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level))

    # Set log levels for noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

