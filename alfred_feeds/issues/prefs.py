"""Persistence of create-issue metadata and remembered choices."""

from pathlib import Path

import structlog
from pydantic import ValidationError

from alfred_feeds.issues.schemas import IssueMetadata

PREFS_FILE = "create-linear-issue-cache.json"


class PrefsStore:
    """
    One JSON object in the data directory.

    Like the disk cache, a missing or unreadable file reads back as None
    and write failures are logged rather than raised.
    """

    def __init__(
        self,
        data_dir: Path,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        self._data_dir = Path(data_dir)
        self._logger = logger or structlog.get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._data_dir / PREFS_FILE

    def read(self) -> IssueMetadata | None:
        if not self.path.exists():
            return None
        try:
            return IssueMetadata.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            self._logger.warning("Could not read issue preferences", error=str(e))
            return None

    def write(self, metadata: IssueMetadata, indent: int | None = None) -> bool:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                metadata.model_dump_json(by_alias=True, indent=indent),
                encoding="utf-8",
            )
        except OSError as e:
            self._logger.error("Could not write issue preferences", error=str(e))
            return False
        return True
