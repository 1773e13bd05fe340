"""
Display schema shared by every filter.

DisplayItem is what Alfred renders; every filter, the aggregator and the
disk cache speak it. Field names follow Alfred's script-filter item
(``icon`` is ``{"path": ...}``); ``source`` and ``date`` are extra keys
Alfred ignores and the aggregator uses for restriction and ordering.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SourceCode(str, Enum):
    """Short codes tagging each item with the service it came from."""

    GITHUB = "gh"
    LINEAR = "li"
    VERCEL = "vc"
    LOOM = "lm"
    FIGMA = "fg"
    CURSOR = "cr"
    ROOT = "root"


class Icon(BaseModel):
    path: str


class DisplayItem(BaseModel):
    """
    One launcher result.

    Navigation and error placeholders carry the epoch as ``date`` so
    they sort after every dated item. ``uid`` is deliberately left unset
    by some filters to stop Alfred from learning their ordering.
    """

    model_config = ConfigDict(use_enum_values=True)

    title: str
    subtitle: str = ""
    arg: str | None = None
    icon: Icon | None = None
    source: SourceCode
    date: datetime = Field(default=EPOCH)
    uid: str | None = None
    valid: bool | None = None

    @field_validator("date")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Naive datetimes are taken as UTC so ordering never mixes kinds."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_serializer("date")
    def serialize_date(self, v: datetime) -> str:
        return v.isoformat().replace("+00:00", "Z")

    @property
    def is_placeholder(self) -> bool:
        """Navigation and error items are the only epoch-dated items."""
        return self.date == EPOCH

    def to_alfred(self) -> dict[str, Any]:
        """Item dict for the Alfred JSON document, without unset fields."""
        return self.model_dump(mode="json", exclude_none=True)


def items_document(items: list[DisplayItem]) -> dict[str, Any]:
    """The top-level ``{"items": [...]}`` document Alfred expects."""
    return {"items": [item.to_alfred() for item in items]}
