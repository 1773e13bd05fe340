"""
Typed records returned by the source adapters.

Raw service payloads are validated here, at the adapter boundary, so
the filter layer never threads loosely shaped dicts around. Nested
fields are pulled up with AliasPath; ``populate_by_name`` lets a record
dumped to the disk cache (field names, not aliases) be read back.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import AliasPath, BaseModel, ConfigDict, Field, field_validator


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PullRequest(_Record):
    """A GitHub pull request."""

    number: int
    title: str
    state: str
    head_ref: str | None = Field(default=None, validation_alias=AliasPath("head", "ref"))
    author: str = Field(default="unknown", validation_alias=AliasPath("user", "login"))
    html_url: str
    updated_at: datetime
    merged_at: datetime | None = None


class LinearIssue(_Record):
    """A Linear issue as listed by the issues query."""

    identifier: str
    title: str
    state: str = Field(default="", validation_alias=AliasPath("state", "name"))
    priority: int | None = None
    assignee: str | None = Field(default=None, validation_alias=AliasPath("assignee", "name"))
    url: str
    updated_at: datetime = Field(validation_alias="updatedAt")


class Deployment(_Record):
    """A Vercel deployment."""

    uid: str
    url: str
    ready_state: str = Field(default="", validation_alias="readyState")
    created_at: datetime = Field(validation_alias="createdAt")
    commit_ref: str | None = Field(
        default=None, validation_alias=AliasPath("meta", "githubCommitRef")
    )
    commit_message: str | None = Field(
        default=None, validation_alias=AliasPath("meta", "githubCommitMessage")
    )
    creator: str | None = Field(default=None, validation_alias=AliasPath("creator", "username"))


class FigmaComment(_Record):
    """A comment on a Figma file."""

    id: str
    message: str
    author: str = Field(default="unknown", validation_alias=AliasPath("user", "handle"))
    created_at: datetime
    resolved_at: datetime | None = None
    node_id: str | None = Field(default=None, validation_alias=AliasPath("client_meta", "node_id"))


class LoomVideo(_Record):
    """A video in the Loom library."""

    id: str
    name: str
    owner: str = Field(default="unknown", validation_alias=AliasPath("owner", "display_name"))
    created_at: datetime = Field(validation_alias="createdAt")


class UsageEvent(_Record):
    """One billed Cursor request."""

    timestamp_ms: int = Field(validation_alias="timestamp")
    model: str = "Unknown"
    cost: float = Field(default=0.0, validation_alias="usageBasedCosts")

    @field_validator("cost", mode="before")
    @classmethod
    def parse_cost(cls, v: Any) -> float:
        """Costs arrive as display strings such as ``"$0.04"``."""
        if v is None or v == "":
            return 0.0
        if isinstance(v, str):
            try:
                return float(v.replace("$", "").strip() or 0)
            except ValueError:
                return 0.0
        return float(v)

    @property
    def occurred_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp_ms / 1000, tz=timezone.utc)
