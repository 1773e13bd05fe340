"""
Schemas for the create-issue flow.

IssueMetadata mirrors the ``create-linear-issue-cache.json`` file: the
teams, projects and users of the Linear workspace plus the user's last
explicit choices and when they were made (epoch milliseconds). Keys are
camelCase on disk; nested GraphQL shapes (``members.nodes``,
``teams.nodes``) are flattened on the way in.
"""

from typing import Any

from pydantic import AliasPath, BaseModel, ConfigDict, Field, model_validator

CHOICE_EXPIRY_MS = 30 * 60 * 1000


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Priority(_CamelModel):
    label: str
    id: int


PRIORITIES: list[Priority] = [
    Priority(label=label, id=priority_id)
    for label, priority_id in [
        ("No priority", 0),
        ("urgent", 1),
        ("p0", 1),
        ("1", 1),
        ("u", 1),
        ("high", 2),
        ("p1", 2),
        ("2", 2),
        ("h", 2),
        ("medium", 3),
        ("p2", 3),
        ("3", 3),
        ("m", 3),
        ("low", 4),
        ("p3", 4),
        ("4", 4),
        ("l", 4),
    ]
]


class LinearTeam(_CamelModel):
    id: str
    key: str = ""
    name: str = ""
    created_at: str | None = Field(default=None, alias="createdAt")
    is_member: bool = Field(default=False, alias="isMember")

    @model_validator(mode="before")
    @classmethod
    def flatten_members(cls, data: Any) -> Any:
        """``members.nodes[*].isMe`` from the API becomes ``isMember``."""
        if isinstance(data, dict) and "members" in data:
            members = (data.get("members") or {}).get("nodes") or []
            data = {**data, "isMember": any(m.get("isMe") for m in members)}
        return data


class LinearProject(_CamelModel):
    id: str
    name: str = ""
    team_ids: list[str] = Field(default_factory=list, alias="teamIds")

    @model_validator(mode="before")
    @classmethod
    def flatten_teams(cls, data: Any) -> Any:
        if isinstance(data, dict) and "teams" in data:
            teams = (data.get("teams") or {}).get("nodes") or []
            data = {**data, "teamIds": [t["id"] for t in teams if t.get("id")]}
        return data


class LinearUser(_CamelModel):
    id: str
    name: str = ""
    display_name: str | None = Field(default=None, alias="displayName")
    email: str | None = None
    is_me: bool = Field(default=False, alias="isMe")

    @property
    def label(self) -> str:
        return self.display_name or self.name


class IssueParams(BaseModel):
    """Resolved issue fields; names are for display only."""

    team_id: str | None = None
    project_id: str | None = None
    assignee_id: str | None = None
    priority_id: int | None = None
    team_name: str | None = None
    project_name: str | None = None
    assignee_name: str | None = None
    priority_label: str | None = None
    unmatched: list[str] = Field(default_factory=list)


class IssueMetadata(_CamelModel):
    """Workspace metadata plus remembered choices."""

    teams: list[LinearTeam] = Field(default_factory=list)
    projects: list[LinearProject] = Field(default_factory=list)
    users: list[LinearUser] = Field(default_factory=list)
    priorities: list[Priority] = Field(default_factory=lambda: list(PRIORITIES))

    teams_choice: str | None = Field(default=None, alias="teamsChoice")
    projects_choice: str | None = Field(default=None, alias="projectsChoice")
    users_choice: str | None = Field(default=None, alias="usersChoice")
    priorities_choice: int | None = Field(default=None, alias="prioritiesChoice")

    teams_choice_timestamp: int | None = Field(default=None, alias="teamsChoiceTimestamp")
    projects_choice_timestamp: int | None = Field(default=None, alias="projectsChoiceTimestamp")
    users_choice_timestamp: int | None = Field(default=None, alias="usersChoiceTimestamp")
    priorities_choice_timestamp: int | None = Field(
        default=None, alias="prioritiesChoiceTimestamp"
    )

    @property
    def is_complete(self) -> bool:
        """Teams, projects and users are all present."""
        return bool(self.teams and self.projects and self.users)

    def recent_choice(self, kind: str, now_ms: int) -> Any:
        """
        Remembered choice for ``kind`` (teams, projects, users, priorities).

        Returns None when the choice was never made or is older than
        30 minutes.
        """
        timestamp = getattr(self, f"{kind}_choice_timestamp")
        if not timestamp or now_ms - timestamp > CHOICE_EXPIRY_MS:
            return None
        return getattr(self, f"{kind}_choice")

    def remember(self, explicit: IssueParams, now_ms: int) -> "IssueMetadata":
        """Copy with the explicitly given values stored as fresh choices."""
        update: dict[str, Any] = {}
        for kind, value in (
            ("teams", explicit.team_id),
            ("projects", explicit.project_id),
            ("users", explicit.assignee_id),
            ("priorities", explicit.priority_id),
        ):
            if value is not None:
                update[f"{kind}_choice"] = value
                update[f"{kind}_choice_timestamp"] = now_ms
        return self.model_copy(update=update)

    def with_choices_of(self, other: "IssueMetadata | None") -> "IssueMetadata":
        """Fresh workspace lists combined with the choices stored in ``other``."""
        if other is None:
            return self
        choices = other.model_dump(
            include={
                "teams_choice",
                "projects_choice",
                "users_choice",
                "priorities_choice",
                "teams_choice_timestamp",
                "projects_choice_timestamp",
                "users_choice_timestamp",
                "priorities_choice_timestamp",
            }
        )
        return self.model_copy(update=choices)


class TitleValidation(BaseModel):
    valid: bool
    message: str | None = None


class IssueWorkflow(BaseModel):
    """Outcome of parsing one input line against the metadata."""

    input: str
    title: str
    metadata: IssueMetadata
    explicit: IssueParams
    params: IssueParams
    validation: TitleValidation


class CreatedIssue(_CamelModel):
    id: str
    identifier: str
    url: str | None = None
    assignee_name: str | None = Field(
        default=None, validation_alias=AliasPath("assignee", "displayName")
    )
