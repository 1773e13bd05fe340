"""
Parsing of the create-issue command line.

``-eng -alice -high Fix login redirect`` -> team ``eng``, assignee
``alice``, priority ``high``, title ``Fix login redirect``. Parameter
words are prefix-matched against the workspace metadata after
lower-casing and stripping whitespace, ``_`` and ``-``.
"""

import re
import time
from collections.abc import Callable, Sequence
from typing import Any

from alfred_feeds.issues.schemas import (
    PRIORITIES,
    IssueMetadata,
    IssueParams,
    LinearProject,
    LinearTeam,
    LinearUser,
    Priority,
    TitleValidation,
)

_SANITISE = re.compile(r"[\s_-]")

# Priorities go first so "-high" never gets claimed by a project or user
PROCESSING_ORDER = ("priorities", "users", "teams", "projects")


def sanitise(value: str) -> str:
    return _SANITISE.sub("", value).lower()


def fuzzy_match(value: str, prefix: str) -> bool:
    return sanitise(value).startswith(sanitise(prefix))


def _matches_any(candidates: Sequence[str | None], word: str) -> bool:
    return any(fuzzy_match(c, word[1:]) for c in candidates if c)


def match_team(team: LinearTeam, word: str) -> bool:
    return _matches_any([team.name, team.key], word)


def match_project(project: LinearProject, word: str) -> bool:
    return _matches_any([project.name], word)


def match_user(user: LinearUser, word: str) -> bool:
    email_name = user.email.split("@")[0] if user.email else None
    return _matches_any([user.name, user.display_name, email_name], word)


def match_priority(priority: Priority, word: str) -> bool:
    return _matches_any([priority.label], word)


def parse_input(text: str) -> tuple[list[str], list[str]]:
    """
    Split input into parameter words and title words.

    Parameter words start with ``-`` and are longer than one character;
    a lone ``-`` stays in the title.
    """
    words = text.split()
    params = [w for w in words if w.startswith("-") and len(w) > 1]
    title = [w for w in words if not w.startswith("-") or len(w) == 1]
    return params, title


def _find(collection: Sequence[Any], word: str, matcher: Callable[[Any, str], bool]) -> Any:
    return next((item for item in collection if matcher(item, word)), None)


def _candidates(
    kind: str, metadata: IssueMetadata | None, team_id: str | None
) -> tuple[Sequence[Any], Callable[[Any, str], bool]]:
    if kind == "priorities":
        return PRIORITIES, match_priority
    if metadata is None:
        return [], match_priority
    if kind == "users":
        return metadata.users, match_user
    if kind == "teams":
        return metadata.teams, match_team
    projects = [p for p in metadata.projects if team_id is None or team_id in p.team_ids]
    return projects, match_project


def process_parameters(words: Sequence[str], metadata: IssueMetadata | None) -> IssueParams:
    """
    Resolve parameter words against the metadata.

    Each kind is matched once, scanning the words from the end so the
    last matching word wins. Projects are restricted to the matched team
    when there is one. Words nothing matched are left in ``unmatched``.
    """
    params = IssueParams(unmatched=list(words))

    for kind in PROCESSING_ORDER:
        collection, matcher = _candidates(kind, metadata, params.team_id)

        for i in range(len(params.unmatched) - 1, -1, -1):
            match = _find(collection, params.unmatched[i], matcher)
            if match is None:
                continue

            if kind == "priorities":
                params.priority_id, params.priority_label = match.id, match.label
            elif kind == "users":
                params.assignee_id, params.assignee_name = match.id, match.label
            elif kind == "teams":
                params.team_id, params.team_name = match.id, match.name
            else:
                params.project_id, params.project_name = match.id, match.name
            del params.unmatched[i]
            break

    return params


def default_team_id(metadata: IssueMetadata) -> str | None:
    """The oldest team the current user is a member of."""
    mine = [t for t in metadata.teams if t.is_member]
    mine.sort(key=lambda t: t.created_at or "")
    return mine[0].id if mine else None


def apply_default_preferences(
    params: IssueParams,
    metadata: IssueMetadata,
    now_ms: int | None = None,
) -> IssueParams:
    """
    Fill values the input did not give from recent choices.

    Remembered choices expire after 30 minutes. A project given without
    a team takes the project's first team. With neither team nor project
    the user's oldest team is used.
    """
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    result = params.model_copy(deep=True)

    if result.team_id is None and result.project_id is None:
        result.project_id = metadata.recent_choice("projects", now_ms)
        result.team_id = metadata.recent_choice("teams", now_ms)
    elif result.project_id is None:
        result.team_id = metadata.recent_choice("teams", now_ms)
    elif result.team_id is None:
        project = next((p for p in metadata.projects if p.id == result.project_id), None)
        if project and project.team_ids:
            result.team_id = project.team_ids[0]
        else:
            result.team_id = metadata.recent_choice("teams", now_ms)

    if not result.team_id and not result.project_id:
        result.team_id = default_team_id(metadata)

    if result.assignee_id is None:
        result.assignee_id = metadata.recent_choice("users", now_ms)
    if result.priority_id is None:
        result.priority_id = metadata.recent_choice("priorities", now_ms)

    if result.team_id and not result.team_name:
        team = next((t for t in metadata.teams if t.id == result.team_id), None)
        if team:
            result.team_name = team.name
    if result.project_id and not result.project_name:
        project = next((p for p in metadata.projects if p.id == result.project_id), None)
        if project:
            result.project_name = project.name
    if result.assignee_id and not result.assignee_name:
        user = next((u for u in metadata.users if u.id == result.assignee_id), None)
        if user:
            result.assignee_name = user.label
    if result.priority_id is not None:
        priority = next((p for p in PRIORITIES if p.id == result.priority_id), None)
        if priority:
            result.priority_label = priority.label

    return result


def build_title(unmatched: Sequence[str], title_words: Sequence[str]) -> str:
    """Unmatched parameter words lead the title."""
    return " ".join(w.strip() for w in [*unmatched, *title_words])


def validate_title(title: str) -> TitleValidation:
    if not title.strip():
        return TitleValidation(valid=False, message="Please provide a title")
    if len(title.split()) == 1:
        return TitleValidation(
            valid=False,
            message="Please provide a more descriptive title with multiple words",
        )
    return TitleValidation(valid=True)
