"""
Create-issue service.

Resolves a short command line against the Linear workspace metadata,
previews the result as a launcher item and submits the ``issueCreate``
mutation. Metadata is served from the prefs file when it is complete,
with a background refresh spawned each time, and fetched synchronously
otherwise.
"""

import time
from typing import Any

import structlog

from alfred_feeds.adapters.base_adapter import MissingConfigError
from alfred_feeds.adapters.http_client import HTTPClient, HTTPClientError, RetryConfig
from alfred_feeds.adapters.linear_adapter import LINEAR_GRAPHQL_URL, linear_headers
from alfred_feeds.cache.policy import Spawner
from alfred_feeds.cache.refresh import RefreshLock, RefreshOutcome, run_refresh
from alfred_feeds.cache.store import DiskCacheStore
from alfred_feeds.config.settings import Settings
from alfred_feeds.filters.linear_filter import LinearFilter
from alfred_feeds.filters.schemas import DisplayItem, Icon, SourceCode
from alfred_feeds.issues.parser import (
    apply_default_preferences,
    build_title,
    parse_input,
    process_parameters,
    validate_title,
)
from alfred_feeds.issues.prefs import PREFS_FILE, PrefsStore
from alfred_feeds.issues.schemas import (
    CreatedIssue,
    IssueMetadata,
    IssueParams,
    IssueWorkflow,
)

METADATA_REFRESH_KEY = "issue-metadata"

METADATA_QUERY = """
query {
  teams {
    nodes {
      id
      key
      name
      createdAt
      members { nodes { id isMe } }
    }
  }
  projects {
    nodes {
      id
      name
      teams { nodes { id } }
    }
  }
  users {
    nodes {
      id
      name
      email
      displayName
      isMe
    }
  }
}
"""

CREATE_ISSUE_MUTATION = """
mutation CreateIssue($input: IssueCreateInput!) {
  issueCreate(input: $input) {
    success
    issue {
      id
      identifier
      url
      assignee { displayName }
    }
  }
}
"""


class IssueWorkflowError(Exception):
    """The issue could not be previewed or created."""

    pass


def format_preview_subtitle(params: IssueParams) -> str:
    parts = [
        f"{label}: {value}"
        for label, value in (
            ("Team", params.team_name),
            ("Project", params.project_name),
            ("Assignee", params.assignee_name),
            ("Priority", params.priority_label),
        )
        if value
    ]
    return " | ".join(parts)


def preview_error_item() -> DisplayItem:
    return DisplayItem(
        uid="error",
        title="New Linear issue",
        subtitle="",
        icon=Icon(path=LinearFilter.icon_path),
        source=SourceCode.LINEAR,
        valid=False,
    )


class IssueService:
    """
    Preview and creation of Linear issues from a command line.

    Usage:
        service = IssueService(settings, PrefsStore(settings.data_dir), spawner)
        item = await service.preview("-eng -high Fix login redirect")
        issue = await service.create("-eng -high Fix login redirect")
    """

    def __init__(
        self,
        settings: Settings,
        prefs: PrefsStore,
        spawner: Spawner | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        self._settings = settings
        self._prefs = prefs
        self._spawner = spawner
        self._logger = logger or structlog.get_logger(__name__)

    @property
    def dry_run(self) -> bool:
        return self._settings.dry_run

    def _token(self) -> str:
        if not self._settings.linear_api_key:
            raise MissingConfigError("LINEAR_API_KEY")
        return self._settings.linear_api_key

    def _client(self) -> HTTPClient:
        return HTTPClient(
            RetryConfig(max_retries=self._settings.max_http_retries),
            timeout=self._settings.http_timeout_seconds,
        )

    async def get_metadata(self) -> IssueMetadata:
        """
        Fetch teams, projects and users from Linear.

        Raises:
            MissingConfigError: if LINEAR_API_KEY is not set
            HTTPClientError: on transport or GraphQL failure
        """
        headers = linear_headers(self._token())
        async with self._client() as client:
            data = await client.graphql(LINEAR_GRAPHQL_URL, METADATA_QUERY, headers=headers)

        return IssueMetadata(
            teams=data["teams"]["nodes"],
            projects=data["projects"]["nodes"],
            users=data["users"]["nodes"],
        )

    def store_metadata(self, metadata: IssueMetadata) -> IssueMetadata:
        """Persist fresh metadata, keeping the remembered choices."""
        merged = metadata.with_choices_of(self._prefs.read())
        self._prefs.write(merged)
        return merged

    async def load_metadata(self) -> IssueMetadata:
        """
        Metadata for parsing, from the prefs file when it is complete.

        Raises:
            IssueWorkflowError: if the file is incomplete and the fetch fails
        """
        cached = self._prefs.read()
        if cached is not None and cached.is_complete:
            if self._spawner is not None:
                self._spawner.spawn(METADATA_REFRESH_KEY, PREFS_FILE)
            return cached

        self._logger.info("Issue metadata missing or incomplete, fetching")
        try:
            fresh = await self.get_metadata()
        except (MissingConfigError, HTTPClientError) as e:
            raise IssueWorkflowError(str(e)) from e
        return self.store_metadata(fresh)

    async def refresh(self, lock: RefreshLock) -> RefreshOutcome:
        """Background refresh of the metadata, guarded and throttled like a filter refresh."""

        async def fetch() -> list[IssueMetadata]:
            return [await self.get_metadata()]

        return await run_refresh(
            fetch,
            store=DiskCacheStore(self._settings.data_dir, logger=self._logger),
            cache_key=PREFS_FILE,
            lock=lock,
            throttle_seconds=self._settings.issue_metadata_throttle_seconds,
            write=lambda result: self.store_metadata(result[0]),
            logger=self._logger,
        )

    async def process_workflow(self, text: str, now_ms: int | None = None) -> IssueWorkflow:
        """Parse ``text`` into the final issue fields and title."""
        param_words, title_words = parse_input(text)
        metadata = await self.load_metadata()

        explicit = process_parameters(param_words, metadata)
        params = apply_default_preferences(explicit, metadata, now_ms)
        title = build_title(explicit.unmatched, title_words)

        return IssueWorkflow(
            input=text,
            title=title,
            metadata=metadata,
            explicit=explicit,
            params=params,
            validation=validate_title(title),
        )

    async def preview(self, text: str) -> DisplayItem:
        """The single launcher item describing the issue ``text`` would create."""
        try:
            workflow = await self.process_workflow(text)
        except IssueWorkflowError as e:
            self._logger.warning("Issue preview unavailable", error=str(e))
            return preview_error_item()

        title = "Create Linear issue"
        if workflow.title:
            title = f"{title}: {workflow.title}"

        return DisplayItem(
            uid="linear-issue",
            title=title,
            subtitle=format_preview_subtitle(workflow.params),
            arg=text,
            icon=Icon(path=LinearFilter.icon_path),
            source=SourceCode.LINEAR,
            valid=workflow.validation.valid,
        )

    async def create(self, text: str) -> CreatedIssue:
        """
        Create the issue described by ``text``.

        Explicitly given values are remembered for the next 30 minutes.
        After the mutation the Linear filter cache is refreshed in the
        background so the new issue shows up.

        Raises:
            IssueWorkflowError: on an invalid title or a failed mutation
        """
        if not text.strip():
            raise IssueWorkflowError("Please provide an issue title")

        workflow = await self.process_workflow(text)
        if not workflow.validation.valid:
            raise IssueWorkflowError(workflow.validation.message or "Invalid title")

        now_ms = int(time.time() * 1000)
        self._prefs.write(
            workflow.metadata.remember(workflow.explicit, now_ms),
            indent=2 if self.dry_run else None,
        )

        params = workflow.params
        issue_input: dict[str, Any] = {
            "teamId": params.team_id or None,
            "projectId": params.project_id or None,
            "assigneeId": params.assignee_id or None,
            "priority": params.priority_id or 0,
            "title": workflow.title,
        }

        try:
            return await self._submit(issue_input)
        finally:
            if self._spawner is not None:
                self._spawner.spawn(LinearFilter.key, LinearFilter.cache_key)

    async def _submit(self, issue_input: dict[str, Any]) -> CreatedIssue:
        if self.dry_run:
            self._logger.info(
                "Dry run, issue not created",
                team=(issue_input["teamId"] or "")[:4] or None,
                project=(issue_input["projectId"] or "")[:4] or None,
                assignee=(issue_input["assigneeId"] or "")[:4] or None,
                priority=issue_input["priority"],
                title=issue_input["title"],
            )
            return CreatedIssue(id="dry-run", identifier="DRY-RUN")

        try:
            headers = linear_headers(self._token())
            async with self._client() as client:
                data = await client.graphql(
                    LINEAR_GRAPHQL_URL,
                    CREATE_ISSUE_MUTATION,
                    variables={"input": issue_input},
                    headers=headers,
                )
            issue = (data.get("issueCreate") or {}).get("issue")
            if not issue:
                raise HTTPClientError("issueCreate returned no issue")
        except (MissingConfigError, HTTPClientError) as e:
            self._logger.error("Issue creation failed", error=str(e))
            raise IssueWorkflowError("Failed to create the issue.") from e

        created = CreatedIssue.model_validate(issue)
        self._logger.info("Issue created", identifier=created.identifier)
        return created
