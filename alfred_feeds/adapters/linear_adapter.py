"""Linear adapter: issues visible to the API key, via GraphQL."""

from typing import Any

from alfred_feeds.adapters.base_adapter import BaseAdapter
from alfred_feeds.adapters.http_client import HTTPClient
from alfred_feeds.adapters.schemas import LinearIssue

LINEAR_GRAPHQL_URL = "https://api.linear.app/graphql"

ISSUES_QUERY = """
query($after: String) {
  issues(first: 100, after: $after) {
    nodes {
      title
      identifier
      state { name }
      updatedAt
      assignee { name }
      url
      priority
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""


def linear_headers(token: str) -> dict[str, str]:
    """Linear takes the personal API key as the bare Authorization value."""
    return {"Content-Type": "application/json", "Authorization": token}


class LinearAdapter(BaseAdapter[LinearIssue]):
    """Lists issues following the GraphQL cursor until the last page."""

    required_settings = ("linear_api_key", "linear_team")

    @property
    def name(self) -> str:
        return "linear"

    async def _fetch_raw(self, client: HTTPClient) -> list[dict[str, Any]]:
        headers = linear_headers(self._require("linear_api_key"))

        issues: list[dict[str, Any]] = []
        end_cursor: str | None = None
        while True:
            data = await client.graphql(
                LINEAR_GRAPHQL_URL,
                ISSUES_QUERY,
                variables={"after": end_cursor},
                headers=headers,
            )
            issues.extend(data["issues"]["nodes"])

            page_info = data["issues"]["pageInfo"]
            if not page_info["hasNextPage"]:
                break
            end_cursor = page_info["endCursor"]

        return issues

    def _transform(self, raw: dict[str, Any]) -> LinearIssue | None:
        return LinearIssue.model_validate(raw)
