"""Loom adapter: the most recent videos of the library, via the web GraphQL API."""

from typing import Any

from alfred_feeds.adapters.base_adapter import BaseAdapter
from alfred_feeds.adapters.http_client import HTTPClient
from alfred_feeds.adapters.schemas import LoomVideo

LOOM_GRAPHQL_URL = "https://www.loom.com/graphql"
LIBRARY_PAGE_SIZE = 12

LOOMS_QUERY = """
query GetLoomsForLibrary($limit: Int!, $cursor: String, $folderId: String, $sourceValue: String, $source: LoomsSource!, $sortType: LoomsSortType!, $sortOrder: LoomsSortOrder!, $sortGrouping: LoomsSortGrouping, $filters: [[LoomsCollectionFilter!]!], $timeRange: TimeRange) {
  getLooms {
    __typename
    ... on GetLoomsPayload {
      videos(
        first: $limit
        after: $cursor
        folderId: $folderId
        sourceValue: $sourceValue
        source: $source
        sortType: $sortType
        sortOrder: $sortOrder
        sortGrouping: $sortGrouping
        filters: $filters
        timeRange: $timeRange
      ) {
        edges {
          node {
            id
            name
            createdAt
            owner { display_name }
          }
        }
      }
    }
  }
}
"""


class LoomAdapter(BaseAdapter[LoomVideo]):
    """
    Uses the browser session cookie; there is no public API key.

    Only the first page is requested: the library is sorted by recency
    and older videos are not useful in a launcher.
    """

    required_settings = ("loom_connect_sid",)

    @property
    def name(self) -> str:
        return "loom"

    async def _fetch_raw(self, client: HTTPClient) -> list[dict[str, Any]]:
        headers = {
            "accept": "*/*",
            "content-type": "application/json",
            "apollographql-client-name": "web",
            "cookie": f"connect.sid={self._require('loom_connect_sid')};",
            "Referer": "https://www.loom.com/looms/videos",
        }
        data = await client.graphql(
            LOOM_GRAPHQL_URL,
            LOOMS_QUERY,
            variables={
                "source": "ALL",
                "sortType": "RECENT",
                "sortOrder": "DESC",
                "filters": [],
                "limit": LIBRARY_PAGE_SIZE,
                "cursor": None,
                "folderId": None,
                "timeRange": None,
            },
            headers=headers,
            operation_name="GetLoomsForLibrary",
        )
        return [edge["node"] for edge in data["getLooms"]["videos"]["edges"]]

    def _transform(self, raw: dict[str, Any]) -> LoomVideo | None:
        return LoomVideo.model_validate(raw)
