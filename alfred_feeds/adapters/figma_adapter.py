"""Figma adapter: comments on one file."""

from typing import Any

from alfred_feeds.adapters.base_adapter import BaseAdapter
from alfred_feeds.adapters.http_client import HTTPClient
from alfred_feeds.adapters.schemas import FigmaComment

FIGMA_API_URL = "https://api.figma.com/v1"


class FigmaAdapter(BaseAdapter[FigmaComment]):
    """Lists file comments; comments not pinned to a node are dropped."""

    required_settings = ("figma_api_key", "figma_file")

    @property
    def name(self) -> str:
        return "figma"

    async def _fetch_raw(self, client: HTTPClient) -> list[dict[str, Any]]:
        headers = {"X-Figma-Token": self._require("figma_api_key")}
        url = f"{FIGMA_API_URL}/files/{self._require('figma_file')}/comments"

        comments: list[dict[str, Any]] = []
        after: str | None = None
        while True:
            response = await client.get(
                url,
                params={"after": after} if after else None,
                headers=headers,
            )
            data = response.json()
            comments.extend(data["comments"])

            after = (data.get("pagination") or {}).get("after")
            if not after:
                break

        return comments

    def _transform(self, raw: dict[str, Any]) -> FigmaComment | None:
        comment = FigmaComment.model_validate(raw)
        if comment.node_id is None:
            return None
        return comment
