"""Vercel adapter: deployments visible to the token."""

from typing import Any

from alfred_feeds.adapters.base_adapter import BaseAdapter
from alfred_feeds.adapters.http_client import HTTPClient
from alfred_feeds.adapters.schemas import Deployment

VERCEL_DEPLOYMENTS_URL = "https://api.vercel.com/v6/deployments"


class VercelAdapter(BaseAdapter[Deployment]):
    """Follows ``pagination.next`` (an ``until`` timestamp) to the end."""

    required_settings = ("vercel_api_key",)

    @property
    def name(self) -> str:
        return "vercel"

    async def _fetch_raw(self, client: HTTPClient) -> list[dict[str, Any]]:
        headers = {"Authorization": f"Bearer {self._require('vercel_api_key')}"}

        deployments: list[dict[str, Any]] = []
        until: Any = None
        while True:
            response = await client.get(
                VERCEL_DEPLOYMENTS_URL,
                params={"until": until} if until else None,
                headers=headers,
            )
            data = response.json()
            deployments.extend(data["deployments"])

            until = (data.get("pagination") or {}).get("next")
            if not until:
                break

        return deployments

    def _transform(self, raw: dict[str, Any]) -> Deployment | None:
        return Deployment.model_validate(raw)
