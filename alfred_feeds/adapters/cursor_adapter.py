"""Cursor adapter: billed usage events of the last 30 days."""

import time
from typing import Any

from alfred_feeds.adapters.base_adapter import BaseAdapter
from alfred_feeds.adapters.http_client import HTTPClient, HTTPClientError
from alfred_feeds.adapters.schemas import UsageEvent

CURSOR_USAGE_URL = "https://www.cursor.com/api/dashboard/get-filtered-usage-events"
PAGE_SIZE = 100
LOOKBACK_DAYS = 30


class CursorAdapter(BaseAdapter[UsageEvent]):
    """Pages through dashboard usage events until a short page."""

    required_settings = ("cursor_session_token", "cursor_team_id", "cursor_user_id")

    @property
    def name(self) -> str:
        return "cursor"

    async def _fetch_raw(self, client: HTTPClient) -> list[dict[str, Any]]:
        headers = {
            "accept": "*/*",
            "content-type": "application/json",
            "cookie": (
                "NEXT_LOCALE=en; "
                f"WorkosCursorSessionToken={self._require('cursor_session_token')};"
            ),
            "Referer": "https://www.cursor.com/dashboard?tab=usage",
        }
        end_ms = int(time.time() * 1000)
        start_ms = end_ms - LOOKBACK_DAYS * 24 * 60 * 60 * 1000

        events: list[dict[str, Any]] = []
        page = 1
        while True:
            response = await client.post(
                CURSOR_USAGE_URL,
                json_body={
                    "teamId": int(self._require("cursor_team_id")),
                    "userId": int(self._require("cursor_user_id")),
                    "startDate": str(start_ms),
                    "endDate": str(end_ms),
                    "page": page,
                    "pageSize": PAGE_SIZE,
                },
                headers=headers,
            )
            usage_events = response.json().get("usageEventsDisplay")
            if not isinstance(usage_events, list):
                raise HTTPClientError("Invalid response format from Cursor API")

            events.extend(usage_events)
            if len(usage_events) < PAGE_SIZE:
                break
            page += 1

        return events

    def _transform(self, raw: dict[str, Any]) -> UsageEvent | None:
        return UsageEvent.model_validate(raw)
