"""GitHub adapter: every pull request of one repository."""

from typing import Any

from alfred_feeds.adapters.base_adapter import BaseAdapter
from alfred_feeds.adapters.http_client import HTTPClient
from alfred_feeds.adapters.schemas import PullRequest

GITHUB_API_URL = "https://api.github.com"
PAGE_SIZE = 100


class GitHubAdapter(BaseAdapter[PullRequest]):
    """Lists pull requests in all states, newest pages first."""

    required_settings = ("github_api_key", "github_repo")

    @property
    def name(self) -> str:
        return "github"

    async def _fetch_raw(self, client: HTTPClient) -> list[dict[str, Any]]:
        token = self._require("github_api_key")
        repo = self._require("github_repo")
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }

        pulls: list[dict[str, Any]] = []
        page = 1
        while True:
            response = await client.get(
                f"{GITHUB_API_URL}/repos/{repo}/pulls",
                params={"state": "all", "per_page": PAGE_SIZE, "page": page},
                headers=headers,
            )
            page_data = response.json()
            pulls.extend(page_data)

            if len(page_data) < PAGE_SIZE:
                break
            page += 1

        return pulls

    def _transform(self, raw: dict[str, Any]) -> PullRequest | None:
        html_url = raw.get("html_url") or raw.get("_links", {}).get("html", {}).get("href")
        return PullRequest.model_validate({**raw, "html_url": html_url})
