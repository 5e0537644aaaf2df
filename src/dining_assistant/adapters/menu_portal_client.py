"""HTTP client for the FoodPro menu and nutrition portals."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class MenuPortalClient(Protocol):
    """Interface for fetching raw portal pages."""

    async def fetch_html(self, url: str) -> str:
        """Fetch a page and return its HTML body."""


@dataclass
class HttpxMenuPortalClient(MenuPortalClient):
    """HTTPX-backed portal client."""

    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(cls, timeout_seconds: float = 15) -> "HttpxMenuPortalClient":
        """Create a portal client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(
                headers={"User-Agent": _USER_AGENT},
                follow_redirects=True,
            ),
            timeout_seconds=timeout_seconds,
        )

    async def fetch_html(self, url: str) -> str:
        """GET a portal page; non-2xx responses raise ``httpx.HTTPStatusError``."""
        response = await self.http_client.get(url, timeout=self.timeout_seconds)
        response.raise_for_status()
        return response.text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
