"""HTTP fetcher for the Maoyan content API."""

import json
import logging
from typing import Any

import httpx

from maoyan_mcp.config import settings
from maoyan_mcp.exceptions import DecodeFailed, TransportFailed

logger = logging.getLogger(__name__)


def default_headers() -> dict[str, str]:
    """Browser-like header profile sent with every request."""
    return {
        "User-Agent": settings.user_agent,
        "Accept": settings.accept,
        "Accept-Language": settings.accept_language,
    }


class RemoteFetcher:
    """
    Stateless GET client for the content provider.

    Each call opens its own ``httpx.AsyncClient`` and issues exactly one
    request. Nothing is retried here; callers decide what a failure means.
    """

    def __init__(
        self,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            timeout: Per-request timeout in seconds (uses settings if not provided)
            headers: Header profile (uses the browser-like default if not provided)
        """
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.headers = headers or default_headers()

    async def fetch_text(self, url: str, params: dict[str, Any] | None = None) -> str:
        """
        GET a URL and return the body as text.

        Args:
            url: Absolute URL to fetch
            params: Optional query parameters

        Returns:
            Response body decoded as text

        Raises:
            TransportFailed: connection error, timeout or non-2xx status
        """
        response = await self._get(url, params)
        return response.text

    async def fetch_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET a URL and parse the body as JSON.

        Raises:
            TransportFailed: connection error, timeout or non-2xx status
            DecodeFailed: body is not valid JSON
        """
        response = await self._get(url, params)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Failed to decode JSON from {url}: {e}")
            raise DecodeFailed(f"invalid JSON from {url}: {e}") from e

    async def _get(self, url: str, params: dict[str, Any] | None) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers=self.headers) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP {e.response.status_code} from {url}")
            raise TransportFailed(f"HTTP {e.response.status_code} from {url}") from e

        except httpx.TimeoutException as e:
            logger.error(f"Timed out fetching {url}")
            raise TransportFailed(f"timed out fetching {url}") from e

        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransportFailed(f"request to {url} failed: {e}") from e

        except httpx.InvalidURL as e:
            logger.error(f"Invalid URL {url!r}: {e}")
            raise TransportFailed(f"invalid URL {url!r}: {e}") from e
