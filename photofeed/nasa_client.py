"""NASA image API client with modern async patterns."""

import logging
import re
from typing import Any

import httpx

from photofeed.exceptions import (
    EmptyResponseError,
    InvalidRequestError,
    TransportFailureError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://images-api.nasa.gov"

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


class NasaImagesClient:
    """
    Async client for the NASA image and video library search API.

    One instance is created at application start and shared; it owns a single
    ``httpx.AsyncClient`` unless one is passed in.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        if http_client is None:
            client_kwargs: dict[str, Any] = {
                "headers": self._headers(),
                "follow_redirects": True,
                "transport": transport,
            }
            # Without an explicit timeout httpx keeps its own default.
            if timeout is not None:
                client_kwargs["timeout"] = timeout
            http_client = httpx.AsyncClient(**client_kwargs)
        self._http = http_client

    @staticmethod
    def _headers() -> dict[str, str]:
        """Get request headers."""
        return {
            "Accept": "application/json",
            "User-Agent": "PhotoFeed/1.0",
        }

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "NasaImagesClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def build_search_url(self, q: str, *, media_type: str, page_size: int) -> httpx.URL:
        """
        Build the search URL for one query.

        Raises:
            InvalidRequestError: If the query or base URL cannot form a valid request
        """
        if q is None or not q.strip():
            raise InvalidRequestError("Search term must not be empty")
        if _CONTROL_CHARS_RE.search(q):
            raise InvalidRequestError(f"Search term contains control characters: {q!r}")

        try:
            url = httpx.URL(f"{self.base_url}/search")
        except httpx.InvalidURL as e:
            raise InvalidRequestError(f"Invalid base URL: {self.base_url!r}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidRequestError(f"Base URL must be an absolute http(s) URL: {self.base_url!r}")

        return url.copy_merge_params({"q": q, "media_type": media_type, "page_size": page_size})

    async def search(self, q: str, *, media_type: str, page_size: int) -> bytes:
        """
        Search the image library and return the raw response body.

        Args:
            q: Query string
            media_type: Media type filter
            page_size: Number of results per page

        Returns:
            Response body bytes

        Raises:
            InvalidRequestError: Before any network call, on an unusable request
            TransportFailureError: On network errors and non-2xx statuses
            EmptyResponseError: When the body is missing
        """
        url = self.build_search_url(q, media_type=media_type, page_size=page_size)

        logger.info(f"NASA API request: {url}")
        response = await self._send(url)
        logger.debug(f"NASA API response: {response.status_code} ({len(response.content)} bytes)")

        if not response.content:
            raise EmptyResponseError(f"NASA API returned an empty body for q={q!r}")
        return response.content

    async def get_bytes(self, url: str) -> httpx.Response:
        """Fetch a media URL with the shared client; redirects are not followed."""
        return await self._send(url, follow_redirects=False)

    async def _send(self, url: httpx.URL | str, follow_redirects: bool = True) -> httpx.Response:
        try:
            response = await self._http.get(url, follow_redirects=follow_redirects)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"NASA API error {status_code}: URL={url}")
            raise TransportFailureError(
                f"API returned {status_code}", cause=e, status_code=status_code
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Network error connecting to NASA API: {e}")
            raise TransportFailureError(f"Network error connecting to NASA API: {e}", cause=e) from e
