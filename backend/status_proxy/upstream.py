"""
Upstream Image Fetcher

Fetches status-code images from the upstream image service
(https://http.cat by default) on a cache miss.
"""

import logging
from typing import Optional

import httpx

from .config import DEFAULT_UPSTREAM_URL
from .exceptions import UpstreamError

logger = logging.getLogger(__name__)


class UpstreamFetcher:
    """
    Single-GET client for <base_url>/<key>.

    The response body is taken as binary image data whatever its declared
    content type. No retries; the client's default timeout applies.

    Usage:
        fetcher = UpstreamFetcher("https://http.cat")
        data = await fetcher.fetch("404")
        await fetcher.close()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_UPSTREAM_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")

        # An injected client stays owned by the caller
        self._owns_client = client is None
        self.http_client = client or httpx.AsyncClient(
            follow_redirects=True,
            headers={"Accept": "image/*,*/*;q=0.8"},
        )

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    async def fetch(self, key: str) -> bytes:
        """
        Download the image for a key.

        Raises:
            UpstreamError: network failure, non-success status or empty body.
        """
        url = self.url_for(key)
        logger.info(f"[Upstream] Fetching: {url}")

        try:
            response = await self.http_client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"[Upstream] HTTP error {status}: {url}")
            raise UpstreamError(key, f"upstream returned {status}", status, e)
        except httpx.HTTPError as e:
            logger.warning(f"[Upstream] Fetch error for {url}: {e!r}")
            raise UpstreamError(key, "request failed", original_error=e)

        image_data = response.content
        if not image_data:
            logger.warning(f"[Upstream] Empty body: {url}")
            raise UpstreamError(key, "empty body", response.status_code)

        logger.info(f"[Upstream] Fetched: {url} ({len(image_data)} bytes)")
        return image_data

    async def close(self) -> None:
        """Close HTTP client."""
        if self._owns_client:
            await self.http_client.aclose()
