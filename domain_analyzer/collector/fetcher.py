"""
Content Fetcher

Single GET of a domain's homepage with a descriptive User-Agent.
A failed fetch never raises: it resolves to the worst-case technical result.
"""

import asyncio
import logging
from typing import Optional

import httpx

from domain_analyzer.pipeline.models import TechnicalResult
from domain_analyzer.utils.config import DEFAULT_USER_AGENT

from .extractor import SignalExtractor, fetch_failure_result

logger = logging.getLogger(__name__)


class ContentFetcher:
    """
    Fetches a page and runs the signal extractor over it.

    Usage:
        async with ContentFetcher(timeout=15.0) as fetcher:
            result = await fetcher.collect("https://example.com")
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize fetcher.

        Args:
            user_agent: User-Agent header sent with every request
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used for testing)
        """
        self.user_agent = user_agent
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml",
            },
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            transport=transport,
        )
        self._closed = False

    async def collect(self, url: str) -> TechnicalResult:
        """
        Fetch `url` and extract technical signals.

        Returns:
            TechnicalResult; a single `fetch` error finding on any failure
        """
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as e:
            logger.warning(f"Fetch timed out for {url}: {e}")
            return fetch_failure_result(url, "request timed out")
        except httpx.HTTPError as e:
            logger.warning(f"Fetch failed for {url}: {e}")
            return fetch_failure_result(url, f"network error ({e.__class__.__name__})")

        if not response.is_success:
            logger.warning(f"Fetch for {url} returned HTTP {response.status_code}")
            return fetch_failure_result(
                url,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.info(f"Fetched {url} ({len(response.content)} bytes, HTTP {response.status_code})")
        # CPU-bound
        extractor = SignalExtractor(url)
        return await asyncio.to_thread(extractor.extract, response.text, response.status_code)

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
