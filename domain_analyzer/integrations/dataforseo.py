"""
DataForSEO API Client

Secondary domain-authority source (Backlinks Summary API).

Async HTTP client with:
- Automatic retry with exponential backoff
- API-level and task-level status checking
- Domain rank on the 0-100 scale (rank_scale="one_hundred")
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from domain_analyzer.pipeline.errors import ProviderError

from .authority import AuthorityProvider

logger = logging.getLogger(__name__)

OK_STATUS = 20000


def safe_get_result(response: Any) -> Dict[str, Any]:
    """
    First result object of the first task, or {} when absent or malformed.
    """
    if not isinstance(response, dict):
        return {}

    tasks = response.get("tasks")
    if not tasks or not isinstance(tasks, list) or not isinstance(tasks[0], dict):
        return {}

    result = tasks[0].get("result")
    if not result or not isinstance(result, list):
        return {}

    first_result = result[0]
    return first_result if isinstance(first_result, dict) else {}


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 2
    initial_delay: float = 1.0
    max_delay: float = 10.0
    exponential_base: float = 2.0


class DataForSEOError(ProviderError):
    """DataForSEO API error."""

    def __init__(self, message: str, status_code: int = None, response: dict = None):
        super().__init__(message, provider="dataforseo", status_code=status_code, response=response)


class DataForSEOClient:
    """
    Async client for DataForSEO API.

    Usage:
        client = DataForSEOClient(login="your_login", password="your_password")
        summary = await client.get_backlink_summary("example.com")
        await client.close()
    """

    BASE_URL = "https://api.dataforseo.com/v3"

    def __init__(
        self,
        login: str,
        password: str,
        retry_config: Optional[RetryConfig] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize DataForSEO client.

        Args:
            login: DataForSEO login email
            password: DataForSEO API password
            retry_config: Retry configuration (optional)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used for testing)
        """
        self.login = login
        self.retry_config = retry_config or RetryConfig()

        auth_token = base64.b64encode(f"{login}:{password}".encode()).decode()

        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={
                "Authorization": f"Basic {auth_token}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    async def post(self, endpoint: str, data: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        POST a task list to `endpoint` with retry.

        Raises:
            DataForSEOError: On API error after retries
        """
        if self._closed:
            raise DataForSEOError("Client is closed")

        return await self._request_with_retry(f"/{endpoint}", data)

    async def _make_request(self, url: str, data: List[Dict]) -> Dict[str, Any]:
        """Make a single HTTP request."""
        logger.debug(f"POST {url}")

        response = await self._client.post(url, json=data)

        if response.status_code != 200:
            raise DataForSEOError(
                f"API request failed: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            result = response.json()
        except ValueError:
            raise DataForSEOError("malformed response body")

        if not isinstance(result, dict):
            raise DataForSEOError("malformed response body")

        tasks = result.get("tasks") or []
        if not isinstance(tasks, list) or not all(isinstance(t, dict) for t in tasks):
            raise DataForSEOError("malformed response body", response=result)

        if result.get("status_code") != OK_STATUS:
            raise DataForSEOError(
                f"API error: {result.get('status_message', 'Unknown error')}",
                status_code=result.get("status_code"),
                response=result,
            )

        for task in tasks:
            if task.get("status_code") != OK_STATUS:
                raise DataForSEOError(
                    f"Task error: {task.get('status_message', 'Task error')}",
                    status_code=task.get("status_code"),
                    response=result,
                )

        return result

    async def _request_with_retry(self, url: str, data: List[Dict]) -> Dict[str, Any]:
        """Make request with automatic retry on failure."""
        last_exception = None
        delay = self.retry_config.initial_delay

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                return await self._make_request(url, data)

            except DataForSEOError as e:
                last_exception = e

                # Don't retry client errors (4xx except 429) or API-level rejections
                if e.status_code and e.status_code != 429 and (
                    400 <= e.status_code < 500 or e.status_code >= 10000
                ):
                    raise

            except httpx.TimeoutException as e:
                last_exception = DataForSEOError(f"Request timed out: {e}")

            except httpx.HTTPError as e:
                last_exception = DataForSEOError(f"HTTP error: {e}")

            if attempt < self.retry_config.max_retries:
                logger.warning(
                    f"DataForSEO request failed (attempt {attempt + 1}/"
                    f"{self.retry_config.max_retries + 1}): {last_exception}. "
                    f"Retrying in {delay}s..."
                )
                await asyncio.sleep(delay)
                delay = min(
                    delay * self.retry_config.exponential_base,
                    self.retry_config.max_delay,
                )

        raise last_exception

    async def get_backlink_summary(self, domain: str) -> Dict[str, Any]:
        """
        Backlink summary with domain rank on a 0-100 scale.

        Without rank_scale="one_hundred" the API returns rank on 0-1000.

        Returns:
            Dict with domain_rank, referring_domains, backlinks

        Raises:
            DataForSEOError: On API error or an empty result
        """
        result = await self.post(
            "backlinks/summary/live",
            [{
                "target": domain,
                "internal_list_limit": 0,
                "backlinks_status_type": "all",
                "rank_scale": "one_hundred",
            }],
        )

        item = safe_get_result(result)
        if not item:
            raise DataForSEOError(f"No backlink summary data for {domain}", response=result)

        rank = item.get("rank")
        if not isinstance(rank, (int, float)):
            raise DataForSEOError("response missing rank", response=result)

        return {
            "domain_rank": int(rank),
            "referring_domains": item.get("referring_domains", 0),
            "backlinks": item.get("backlinks", 0),
        }

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class DataForSEOAuthorityProvider(AuthorityProvider):
    """Authority provider backed by the DataForSEO backlink summary."""

    name = "dataforseo"

    def __init__(
        self,
        login: Optional[str],
        password: Optional[str],
        retry_config: Optional[RetryConfig] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.login = login
        self.password = password
        self._client: Optional[DataForSEOClient] = None
        if login and password:
            self._client = DataForSEOClient(
                login=login,
                password=password,
                retry_config=retry_config,
                timeout=timeout,
                transport=transport,
            )

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def fetch_authority(self, domain: str) -> int:
        if self._client is None:
            raise DataForSEOError("DataForSEO credentials not configured")

        summary = await self._client.get_backlink_summary(domain)
        return summary["domain_rank"]

    async def close(self):
        if self._client is not None:
            await self._client.close()
