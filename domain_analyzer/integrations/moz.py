"""
Moz Links API Client

Primary domain-authority source.

API: https://moz.com/api/docs/links/url-metrics
Auth: HTTP Basic with access id and secret key.
"""

import base64
import logging
from typing import Any, Dict, List, Optional

import httpx

from domain_analyzer.pipeline.errors import ProviderError

from .authority import AuthorityProvider

logger = logging.getLogger(__name__)


class MozAuthorityProvider(AuthorityProvider):
    """
    Domain Authority from Moz `url_metrics`.

    Usage:
        provider = MozAuthorityProvider(access_id="...", secret_key="...")
        da = await provider.fetch_authority("example.com")
        await provider.close()
    """

    name = "moz"
    BASE_URL = "https://lsapi.seomoz.com/v2"

    def __init__(
        self,
        access_id: Optional[str],
        secret_key: Optional[str],
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_id = access_id
        self.secret_key = secret_key

        headers = {"Content-Type": "application/json"}
        if access_id and secret_key:
            token = base64.b64encode(f"{access_id}:{secret_key}".encode()).decode()
            headers["Authorization"] = f"Basic {token}"

        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    @property
    def is_configured(self) -> bool:
        return bool(self.access_id and self.secret_key)

    async def url_metrics(self, targets: List[str]) -> Dict[str, Any]:
        """Raw `url_metrics` call."""
        if self._closed:
            raise ProviderError("Client is closed", provider=self.name)

        try:
            response = await self._client.post("/url_metrics", json={"targets": targets})
        except httpx.TimeoutException:
            raise ProviderError("request timed out", provider=self.name)
        except httpx.HTTPError as e:
            raise ProviderError(f"HTTP error: {e}", provider=self.name)

        if response.status_code != 200:
            raise ProviderError(
                f"API request failed: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise ProviderError("malformed response body", provider=self.name)

    async def fetch_authority(self, domain: str) -> int:
        data = await self.url_metrics([domain])

        results = data.get("results") if isinstance(data, dict) else None
        if not results or not isinstance(results[0], dict):
            raise ProviderError("no results in response", provider=self.name, response=data)

        authority = results[0].get("domain_authority")
        if not isinstance(authority, (int, float)):
            raise ProviderError("response missing domain_authority", provider=self.name, response=data)

        return int(round(authority))

    async def close(self):
        if not self._closed:
            await self._client.aclose()
            self._closed = True
