"""
Tests for the content fetcher.
"""

import threading
from unittest.mock import patch

import httpx
import pytest

from domain_analyzer.collector.extractor import SignalExtractor
from domain_analyzer.collector.fetcher import ContentFetcher
from domain_analyzer.pipeline.models import Severity
from domain_analyzer.utils.config import DEFAULT_USER_AGENT

URL = "https://example.com"


def html_transport(html: str, status_code: int = 200, calls: list = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, text=html, headers={"Content-Type": "text/html"})
    return httpx.MockTransport(handler)


class TestContentFetcher:

    @pytest.mark.asyncio
    async def test_fetch_and_extract(self, good_html):
        calls = []
        async with ContentFetcher(transport=html_transport(good_html, calls=calls)) as fetcher:
            result = await fetcher.collect(URL)

        assert result.fetched is True
        assert result.score == 100
        assert result.raw_signals["status_code"] == 200
        assert calls[0].headers["User-Agent"] == DEFAULT_USER_AGENT

    @pytest.mark.asyncio
    async def test_parsing_runs_in_worker_thread(self, good_html):
        threads = []
        original = SignalExtractor.extract

        def recording_extract(extractor, html, status_code=None):
            threads.append(threading.get_ident())
            return original(extractor, html, status_code)

        with patch.object(SignalExtractor, "extract", recording_extract):
            async with ContentFetcher(transport=html_transport(good_html)) as fetcher:
                result = await fetcher.collect(URL)

        assert result.score == 100
        assert len(threads) == 1
        assert threads[0] != threading.get_ident()

    @pytest.mark.asyncio
    async def test_custom_user_agent(self, good_html):
        calls = []
        transport = html_transport(good_html, calls=calls)
        async with ContentFetcher(user_agent="TestAgent/2.0", transport=transport) as fetcher:
            await fetcher.collect(URL)

        assert calls[0].headers["User-Agent"] == "TestAgent/2.0"

    @pytest.mark.asyncio
    async def test_follows_redirects(self, good_html):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "example.com":
                return httpx.Response(301, headers={"Location": "https://www.example.com/"})
            return httpx.Response(200, text=good_html)

        async with ContentFetcher(transport=httpx.MockTransport(handler)) as fetcher:
            result = await fetcher.collect(URL)

        assert result.fetched is True

    @pytest.mark.asyncio
    async def test_non_2xx(self, good_html):
        async with ContentFetcher(transport=html_transport(good_html, status_code=404)) as fetcher:
            result = await fetcher.collect(URL)

        assert result.fetched is False
        assert len(result.findings) == 1
        assert result.findings[0].kind == "fetch"
        assert result.findings[0].severity == Severity.ERROR
        assert "HTTP 404" in result.findings[0].message
        assert result.raw_signals["status_code"] == 404

    @pytest.mark.asyncio
    async def test_network_error(self, failing_transport):
        async with ContentFetcher(transport=failing_transport) as fetcher:
            result = await fetcher.collect(URL)

        assert result.fetched is False
        assert result.findings[0].kind == "fetch"
        assert "network error" in result.findings[0].message

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        async with ContentFetcher(transport=httpx.MockTransport(handler)) as fetcher:
            result = await fetcher.collect(URL)

        assert "timed out" in result.findings[0].message
        assert result.score == 50
