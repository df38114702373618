"""
Tests for report generation via the Claude client.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from domain_analyzer.analyzer.client import ClaudeClient
from domain_analyzer.pipeline.models import Finding, ScoreBreakdown, Severity
from domain_analyzer.reporter.generator import ReportGenerator, build_prompt, format_findings

SCORES = ScoreBreakdown(technical=34, performance=15, authority=9, total=58)
SIGNALS = {"domain": "example.com", "title_length": 10}
FINDINGS = [
    Finding("title_tag", Severity.WARNING, "Title tag is too short", "https://example.com", 5),
    Finding("headings", Severity.GOOD, "Single H1 tag found", "https://example.com"),
    Finding("meta_description", Severity.ERROR, "Missing meta description", "https://example.com", 10),
]


class TestPrompt:

    def test_prompt_contents(self):
        prompt = build_prompt("example.com", SCORES, SIGNALS, FINDINGS)

        assert "example.com" in prompt
        assert "Overall: 58/100" in prompt
        assert "Technical SEO: 34/40" in prompt
        assert '"title_length": 10' in prompt
        assert "Missing meta description" in prompt

    def test_errors_listed_first(self):
        lines = format_findings(FINDINGS).splitlines()

        assert lines[0].startswith("- [ERROR]")
        assert lines[1].startswith("- [WARNING]")
        assert lines[2].startswith("- [GOOD]")

    def test_no_findings(self):
        assert format_findings([]) == "- (none)"


class TestReportGenerator:

    @pytest.mark.asyncio
    async def test_returns_report(self, mock_claude_client):
        generator = ReportGenerator(mock_claude_client, timeout=5)

        report = await generator.generate("example.com", SCORES, SIGNALS, FINDINGS)

        assert report == "# Report\n\nAll good."
        mock_claude_client.analyze.assert_awaited_once()
        prompt = mock_claude_client.analyze.await_args.args[0]
        assert "example.com" in prompt
        mock_claude_client.get_usage_summary.assert_called_once()

    @pytest.mark.asyncio
    async def test_api_error_omits_report(self, mock_claude_client, response_factory):
        mock_claude_client.analyze = AsyncMock(
            return_value=response_factory(content="", success=False, error="overloaded")
        )

        report = await ReportGenerator(mock_claude_client).generate("example.com", SCORES, SIGNALS, FINDINGS)

        assert report is None

    @pytest.mark.asyncio
    async def test_empty_output_omits_report(self, mock_claude_client, response_factory):
        mock_claude_client.analyze = AsyncMock(return_value=response_factory(content="   "))

        report = await ReportGenerator(mock_claude_client).generate("example.com", SCORES, SIGNALS, FINDINGS)

        assert report is None

    @pytest.mark.asyncio
    async def test_timeout_omits_report(self, mock_claude_client, response_factory):
        async def slow(*args, **kwargs):
            await asyncio.sleep(1)
            return response_factory()

        mock_claude_client.analyze = slow
        generator = ReportGenerator(mock_claude_client, timeout=0.01)

        assert await generator.generate("example.com", SCORES, SIGNALS, FINDINGS) is None


class TestClaudeClient:

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            ClaudeClient(api_key="")

    @pytest.mark.asyncio
    async def test_analyze_tracks_usage(self):
        client = ClaudeClient(api_key="test-key", model="claude-test", max_tokens=500)
        message = MagicMock()
        message.content = [MagicMock(text="# Report")]
        message.usage = MagicMock(input_tokens=1200, output_tokens=300)
        message.stop_reason = "end_turn"

        with patch.object(
            client.async_client.messages, "create", AsyncMock(return_value=message)
        ) as create:
            response = await client.analyze("prompt", system="system")

        assert response.success
        assert response.content == "# Report"
        assert client.get_usage_summary()["total_tokens"] == 1500
        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 500
        assert kwargs["system"] == "system"

    @pytest.mark.asyncio
    async def test_api_error_returned(self):
        client = ClaudeClient(api_key="test-key")
        error = anthropic.APIConnectionError(
            request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        )

        with patch.object(client.async_client.messages, "create", AsyncMock(side_effect=error)):
            response = await client.analyze("prompt")

        assert response.success is False
        assert response.stop_reason == "error"
