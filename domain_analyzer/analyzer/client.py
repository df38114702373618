"""
Claude API Client

Thin async wrapper around the Anthropic SDK with token and cost tracking.
Used by the report generator; API errors are returned, not raised.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import anthropic

logger = logging.getLogger(__name__)


@dataclass
class TokenUsage:
    """Track token usage for cost calculation."""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def estimated_cost(self) -> float:
        """Estimate cost based on Claude Sonnet pricing ($3/1M in, $15/1M out)."""
        input_cost = (self.input_tokens / 1_000_000) * 3.0
        output_cost = (self.output_tokens / 1_000_000) * 15.0
        return input_cost + output_cost


@dataclass
class AnalysisResponse:
    """Response from a Claude call."""
    content: str
    usage: TokenUsage
    model: str
    stop_reason: str
    success: bool = True
    error: Optional[str] = None


class ClaudeClient:
    """
    Async client for the Claude Messages API.

    Usage:
        client = ClaudeClient(api_key="...", model="claude-sonnet-4-20250514")
        response = await client.analyze("Write a report", system="You are ...")
        if response.success:
            print(response.content)
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 2000
    TEMPERATURE = 0.3

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        max_tokens: int = MAX_TOKENS,
        temperature: float = TEMPERATURE,
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key
            model: Model to use (defaults to Sonnet 4)
            max_tokens: Maximum output tokens per call
            temperature: Sampling temperature
        """
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY not provided")

        self.model = model or self.DEFAULT_MODEL
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.async_client = anthropic.AsyncAnthropic(api_key=api_key)

        # Cumulative usage
        self.total_usage = TokenUsage()
        self.call_count = 0

    async def analyze(self, prompt: str, system: Optional[str] = None) -> AnalysisResponse:
        """
        Send a prompt to Claude.

        Args:
            prompt: User prompt
            system: System prompt

        Returns:
            AnalysisResponse; `success` is False on API error
        """
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        try:
            response = await self.async_client.messages.create(**kwargs)
        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            return AnalysisResponse(
                content="",
                usage=TokenUsage(),
                model=self.model,
                stop_reason="error",
                success=False,
                error=str(e),
            )

        content = "".join(
            block.text for block in response.content if hasattr(block, "text")
        )

        usage = TokenUsage(
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        self.total_usage.input_tokens += usage.input_tokens
        self.total_usage.output_tokens += usage.output_tokens
        self.call_count += 1

        logger.info(
            f"Claude call: {usage.input_tokens} in, {usage.output_tokens} out, "
            f"${usage.estimated_cost:.4f}"
        )

        return AnalysisResponse(
            content=content,
            usage=usage,
            model=self.model,
            stop_reason=response.stop_reason,
        )

    def get_usage_summary(self) -> Dict[str, Any]:
        """Summary of all API usage by this client."""
        return {
            "total_calls": self.call_count,
            "input_tokens": self.total_usage.input_tokens,
            "output_tokens": self.total_usage.output_tokens,
            "total_tokens": self.total_usage.total_tokens,
            "estimated_cost": self.total_usage.estimated_cost,
        }

    async def close(self):
        await self.async_client.close()
