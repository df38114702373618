"""
Google PageSpeed Insights Client

Measures homepage performance through the PageSpeed Insights v5 API.

API: https://developers.google.com/speed/docs/insights/v5/get-started

Outcomes:
- No API key: score 50, one warning finding (capability unavailable)
- Success: overall score plus one finding per Core Web Vitals audit
- Any failure: score 0, exactly one error finding; never retried
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from domain_analyzer.pipeline.errors import ProviderError
from domain_analyzer.pipeline.models import Finding, PerformanceResult, Severity
from domain_analyzer.scoring.aggregator import round_half_up

logger = logging.getLogger(__name__)

UNCONFIGURED_SCORE = 50

# Audit id -> display label
METRIC_AUDITS = {
    "first-contentful-paint": "First Contentful Paint",
    "largest-contentful-paint": "Largest Contentful Paint",
    "cumulative-layout-shift": "Cumulative Layout Shift",
    "total-blocking-time": "Total Blocking Time",
    "speed-index": "Speed Index",
}


def grade_overall(score: int) -> Severity:
    if score > 90:
        return Severity.GOOD
    if score > 50:
        return Severity.WARNING
    return Severity.ERROR


def grade_audit(audit_score: float) -> Severity:
    if audit_score > 0.9:
        return Severity.GOOD
    if audit_score > 0.5:
        return Severity.WARNING
    return Severity.ERROR


def unconfigured_result(url: str) -> PerformanceResult:
    finding = Finding(
        kind="performance",
        severity=Severity.WARNING,
        message="Performance analysis unavailable: PageSpeed API key not configured",
        source_url=url,
    )
    return PerformanceResult(score=UNCONFIGURED_SCORE, findings=(finding,), status="unconfigured")


def failed_result(url: str, reason: str) -> PerformanceResult:
    finding = Finding(
        kind="performance",
        severity=Severity.ERROR,
        message=f"Failed to analyze performance: {reason}",
        source_url=url,
    )
    return PerformanceResult(score=0, findings=(finding,), status="failed")


class PageSpeedClient:
    """
    Async client for the PageSpeed Insights API.

    Usage:
        async with PageSpeedClient(api_key="...") as client:
            result = await client.measure("https://example.com")
    """

    BASE_URL = "https://www.googleapis.com/pagespeedonline/v5"

    def __init__(
        self,
        api_key: Optional[str],
        strategy: str = "mobile",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize PageSpeed client.

        Args:
            api_key: Google API key; None disables measurement
            strategy: "mobile" or "desktop"
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used for testing)
        """
        self.api_key = api_key
        self.strategy = strategy
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def measure(self, url: str) -> PerformanceResult:
        """
        Measure performance for `url`.

        Never raises; failures resolve to a failed PerformanceResult.
        """
        if not self.is_configured:
            logger.warning("PageSpeed API key not configured, using neutral performance score")
            return unconfigured_result(url)

        try:
            payload = await self._run_pagespeed(url)
            return self._parse(url, payload)
        except ProviderError as e:
            logger.warning(f"PageSpeed measurement failed for {url}: {e}")
            return failed_result(url, str(e))

    async def _run_pagespeed(self, url: str) -> Dict[str, Any]:
        if self._closed:
            raise ProviderError("Client is closed", provider="pagespeed")

        params = {
            "url": url,
            "key": self.api_key,
            "category": "PERFORMANCE",
            "strategy": self.strategy,
        }

        try:
            response = await self._client.get("/runPagespeed", params=params)
        except httpx.TimeoutException:
            raise ProviderError("request timed out", provider="pagespeed")
        except httpx.HTTPError as e:
            raise ProviderError(f"HTTP error: {e}", provider="pagespeed")

        if response.status_code != 200:
            raise ProviderError(
                f"API request failed: {response.status_code}",
                provider="pagespeed",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise ProviderError("malformed response body", provider="pagespeed")

    def _parse(self, url: str, payload: Dict[str, Any]) -> PerformanceResult:
        lighthouse = payload.get("lighthouseResult") if isinstance(payload, dict) else None
        if not isinstance(lighthouse, dict):
            raise ProviderError("response missing lighthouseResult", provider="pagespeed")

        categories = lighthouse.get("categories")
        performance = categories.get("performance") if isinstance(categories, dict) else None
        if not isinstance(performance, dict):
            raise ProviderError("malformed response: missing performance category", provider="pagespeed")

        raw_score = performance.get("score")
        if not isinstance(raw_score, (int, float)):
            raise ProviderError("response missing performance score", provider="pagespeed")

        score = max(0, min(100, round_half_up(raw_score * 100)))
        findings: List[Finding] = [Finding(
            kind="performance",
            severity=grade_overall(score),
            message=f"Performance score: {score}/100",
            source_url=url,
        )]

        metrics: Dict[str, Any] = {}
        audits = lighthouse.get("audits") or {}
        if not isinstance(audits, dict):
            raise ProviderError("malformed response: audits is not an object", provider="pagespeed")

        for audit_id, label in METRIC_AUDITS.items():
            audit = audits.get(audit_id)
            if not isinstance(audit, dict) or not isinstance(audit.get("score"), (int, float)):
                continue

            display = audit.get("displayValue") or "n/a"
            metrics[audit_id] = {
                "score": audit["score"],
                "display_value": display,
                "numeric_value": audit.get("numericValue"),
            }
            findings.append(Finding(
                kind="performance",
                severity=grade_audit(audit["score"]),
                message=f"{label}: {display}",
                source_url=url,
            ))

        logger.info(f"PageSpeed score for {url}: {score}/100 ({self.strategy})")
        return PerformanceResult(
            score=score,
            findings=tuple(findings),
            status="measured",
            metrics=metrics,
        )

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
