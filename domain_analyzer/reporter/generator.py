"""
Report Generator

Turns a scored analysis into a readable markdown report through Claude.
A report is optional output: on timeout, API error or empty text the
generator returns None and the analysis is still stored.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from domain_analyzer.analyzer.client import ClaudeClient
from domain_analyzer.pipeline.errors import ReportGenerationError
from domain_analyzer.pipeline.models import Finding, ScoreBreakdown, Severity

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an experienced technical SEO consultant. You write concise, "
    "actionable reports for site owners. Only use the data you are given."
)

REPORT_PROMPT = """Write an SEO report for {domain}.

## Scores
- Overall: {total}/100
- Technical SEO: {technical}/40
- Performance: {performance}/30
- Domain authority: {authority}/30

## Raw signals
```json
{signals}
```

## Findings
{findings}

Structure the report in markdown with these sections:
1. Executive summary (2-3 sentences)
2. Critical issues (errors, most impactful first)
3. Improvements (warnings)
4. Strengths
5. Prioritized action plan (numbered, at most 7 items)

Mention when a value is estimated or a measurement was unavailable."""

_SEVERITY_ORDER = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2, Severity.GOOD: 3}


def format_findings(findings: Iterable[Finding]) -> str:
    """One bullet per finding, errors first, discovery order within a severity."""
    ordered = sorted(findings, key=lambda f: _SEVERITY_ORDER.get(f.severity, 9))
    lines = [f"- [{f.severity.value.upper()}] {f.kind}: {f.message}" for f in ordered]
    return "\n".join(lines) or "- (none)"


def build_prompt(
    domain: str,
    scores: ScoreBreakdown,
    raw_signals: Dict[str, Any],
    findings: Iterable[Finding],
) -> str:
    return REPORT_PROMPT.format(
        domain=domain,
        total=scores.total,
        technical=scores.technical,
        performance=scores.performance,
        authority=scores.authority,
        signals=json.dumps(raw_signals, indent=2, sort_keys=True, default=str),
        findings=format_findings(findings),
    )


class ReportGenerator:
    """
    Generates a report with a hard time limit.

    Usage:
        generator = ReportGenerator(ClaudeClient(api_key="..."), timeout=20.0)
        report = await generator.generate(domain, scores, raw_signals, findings)
    """

    def __init__(self, client: ClaudeClient, timeout: float = 20.0):
        self.client = client
        self.timeout = timeout

    async def generate(
        self,
        domain: str,
        scores: ScoreBreakdown,
        raw_signals: Dict[str, Any],
        findings: List[Finding],
    ) -> Optional[str]:
        """Generate a report, or None if generation failed."""
        try:
            return await self._generate(domain, scores, raw_signals, findings)
        except ReportGenerationError as e:
            logger.warning(f"Report omitted for {domain}: {e}")
            return None

    async def _generate(
        self,
        domain: str,
        scores: ScoreBreakdown,
        raw_signals: Dict[str, Any],
        findings: List[Finding],
    ) -> str:
        prompt = build_prompt(domain, scores, raw_signals, findings)

        try:
            response = await asyncio.wait_for(
                self.client.analyze(prompt, system=SYSTEM_PROMPT),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise ReportGenerationError(f"generation exceeded {self.timeout:.0f}s")

        if not response.success:
            raise ReportGenerationError(response.error or "generation failed")

        report = (response.content or "").strip()
        if not report:
            raise ReportGenerationError("empty response")

        usage = self.client.get_usage_summary()
        logger.info(
            f"Generated report for {domain} ({len(report)} chars), "
            f"tokens={usage['total_tokens']}, cost=${usage['estimated_cost']:.4f}"
        )
        return report

    async def close(self):
        await self.client.close()
