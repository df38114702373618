"""
Score Aggregator

Combines the three stage scores into the weighted composite:

    technical   (0-40) = round(technical_100 * 0.40)
    performance (0-30) = round(performance_100 / 100 * 30)
    authority   (0-30) = round(authority_100 / 100 * 30)
    total       (0-100) = sum, clamped

Rounding is half-up so 0.5 always rounds away from zero. Pure; no I/O.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

from domain_analyzer.pipeline.models import Finding, ScoreBreakdown

Number = Union[int, float]

TECHNICAL_WEIGHT = 0.40


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clamp(value: Number, low: Number = 0, high: Number = 100) -> Number:
    return max(low, min(high, value))


def technical_score_from_findings(findings: Iterable[Finding]) -> int:
    """100-point technical score: 100 minus all deductions, floored at 0."""
    return max(0, 100 - sum(f.deduction for f in findings))


def aggregate_scores(
    technical_findings: Iterable[Finding],
    performance_score: Number,
    authority_score: Number,
) -> ScoreBreakdown:
    """
    Compute the composite score breakdown.

    Args:
        technical_findings: Findings from fetch + extraction (any list is accepted)
        performance_score: Provider performance score, 0-100
        authority_score: Domain authority, 0-100

    Returns:
        ScoreBreakdown with every component inside its ceiling
    """
    technical_100 = technical_score_from_findings(technical_findings)

    technical = round_half_up(technical_100 * TECHNICAL_WEIGHT)
    performance = round_half_up(
        clamp(performance_score) / 100 * ScoreBreakdown.PERFORMANCE_MAX
    )
    authority = round_half_up(
        clamp(authority_score) / 100 * ScoreBreakdown.AUTHORITY_MAX
    )

    return ScoreBreakdown(
        technical=technical,
        performance=performance,
        authority=authority,
        total=int(clamp(technical + performance + authority)),
    )
