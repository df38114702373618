"""Composite scoring."""

from .aggregator import (
    aggregate_scores,
    clamp,
    round_half_up,
    technical_score_from_findings,
)

__all__ = [
    "aggregate_scores",
    "clamp",
    "round_half_up",
    "technical_score_from_findings",
]
