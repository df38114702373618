"""
Content-addressed cache keys.

A key identifies an analysis by what was measured, not by when: two runs that
produced identical raw signals and scores share a key, which lets the pipeline
reuse an existing report instead of paying for a new one.
"""

import hashlib
import json
from typing import Any, Dict, Union

from domain_analyzer.pipeline.models import ScoreBreakdown

CACHE_KEY_LENGTH = 16


def canonical_json(payload: Any) -> str:
    """Serialize with sorted keys and compact separators."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def generate_cache_key(
    raw_signals: Dict[str, Any],
    scores: Union[ScoreBreakdown, Dict[str, int]],
) -> str:
    """
    Derive the cache key for an analysis.

    Args:
        raw_signals: Raw-signal map (including the normalized domain)
        scores: Score breakdown or its dict form

    Returns:
        First 16 hex characters of the SHA-256 digest
    """
    if isinstance(scores, ScoreBreakdown):
        scores = scores.to_dict()

    payload = canonical_json({"raw_signals": raw_signals, "scores": scores})
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:CACHE_KEY_LENGTH]
