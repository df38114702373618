"""
Collector

Homepage fetching and on-page signal extraction.
"""

from .extractor import (
    ABSENT_PAGE_DEDUCTION,
    SignalExtractor,
    empty_raw_signals,
    fetch_failure_result,
)
from .fetcher import ContentFetcher

__all__ = [
    "ABSENT_PAGE_DEDUCTION",
    "SignalExtractor",
    "empty_raw_signals",
    "fetch_failure_result",
    "ContentFetcher",
]
