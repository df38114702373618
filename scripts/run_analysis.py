#!/usr/bin/env python3
"""
Run a domain analysis from the command line.

Usage:
    python scripts/run_analysis.py example.com --requester-id cli
    python scripts/run_analysis.py https://www.example.com --requester-id cli --json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from domain_analyzer.database import AnalysisRepository, init_db
from domain_analyzer.pipeline.config import PipelineConfig
from domain_analyzer.pipeline.orchestrator import AnalysisPipeline
from domain_analyzer.pipeline.response import PipelineOutcome


def setup_logging(verbose: bool = False):
    """Configure logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def print_summary(outcome: PipelineOutcome):
    if not outcome.success:
        print(f"\nAnalysis failed: {outcome.error}")
        return

    analysis = outcome.analysis
    scores = analysis["scores"]

    print(f"\n{'='*60}")
    print(f"DOMAIN ANALYSIS: {analysis['domain']}")
    print(f"{'='*60}")
    print(f"  Total:       {scores['total']:3d}/100")
    print(f"  Technical:   {scores['technical']:3d}/40")
    print(f"  Performance: {scores['performance']:3d}/30")
    print(f"  Authority:   {scores['authority']:3d}/30")
    print(f"  Cache key:   {analysis['cache_key']}")

    print(f"\nFindings:")
    for finding in analysis["findings"]:
        print(f"  [{finding['severity']:7s}] {finding['kind']:16s} {finding['message']}")

    if analysis["report"]:
        reused = " (reused)" if analysis["report_reused"] else ""
        print(f"\n{'='*60}")
        print(f"REPORT{reused}")
        print(f"{'='*60}")
        print(analysis["report"])


async def run(domain: str, requester_id: str) -> PipelineOutcome:
    init_db()
    config = PipelineConfig.from_settings()
    async with AnalysisPipeline(config, AnalysisRepository()) as pipeline:
        return await pipeline.run(domain, requester_id)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Analyze a web domain")
    parser.add_argument("domain", help="Domain to analyze (e.g., example.com)")
    parser.add_argument(
        "--requester-id",
        required=True,
        help="Id recorded as the requester of this analysis",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the response envelope as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    args = parser.parse_args()

    load_dotenv()
    setup_logging(args.verbose)

    outcome = asyncio.run(run(args.domain, args.requester_id))

    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2, default=str))
    else:
        print_summary(outcome)

    sys.exit(0 if outcome.success else 1)


if __name__ == "__main__":
    main()
