"""
Analysis Orchestrator

Runs one analysis end to end:

    validate
      -> [technical | performance | authority]   (concurrent, independently bounded)
      -> aggregate
      -> cache key
      -> reuse or generate report
      -> persist
      -> respond

Only validation and persistence failures fail the request. Every other
failure degrades into findings.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from domain_analyzer.analyzer.client import ClaudeClient
from domain_analyzer.cache.keys import generate_cache_key
from domain_analyzer.collector.extractor import fetch_failure_result
from domain_analyzer.collector.fetcher import ContentFetcher
from domain_analyzer.database.repository import AnalysisRepository
from domain_analyzer.integrations.authority import (
    AuthorityChain,
    estimate_authority,
    estimated_result,
)
from domain_analyzer.integrations.config import (
    build_authority_chain,
    build_performance_client,
    log_provider_status,
)
from domain_analyzer.integrations.pagespeed import PageSpeedClient, failed_result
from domain_analyzer.reporter.generator import ReportGenerator
from domain_analyzer.scoring.aggregator import aggregate_scores

from .config import PipelineConfig
from .errors import PersistenceError, RequestValidationError
from .models import (
    AnalysisRecord,
    AuthorityResult,
    Finding,
    PerformanceResult,
    ScoreBreakdown,
    Severity,
    TechnicalResult,
    ValidatedRequest,
)
from .response import (
    INTERNAL,
    PERSISTENCE,
    VALIDATION,
    PipelineOutcome,
    build_response,
    error_response,
)
from .validation import validate_request

logger = logging.getLogger(__name__)


def _describe(error: BaseException) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return "stage timed out"
    return str(error) or error.__class__.__name__


class AnalysisPipeline:
    """
    Domain analysis pipeline.

    Collaborators are injected; anything not supplied is built from `config`.

    Usage:
        config = PipelineConfig.from_settings()
        async with AnalysisPipeline(config, AnalysisRepository()) as pipeline:
            outcome = await pipeline.run("example.com", requester_id="user-1")
    """

    def __init__(
        self,
        config: PipelineConfig,
        store: AnalysisRepository,
        fetcher: Optional[ContentFetcher] = None,
        performance: Optional[PageSpeedClient] = None,
        authority: Optional[AuthorityChain] = None,
        reporter: Optional[ReportGenerator] = None,
    ):
        self.config = config
        self.store = store

        self.fetcher = fetcher or ContentFetcher(
            user_agent=config.user_agent,
            timeout=config.fetch_timeout,
        )
        self.performance = performance or build_performance_client(config)
        self.authority = authority or build_authority_chain(config)

        if reporter is None and config.has_reports:
            reporter = ReportGenerator(
                ClaudeClient(
                    api_key=config.anthropic_api_key,
                    model=config.claude_model,
                    max_tokens=config.report_max_tokens,
                    temperature=config.report_temperature,
                ),
                timeout=config.report_timeout,
            )
        self.reporter = reporter

        log_provider_status(config)

    # =========================================================================
    # ENTRY POINT
    # =========================================================================

    async def run(self, domain: Optional[str], requester_id: Optional[str]) -> PipelineOutcome:
        """
        Analyze a domain.

        Args:
            domain: Domain or URL as supplied by the caller
            requester_id: Id of the requesting user

        Returns:
            PipelineOutcome (never raises)
        """
        try:
            request = validate_request(domain, requester_id)
        except RequestValidationError as e:
            logger.info(f"Rejected analysis request: {e}")
            return error_response(str(e), VALIDATION)

        logger.info(f"Starting analysis for {request.domain} (requester={request.requester_id})")

        try:
            return await self._analyze(request)
        except PersistenceError as e:
            logger.error(f"Analysis for {request.domain} failed to persist: {e}")
            return error_response(str(e), PERSISTENCE)
        except Exception as e:
            logger.exception(f"Analysis for {request.domain} failed unexpectedly")
            return error_response(str(e) or e.__class__.__name__, INTERNAL)

    # =========================================================================
    # STAGES
    # =========================================================================

    async def _analyze(self, request: ValidatedRequest) -> PipelineOutcome:
        technical, performance, authority = await self._collect(request)

        findings: List[Finding] = [
            *technical.findings,
            *performance.findings,
            *authority.findings,
        ]
        scores = aggregate_scores(technical.findings, performance.score, authority.authority)
        raw_signals = self._raw_signals(request, technical, performance, authority)
        cache_key = generate_cache_key(raw_signals, scores)

        logger.info(
            f"Scored {request.domain}: total={scores.total} "
            f"(technical={scores.technical}, performance={scores.performance}, "
            f"authority={scores.authority}) key={cache_key}"
        )

        report, reused = await self._resolve_report(request, scores, raw_signals, findings, cache_key)

        record = AnalysisRecord(
            id=uuid4(),
            requester_id=request.requester_id,
            domain=request.domain,
            scores=scores,
            raw_signals=raw_signals,
            cache_key=cache_key,
            generated_at=datetime.utcnow(),
            report=report,
            findings=findings,
        )

        stored = await asyncio.to_thread(self.store.save_analysis, record)

        try:
            await asyncio.to_thread(self.store.save_findings, stored.id, findings)
        except PersistenceError as e:
            logger.error(f"Findings for analysis {stored.id} were not stored: {e}")

        return build_response(stored, findings, report_reused=reused)

    async def _collect(
        self, request: ValidatedRequest
    ) -> Tuple[TechnicalResult, PerformanceResult, AuthorityResult]:
        """Run the three independent stages concurrently and join them."""
        timeout = self.config.stage_timeout
        tasks = [
            asyncio.create_task(
                asyncio.wait_for(self.fetcher.collect(request.url), timeout),
                name=f"technical:{request.domain}",
            ),
            asyncio.create_task(
                asyncio.wait_for(self.performance.measure(request.url), timeout),
                name=f"performance:{request.domain}",
            ),
            asyncio.create_task(
                asyncio.wait_for(self.authority.resolve(request.domain, request.url), timeout),
                name=f"authority:{request.domain}",
            ),
        ]
        technical, performance, authority = await asyncio.gather(*tasks, return_exceptions=True)

        if isinstance(technical, BaseException):
            logger.warning(f"Technical stage failed for {request.domain}: {_describe(technical)}")
            technical = fetch_failure_result(request.url, _describe(technical))

        if isinstance(performance, BaseException):
            logger.warning(f"Performance stage failed for {request.domain}: {_describe(performance)}")
            performance = failed_result(request.url, _describe(performance))

        if isinstance(authority, BaseException):
            logger.warning(f"Authority stage failed for {request.domain}: {_describe(authority)}")
            authority = self._authority_fallback(request, authority)

        if not technical.fetched:
            logger.warning(f"Homepage for {request.domain} not fetched; technical rules scored as absent")

        return technical, performance, authority

    def _authority_fallback(self, request: ValidatedRequest, error: BaseException) -> AuthorityResult:
        if self.config.allow_estimated_authority:
            return estimated_result(request.domain, request.url, estimate_authority(request.domain))

        return AuthorityResult(
            authority=0,
            findings=(Finding(
                kind="authority",
                severity=Severity.ERROR,
                message=f"Domain authority could not be determined: {_describe(error)}",
                source_url=request.url,
            ),),
        )

    def _raw_signals(
        self,
        request: ValidatedRequest,
        technical: TechnicalResult,
        performance: PerformanceResult,
        authority: AuthorityResult,
    ) -> Dict[str, Any]:
        signals = dict(technical.raw_signals)
        signals["domain"] = request.domain
        signals["performance_status"] = performance.status
        signals["performance_metrics"] = dict(performance.metrics)
        signals["authority_source"] = authority.source
        signals["authority_estimated"] = authority.estimated
        signals["authority_attempts"] = list(authority.attempts)
        return signals

    async def _resolve_report(
        self,
        request: ValidatedRequest,
        scores: ScoreBreakdown,
        raw_signals: Dict[str, Any],
        findings: List[Finding],
        cache_key: str,
    ) -> Tuple[Optional[str], bool]:
        """Reuse a stored report for the same cache key, else generate one."""
        if self.reporter is None or not cache_key:
            return None, False

        try:
            cached = await asyncio.to_thread(self.store.find_report_by_cache_key, cache_key)
        except PersistenceError as e:
            logger.warning(f"Report cache lookup failed for {cache_key}: {e}")
            cached = None

        if cached is not None:
            logger.info(f"Reusing report from analysis {cached.id} (key={cache_key})")
            return cached.report, True

        report = await self.reporter.generate(request.domain, scores, raw_signals, findings)
        return report, False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def close(self):
        await self.fetcher.close()
        await self.performance.close()
        await self.authority.close()
        if self.reporter is not None:
            await self.reporter.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
