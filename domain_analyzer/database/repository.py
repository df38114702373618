"""
Repository Layer - Clean Interface for Analysis Storage

Stores and retrieves AnalysisRecord values. Handles all SQLAlchemy
complexity internally and converts driver errors into PersistenceError.
"""

import logging
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload, sessionmaker

from domain_analyzer.pipeline.errors import PersistenceError
from domain_analyzer.pipeline.models import (
    AnalysisRecord,
    AnalysisStatus,
    Finding,
    ScoreBreakdown,
    Severity,
)

from .models import Analysis, FindingRow
from .session import get_db_context

logger = logging.getLogger(__name__)


class AnalysisRepository:
    """
    Storage for analyses and their findings.

    Usage:
        repo = AnalysisRepository(get_session_factory())
        stored = repo.save_analysis(record)
        repo.save_findings(stored.id, record.findings)
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    # =========================================================================
    # WRITES
    # =========================================================================

    def save_analysis(self, record: AnalysisRecord) -> AnalysisRecord:
        """
        Insert an analysis row.

        Returns:
            The stored record (findings not included)

        Raises:
            PersistenceError: If the row could not be written
        """
        try:
            with get_db_context(self.session_factory) as db:
                row = Analysis(
                    id=record.id,
                    requester_id=record.requester_id,
                    domain=record.domain,
                    technical_score=record.scores.technical,
                    performance_score=record.scores.performance,
                    authority_score=record.scores.authority,
                    total_score=record.scores.total,
                    raw_signals=record.raw_signals,
                    report=record.report,
                    cache_key=record.cache_key,
                    status=record.status.value,
                    generated_at=record.generated_at,
                    created_at=record.generated_at,
                )
                db.add(row)
                db.flush()
                stored = _analysis_to_record(row, include_findings=False)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store analysis {record.id} for {record.domain}: {e}")
            raise PersistenceError(f"Failed to store analysis: {e}") from e

        logger.info(f"Stored analysis {stored.id} for {stored.domain} (total={stored.scores.total})")
        return stored

    def save_findings(self, analysis_id: UUID, findings: Sequence[Finding]) -> int:
        """
        Bulk insert findings for an analysis, preserving order.

        Returns:
            Number of rows written

        Raises:
            PersistenceError: If the rows could not be written
        """
        if not findings:
            return 0

        try:
            with get_db_context(self.session_factory) as db:
                db.add_all([
                    FindingRow(
                        analysis_id=analysis_id,
                        position=position,
                        kind=f.kind,
                        severity=f.severity.value,
                        message=f.message,
                        source_url=f.source_url,
                        deduction=f.deduction,
                    )
                    for position, f in enumerate(findings)
                ])
        except SQLAlchemyError as e:
            logger.error(f"Failed to store findings for analysis {analysis_id}: {e}")
            raise PersistenceError(f"Failed to store findings: {e}") from e

        logger.info(f"Stored {len(findings)} findings for analysis {analysis_id}")
        return len(findings)

    # =========================================================================
    # READS
    # =========================================================================

    def find_report_by_cache_key(self, cache_key: str) -> Optional[AnalysisRecord]:
        """Most recent analysis with this cache key that has a report."""
        try:
            with get_db_context(self.session_factory) as db:
                row = db.execute(
                    select(Analysis)
                    .where(Analysis.cache_key == cache_key)
                    .where(Analysis.report.is_not(None))
                    .order_by(Analysis.created_at.desc())
                    .limit(1)
                ).scalar_one_or_none()
                return _analysis_to_record(row, include_findings=False) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Cache lookup failed: {e}") from e

    def get_analysis(self, analysis_id: UUID) -> Optional[AnalysisRecord]:
        """Fetch an analysis with its findings, or None."""
        try:
            with get_db_context(self.session_factory) as db:
                row = db.execute(
                    select(Analysis)
                    .options(selectinload(Analysis.findings))
                    .where(Analysis.id == analysis_id)
                ).scalar_one_or_none()
                return _analysis_to_record(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load analysis: {e}") from e


def _analysis_to_record(row: Analysis, include_findings: bool = True) -> AnalysisRecord:
    findings: List[Finding] = []
    if include_findings:
        findings = [_finding_from_row(f) for f in row.findings]

    return AnalysisRecord(
        id=row.id,
        requester_id=row.requester_id,
        domain=row.domain,
        scores=ScoreBreakdown(
            technical=row.technical_score,
            performance=row.performance_score,
            authority=row.authority_score,
            total=row.total_score,
        ),
        raw_signals=row.raw_signals or {},
        cache_key=row.cache_key,
        generated_at=row.generated_at,
        status=AnalysisStatus(row.status),
        report=row.report,
        findings=findings,
    )


def _finding_from_row(row: FindingRow) -> Finding:
    return Finding(
        kind=row.kind,
        severity=Severity(row.severity),
        message=row.message,
        source_url=row.source_url,
        deduction=row.deduction,
    )
