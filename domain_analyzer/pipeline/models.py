"""
Pipeline data model.

Every value produced by a stage is immutable: stages run concurrently and hand
their results to the aggregator without sharing any mutable state.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID


class Severity(str, enum.Enum):
    """Severity of a single rule evaluation."""
    GOOD = "good"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


class AnalysisStatus(str, enum.Enum):
    """Lifecycle status stored on an analysis record."""
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Finding:
    """
    One technical finding.

    `deduction` is the number of points (out of 100) this finding removes from
    the technical budget. Provider findings never deduct.
    """
    kind: str
    severity: Severity
    message: str
    source_url: str
    deduction: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "severity": self.severity.value,
            "message": self.message,
            "source_url": self.source_url,
            "deduction": self.deduction,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    """Weighted composite score. Components are already scaled to their ceilings."""
    technical: int
    performance: int
    authority: int
    total: int

    TECHNICAL_MAX = 40
    PERFORMANCE_MAX = 30
    AUTHORITY_MAX = 30

    def __post_init__(self):
        limits = {
            "technical": self.TECHNICAL_MAX,
            "performance": self.PERFORMANCE_MAX,
            "authority": self.AUTHORITY_MAX,
            "total": 100,
        }
        for name, ceiling in limits.items():
            value = getattr(self, name)
            if not 0 <= value <= ceiling:
                raise ValueError(f"{name} score {value} outside 0-{ceiling}")

    def to_dict(self) -> Dict[str, int]:
        return {
            "technical": self.technical,
            "performance": self.performance,
            "authority": self.authority,
            "total": self.total,
        }


@dataclass(frozen=True)
class ValidatedRequest:
    """A request that passed validation, with its normalized domain."""
    domain: str
    url: str
    requester_id: str


# =============================================================================
# STAGE RESULTS
# =============================================================================

@dataclass(frozen=True)
class TechnicalResult:
    """Output of fetch + signal extraction."""
    findings: Tuple[Finding, ...]
    raw_signals: Dict[str, Any]
    fetched: bool = True

    @property
    def total_deduction(self) -> int:
        return sum(f.deduction for f in self.findings)

    @property
    def score(self) -> int:
        """Internal 100-point technical score."""
        return max(0, 100 - self.total_deduction)


@dataclass(frozen=True)
class PerformanceResult:
    """Output of the page-performance provider."""
    score: int
    findings: Tuple[Finding, ...]
    status: str  # measured, unconfigured, failed
    metrics: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthorityResult:
    """Output of the domain-authority provider chain."""
    authority: int
    findings: Tuple[Finding, ...]
    source: Optional[str] = None  # provider name, "estimated", or None
    estimated: bool = False
    attempts: Tuple[str, ...] = ()


# =============================================================================
# PERSISTED RECORD
# =============================================================================

@dataclass(frozen=True)
class AnalysisRecord:
    """An analysis as stored by the repository."""
    id: UUID
    requester_id: str
    domain: str
    scores: ScoreBreakdown
    raw_signals: Dict[str, Any]
    cache_key: str
    generated_at: datetime
    status: AnalysisStatus = AnalysisStatus.COMPLETED
    report: Optional[str] = None
    findings: List[Finding] = field(default_factory=list)

    def to_dict(self, include_findings: bool = True) -> Dict[str, Any]:
        data = {
            "id": str(self.id),
            "requester_id": self.requester_id,
            "domain": self.domain,
            "scores": self.scores.to_dict(),
            "raw_signals": self.raw_signals,
            "report": self.report,
            "cache_key": self.cache_key,
            "generated_at": self.generated_at.isoformat(),
            "status": self.status.value,
        }
        if include_findings:
            data["findings"] = [f.to_dict() for f in self.findings]
        return data
