"""
Response assembly.

Every pipeline run ends in a PipelineOutcome, which serializes to the public
envelope: {success, analysis?, error?}.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .models import AnalysisRecord, Finding

# error_type values
VALIDATION = "validation"
PERSISTENCE = "persistence"
INTERNAL = "internal"


@dataclass
class PipelineOutcome:
    """Result of one pipeline run."""
    success: bool
    analysis: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        if self.analysis is not None:
            data["analysis"] = self.analysis
        if self.error is not None:
            data["error"] = self.error
        return data


def build_response(
    record: AnalysisRecord,
    findings: Sequence[Finding],
    report_reused: bool = False,
) -> PipelineOutcome:
    """Success envelope for a stored analysis."""
    return PipelineOutcome(
        success=True,
        analysis={
            "id": str(record.id),
            "domain": record.domain,
            "scores": record.scores.to_dict(),
            "findings": [f.to_dict() for f in findings],
            "report": record.report,
            "cache_key": record.cache_key,
            "generated_at": record.generated_at.isoformat(),
            "report_reused": report_reused,
        },
    )


def error_response(message: str, error_type: str = INTERNAL) -> PipelineOutcome:
    """Failure envelope with a caller-visible message."""
    return PipelineOutcome(success=False, error=message, error_type=error_type)
