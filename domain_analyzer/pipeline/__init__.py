"""
Analysis pipeline: data model, validation, orchestration and response shape.
"""

from .errors import (
    AnalysisError,
    PersistenceError,
    ProviderError,
    ReportGenerationError,
    RequestValidationError,
)
from .models import (
    AnalysisRecord,
    AnalysisStatus,
    AuthorityResult,
    Finding,
    PerformanceResult,
    ScoreBreakdown,
    Severity,
    TechnicalResult,
    ValidatedRequest,
)
from .validation import normalize_domain, validate_request

__all__ = [
    "AnalysisError",
    "PersistenceError",
    "ProviderError",
    "ReportGenerationError",
    "RequestValidationError",
    "AnalysisRecord",
    "AnalysisStatus",
    "AuthorityResult",
    "Finding",
    "PerformanceResult",
    "ScoreBreakdown",
    "Severity",
    "TechnicalResult",
    "ValidatedRequest",
    "normalize_domain",
    "validate_request",
]
