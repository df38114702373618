"""
Analysis error taxonomy.

Only RequestValidationError and PersistenceError ever reach the caller as a
failed request. ProviderError and ReportGenerationError are raised inside a
stage and converted into findings / an omitted report by that stage.
"""

from typing import Optional


class AnalysisError(Exception):
    """Base class for all analysis pipeline errors."""


class RequestValidationError(AnalysisError):
    """Missing or malformed analysis input. Raised before any stage starts."""


class PersistenceError(AnalysisError):
    """The analysis record could not be stored."""


class ProviderError(AnalysisError):
    """An external metrics provider failed or returned an unusable payload."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        response: Optional[dict] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response = response


class ReportGenerationError(AnalysisError):
    """The generative text service failed to produce a report."""
