"""Human-readable report generation."""

from .generator import ReportGenerator, build_prompt, format_findings

__all__ = ["ReportGenerator", "build_prompt", "format_findings"]
