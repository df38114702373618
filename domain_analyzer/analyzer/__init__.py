"""Generative text client."""

from .client import AnalysisResponse, ClaudeClient, TokenUsage

__all__ = ["AnalysisResponse", "ClaudeClient", "TokenUsage"]
