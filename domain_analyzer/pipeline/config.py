"""
Pipeline configuration.

The pipeline never reads the environment itself; callers build a
PipelineConfig (usually from Settings) and inject it.
"""

from dataclasses import dataclass
from typing import Optional

from domain_analyzer.utils.config import DEFAULT_USER_AGENT, Settings, get_settings


@dataclass(frozen=True)
class PipelineConfig:
    """Everything the pipeline and its providers need to run."""

    # Fetcher
    user_agent: str = DEFAULT_USER_AGENT
    fetch_timeout: float = 15.0

    # Performance
    google_api_key: Optional[str] = None
    pagespeed_strategy: str = "mobile"

    # Authority
    moz_access_id: Optional[str] = None
    moz_secret_key: Optional[str] = None
    dataforseo_login: Optional[str] = None
    dataforseo_password: Optional[str] = None
    allow_estimated_authority: bool = False

    # Report
    anthropic_api_key: Optional[str] = None
    claude_model: str = "claude-sonnet-4-20250514"
    report_max_tokens: int = 2000
    report_temperature: float = 0.3
    reports_enabled: bool = True
    report_timeout: float = 20.0

    # Timeouts
    provider_timeout: float = 60.0
    stage_timeout: float = 90.0

    @property
    def has_pagespeed(self) -> bool:
        return bool(self.google_api_key)

    @property
    def has_moz(self) -> bool:
        return bool(self.moz_access_id and self.moz_secret_key)

    @property
    def has_dataforseo(self) -> bool:
        return bool(self.dataforseo_login and self.dataforseo_password)

    @property
    def has_reports(self) -> bool:
        return self.reports_enabled and bool(self.anthropic_api_key)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PipelineConfig":
        settings = settings or get_settings()
        return cls(
            user_agent=settings.USER_AGENT,
            fetch_timeout=settings.FETCH_TIMEOUT,
            google_api_key=settings.GOOGLE_API_KEY,
            pagespeed_strategy=settings.PAGESPEED_STRATEGY,
            moz_access_id=settings.MOZ_ACCESS_ID,
            moz_secret_key=settings.MOZ_SECRET_KEY,
            dataforseo_login=settings.DATAFORSEO_LOGIN,
            dataforseo_password=settings.DATAFORSEO_PASSWORD,
            allow_estimated_authority=settings.ALLOW_ESTIMATED_AUTHORITY,
            anthropic_api_key=settings.ANTHROPIC_API_KEY,
            claude_model=settings.CLAUDE_MODEL,
            report_max_tokens=settings.REPORT_MAX_TOKENS,
            report_temperature=settings.REPORT_TEMPERATURE,
            reports_enabled=settings.REPORTS_ENABLED,
            report_timeout=settings.REPORT_TIMEOUT,
            provider_timeout=settings.PROVIDER_TIMEOUT,
            stage_timeout=settings.STAGE_TIMEOUT,
        )
