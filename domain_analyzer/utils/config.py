"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.

The pipeline itself never reads these settings directly: entry points build a
PipelineConfig from them and pass it to the AnalysisPipeline constructor.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; DomainAnalyzer/1.0; "
    "+https://github.com/domain-analyzer)"
)


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra fields in .env file
        case_sensitive=False,  # Allow both UPPERCASE and lowercase
    )

    # Database
    DATABASE_URL: Optional[str] = None
    SQLITE_PATH: str = "domain_analyzer_dev.db"
    SQL_DEBUG: bool = False

    # Google PageSpeed Insights (performance provider)
    GOOGLE_API_KEY: Optional[str] = None
    PAGESPEED_STRATEGY: str = "mobile"

    # Moz Links API (primary authority provider)
    MOZ_ACCESS_ID: Optional[str] = None
    MOZ_SECRET_KEY: Optional[str] = None

    # DataForSEO Backlinks (secondary authority provider)
    DATAFORSEO_LOGIN: Optional[str] = None
    DATAFORSEO_PASSWORD: Optional[str] = None

    # Degraded mode: allow a clearly-flagged authority estimate
    ALLOW_ESTIMATED_AUTHORITY: bool = False

    # Claude API (report generation)
    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"
    REPORT_MAX_TOKENS: int = 2000
    REPORT_TEMPERATURE: float = 0.3
    REPORTS_ENABLED: bool = True

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    USER_AGENT: str = DEFAULT_USER_AGENT

    # Timeouts (seconds)
    FETCH_TIMEOUT: float = 15.0
    PROVIDER_TIMEOUT: float = 60.0
    STAGE_TIMEOUT: float = 90.0
    REPORT_TIMEOUT: float = 20.0


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
