"""
External API Configuration

Builds provider clients from a PipelineConfig. Which providers take part in a
run is decided here, by configuration, never by the pipeline code.
"""

import logging
from typing import List

from domain_analyzer.pipeline.config import PipelineConfig

from .authority import AuthorityChain, AuthorityProvider
from .dataforseo import DataForSEOAuthorityProvider
from .moz import MozAuthorityProvider
from .pagespeed import PageSpeedClient

logger = logging.getLogger(__name__)


def build_performance_client(config: PipelineConfig) -> PageSpeedClient:
    """PageSpeed client; unconfigured (neutral score) when no key is set."""
    return PageSpeedClient(
        api_key=config.google_api_key,
        strategy=config.pagespeed_strategy,
        timeout=config.provider_timeout,
    )


def build_authority_providers(config: PipelineConfig) -> List[AuthorityProvider]:
    """Ordered provider list: Moz first, DataForSEO second."""
    return [
        MozAuthorityProvider(
            access_id=config.moz_access_id,
            secret_key=config.moz_secret_key,
            timeout=config.provider_timeout,
        ),
        DataForSEOAuthorityProvider(
            login=config.dataforseo_login,
            password=config.dataforseo_password,
            timeout=config.provider_timeout,
        ),
    ]


def build_authority_chain(config: PipelineConfig) -> AuthorityChain:
    """
    Provider chain with a per-provider time budget.

    Each provider gets at most an equal share of the stage timeout so that a
    slow primary still leaves room for the providers after it.
    """
    providers = build_authority_providers(config)
    per_provider = min(config.provider_timeout, config.stage_timeout / len(providers))
    return AuthorityChain(
        providers,
        allow_estimate=config.allow_estimated_authority,
        timeout=per_provider,
    )


def log_provider_status(config: PipelineConfig):
    """Log configuration status."""
    logger.info(
        f"External API status: "
        f"PageSpeed={'enabled' if config.has_pagespeed else 'disabled'}, "
        f"Moz={'enabled' if config.has_moz else 'disabled'}, "
        f"DataForSEO={'enabled' if config.has_dataforseo else 'disabled'}, "
        f"Estimate={'allowed' if config.allow_estimated_authority else 'off'}, "
        f"Reports={'enabled' if config.has_reports else 'disabled'}"
    )
