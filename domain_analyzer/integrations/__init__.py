"""
External API Integrations

Metric providers used by the analysis pipeline:
- PageSpeed: page-performance score
- Moz: domain authority (primary)
- DataForSEO: domain rank (secondary)
- Config: provider construction from configuration
"""

from .authority import (
    AuthorityChain,
    AuthorityProvider,
    EstimatedAuthorityProvider,
    estimate_authority,
    estimated_result,
)
from .config import (
    build_authority_chain,
    build_authority_providers,
    build_performance_client,
    log_provider_status,
)
from .dataforseo import (
    DataForSEOAuthorityProvider,
    DataForSEOClient,
    DataForSEOError,
    RetryConfig,
)
from .moz import MozAuthorityProvider
from .pagespeed import PageSpeedClient

__all__ = [
    # Authority
    "AuthorityChain",
    "AuthorityProvider",
    "EstimatedAuthorityProvider",
    "estimate_authority",
    "estimated_result",
    "MozAuthorityProvider",
    "DataForSEOAuthorityProvider",
    "DataForSEOClient",
    "DataForSEOError",
    "RetryConfig",
    # Performance
    "PageSpeedClient",
    # Config
    "build_authority_chain",
    "build_authority_providers",
    "build_performance_client",
    "log_provider_status",
]
