"""
Domain Authority Provider Chain

Providers are tried in order; an unconfigured provider is skipped and a
failing one falls through to the next. The estimate is a last resort that
must be switched on explicitly and is always reported as not measured.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import httpx

from domain_analyzer.pipeline.errors import ProviderError
from domain_analyzer.pipeline.models import AuthorityResult, Finding, Severity

logger = logging.getLogger(__name__)


class AuthorityProvider(ABC):
    """Common interface for domain-authority sources (0-100 scale)."""

    name: str = "provider"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials for this provider are present."""

    @abstractmethod
    async def fetch_authority(self, domain: str) -> int:
        """
        Look up authority for `domain`.

        Raises:
            ProviderError: On any failure or unusable payload
        """

    async def close(self):
        """Release any HTTP resources."""


def grade_authority(authority: int) -> Severity:
    if authority > 50:
        return Severity.GOOD
    if authority > 20:
        return Severity.WARNING
    return Severity.ERROR


# =============================================================================
# ESTIMATE
# =============================================================================

# TLDs that historically carry institutional weight
_INSTITUTIONAL_TLDS = {"edu", "gov", "mil", "int"}
_ESTABLISHED_TLDS = {"com", "org", "net"}


def estimate_authority(domain: str) -> int:
    """
    Deterministic authority guess from the domain name alone, 5-50.

    Shorter registrable names, established TLDs and names without hyphens or
    digits score higher. The same input always yields the same value.
    """
    labels = domain.lower().split(".")
    tld = labels[-1] if labels else ""
    name = labels[-2] if len(labels) >= 2 else (labels[0] if labels else "")

    score = 20
    if tld in _INSTITUTIONAL_TLDS:
        score += 20
    elif tld in _ESTABLISHED_TLDS:
        score += 10
    elif len(tld) == 2:
        score += 5

    if len(name) <= 6:
        score += 10
    elif len(name) <= 10:
        score += 5
    elif len(name) > 20:
        score -= 10

    if "-" in name:
        score -= 5
    if any(ch.isdigit() for ch in name):
        score -= 5

    return max(5, min(50, score))


class EstimatedAuthorityProvider(AuthorityProvider):
    """Name-based estimate. Never a substitute for measured data."""

    name = "estimated"

    @property
    def is_configured(self) -> bool:
        return True

    async def fetch_authority(self, domain: str) -> int:
        return estimate_authority(domain)


def estimated_result(
    domain: str,
    url: str,
    authority: int,
    source: str = EstimatedAuthorityProvider.name,
    attempts: Sequence[str] = (),
) -> AuthorityResult:
    """Authority result for an estimate; always a warning, never measured."""
    logger.warning(f"Using estimated authority for {domain}: {authority}")
    finding = Finding(
        kind="authority",
        severity=Severity.WARNING,
        message=(
            f"Estimated domain authority: {authority}/100 "
            f"(heuristic from the domain name, not measured data)"
        ),
        source_url=url,
    )
    return AuthorityResult(
        authority=authority,
        findings=(finding,),
        source=source,
        estimated=True,
        attempts=tuple(attempts),
    )


# =============================================================================
# CHAIN
# =============================================================================

class AuthorityChain:
    """
    Resolve domain authority through an ordered list of providers.

    Each provider call is bounded by `timeout`; a provider that runs past it
    falls through to the next one like any other failure.

    Usage:
        chain = AuthorityChain([moz, dataforseo], allow_estimate=False, timeout=30)
        result = await chain.resolve("example.com", "https://example.com")
    """

    def __init__(
        self,
        providers: Sequence[AuthorityProvider],
        allow_estimate: bool = False,
        estimator: Optional[AuthorityProvider] = None,
        timeout: Optional[float] = None,
    ):
        self.providers = list(providers)
        self.allow_estimate = allow_estimate
        self.estimator = estimator or EstimatedAuthorityProvider()
        self.timeout = timeout

    async def _fetch(self, provider: AuthorityProvider, domain: str) -> int:
        if self.timeout is None:
            return int(await provider.fetch_authority(domain))
        return int(await asyncio.wait_for(provider.fetch_authority(domain), self.timeout))

    async def resolve(self, domain: str, url: str) -> AuthorityResult:
        """
        Try each configured provider in order.

        Never raises; an unresolved chain yields authority 0 with an error finding.
        """
        attempts: List[str] = []
        failures: List[str] = []

        for provider in self.providers:
            if not provider.is_configured:
                logger.debug(f"Authority provider {provider.name} not configured, skipping")
                continue

            attempts.append(provider.name)
            try:
                authority = await self._fetch(provider, domain)
            except asyncio.TimeoutError:
                logger.warning(f"Authority provider {provider.name} timed out for {domain}")
                failures.append(f"{provider.name}: timed out after {self.timeout:g}s")
                continue
            except (ProviderError, httpx.HTTPError) as e:
                logger.warning(f"Authority provider {provider.name} failed for {domain}: {e}")
                failures.append(f"{provider.name}: {e}")
                continue

            authority = max(0, min(100, authority))
            logger.info(f"Domain authority for {domain}: {authority} (via {provider.name})")
            finding = Finding(
                kind="authority",
                severity=grade_authority(authority),
                message=f"Domain Authority: {authority}/100 (source: {provider.name})",
                source_url=url,
            )
            return AuthorityResult(
                authority=authority,
                findings=(finding,),
                source=provider.name,
                attempts=tuple(attempts),
            )

        if self.allow_estimate:
            authority = await self.estimator.fetch_authority(domain)
            attempts.append(self.estimator.name)
            return estimated_result(domain, url, authority, source=self.estimator.name, attempts=attempts)

        if failures:
            message = "Domain authority could not be determined: " + "; ".join(failures)
        else:
            message = "Domain authority unavailable: no authority provider is configured (unconfigured)"

        logger.warning(f"No authority for {domain}: {message}")
        finding = Finding(kind="authority", severity=Severity.ERROR, message=message, source_url=url)
        return AuthorityResult(authority=0, findings=(finding,), attempts=tuple(attempts))

    async def close(self):
        for provider in self.providers:
            await provider.close()
