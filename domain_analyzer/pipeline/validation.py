"""
Request validation and domain normalization.
"""

import re
from typing import Optional

from .errors import RequestValidationError
from .models import ValidatedRequest

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://")

# Dot-separated labels, 1-63 chars each, no leading/trailing hyphen, >= 2 labels.
_HOSTNAME_RE = re.compile(
    r"^(?=.{1,253}$)"
    r"(?!-)[a-z0-9-]{1,63}(?<!-)"
    r"(?:\.(?!-)[a-z0-9-]{1,63}(?<!-))+$"
)


def normalize_domain(domain: str) -> str:
    """
    Strip scheme, `www.` prefix, path, port and trailing dot from a domain.

    >>> normalize_domain("https://www.Example.com/about?x=1")
    'example.com'
    """
    value = domain.strip().lower()
    value = _SCHEME_RE.sub("", value)

    # Cut at the first path, query or fragment delimiter
    for delimiter in ("/", "?", "#"):
        value = value.split(delimiter, 1)[0]

    # Drop credentials and port
    value = value.rsplit("@", 1)[-1]
    value = value.split(":", 1)[0]

    if value.startswith("www."):
        value = value[4:]

    return value.rstrip(".")


def is_valid_hostname(domain: str) -> bool:
    """Check a normalized domain against the hostname pattern."""
    return bool(_HOSTNAME_RE.match(domain))


def validate_request(domain: Optional[str], requester_id: Optional[str]) -> ValidatedRequest:
    """
    Validate an analysis request.

    Args:
        domain: Domain or URL as typed by the user
        requester_id: Id of the user asking for the analysis

    Returns:
        ValidatedRequest with the normalized domain and its canonical https URL

    Raises:
        RequestValidationError: On missing fields or a malformed domain
    """
    missing = []
    if domain is None or not str(domain).strip():
        missing.append("domain")
    if requester_id is None or not str(requester_id).strip():
        missing.append("requester_id")
    if missing:
        raise RequestValidationError(f"Missing required field(s): {', '.join(missing)}")

    normalized = normalize_domain(str(domain))
    if not is_valid_hostname(normalized):
        raise RequestValidationError(f"Invalid domain: {domain!r}")

    return ValidatedRequest(
        domain=normalized,
        url=f"https://{normalized}",
        requester_id=str(requester_id).strip(),
    )
