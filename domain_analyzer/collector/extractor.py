"""
On-page Signal Extractor

Parses homepage markup and evaluates the technical SEO rule table:
- Title tag (presence, 30-60 chars)
- Meta description (presence, 120-160 chars)
- Viewport and charset meta tags
- H1 count and heading hierarchy
- Image alt attributes
- Structured data (JSON-LD, microdata)
- Open Graph tags
- Canonical link

Each violated rule emits a finding carrying its deduction out of a 100-point
technical budget. Satisfied rules emit `good` findings for reporting only.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from domain_analyzer.pipeline.models import Finding, Severity, TechnicalResult

logger = logging.getLogger(__name__)


# =============================================================================
# RULE TABLE (deductions out of 100)
# =============================================================================

TITLE_MISSING = 15
TITLE_LENGTH = 5
DESCRIPTION_MISSING = 10
DESCRIPTION_LENGTH = 5
VIEWPORT_MISSING = 3
CHARSET_MISSING = 2
H1_MISSING = 10
H1_MULTIPLE = 5
STRUCTURED_DATA_MISSING = 5
OPEN_GRAPH_MISSING = 3
OPEN_GRAPH_PARTIAL = 2
CANONICAL_MISSING = 2

IMAGE_MISSING_ALT_EACH = 2
IMAGE_MISSING_ALT_CAP = 15
IMAGE_EMPTY_ALT_EACH = 1
IMAGE_EMPTY_ALT_CAP = 10

TITLE_MIN, TITLE_MAX = 30, 60
DESCRIPTION_MIN, DESCRIPTION_MAX = 120, 160

OPEN_GRAPH_PROPERTIES = ("og:title", "og:description", "og:image")

# Every "absent" rule. Applied as a whole when the page could not be fetched.
ABSENT_PAGE_DEDUCTION = (
    TITLE_MISSING
    + DESCRIPTION_MISSING
    + VIEWPORT_MISSING
    + CHARSET_MISSING
    + H1_MISSING
    + STRUCTURED_DATA_MISSING
    + OPEN_GRAPH_MISSING
    + CANONICAL_MISSING
)

_JSON_LD_TYPE = re.compile(r"^\s*application/ld\+json\s*$", re.I)
_CHARSET_IN_CONTENT = re.compile(r"charset\s*=\s*([^\s;\"']+)", re.I)


def empty_raw_signals() -> Dict[str, Any]:
    """Raw-signal map for a page where nothing was found."""
    return {
        "fetched": False,
        "status_code": None,
        "page_size": 0,
        "title_length": 0,
        "meta_description_length": 0,
        "h1_count": 0,
        "heading_counts": {"h1": 0, "h2": 0, "h3": 0, "h4": 0},
        "image_count": 0,
        "images_without_alt": 0,
        "images_with_empty_alt": 0,
        "has_structured_data": False,
        "structured_data_types": {"json_ld": 0, "microdata": 0},
        "open_graph_tags": 0,
        "has_canonical": False,
        "has_viewport_meta": False,
        "has_charset_meta": False,
    }


def fetch_failure_result(url: str, reason: str, status_code: Optional[int] = None) -> TechnicalResult:
    """
    Technical result for a page that could not be fetched.

    The extractor is skipped; a single `fetch` error carries the deduction of
    every absent-signal rule so the technical score stays well-defined.
    """
    signals = empty_raw_signals()
    signals["status_code"] = status_code
    signals["fetch_error"] = reason

    finding = Finding(
        kind="fetch",
        severity=Severity.ERROR,
        message=f"Could not fetch page: {reason}",
        source_url=url,
        deduction=ABSENT_PAGE_DEDUCTION,
    )
    return TechnicalResult(findings=(finding,), raw_signals=signals, fetched=False)


def _meta_by_name(soup: BeautifulSoup, name: str) -> Optional[Tag]:
    """Find <meta name=...> (or property=...) case-insensitively."""
    wanted = name.lower()
    for meta in soup.find_all("meta"):
        for attr in ("name", "property"):
            value = meta.get(attr)
            if isinstance(value, str) and value.strip().lower() == wanted:
                return meta
    return None


def _content(meta: Optional[Tag]) -> str:
    if meta is None:
        return ""
    value = meta.get("content")
    return value.strip() if isinstance(value, str) else ""


class SignalExtractor:
    """
    Evaluates the technical rule table against one page.

    Usage:
        result = SignalExtractor("https://example.com").extract(html)
        result.score        # 0-100
        result.findings     # ordered findings
        result.raw_signals  # counts and flags for the aggregator/report
    """

    def __init__(self, url: str, parser: str = "html.parser"):
        self.url = url
        self.parser = parser

    def extract(self, html: str, status_code: Optional[int] = None) -> TechnicalResult:
        """
        Parse markup and evaluate every rule.

        Args:
            html: Page markup
            status_code: HTTP status of the fetch, stored in raw signals

        Returns:
            TechnicalResult with findings in discovery order
        """
        soup = BeautifulSoup(html or "", self.parser)
        findings: List[Finding] = []
        signals = empty_raw_signals()
        signals["fetched"] = True
        signals["status_code"] = status_code
        signals["page_size"] = len(html or "")

        self._check_title(soup, findings, signals)
        self._check_description(soup, findings, signals)
        self._check_viewport(soup, findings, signals)
        self._check_charset(soup, findings, signals)
        self._check_headings(soup, findings, signals)
        self._check_images(soup, findings, signals)
        self._check_structured_data(soup, findings, signals)
        self._check_open_graph(soup, findings, signals)
        self._check_canonical(soup, findings, signals)

        result = TechnicalResult(findings=tuple(findings), raw_signals=signals)
        logger.info(
            f"Extracted {len(findings)} findings for {self.url}: "
            f"technical={result.score}/100"
        )
        return result

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def _add(
        self,
        findings: List[Finding],
        kind: str,
        severity: Severity,
        message: str,
        deduction: int = 0,
    ):
        findings.append(Finding(
            kind=kind,
            severity=severity,
            message=message,
            source_url=self.url,
            deduction=deduction,
        ))

    def _check_title(self, soup: BeautifulSoup, findings: List[Finding], signals: Dict):
        tag = soup.find("title")
        if tag is None:
            self._add(findings, "title_tag", Severity.ERROR, "Missing title tag", TITLE_MISSING)
            return

        title = tag.get_text(strip=True)
        length = len(title)
        signals["title_length"] = length

        if length == 0:
            self._add(findings, "title_tag", Severity.ERROR, "Empty title tag", TITLE_MISSING)
        elif length < TITLE_MIN:
            self._add(
                findings, "title_tag", Severity.WARNING,
                f"Title tag is too short ({length} characters, recommended: {TITLE_MIN}-{TITLE_MAX})",
                TITLE_LENGTH,
            )
        elif length > TITLE_MAX:
            self._add(
                findings, "title_tag", Severity.WARNING,
                f"Title tag is too long ({length} characters, recommended: {TITLE_MIN}-{TITLE_MAX})",
                TITLE_LENGTH,
            )
        else:
            self._add(
                findings, "title_tag", Severity.GOOD,
                f"Title tag length is optimal ({length} characters)",
            )

    def _check_description(self, soup: BeautifulSoup, findings: List[Finding], signals: Dict):
        meta = _meta_by_name(soup, "description")
        if meta is None:
            self._add(
                findings, "meta_description", Severity.ERROR,
                "Missing meta description", DESCRIPTION_MISSING,
            )
            return

        description = _content(meta)
        length = len(description)
        signals["meta_description_length"] = length

        if length == 0:
            self._add(
                findings, "meta_description", Severity.ERROR,
                "Empty meta description", DESCRIPTION_MISSING,
            )
        elif length < DESCRIPTION_MIN:
            self._add(
                findings, "meta_description", Severity.WARNING,
                f"Meta description is too short ({length} characters, "
                f"recommended: {DESCRIPTION_MIN}-{DESCRIPTION_MAX})",
                DESCRIPTION_LENGTH,
            )
        elif length > DESCRIPTION_MAX:
            self._add(
                findings, "meta_description", Severity.WARNING,
                f"Meta description is too long ({length} characters, "
                f"recommended: {DESCRIPTION_MIN}-{DESCRIPTION_MAX})",
                DESCRIPTION_LENGTH,
            )
        else:
            self._add(
                findings, "meta_description", Severity.GOOD,
                f"Meta description length is optimal ({length} characters)",
            )

    def _check_viewport(self, soup: BeautifulSoup, findings: List[Finding], signals: Dict):
        if _meta_by_name(soup, "viewport") is None:
            self._add(
                findings, "meta_tags", Severity.WARNING,
                "Missing viewport meta tag (important for mobile)", VIEWPORT_MISSING,
            )
            return

        signals["has_viewport_meta"] = True
        self._add(findings, "meta_tags", Severity.GOOD, "Viewport meta tag found")

    def _check_charset(self, soup: BeautifulSoup, findings: List[Finding], signals: Dict):
        charset = None
        for meta in soup.find_all("meta"):
            value = meta.get("charset")
            if isinstance(value, str) and value.strip():
                charset = value.strip()
                break
            http_equiv = meta.get("http-equiv")
            if isinstance(http_equiv, str) and http_equiv.lower() == "content-type":
                match = _CHARSET_IN_CONTENT.search(_content(meta))
                if match:
                    charset = match.group(1)
                    break

        if charset is None:
            self._add(
                findings, "meta_tags", Severity.WARNING,
                "Missing charset meta tag", CHARSET_MISSING,
            )
            return

        signals["has_charset_meta"] = True
        self._add(findings, "meta_tags", Severity.GOOD, f"Charset meta tag found: {charset}")

    def _check_headings(self, soup: BeautifulSoup, findings: List[Finding], signals: Dict):
        counts = {level: len(soup.find_all(level)) for level in ("h1", "h2", "h3", "h4")}
        h1_count = counts["h1"]
        signals["h1_count"] = h1_count
        signals["heading_counts"] = counts

        if h1_count == 0:
            self._add(findings, "headings", Severity.ERROR, "Missing H1 tag", H1_MISSING)
        elif h1_count > 1:
            self._add(
                findings, "headings", Severity.WARNING,
                f"Multiple H1 tags found ({h1_count}). Consider using only one H1 per page.",
                H1_MULTIPLE,
            )
        else:
            content = soup.find("h1").get_text(" ", strip=True)
            snippet = content[:50] + ("..." if len(content) > 50 else "")
            self._add(
                findings, "headings", Severity.GOOD,
                f'Single H1 tag found with content: "{snippet}"',
            )

        if counts["h2"] or counts["h3"] or counts["h4"]:
            self._add(
                findings, "headings", Severity.GOOD,
                f"Good heading structure: H1({counts['h1']}), H2({counts['h2']}), "
                f"H3({counts['h3']}), H4({counts['h4']})",
            )

    def _check_images(self, soup: BeautifulSoup, findings: List[Finding], signals: Dict):
        images = soup.find_all("img")
        without_alt = [img for img in images if not img.has_attr("alt")]
        empty_alt = [
            img for img in images
            if img.has_attr("alt") and not str(img.get("alt") or "").strip()
        ]

        signals["image_count"] = len(images)
        signals["images_without_alt"] = len(without_alt)
        signals["images_with_empty_alt"] = len(empty_alt)

        if not images:
            self._add(findings, "images", Severity.INFO, "No images found on the page")
            return

        if without_alt:
            self._add(
                findings, "images", Severity.WARNING,
                f"{len(without_alt)} out of {len(images)} images missing alt attributes",
                min(len(without_alt) * IMAGE_MISSING_ALT_EACH, IMAGE_MISSING_ALT_CAP),
            )
        if empty_alt:
            self._add(
                findings, "images", Severity.WARNING,
                f"{len(empty_alt)} out of {len(images)} images have empty alt attributes",
                min(len(empty_alt) * IMAGE_EMPTY_ALT_EACH, IMAGE_EMPTY_ALT_CAP),
            )
        if not without_alt and not empty_alt:
            self._add(
                findings, "images", Severity.GOOD,
                f"All {len(images)} images have alt attributes",
            )

    def _check_structured_data(self, soup: BeautifulSoup, findings: List[Finding], signals: Dict):
        json_ld = soup.find_all("script", attrs={"type": _JSON_LD_TYPE})
        microdata = soup.find_all(
            lambda tag: tag.has_attr("itemscope") or tag.has_attr("itemtype") or tag.has_attr("itemprop")
        )

        signals["structured_data_types"] = {"json_ld": len(json_ld), "microdata": len(microdata)}
        signals["has_structured_data"] = bool(json_ld or microdata)

        if not json_ld and not microdata:
            self._add(
                findings, "structured_data", Severity.WARNING,
                "No structured data (JSON-LD or Microdata) found", STRUCTURED_DATA_MISSING,
            )
            return

        types = []
        if json_ld:
            types.append(f"JSON-LD ({len(json_ld)} blocks)")
        if microdata:
            types.append(f"Microdata ({len(microdata)} elements)")
        self._add(
            findings, "structured_data", Severity.GOOD,
            f"Structured data found: {', '.join(types)}",
        )

    def _check_open_graph(self, soup: BeautifulSoup, findings: List[Finding], signals: Dict):
        found = sum(1 for prop in OPEN_GRAPH_PROPERTIES if _content(_meta_by_name(soup, prop)))
        signals["open_graph_tags"] = found

        if found == 0:
            self._add(
                findings, "social_tags", Severity.WARNING,
                "No Open Graph tags found (important for social media sharing)",
                OPEN_GRAPH_MISSING,
            )
        elif found < len(OPEN_GRAPH_PROPERTIES):
            self._add(
                findings, "social_tags", Severity.WARNING,
                f"Partial Open Graph implementation ({found}/3 basic tags found)",
                OPEN_GRAPH_PARTIAL,
            )
        else:
            self._add(
                findings, "social_tags", Severity.GOOD,
                "Complete Open Graph tags found (title, description, image)",
            )

    def _check_canonical(self, soup: BeautifulSoup, findings: List[Finding], signals: Dict):
        href = None
        for link in soup.find_all("link"):
            rel = link.get("rel") or []
            if isinstance(rel, str):
                rel = rel.split()
            if "canonical" in [r.lower() for r in rel] and (link.get("href") or "").strip():
                href = link["href"].strip()
                break

        if href is None:
            self._add(findings, "canonical", Severity.WARNING, "No canonical URL found", CANONICAL_MISSING)
            return

        signals["has_canonical"] = True
        self._add(findings, "canonical", Severity.GOOD, f"Canonical URL found: {href}")
