"""
Test Suite for the Signal Extractor

Covers the technical rule table, good/info findings and the raw-signal map.
"""

import pytest

from domain_analyzer.collector.extractor import (
    ABSENT_PAGE_DEDUCTION,
    SignalExtractor,
    fetch_failure_result,
)
from domain_analyzer.pipeline.models import Severity

URL = "https://example.com"


def extract(html: str):
    return SignalExtractor(URL).extract(html, status_code=200)


def by_kind(result, kind):
    return [f for f in result.findings if f.kind == kind]


class TestCompletePage:
    """A page satisfying every rule."""

    def test_no_deductions(self, good_html):
        result = extract(good_html)

        assert result.total_deduction == 0
        assert result.score == 100
        assert all(f.severity == Severity.GOOD for f in result.findings)

    def test_good_findings_reported(self, good_html):
        result = extract(good_html)
        kinds = {f.kind for f in result.findings}

        assert kinds == {
            "title_tag", "meta_description", "meta_tags", "headings",
            "images", "structured_data", "social_tags", "canonical",
        }
        assert any("Charset meta tag found: utf-8" in f.message for f in result.findings)
        assert any("Canonical URL found: https://example.com/" in f.message for f in result.findings)

    def test_raw_signals(self, good_html):
        signals = extract(good_html).raw_signals

        assert signals["fetched"] is True
        assert signals["status_code"] == 200
        assert signals["title_length"] == 48
        assert 120 <= signals["meta_description_length"] <= 160
        assert signals["h1_count"] == 1
        assert signals["heading_counts"] == {"h1": 1, "h2": 1, "h3": 0, "h4": 0}
        assert signals["image_count"] == 2
        assert signals["images_without_alt"] == 0
        assert signals["has_structured_data"] is True
        assert signals["structured_data_types"] == {"json_ld": 1, "microdata": 0}
        assert signals["open_graph_tags"] == 3
        assert signals["has_canonical"] is True
        assert signals["has_viewport_meta"] is True
        assert signals["has_charset_meta"] is True


class TestMinimalPage:
    """A page without title, description or H1."""

    def test_three_errors(self, minimal_html):
        result = extract(minimal_html)
        errors = [f for f in result.findings if f.severity == Severity.ERROR]

        assert len(errors) == 3
        assert {f.kind for f in errors} == {"title_tag", "meta_description", "headings"}

    def test_deductions_at_least_35(self, minimal_html):
        result = extract(minimal_html)

        assert result.total_deduction >= 35
        assert result.score == 100 - ABSENT_PAGE_DEDUCTION

    def test_no_images_is_info(self, minimal_html):
        images = by_kind(extract(minimal_html), "images")

        assert len(images) == 1
        assert images[0].severity == Severity.INFO
        assert images[0].deduction == 0


class TestTitleAndDescription:
    """Length rules."""

    def test_short_title_and_missing_description(self, short_title_html):
        result = extract(short_title_html)

        title = by_kind(result, "title_tag")
        description = by_kind(result, "meta_description")

        assert title[0].severity == Severity.WARNING
        assert "too short (10 characters" in title[0].message
        assert description[0].severity == Severity.ERROR
        assert result.total_deduction == 5 + 10

    def test_long_title(self, page_factory):
        result = extract(page_factory(title="T" * 61))
        title = by_kind(result, "title_tag")[0]

        assert title.severity == Severity.WARNING
        assert title.deduction == 5

    def test_empty_title_is_missing(self, page_factory):
        result = extract(page_factory(title="   "))
        title = by_kind(result, "title_tag")[0]

        assert title.severity == Severity.ERROR
        assert title.deduction == 15

    def test_short_description(self, page_factory):
        result = extract(page_factory(description="Too short."))
        description = by_kind(result, "meta_description")[0]

        assert description.severity == Severity.WARNING
        assert description.deduction == 5

    def test_description_name_case_insensitive(self, page_factory, good_html):
        html = good_html.replace('name="description"', 'name="Description"')
        description = by_kind(extract(html), "meta_description")[0]

        assert description.severity == Severity.GOOD


class TestHeadings:
    """H1 rules."""

    def test_multiple_h1(self, page_factory):
        result = extract(page_factory(h1="<h1>One</h1><h1>Two</h1>"))
        h1 = by_kind(result, "headings")[0]

        assert h1.severity == Severity.WARNING
        assert h1.deduction == 5
        assert result.raw_signals["h1_count"] == 2

    def test_single_h1_snippet_truncated(self, page_factory):
        result = extract(page_factory(h1=f"<h1>{'x' * 80}</h1>"))
        h1 = by_kind(result, "headings")[0]

        assert h1.severity == Severity.GOOD
        assert ("x" * 50 + "...") in h1.message
        assert ("x" * 51) not in h1.message


class TestImages:
    """Alt attribute rules are evaluated independently."""

    def test_missing_and_empty_alt(self, page_factory):
        images = '<img src="a.png"><img src="b.png" alt=""><img src="c.png" alt="C">'
        result = extract(page_factory(images=images))
        findings = by_kind(result, "images")

        assert [f.deduction for f in findings] == [2, 1]
        assert all(f.severity == Severity.WARNING for f in findings)
        assert result.raw_signals["images_without_alt"] == 1
        assert result.raw_signals["images_with_empty_alt"] == 1

    def test_missing_alt_capped(self, page_factory):
        result = extract(page_factory(images='<img src="x.png">' * 10))

        assert by_kind(result, "images")[0].deduction == 15

    def test_empty_alt_capped(self, page_factory):
        result = extract(page_factory(images='<img src="x.png" alt=" ">' * 12))

        assert by_kind(result, "images")[0].deduction == 10


class TestMetaAndStructure:
    """Viewport, charset, structured data, Open Graph, canonical."""

    def test_missing_head_tags(self, page_factory):
        result = extract(page_factory(full_head=False))
        deductions = {
            (f.kind, f.message.split(" (")[0]): f.deduction
            for f in result.findings if f.deduction
        }

        assert deductions[("meta_tags", "Missing viewport meta tag")] == 3
        assert deductions[("meta_tags", "Missing charset meta tag")] == 2
        assert deductions[("structured_data", "No structured data")] == 5
        assert deductions[("social_tags", "No Open Graph tags found")] == 3
        assert deductions[("canonical", "No canonical URL found")] == 2

    def test_charset_from_http_equiv(self, page_factory):
        html = page_factory(
            full_head=False,
            head_extra='<meta http-equiv="Content-Type" content="text/html; charset=ISO-8859-1">',
        )
        result = extract(html)

        assert result.raw_signals["has_charset_meta"] is True
        assert any("ISO-8859-1" in f.message for f in result.findings)

    def test_microdata_detected(self, page_factory):
        html = page_factory(
            full_head=False,
            h1='<h1 itemscope itemtype="https://schema.org/Organization">Acme</h1>',
        )
        result = extract(html)

        assert result.raw_signals["has_structured_data"] is True
        assert result.raw_signals["structured_data_types"]["microdata"] == 1

    def test_partial_open_graph(self, page_factory):
        html = page_factory(
            full_head=False,
            head_extra='<meta property="og:title" content="Acme">',
        )
        social = by_kind(extract(html), "social_tags")[0]

        assert social.severity == Severity.WARNING
        assert social.deduction == 2
        assert "1/3" in social.message

    def test_empty_open_graph_content_not_counted(self, page_factory):
        html = page_factory(
            full_head=False,
            head_extra='<meta property="og:title" content="">',
        )

        assert extract(html).raw_signals["open_graph_tags"] == 0

    def test_canonical_without_href_is_missing(self, page_factory):
        html = page_factory(full_head=False, head_extra='<link rel="canonical" href="">')

        assert extract(html).raw_signals["has_canonical"] is False


class TestFetchFailure:
    """Worst-case absence when the page could not be fetched."""

    def test_single_fetch_finding(self):
        result = fetch_failure_result(URL, "HTTP 503", status_code=503)

        assert len(result.findings) == 1
        finding = result.findings[0]
        assert finding.kind == "fetch"
        assert finding.severity == Severity.ERROR
        assert "HTTP 503" in finding.message
        assert finding.deduction == ABSENT_PAGE_DEDUCTION == 50

    def test_raw_signals_zeroed(self):
        result = fetch_failure_result(URL, "request timed out")

        assert result.fetched is False
        assert result.score == 50
        assert result.raw_signals["fetched"] is False
        assert result.raw_signals["title_length"] == 0
        assert result.raw_signals["fetch_error"] == "request timed out"
