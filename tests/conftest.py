"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and configuration for all test modules.
"""

from typing import Callable, Dict, Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from domain_analyzer.analyzer.client import AnalysisResponse, TokenUsage
from domain_analyzer.database import AnalysisRepository, Base, make_session_factory


# ============================================================================
# HTML Fixtures
# ============================================================================

GOOD_TITLE = "Example Domain - Reliable Widgets for Every Team"
GOOD_DESCRIPTION = "Reliable widgets for every team. " * 4


def make_page(
    title: str = GOOD_TITLE,
    description: str = GOOD_DESCRIPTION,
    h1: str = "<h1>Reliable widgets</h1>",
    images: str = '<img src="/a.png" alt="Widget A"><img src="/b.png" alt="Widget B">',
    head_extra: str = "",
    full_head: bool = True,
) -> str:
    """Build a homepage. With the defaults every technical rule is satisfied."""
    head = [f"<title>{title}</title>" if title is not None else ""]
    if description is not None:
        head.append(f'<meta name="description" content="{description}">')
    if full_head:
        head += [
            '<meta charset="utf-8">',
            '<meta name="viewport" content="width=device-width, initial-scale=1">',
            '<meta property="og:title" content="Example Domain">',
            '<meta property="og:description" content="Reliable widgets">',
            '<meta property="og:image" content="https://example.com/og.png">',
            '<link rel="canonical" href="https://example.com/">',
            '<script type="application/ld+json">{"@type": "Organization"}</script>',
        ]
    head.append(head_extra)

    return (
        "<!DOCTYPE html><html><head>"
        + "".join(head)
        + "</head><body>"
        + h1
        + "<h2>Products</h2><p>Widgets.</p>"
        + images
        + "</body></html>"
    )


@pytest.fixture
def page_factory() -> Callable[..., str]:
    return make_page


@pytest.fixture
def good_html() -> str:
    """Page satisfying every technical rule."""
    return make_page()


@pytest.fixture
def minimal_html() -> str:
    """Page without title, description or H1."""
    return "<html><body><p>Hello</p></body></html>"


@pytest.fixture
def short_title_html() -> str:
    """10-char title, no description, one H1, no images; everything else present."""
    return make_page(title="Short Page", description=None, images="")


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest.fixture
def json_transport() -> Callable[..., httpx.MockTransport]:
    """Build a MockTransport that answers every request with one JSON payload."""
    def factory(payload: Any = None, status_code: int = 200, calls: list = None):
        def handler(request: httpx.Request) -> httpx.Response:
            if calls is not None:
                calls.append(request)
            return httpx.Response(status_code, json=payload if payload is not None else {})
        return httpx.MockTransport(handler)
    return factory


@pytest.fixture
def failing_transport() -> httpx.MockTransport:
    """Transport that always fails to connect."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.MockTransport(handler)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def session_factory():
    """In-memory SQLite shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory) -> AnalysisRepository:
    return AnalysisRepository(session_factory)


# ============================================================================
# Claude Fixtures
# ============================================================================

def claude_response(content: str = "# Report\n\nAll good.", success: bool = True, error: str = None):
    return AnalysisResponse(
        content=content,
        usage=TokenUsage(input_tokens=100, output_tokens=50),
        model="claude-test",
        stop_reason="end_turn" if success else "error",
        success=success,
        error=error,
    )


@pytest.fixture
def response_factory():
    return claude_response


@pytest.fixture
def mock_claude_client():
    """Mock Claude API client."""
    client = MagicMock()
    client.analyze = AsyncMock(return_value=claude_response())
    client.close = AsyncMock()
    client.get_usage_summary = MagicMock(return_value={
        "total_tokens": 150,
        "estimated_cost": 0.001,
    })
    return client


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
