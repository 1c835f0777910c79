"""Shared fixtures for on-page SEO tests."""

import httpx
import pytest

from onpage_seo.models import (
    Heading,
    PageImage,
    PageResources,
    PageSignals,
    Resource,
    SchemaMarkupSummary,
)

SAMPLE_URL = "https://example.com/web-development-guide"

SAMPLE_HTML = """
<html>
    <head>
        <title>Web Development Guide for Beginners</title>
        <meta name="description" content="A complete web development guide covering HTML, CSS and JavaScript.">
        <meta name="keywords" content="web, development">
        <link rel="canonical" href="/web-development-guide">
        <meta property="og:image" content="https://example.com/og.png">
        <meta property="og:title" content="Web Development Guide">
        <meta property="og:description" content="Learn web development step by step.">
        <link rel="stylesheet" href="/static/styles.min.css">
        <script src="/static/app.min.js"></script>
        <script type="application/ld+json">
            {"@context": "https://schema.org", "@type": "Article", "headline": "Guide"}
        </script>
    </head>
    <body>
        <div class="cookie-banner">We use cookies to improve your experience</div>
        <h1>Web Development Guide</h1>
        <p>This web development guide teaches you the basics.</p>
        <h2>Getting Started with Web Development</h2>
        <p>Pick an editor and a browser.</p>
        <h3>Tools</h3>
        <img src="/images/hero.webp" alt="Hero image">
        <img src="/images/diagram.png">
        <a href="/about">About</a>
        <a href="https://blog.example.com/post">Blog</a>
        <a href="https://developer.mozilla.org">MDN</a>
        <a href="#top">Top</a>
        <a href="mailto:hi@example.com">Mail</a>
        <a href="javascript:void(0)">Menu</a>
        <script>var tracking = "script text";</script>
    </body>
</html>
"""


def make_mock_client(html: str = SAMPLE_HTML, status_code: int = 200) -> httpx.AsyncClient:
    """AsyncClient that answers every request with the given page."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "HEAD":
            return httpx.Response(status_code)
        return httpx.Response(status_code, html=html)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def mock_client_factory():
    """Factory for AsyncClients serving a fixed page."""
    return make_mock_client


@pytest.fixture
def sample_html():
    return SAMPLE_HTML


@pytest.fixture
def sample_url():
    return SAMPLE_URL


@pytest.fixture
def good_signals():
    """Signals for a page that passes every check for "web development"."""
    chunk = "web development " + " ".join(["content"] * 78)
    body = " ".join([chunk] * 8)
    return PageSignals(
        url=SAMPLE_URL,
        title="Web Development Guide for Beginners",
        meta_description="A complete web development guide covering HTML, CSS and JavaScript.",
        canonical_url=SAMPLE_URL,
        og_image="https://example.com/og.png",
        og_title="Web Development Guide",
        og_description="Learn web development step by step.",
        content=body,
        headings=(
            Heading(1, "Web Development Guide"),
            Heading(2, "Why web development matters"),
            Heading(3, "Tools"),
        ),
        paragraphs=("Web development starts with a plan.", "More text."),
        images=(PageImage(src="https://example.com/images/hero.webp", alt="Hero", size=120_000),),
        internal_links=("https://example.com/about",),
        outbound_links=("https://developer.mozilla.org/",),
        resources=PageResources(
            js=(Resource("https://example.com/app.min.js"),),
            css=(Resource("https://example.com/styles.min.css"),),
        ),
        schema_markup=SchemaMarkupSummary(has_schema=True, schema_types=("Article",), schema_count=1),
    )


@pytest.fixture
def bare_signals():
    """Signals for a page with almost nothing on it."""
    return PageSignals(url="https://example.com/page", content="hello world")
