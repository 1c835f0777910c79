"""Page scraper that turns a URL into structured page signals."""

import logging
import re
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from urllib.parse import urljoin, urlparse

import httpx
import tldextract
from bs4 import BeautifulSoup

from onpage_seo.constants import (
    DEFAULT_REQUEST_HEADERS,
    EXCLUDED_LINK_PREFIXES,
    NOISE_SELECTORS,
)
from onpage_seo.exceptions import FetchError
from onpage_seo.heuristics import summarize_schema_markup
from onpage_seo.models import (
    Heading,
    PageImage,
    PageResources,
    PageSignals,
    Resource,
)

logger = logging.getLogger(__name__)

# Uses the bundled public suffix snapshot; never fetches the list at runtime
_domain_extractor = tldextract.TLDExtract(suffix_list_urls=())

_HEADING_RE = re.compile(r"^h[1-6]$")
_PROTECTED_TAGS = {"html", "head", "body"}
_NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]
# InvalidURL is raised while building the request and is not an HTTPError
_REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


def registrable_domain(url: str) -> str:
    """Return the registrable domain of a URL (``blog.example.co.uk`` -> ``example.co.uk``).

    Hosts without a public suffix (IP addresses, ``localhost``) are returned as-is.
    """
    extracted = _domain_extractor(url)
    if extracted.suffix and extracted.domain:
        return f"{extracted.domain}.{extracted.suffix}".lower()
    return (urlparse(url).hostname or "").lower()


def _collapse(text: str) -> str:
    return " ".join(text.split())


class PageScraper:
    """Fetches a page and extracts on-page SEO signals."""

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the scraper.

        Args:
            user_agent: Override for the default browser-like User-Agent
            timeout: Per-request timeout in seconds
            client: Shared AsyncClient; one is created per scrape when omitted
        """
        self.headers = dict(DEFAULT_REQUEST_HEADERS)
        if user_agent:
            self.headers["User-Agent"] = user_agent
        self.timeout = timeout
        self._client = client

    @asynccontextmanager
    async def _client_context(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            yield client

    async def scrape(self, url: str, keyphrase: str = "") -> PageSignals:
        """Fetch ``url`` and extract its page signals.

        Args:
            url: Page to analyze
            keyphrase: Target keyphrase, used for log context only

        Returns:
            PageSignals for the page

        Raises:
            FetchError: On network failure or a non-2xx response
        """
        logger.info(f"Scraping {url} for keyphrase {keyphrase!r}")

        async with self._client_context() as client:
            await self._probe(client, url)

            try:
                response = await client.get(url, headers=self.headers)
            except _REQUEST_ERRORS as e:
                logger.error(f"Request for {url} failed: {e}")
                raise FetchError(url, str(e) or e.__class__.__name__) from e

            if not response.is_success:
                logger.error(f"Fetching {url} returned HTTP {response.status_code}")
                raise FetchError(
                    url,
                    f"Failed to fetch page: {response.status_code} {response.reason_phrase}",
                    status_code=response.status_code,
                )

            html = response.text

        return self.extract_signals(html, url)

    async def _probe(self, client: httpx.AsyncClient, url: str) -> None:
        """Lightweight HEAD request; its outcome is logged and otherwise ignored."""
        try:
            head = await client.head(url, headers=self.headers)
            logger.info(f"HEAD {url} -> {head.status_code} {head.reason_phrase}")
        except _REQUEST_ERRORS as e:
            logger.warning(f"HEAD request for {url} failed: {e}")

    def extract_signals(self, html: str, url: str) -> PageSignals:
        """Parse HTML into PageSignals.

        Noise subtrees (cookie banners, chat widgets, popups, hidden nodes)
        are removed before any content is read.

        Args:
            html: Raw document
            url: Page URL, used to resolve relative links

        Returns:
            PageSignals extracted from the document
        """
        soup = BeautifulSoup(html, "html.parser")
        self._remove_noise(soup)

        schema_markup = summarize_schema_markup(
            script.string or script.get_text()
            for script in soup.find_all("script", attrs={"type": "application/ld+json"})
        )
        resources = self._extract_resources(soup, url)
        internal_links, outbound_links = self._extract_links(soup, url)

        # Script and style bodies are not visible text
        for tag in soup.find_all(_NON_CONTENT_TAGS):
            tag.decompose()

        body = soup.body or soup
        return PageSignals(
            url=url,
            title=self._extract_title(soup),
            meta_description=self._meta_content(soup, name="description")
            or self._meta_content(soup, prop="og:description"),
            meta_keywords=self._meta_content(soup, name="keywords"),
            canonical_url=self._extract_canonical(soup, url),
            og_image=self._meta_content(soup, prop="og:image"),
            og_title=self._meta_content(soup, prop="og:title"),
            og_description=self._meta_content(soup, prop="og:description"),
            content=_collapse(body.get_text(separator=" ")),
            headings=tuple(
                Heading(level=int(tag.name[1]), text=_collapse(tag.get_text(separator=" ")))
                for tag in soup.find_all(_HEADING_RE)
            ),
            paragraphs=tuple(
                text for text in (_collapse(p.get_text(separator=" ")) for p in soup.find_all("p"))
                if text
            ),
            images=self._extract_images(soup, url),
            internal_links=internal_links,
            outbound_links=outbound_links,
            resources=resources,
            schema_markup=schema_markup,
        )

    def _remove_noise(self, soup: BeautifulSoup) -> None:
        removed = 0
        for selector in NOISE_SELECTORS:
            for element in soup.select(selector):
                # An ancestor may already have been removed
                if element.decomposed or element.name in _PROTECTED_TAGS:
                    continue
                element.decompose()
                removed += 1
        if removed:
            logger.debug(f"Removed {removed} noise elements")

    @staticmethod
    def _meta_content(soup: BeautifulSoup, name: Optional[str] = None, prop: Optional[str] = None) -> str:
        attrs = {"name": name} if name else {"property": prop}
        tag = soup.find("meta", attrs=attrs)
        if tag and tag.get("content"):
            return tag["content"].strip()
        return ""

    def _extract_title(self, soup: BeautifulSoup) -> str:
        title = soup.find("title")
        title_text = _collapse(title.get_text()) if title else ""
        return title_text or self._meta_content(soup, prop="og:title")

    @staticmethod
    def _extract_canonical(soup: BeautifulSoup, url: str) -> str:
        canonical = soup.find("link", attrs={"rel": "canonical"})
        if canonical and canonical.get("href"):
            return urljoin(url, canonical["href"].strip())
        return url

    @staticmethod
    def _extract_images(soup: BeautifulSoup, url: str) -> tuple[PageImage, ...]:
        images = []
        for img in soup.find_all("img"):
            src = (img.get("src") or "").strip()
            if not src:
                continue
            images.append(PageImage(src=urljoin(url, src), alt=(img.get("alt") or "").strip()))
        return tuple(images)

    @staticmethod
    def _extract_resources(soup: BeautifulSoup, url: str) -> PageResources:
        js = [
            Resource(url=urljoin(url, script["src"].strip()))
            for script in soup.find_all("script", src=True)
            if script["src"].strip()
        ]
        css = [
            Resource(url=urljoin(url, link["href"].strip()))
            for link in soup.find_all("link", attrs={"rel": "stylesheet"}, href=True)
            if link["href"].strip()
        ]
        return PageResources(js=tuple(js), css=tuple(css))

    @staticmethod
    def _extract_links(soup: BeautifulSoup, url: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """Split anchors into internal and outbound absolute URLs.

        Internal means the same registrable domain regardless of scheme or
        subdomain. Fragment-only and script pseudo-protocol links are dropped,
        as are resolved URLs that are not http(s) (mailto:, tel:).
        """
        base_domain = registrable_domain(url)
        internal: dict[str, None] = {}
        outbound: dict[str, None] = {}

        for anchor in soup.find_all("a", href=True):
            href = anchor["href"].strip()
            if not href or href.lower().startswith(EXCLUDED_LINK_PREFIXES):
                continue

            try:
                absolute = urljoin(url, href)
                parsed = urlparse(absolute)
            except ValueError:
                continue

            if parsed.scheme not in ("http", "https") or not parsed.hostname:
                continue

            if registrable_domain(absolute) == base_domain:
                internal[absolute] = None
            else:
                if not (parsed.path or parsed.query or parsed.fragment):
                    absolute += "/"
                outbound[absolute] = None

        return tuple(internal), tuple(outbound)


async def scrape_web_page(url: str, keyphrase: str = "", **kwargs) -> PageSignals:
    """Scrape a page with a one-off PageScraper."""
    return await PageScraper(**kwargs).scrape(url, keyphrase)
