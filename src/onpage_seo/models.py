"""Data models for on-page SEO analysis."""

from dataclasses import dataclass, field, replace
from typing import Any, Optional


@dataclass(frozen=True)
class Heading:
    """A heading element (h1-h6) in document order."""

    level: int
    text: str


@dataclass(frozen=True)
class PageImage:
    """An <img> element found on the page."""

    src: str
    alt: str = ""
    size: Optional[int] = None  # bytes, when known
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class Resource:
    """An external JS or CSS file referenced by the page."""

    url: str
    size: Optional[int] = None


@dataclass(frozen=True)
class PageResources:
    """External scripts and stylesheets."""

    js: tuple[Resource, ...] = ()
    css: tuple[Resource, ...] = ()


@dataclass(frozen=True)
class SchemaMarkupSummary:
    """Summary of the JSON-LD blocks found on the page."""

    has_schema: bool = False
    schema_types: tuple[str, ...] = ()
    schema_count: int = 0


@dataclass(frozen=True)
class PageSignals:
    """Structured signals extracted from a fetched page.

    Produced once per analysis by the scraper and never modified afterwards;
    ``with_assets`` returns a new instance.
    """

    url: str
    title: str = ""
    meta_description: str = ""
    meta_keywords: str = ""
    canonical_url: str = ""
    og_image: str = ""
    og_title: str = ""
    og_description: str = ""
    content: str = ""
    headings: tuple[Heading, ...] = ()
    paragraphs: tuple[str, ...] = ()
    images: tuple[PageImage, ...] = ()
    internal_links: tuple[str, ...] = ()
    outbound_links: tuple[str, ...] = ()
    resources: PageResources = field(default_factory=PageResources)
    schema_markup: SchemaMarkupSummary = field(default_factory=SchemaMarkupSummary)

    def headings_at(self, level: int) -> list[Heading]:
        """Return headings of the given level in document order."""
        return [h for h in self.headings if h.level == level]

    def with_assets(self, assets: "tuple[PageAsset, ...]") -> "PageSignals":
        """Return a copy whose images carry sizes and MIME types from host assets.

        Assets are matched by exact URL first, then by file name. Alt text is
        always the one in the served HTML.
        """
        if not assets:
            return self

        by_url = {asset.url: asset for asset in assets}
        by_name = {file_name_from_url(asset.url): asset for asset in assets}

        enriched = []
        for image in self.images:
            asset = by_url.get(image.src) or by_name.get(file_name_from_url(image.src))
            if asset is None:
                enriched.append(image)
                continue
            enriched.append(replace(
                image,
                size=image.size if image.size is not None else asset.size,
                mime_type=image.mime_type or asset.mime_type,
            ))
        return replace(self, images=tuple(enriched))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "url": self.url,
            "title": self.title,
            "metaDescription": self.meta_description,
            "metaKeywords": self.meta_keywords,
            "canonicalUrl": self.canonical_url,
            "ogImage": self.og_image,
            "ogTitle": self.og_title,
            "ogDescription": self.og_description,
            "content": self.content,
            "headings": [{"level": h.level, "text": h.text} for h in self.headings],
            "paragraphs": list(self.paragraphs),
            "images": [
                {k: v for k, v in (("src", img.src), ("alt", img.alt), ("size", img.size))
                 if v is not None}
                for img in self.images
            ],
            "internalLinks": list(self.internal_links),
            "outboundLinks": list(self.outbound_links),
            "resources": {
                "js": [{"url": r.url} for r in self.resources.js],
                "css": [{"url": r.url} for r in self.resources.css],
            },
            "schemaMarkup": {
                "hasSchema": self.schema_markup.has_schema,
                "schemaTypes": list(self.schema_markup.schema_types),
                "schemaCount": self.schema_markup.schema_count,
            },
        }


def file_name_from_url(url: str) -> str:
    """Last path segment of a URL, without its query string."""
    return url.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class H2Element:
    """An H2 element reported by the host with a stable identity."""

    id: str
    index: int
    text: str


@dataclass(frozen=True)
class PageAsset:
    """An asset known to the host, used to enrich scraped images."""

    url: str
    alt: str = ""
    size: Optional[int] = None
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class HostOverride:
    """Higher-fidelity page data supplied by the hosting design surface.

    Non-empty values take precedence over scraped signals. ``h2_elements`` is
    ``None`` when the host could not report H2s, and an empty tuple when it
    reported that the page has none.
    """

    title: Optional[str] = None
    meta_description: Optional[str] = None
    canonical_url: Optional[str] = None
    og_image: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    uses_title_as_og_title: bool = False
    uses_description_as_og_description: bool = False
    h2_elements: Optional[tuple[H2Element, ...]] = None
    page_assets: tuple[PageAsset, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HostOverride":
        """Build from a host payload using its camelCase field names."""
        h2_raw = data.get("h2Elements")
        h2_elements = None
        if h2_raw is not None:
            h2_elements = tuple(
                H2Element(
                    id=str(item.get("id", "")),
                    index=int(item.get("index", position)),
                    text=item.get("text") or "",
                )
                for position, item in enumerate(h2_raw)
            )

        page_assets = tuple(
            PageAsset(
                url=item.get("url", ""),
                alt=item.get("alt") or "",
                size=item.get("size"),
                mime_type=item.get("mimeType"),
            )
            for item in data.get("pageAssets") or []
        )

        return cls(
            title=data.get("title"),
            meta_description=data.get("metaDescription"),
            canonical_url=data.get("canonicalUrl"),
            og_image=data.get("openGraphImage") or data.get("ogImage"),
            og_title=data.get("openGraphTitle") or data.get("ogTitle"),
            og_description=data.get("openGraphDescription") or data.get("ogDescription"),
            uses_title_as_og_title=bool(data.get("usesTitleAsOpenGraphTitle", False)),
            uses_description_as_og_description=bool(
                data.get("usesDescriptionAsOpenGraphDescription", False)
            ),
            h2_elements=h2_elements,
            page_assets=page_assets,
        )


@dataclass(frozen=True)
class KeywordResult:
    """Outcome of matching a single keyword."""

    keyword: str
    passed: bool
    is_primary: bool

    def to_dict(self) -> dict[str, Any]:
        return {"keyword": self.keyword, "passed": self.passed, "isPrimary": self.is_primary}


@dataclass(frozen=True)
class KeywordMatchResult:
    """Outcome of matching a primary keyword with secondary fallbacks."""

    found: bool
    matched_keyword: Optional[str] = None
    keyword_results: tuple[KeywordResult, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        result = {
            "found": self.found,
            "keywordResults": [r.to_dict() for r in self.keyword_results],
        }
        if self.matched_keyword is not None:
            result["matchedKeyword"] = self.matched_keyword
        return result


@dataclass(frozen=True)
class MinificationResult:
    """Minification classification of a page's JS and CSS files."""

    passed: bool
    js_minified: int
    css_minified: int
    total_js: int
    total_css: int
    details: tuple[str, ...] = ()


@dataclass(frozen=True)
class HierarchyResult:
    """Heading hierarchy validation outcome."""

    passed: bool
    message: str
    h1_count: int = 0


@dataclass
class ImageDetail:
    """An image itemized in a failing image check."""

    url: str
    name: str
    short_name: str
    size: int  # KB, rounded
    mime_type: str
    alt: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "name": self.name,
            "shortName": self.short_name,
            "size": self.size,
            "mimeType": self.mime_type,
            "alt": self.alt,
        }


@dataclass
class H2Recommendation:
    """A rewrite suggestion targeted at one H2 element."""

    h2_index: int
    h2_text: str
    suggestion: str

    def to_dict(self) -> dict[str, Any]:
        return {"h2Index": self.h2_index, "h2Text": self.h2_text, "suggestion": self.suggestion}


@dataclass
class Check:
    """Result of a single SEO check."""

    title: str
    description: str
    passed: bool
    priority: str
    recommendation: Optional[str] = None
    matched_keyword: Optional[str] = None
    image_data: Optional[list[ImageDetail]] = None
    h2_recommendations: Optional[list[H2Recommendation]] = None

    # Inputs kept for the recommendation pass; not serialized
    context: str = field(default="", repr=False, compare=False)
    h2_elements: Optional[tuple[H2Element, ...]] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a flat dictionary, omitting absent optional fields."""
        result: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "passed": self.passed,
            "priority": self.priority,
        }
        if self.recommendation is not None:
            result["recommendation"] = self.recommendation
        if self.matched_keyword is not None:
            result["matchedKeyword"] = self.matched_keyword
        if self.image_data is not None:
            result["imageData"] = [item.to_dict() for item in self.image_data]
        if self.h2_recommendations is not None:
            result["h2Recommendations"] = [item.to_dict() for item in self.h2_recommendations]
        return result


@dataclass
class AnalysisReport:
    """Scored result of analyzing one page."""

    keyphrase: str
    url: str
    is_home_page: bool
    score: int
    total_checks: int
    passed_checks: int
    failed_checks: int
    checks: list[Check] = field(default_factory=list)

    @property
    def failed(self) -> list[Check]:
        return [check for check in self.checks if not check.passed]

    def get_check(self, title: str) -> Optional[Check]:
        """Find a check by its title."""
        for check in self.checks:
            if check.title == title:
                return check
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the flat JSON structure consumed by report renderers."""
        return {
            "keyphrase": self.keyphrase,
            "url": self.url,
            "isHomePage": self.is_home_page,
            "score": self.score,
            "totalChecks": self.total_checks,
            "passedChecks": self.passed_checks,
            "failedChecks": self.failed_checks,
            "checks": [check.to_dict() for check in self.checks],
        }
