# src/onpage_seo/constants.py
"""Centralized constants for the on-page SEO analyzer.

Lookup tables are exposed as read-only mappings keyed by ``CheckName`` so the
check engine receives them as configuration instead of mutating shared state.
For user-configurable thresholds, see config.py and AnalysisThresholds.
"""

from enum import Enum
from types import MappingProxyType


class CheckName(str, Enum):
    """Closed set of check identifiers. Values are the stable check titles."""

    KEYPHRASE_IN_TITLE = "Keyphrase in Title"
    KEYPHRASE_IN_META_DESCRIPTION = "Keyphrase in Meta Description"
    KEYPHRASE_IN_URL = "Keyphrase in URL"
    CONTENT_LENGTH = "Content Length"
    KEYPHRASE_DENSITY = "Keyphrase Density"
    KEYPHRASE_IN_INTRODUCTION = "Keyphrase in Introduction"
    KEYPHRASE_IN_H1 = "Keyphrase in H1 Heading"
    KEYPHRASE_IN_H2 = "Keyphrase in H2 Headings"
    IMAGE_ALT_ATTRIBUTES = "Image Alt Attributes"
    INTERNAL_LINKS = "Internal Links"
    OUTBOUND_LINKS = "Outbound Links"
    NEXT_GEN_IMAGE_FORMATS = "Next-Gen Image Formats"
    OG_IMAGE = "OG Image"
    OG_TITLE_AND_DESCRIPTION = "OG Title and Description"
    HEADING_HIERARCHY = "Heading Hierarchy"
    CODE_MINIFICATION = "Code Minification"
    SCHEMA_MARKUP = "Schema Markup"
    IMAGE_FILE_SIZE = "Image File Size"


# =============================================================================
# Scoring
# =============================================================================

CHECK_PRIORITIES = MappingProxyType({
    CheckName.KEYPHRASE_IN_TITLE: "high",
    CheckName.KEYPHRASE_IN_META_DESCRIPTION: "high",
    CheckName.KEYPHRASE_IN_URL: "medium",
    CheckName.CONTENT_LENGTH: "high",
    CheckName.KEYPHRASE_DENSITY: "medium",
    CheckName.KEYPHRASE_IN_INTRODUCTION: "medium",
    CheckName.IMAGE_ALT_ATTRIBUTES: "low",
    CheckName.INTERNAL_LINKS: "medium",
    CheckName.OUTBOUND_LINKS: "low",
    CheckName.NEXT_GEN_IMAGE_FORMATS: "low",
    CheckName.OG_IMAGE: "medium",
    CheckName.OG_TITLE_AND_DESCRIPTION: "medium",
    CheckName.KEYPHRASE_IN_H1: "high",
    CheckName.KEYPHRASE_IN_H2: "medium",
    CheckName.HEADING_HIERARCHY: "high",
    CheckName.CODE_MINIFICATION: "low",
    CheckName.SCHEMA_MARKUP: "medium",
    CheckName.IMAGE_FILE_SIZE: "medium",
})

PRIORITY_WEIGHTS = MappingProxyType({
    "high": 3,
    "medium": 2,
    "low": 1,
})

DEFAULT_PRIORITY = "medium"

SUCCESS_MESSAGES = MappingProxyType({
    CheckName.KEYPHRASE_IN_TITLE: "Great! Your title contains the keyphrase.",
    CheckName.KEYPHRASE_IN_META_DESCRIPTION: "Excellent! Your meta description includes the keyphrase.",
    CheckName.KEYPHRASE_IN_URL: "Good job! The keyphrase is present in the URL slug.",
    CheckName.CONTENT_LENGTH: "Well done! Your content meets the recommended length.",
    CheckName.KEYPHRASE_DENSITY: "Perfect! Keyphrase density is within the optimal range.",
    CheckName.KEYPHRASE_IN_INTRODUCTION: "Nice! The keyphrase appears in the first paragraph.",
    CheckName.IMAGE_ALT_ATTRIBUTES: "Good! All relevant images seem to have alt text.",
    CheckName.INTERNAL_LINKS: "Great! You have internal links on the page.",
    CheckName.OUTBOUND_LINKS: "Good! Outbound links are present.",
    CheckName.NEXT_GEN_IMAGE_FORMATS: "Nice! Your images are in next-gen formats.",
    CheckName.OG_IMAGE: "Excellent! An Open Graph image is set.",
    CheckName.OG_TITLE_AND_DESCRIPTION: "Perfect! Open Graph title and description are present.",
    CheckName.KEYPHRASE_IN_H1: "Great! The main H1 heading includes the keyphrase.",
    CheckName.KEYPHRASE_IN_H2: "Good! The keyphrase is found in at least one H2 heading.",
    CheckName.HEADING_HIERARCHY: "Excellent! Your heading structure follows a logical hierarchy.",
    CheckName.CODE_MINIFICATION: "Good! JS and CSS files appear to be minified.",
    CheckName.SCHEMA_MARKUP: "Great! Schema.org markup was detected on the page.",
    CheckName.IMAGE_FILE_SIZE: (
        "Great job! All your images are well-optimized, keeping your page loading times fast."
    ),
})

# Checks whose recommendation is a ready-to-paste string rather than advice
COPYABLE_CHECKS = frozenset({
    CheckName.KEYPHRASE_IN_TITLE,
    CheckName.KEYPHRASE_IN_META_DESCRIPTION,
    CheckName.KEYPHRASE_IN_URL,
    CheckName.KEYPHRASE_IN_INTRODUCTION,
    CheckName.KEYPHRASE_IN_H1,
    CheckName.KEYPHRASE_IN_H2,
    CheckName.IMAGE_ALT_ATTRIBUTES,
})


# =============================================================================
# Scraper Constants
# =============================================================================

DEFAULT_REQUEST_HEADERS = MappingProxyType({
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
})

# CSS selectors for elements that pollute content analysis
NOISE_SELECTORS = (
    # Cookie and consent banners
    ".cookie-banner", ".cookie-consent", "#cookie-notice", ".cookie-policy",
    '[class*="cookie"]', '[id*="cookie"]', '[aria-label*="cookie"]',
    '[class*="consent"]', '[id*="consent"]',
    # Chat widgets and support tools
    ".chat-widget", ".chatbot", "#intercom-container", ".crisp-client",
    ".livechat-widget", ".drift-widget", ".zendesk-chat",
    # Popups and modals
    ".popup", ".modal", ".notification-bar", ".promo-banner",
    '[role="dialog"]:not([aria-label*="content"])',
    '[aria-hidden="true"]',
)

# Link prefixes that never point at a crawlable page
EXCLUDED_LINK_PREFIXES = ("#", "javascript:", "data:", "vbscript:")


# =============================================================================
# Heuristic Constants
# =============================================================================

AUTO_MINIFYING_CDNS = (
    "cdnjs.cloudflare.com",
    "unpkg.com",
    "jsdelivr.net",
    "googleapis.com",
    "gstatic.com",
    "assets.webflow.com",
    "global-uploads.webflow.com",
)

NEXT_GEN_IMAGE_EXTENSIONS = (".webp", ".avif", ".heic")

BYTES_PER_KB = 1024
