"""Heuristic analyzers for page resources, headings and structured data."""

import json
import logging
import re
from typing import Iterable, Sequence

from onpage_seo.constants import AUTO_MINIFYING_CDNS, NEXT_GEN_IMAGE_EXTENSIONS
from onpage_seo.models import (
    Heading,
    HierarchyResult,
    MinificationResult,
    Resource,
    SchemaMarkupSummary,
)

logger = logging.getLogger(__name__)

_BUILD_TOOL_RE = re.compile(r"\.(js|css)\?v=|/build/|/dist/|\.bundle\.|\.chunk\.")
_HASHED_NAME_RE = re.compile(r"\.[a-f0-9]{8,}\.(js|css)$")


def is_likely_minified(url: str) -> bool:
    """Guess whether a JS/CSS URL serves minified code.

    Signals, any of which is sufficient:
    1. ``.min.`` in the file name
    2. an auto-minifying CDN origin
    3. build tool output (``/dist/``, ``/build/``, ``.bundle.``, ``.chunk.``, ``?v=``)
    4. a content-hash segment before the extension
    """
    url_lower = url.lower()

    if ".min." in url_lower:
        return True

    if any(cdn in url_lower for cdn in AUTO_MINIFYING_CDNS):
        return True

    if _BUILD_TOOL_RE.search(url_lower):
        return True

    if _HASHED_NAME_RE.search(url_lower):
        return True

    return False


def _url_of(resource) -> str:
    if isinstance(resource, Resource):
        return resource.url
    if isinstance(resource, dict):
        return resource.get("url", "")
    return str(resource)


def analyze_minification(
    js_files: Iterable,
    css_files: Iterable,
    min_ratio: float = 0.8,
) -> MinificationResult:
    """Classify JS and CSS files and decide whether enough are minified.

    Args:
        js_files: Resources (or ``{"url": ...}`` dicts) for scripts
        css_files: Resources (or ``{"url": ...}`` dicts) for stylesheets
        min_ratio: Minimum minified share of all files to pass

    Returns:
        MinificationResult; passes when there are no files at all
    """
    js_urls = [_url_of(f) for f in js_files]
    css_urls = [_url_of(f) for f in css_files]

    js_minified = sum(1 for url in js_urls if is_likely_minified(url))
    css_minified = sum(1 for url in css_urls if is_likely_minified(url))
    total_js = len(js_urls)
    total_css = len(css_urls)

    details = []
    if total_js == 0 and total_css == 0:
        passed = True
        details.append("No external JS or CSS files detected")
    else:
        ratio = (js_minified + css_minified) / (total_js + total_css)
        passed = ratio >= min_ratio
        if total_js > 0:
            details.append(f"JS files: {js_minified}/{total_js} minified")
        if total_css > 0:
            details.append(f"CSS files: {css_minified}/{total_css} minified")

    return MinificationResult(
        passed=passed,
        js_minified=js_minified,
        css_minified=css_minified,
        total_js=total_js,
        total_css=total_css,
        details=tuple(details),
    )


def validate_heading_hierarchy(headings: Sequence[Heading]) -> HierarchyResult:
    """Check for exactly one H1 and no skipped heading levels.

    Gaps are looked for in the sorted list of levels present, so an H3 that
    appears before its H2 in the document is not a gap.
    """
    h1_count = sum(1 for h in headings if h.level == 1)

    if h1_count == 0:
        return HierarchyResult(
            passed=False,
            message="Missing H1 heading. Every page should have exactly one H1.",
            h1_count=0,
        )

    if h1_count > 1:
        return HierarchyResult(
            passed=False,
            message=f"Found {h1_count} H1 headings. Every page should have exactly one H1.",
            h1_count=h1_count,
        )

    levels = sorted(h.level for h in headings)
    for previous, current in zip(levels, levels[1:]):
        if current > previous + 1:
            return HierarchyResult(
                passed=False,
                message=(
                    f"Heading hierarchy has gaps (H{previous} followed by H{current}). "
                    "Headings should follow a logical order (H1, H2, H3, etc.)."
                ),
                h1_count=h1_count,
            )

    return HierarchyResult(
        passed=True,
        message="Excellent! Your heading structure follows a logical hierarchy.",
        h1_count=h1_count,
    )


def summarize_schema_markup(json_ld_blocks: Iterable[str]) -> SchemaMarkupSummary:
    """Summarize raw ``application/ld+json`` block contents.

    Blocks that fail to parse are skipped. Top-level arrays and ``@graph``
    containers contribute each of their typed items. Types are deduplicated
    in first-seen order.
    """
    schema_types: list[str] = []
    schema_count = 0

    for raw in json_ld_blocks:
        try:
            data = json.loads(raw or "{}")
        except (json.JSONDecodeError, ValueError) as e:
            logger.debug(f"Skipping unparsable JSON-LD block: {e}")
            continue

        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                continue
            candidates = item.get("@graph") if isinstance(item.get("@graph"), list) else [item]
            for node in candidates:
                if not isinstance(node, dict):
                    continue
                schema_type = node.get("@type")
                if not schema_type:
                    continue
                schema_count += 1
                types = schema_type if isinstance(schema_type, list) else [schema_type]
                for t in types:
                    if t and str(t) not in schema_types:
                        schema_types.append(str(t))

    return SchemaMarkupSummary(
        has_schema=schema_count > 0,
        schema_types=tuple(schema_types),
        schema_count=schema_count,
    )


def is_next_gen_image(src: str) -> bool:
    """True when the image path ends in a next-gen extension."""
    path = src.lower().split("?", 1)[0].split("#", 1)[0]
    return path.endswith(NEXT_GEN_IMAGE_EXTENSIONS)


def shorten_file_name(filename: str, max_length: int = 10) -> str:
    """Shorten a file name for display while keeping its extension.

    >>> shorten_file_name("a-very-long-image-name.png")
    'a-very-lon....png'
    """
    last_dot = filename.rfind(".")

    if last_dot <= 0:
        return filename if len(filename) <= max_length else filename[:max_length] + "..."

    name, extension = filename[:last_dot], filename[last_dot:]
    if len(name) <= max_length:
        return filename
    return name[:max_length] + "..." + extension
