"""Check engine: evaluates on-page rules against scraped page signals."""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional, Sequence

from onpage_seo.config import AnalysisThresholds
from onpage_seo.constants import (
    BYTES_PER_KB,
    CHECK_PRIORITIES,
    DEFAULT_PRIORITY,
    PRIORITY_WEIGHTS,
    SUCCESS_MESSAGES,
    CheckName,
)
from onpage_seo.exceptions import PartialDataError
from onpage_seo.heuristics import (
    analyze_minification,
    is_next_gen_image,
    shorten_file_name,
    validate_heading_hierarchy,
)
from onpage_seo.keywords import (
    SecondaryKeywords,
    calculate_combined_keyphrase_density,
    check_keyword_match,
    check_url_keyword_match,
    count_words,
    parse_secondary_keywords,
)
from onpage_seo.models import (
    AnalysisReport,
    Check,
    HostOverride,
    ImageDetail,
    KeywordMatchResult,
    PageImage,
    PageSignals,
    file_name_from_url,
)

logger = logging.getLogger(__name__)


def priority_weight(priority: str, weights: Mapping[str, int] = PRIORITY_WEIGHTS) -> int:
    """Weight of a priority; unknown priorities count as medium."""
    return weights.get(priority, weights[DEFAULT_PRIORITY])


def calculate_seo_score(checks: Sequence[Check], weights: Mapping[str, int] = PRIORITY_WEIGHTS) -> int:
    """Priority-weighted share of passed checks, 0-100.

    Halves round up, so 62.5 scores 63.
    """
    if not checks:
        return 0

    total = sum(priority_weight(check.priority, weights) for check in checks)
    earned = sum(priority_weight(check.priority, weights) for check in checks if check.passed)

    if total == 0:
        return 0
    return int(math.floor(earned / total * 100 + 0.5))


def build_report(
    checks: list[Check],
    keyphrase: str,
    url: str,
    is_home_page: bool,
    weights: Mapping[str, int] = PRIORITY_WEIGHTS,
) -> AnalysisReport:
    """Assemble an AnalysisReport with consistent counts and score."""
    passed = sum(1 for check in checks if check.passed)
    return AnalysisReport(
        keyphrase=keyphrase,
        url=url,
        is_home_page=is_home_page,
        score=calculate_seo_score(checks, weights),
        total_checks=len(checks),
        passed_checks=passed,
        failed_checks=len(checks) - passed,
        checks=checks,
    )


def first_non_empty(*accessors: Callable[[], Optional[str]]) -> str:
    """Evaluate accessors in order and return the first non-blank value."""
    for accessor in accessors:
        value = accessor()
        if value and value.strip():
            return value
    return ""


@dataclass(frozen=True)
class CheckEngineConfig:
    """Lookup tables and thresholds the engine evaluates with."""

    # Python 3.11 dataclasses reject mappingproxy defaults
    priorities: Mapping[str, str] = field(default_factory=lambda: CHECK_PRIORITIES)
    weights: Mapping[str, int] = field(default_factory=lambda: PRIORITY_WEIGHTS)
    success_messages: Mapping[str, str] = field(default_factory=lambda: SUCCESS_MESSAGES)
    thresholds: AnalysisThresholds = field(default_factory=AnalysisThresholds)


@dataclass(frozen=True)
class _Inputs:
    signals: PageSignals
    keyphrase: str
    url: str
    is_home_page: bool
    secondary_keywords: tuple[str, ...]
    override: Optional[HostOverride]

    @property
    def secondary_suffix(self) -> str:
        return " or any secondary keywords" if self.secondary_keywords else ""


class CheckEngine:
    """Runs every on-page check and scores the result.

    Checks are independent: a check that raises degrades to a failed check
    and the remaining checks still run.
    """

    def __init__(self, config: Optional[CheckEngineConfig] = None):
        self.config = config or CheckEngineConfig()
        self._evaluators: tuple[tuple[CheckName, Callable[[_Inputs], Check]], ...] = (
            (CheckName.KEYPHRASE_IN_TITLE, self._check_title),
            (CheckName.KEYPHRASE_IN_META_DESCRIPTION, self._check_meta_description),
            (CheckName.KEYPHRASE_IN_URL, self._check_url),
            (CheckName.CONTENT_LENGTH, self._check_content_length),
            (CheckName.KEYPHRASE_DENSITY, self._check_density),
            (CheckName.KEYPHRASE_IN_INTRODUCTION, self._check_introduction),
            (CheckName.KEYPHRASE_IN_H1, self._check_h1),
            (CheckName.KEYPHRASE_IN_H2, self._check_h2),
            (CheckName.IMAGE_ALT_ATTRIBUTES, self._check_image_alt),
            (CheckName.INTERNAL_LINKS, self._check_internal_links),
            (CheckName.OUTBOUND_LINKS, self._check_outbound_links),
            (CheckName.NEXT_GEN_IMAGE_FORMATS, self._check_next_gen_formats),
            (CheckName.OG_IMAGE, self._check_og_image),
            (CheckName.OG_TITLE_AND_DESCRIPTION, self._check_og_title_description),
            (CheckName.HEADING_HIERARCHY, self._check_heading_hierarchy),
            (CheckName.CODE_MINIFICATION, self._check_minification),
            (CheckName.SCHEMA_MARKUP, self._check_schema_markup),
            (CheckName.IMAGE_FILE_SIZE, self._check_image_file_size),
        )

    @property
    def thresholds(self) -> AnalysisThresholds:
        return self.config.thresholds

    def evaluate(
        self,
        signals: PageSignals,
        keyphrase: str,
        url: str,
        is_home_page: bool = False,
        secondary_keywords: SecondaryKeywords = None,
        host_override: Optional[HostOverride] = None,
    ) -> AnalysisReport:
        """Evaluate all checks for a page.

        Args:
            signals: Scraped page signals
            keyphrase: Primary keyphrase
            url: Analyzed URL
            is_home_page: Homepages need less body text
            secondary_keywords: Comma-separated string or iterable of fallbacks
            host_override: Optional higher-fidelity data from the host

        Returns:
            AnalysisReport with one check per rule, in a fixed order
        """
        if host_override is not None and host_override.page_assets:
            signals = signals.with_assets(host_override.page_assets)

        inputs = _Inputs(
            signals=signals,
            keyphrase=keyphrase or "",
            url=url or signals.url,
            is_home_page=is_home_page,
            secondary_keywords=tuple(parse_secondary_keywords(secondary_keywords)),
            override=host_override,
        )

        checks = [self._run(name, evaluator, inputs) for name, evaluator in self._evaluators]
        return build_report(checks, inputs.keyphrase, inputs.url, is_home_page, self.config.weights)

    def _run(self, name: CheckName, evaluator: Callable[[_Inputs], Check], inputs: _Inputs) -> Check:
        try:
            return evaluator(inputs)
        except PartialDataError as e:
            return self._make(name, False, "", f"{e}.")
        except Exception as e:
            logger.exception(f"Check '{name.value}' could not be evaluated")
            return self._make(name, False, "", f"Unable to evaluate {name.value}: {e}")

    def _make(
        self,
        name: CheckName,
        passed: bool,
        success: str,
        failure: str,
        context: str = "",
        matched_keyword: Optional[str] = None,
        **extra,
    ) -> Check:
        return Check(
            title=name.value,
            description=success if passed else failure,
            passed=passed,
            priority=self.config.priorities.get(name, DEFAULT_PRIORITY),
            matched_keyword=matched_keyword if passed else None,
            context=context,
            **extra,
        )

    def _success(self, name: CheckName) -> str:
        return self.config.success_messages.get(name, f"Check passed: {name.value}")

    def _keyword_check(
        self,
        name: CheckName,
        text: str,
        inputs: _Inputs,
        success: Callable[[str], str],
        failure: str,
        match: Optional[KeywordMatchResult] = None,
        **extra,
    ) -> Check:
        if match is None:
            match = check_keyword_match(text, inputs.keyphrase, inputs.secondary_keywords)
        return self._make(
            name,
            match.found,
            success(match.matched_keyword or inputs.keyphrase),
            failure,
            context=text,
            matched_keyword=match.matched_keyword,
            **extra,
        )

    # -- Keyword placement -------------------------------------------------

    def _check_title(self, inputs: _Inputs) -> Check:
        override = inputs.override
        title = first_non_empty(
            lambda: override.title if override else None,
            lambda: inputs.signals.title,
        )
        if not title:
            raise PartialDataError("page title", "No page title found")
        return self._keyword_check(
            CheckName.KEYPHRASE_IN_TITLE,
            title,
            inputs,
            lambda kw: f'Great! Your title contains the keyword "{kw}".',
            f'Your title does not contain the keyphrase "{inputs.keyphrase}"{inputs.secondary_suffix}.',
        )

    def _check_meta_description(self, inputs: _Inputs) -> Check:
        override = inputs.override
        description = first_non_empty(
            lambda: override.meta_description if override else None,
            lambda: inputs.signals.meta_description,
        )
        if not description:
            raise PartialDataError("meta description", "No meta description found")
        return self._keyword_check(
            CheckName.KEYPHRASE_IN_META_DESCRIPTION,
            description,
            inputs,
            lambda kw: f'Great! Your meta description contains the keyword "{kw}".',
            f'Keyphrase "{inputs.keyphrase}"{inputs.secondary_suffix} not found in meta description: '
            f'"{description}"',
        )

    def _check_url(self, inputs: _Inputs) -> Check:
        override = inputs.override
        url = first_non_empty(
            lambda: override.canonical_url if override else None,
            lambda: inputs.url,
        )
        match = check_url_keyword_match(url, inputs.keyphrase, inputs.secondary_keywords)
        return self._keyword_check(
            CheckName.KEYPHRASE_IN_URL,
            url,
            inputs,
            lambda kw: f'Good job! The keyword "{kw}" is present in the URL slug.',
            f'The URL "{url}" does not contain the keyphrase "{inputs.keyphrase}"{inputs.secondary_suffix}.',
            match=match,
        )

    def _check_introduction(self, inputs: _Inputs) -> Check:
        paragraphs = inputs.signals.paragraphs
        first_paragraph = paragraphs[0] if paragraphs else ""
        if not first_paragraph:
            raise PartialDataError("introduction", "No introduction paragraph found")
        return self._keyword_check(
            CheckName.KEYPHRASE_IN_INTRODUCTION,
            first_paragraph,
            inputs,
            lambda kw: f'Nice! The keyword "{kw}" appears in the first paragraph.',
            f'Keyphrase "{inputs.keyphrase}"{inputs.secondary_suffix} not found in the introduction.',
        )

    def _check_h1(self, inputs: _Inputs) -> Check:
        h1s = inputs.signals.headings_at(1)
        h1_text = h1s[0].text if h1s else ""
        if not h1_text:
            raise PartialDataError("H1 heading", "No H1 heading found")
        return self._keyword_check(
            CheckName.KEYPHRASE_IN_H1,
            h1_text,
            inputs,
            lambda kw: f'Great! The main H1 heading includes the keyword "{kw}".',
            f'The H1 heading "{h1_text}" does not contain the keyphrase '
            f'"{inputs.keyphrase}"{inputs.secondary_suffix}.',
        )

    def _check_h2(self, inputs: _Inputs) -> Check:
        """Match against host-reported H2 elements when available.

        An empty host list is a real "0 found" result. Without a host list
        the scraped H2 text is used and per-element suggestions are not
        possible.
        """
        override = inputs.override
        elements = override.h2_elements if override is not None else None

        if elements is not None:
            h2_text = " ".join(e.text.strip() for e in elements if e.text and e.text.strip())
            count = len(elements)
        else:
            scraped = inputs.signals.headings_at(2)
            h2_text = " ".join(h.text for h in scraped if h.text)
            count = len(scraped)
            if not h2_text:
                raise PartialDataError("H2 headings", "No H2 headings found")

        return self._keyword_check(
            CheckName.KEYPHRASE_IN_H2,
            h2_text,
            inputs,
            lambda kw: f'Good! The keyword "{kw}" is found in at least one H2 heading.',
            f'H2 headings do not contain the keyphrase "{inputs.keyphrase}"'
            f'{inputs.secondary_suffix} ({count} found).',
            h2_elements=elements,
        )

    # -- Content -----------------------------------------------------------

    def _check_content_length(self, inputs: _Inputs) -> Check:
        word_count = count_words(inputs.signals.content)
        minimum = (
            self.thresholds.min_words_homepage if inputs.is_home_page
            else self.thresholds.min_words_page
        )
        page_role = "(homepage)" if inputs.is_home_page else "(regular page)"
        return self._make(
            CheckName.CONTENT_LENGTH,
            word_count >= minimum,
            f"Well done! Your content has {word_count} words, which meets the threshold of "
            f"{minimum} words {page_role}.",
            f"Content length is {word_count} words, which is below the recommended minimum of "
            f"{minimum} words {page_role}.",
            context=f"Current word count: {word_count}",
        )

    def _check_density(self, inputs: _Inputs) -> Check:
        density = calculate_combined_keyphrase_density(
            inputs.signals.content, inputs.keyphrase, inputs.secondary_keywords
        )
        low = self.thresholds.min_keyphrase_density
        high = self.thresholds.max_keyphrase_density

        failure = f"Keyphrase density is {density:.2f}%. "
        if density < low:
            failure += (
                f"Consider using the keyphrase more often to meet the minimum recommended "
                f"density of {low}%."
            )
        elif density > high:
            failure += (
                f"Consider using the keyphrase less often to avoid keyword stuffing. "
                f"The recommended maximum is {high}%."
            )

        return self._make(
            CheckName.KEYPHRASE_DENSITY,
            low <= density <= high,
            self._success(CheckName.KEYPHRASE_DENSITY),
            failure,
            context=(
                f"Content length: {count_words(inputs.signals.content)} words, "
                f"keyphrase density: {density:.2f}%"
            ),
        )

    # -- Images ------------------------------------------------------------

    def _image_details(self, images: Iterable[PageImage]) -> list[ImageDetail]:
        details = []
        for img in images:
            name = file_name_from_url(img.src) or "unknown"
            details.append(ImageDetail(
                url=img.src,
                name=name,
                short_name=shorten_file_name(name, self.thresholds.shortened_name_length),
                size=round(img.size / BYTES_PER_KB) if img.size else 0,
                mime_type=img.mime_type or "Unknown",
                alt=img.alt or "",
            ))
        return details

    def _check_image_alt(self, inputs: _Inputs) -> Check:
        missing = [img for img in inputs.signals.images if not img.alt or not img.alt.strip()]
        failure = f"Found {len(missing)} image(s) without alt attributes."
        return self._make(
            CheckName.IMAGE_ALT_ATTRIBUTES,
            not missing,
            self._success(CheckName.IMAGE_ALT_ATTRIBUTES),
            failure,
            context=f"{len(missing)} image(s) found without alt attributes.",
            image_data=self._image_details(missing) if missing else None,
        )

    def _check_next_gen_formats(self, inputs: _Inputs) -> Check:
        images = inputs.signals.images
        if not images:
            return self._make(
                CheckName.NEXT_GEN_IMAGE_FORMATS, True, "No images found to check.", "",
            )

        next_gen = [img for img in images if is_next_gen_image(img.src)]
        ratio = len(next_gen) / len(images)
        return self._make(
            CheckName.NEXT_GEN_IMAGE_FORMATS,
            ratio >= self.thresholds.min_next_gen_ratio,
            f"Nice! {round(ratio * 100)}% of your images use next-gen formats.",
            f"Consider using next-gen image formats. Only {len(next_gen)} out of {len(images)} "
            f"images use modern formats (WebP, AVIF, HEIC).",
            context=", ".join(img.src for img in images),
        )

    def _check_image_file_size(self, inputs: _Inputs) -> Check:
        images = inputs.signals.images
        if not images:
            return self._make(CheckName.IMAGE_FILE_SIZE, True, "No images found to check.", "")

        limit = self.thresholds.max_image_size_bytes
        oversized = [img for img in images if img.size and img.size > limit]
        limit_kb = round(limit / 1000)
        return self._make(
            CheckName.IMAGE_FILE_SIZE,
            not oversized,
            self._success(CheckName.IMAGE_FILE_SIZE),
            f"{len(oversized)} image(s) are larger than recommended. Consider optimizing images "
            f"over {limit_kb}KB for better performance.",
            context=", ".join(f"{img.src} ({round(img.size / BYTES_PER_KB)} KB)" for img in oversized),
            image_data=self._image_details(oversized) if oversized else None,
        )

    # -- Links -------------------------------------------------------------

    def _check_internal_links(self, inputs: _Inputs) -> Check:
        links = inputs.signals.internal_links
        return self._make(
            CheckName.INTERNAL_LINKS,
            bool(links),
            self._success(CheckName.INTERNAL_LINKS),
            "No internal links found on the page.",
            context=", ".join(links) or "No internal links",
        )

    def _check_outbound_links(self, inputs: _Inputs) -> Check:
        links = inputs.signals.outbound_links
        return self._make(
            CheckName.OUTBOUND_LINKS,
            bool(links),
            self._success(CheckName.OUTBOUND_LINKS),
            "No outbound links found on the page.",
            context=", ".join(links) or "No outbound links",
        )

    # -- Social ------------------------------------------------------------

    def _check_og_image(self, inputs: _Inputs) -> Check:
        override = inputs.override
        og_image = first_non_empty(
            lambda: override.og_image if override else None,
            lambda: inputs.signals.og_image,
        )
        return self._make(
            CheckName.OG_IMAGE,
            bool(og_image),
            self._success(CheckName.OG_IMAGE),
            "No Open Graph image found. Recommended for social media sharing.",
            context=og_image or "No Open Graph image",
        )

    def _check_og_title_description(self, inputs: _Inputs) -> Check:
        override = inputs.override
        signals = inputs.signals
        og_title = first_non_empty(
            lambda: override.og_title if override else None,
            lambda: override.title if override and override.uses_title_as_og_title else None,
            lambda: signals.og_title,
            lambda: signals.title,
        )
        og_description = first_non_empty(
            lambda: override.og_description if override else None,
            lambda: (
                override.meta_description
                if override and override.uses_description_as_og_description else None
            ),
            lambda: signals.og_description,
            lambda: signals.meta_description,
        )

        if not og_title and not og_description:
            failure = "Missing both Open Graph title and description."
        elif not og_title:
            failure = "Missing Open Graph title."
        else:
            failure = "Missing Open Graph description."

        return self._make(
            CheckName.OG_TITLE_AND_DESCRIPTION,
            bool(og_title) and bool(og_description),
            self._success(CheckName.OG_TITLE_AND_DESCRIPTION),
            failure,
            context=f"OG title: {og_title or 'none'}; OG description: {og_description or 'none'}",
        )

    # -- Structure and technical -------------------------------------------

    def _check_heading_hierarchy(self, inputs: _Inputs) -> Check:
        headings = inputs.signals.headings
        result = validate_heading_hierarchy(headings)
        return self._make(
            CheckName.HEADING_HIERARCHY,
            result.passed,
            result.message,
            result.message,
            context=", ".join(f"H{h.level}" for h in headings) or "No headings",
        )

    def _check_minification(self, inputs: _Inputs) -> Check:
        resources = inputs.signals.resources
        result = analyze_minification(resources.js, resources.css, self.thresholds.min_minified_ratio)
        details = ", ".join(result.details)
        return self._make(
            CheckName.CODE_MINIFICATION,
            result.passed,
            f"Good! {details}." if details else self._success(CheckName.CODE_MINIFICATION),
            f"Consider minifying your code. {details}.",
            context=details,
        )

    def _check_schema_markup(self, inputs: _Inputs) -> Check:
        schema = inputs.signals.schema_markup
        plural = "" if schema.schema_count == 1 else "s"
        return self._make(
            CheckName.SCHEMA_MARKUP,
            schema.has_schema,
            f"Great! Found {schema.schema_count} schema markup{plural} "
            f"({', '.join(schema.schema_types)}).",
            "No schema markup detected. Consider adding structured data to help search engines "
            "understand your content.",
            context="No schema markup detected" if not schema.has_schema else ", ".join(schema.schema_types),
        )
