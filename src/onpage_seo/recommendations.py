"""Remediation guidance for failed checks.

Guidance comes from the completion service when one is configured. Every
request runs through a small state machine::

    NOT_STARTED -> CALLING -> SUCCESS
                           -> RETRYING -> CALLING ...
                           -> EXHAUSTED -> FALLBACK

and ends in a deterministic, per-language template whenever the service is
absent, disabled or keeps failing. ``Recommender.recommend`` never raises
for service failures; cancellation still propagates.
"""

import asyncio
import html
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional

from onpage_seo.config import AnalysisThresholds, Config
from onpage_seo.constants import COPYABLE_CHECKS, CheckName
from onpage_seo.exceptions import RecommendationError
from onpage_seo.keywords import SecondaryKeywords, parse_secondary_keywords
from onpage_seo.languages import DEFAULT_LANGUAGE_CODE, get_language_by_code
from onpage_seo.llm import LLMClient

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

_ENGLISH_FUNCTION_WORDS = frozenset(
    {"the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"}
)
_SMART_CHARACTERS = str.maketrans({
    "\u2018": "'",
    "\u2019": "'",
    "\u201C": '"',
    "\u201D": '"',
    "\u2013": "-",
    "\u2014": "-",
    "\u2026": "...",
    "\u00A0": " ",
})
_ZERO_WIDTH_RE = re.compile("[\u200B-\u200F\u2060\uFEFF\u00AD]")
_WRAPPING_QUOTES = "\"'`"


class RecommendationState(str, Enum):
    NOT_STARTED = "not_started"
    CALLING = "calling"
    RETRYING = "retrying"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff for completion-service calls.

    The defaults allow 3 attempts with 1s then 2s between them. Raising
    ``max_retries`` continues the schedule (4s, 8s, ...).
    """

    max_retries: int = 2
    base_delay: float = 1.0
    backoff_factor: float = 2.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, retry: int) -> float:
        """Delay in seconds before retry number ``retry`` (1-based)."""
        return self.base_delay * self.backoff_factor ** (retry - 1)


@dataclass
class RecommendationAttempt:
    """Trace of one recommendation request through the state machine."""

    check_title: str
    states: list[RecommendationState] = field(
        default_factory=lambda: [RecommendationState.NOT_STARTED]
    )
    attempts: int = 0
    delays: list[float] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def state(self) -> RecommendationState:
        return self.states[-1]

    @property
    def used_fallback(self) -> bool:
        return self.state == RecommendationState.FALLBACK

    def advance(self, state: RecommendationState) -> None:
        self.states.append(state)


def _check_key(check_title) -> str:
    return getattr(check_title, "value", check_title)


def needs_copyable_content(check_title: str) -> bool:
    """Whether a check's guidance is a ready-to-paste string."""
    return _check_key(check_title) in {c.value for c in COPYABLE_CHECKS}


def to_url_slug(text: str) -> str:
    """Lowercase, hyphenate whitespace and drop anything outside ``[a-z0-9-]``."""
    slug = re.sub(r"\s+", "-", text.lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


# =============================================================================
# Fallback templates
# =============================================================================

# (copyable, advice) pairs. Placeholders: keyphrase, page_type, title_kind, slug.
_FALLBACK_TEMPLATES: dict[str, dict[str, tuple[str, str]]] = {
    "en": {
        CheckName.KEYPHRASE_IN_TITLE.value: (
            "{keyphrase} - Professional {title_kind} | Your Brand",
            'Add "{keyphrase}" to your title tag. Optimal length is 50-60 characters. '
            "Place the keyphrase near the beginning for better SEO impact.",
        ),
        CheckName.KEYPHRASE_IN_META_DESCRIPTION.value: (
            "Discover expert insights about {keyphrase}. Our comprehensive {page_type} provides "
            "actionable tips and proven strategies to help you succeed. Learn more today!",
            'Include "{keyphrase}" naturally in your meta description. Keep it between 120-155 '
            "characters and make it compelling to encourage clicks.",
        ),
        CheckName.KEYPHRASE_IN_URL.value: (
            "{slug}",
            'Use a URL-friendly version of "{keyphrase}". Use lowercase letters, hyphens for '
            "spaces, and keep it concise.",
        ),
        CheckName.KEYPHRASE_IN_INTRODUCTION.value: (
            "Welcome to our comprehensive guide on {keyphrase}. In this {page_type}, we'll explore "
            "everything you need to know about {keyphrase} and how it can benefit you.",
            'Add "{keyphrase}" to your first paragraph. This helps search engines understand your '
            "content's topic immediately.",
        ),
        CheckName.KEYPHRASE_IN_H1.value: (
            "Complete Guide to {keyphrase}",
            'Include "{keyphrase}" in your main H1 heading. Each page should have exactly one H1 tag.',
        ),
        CheckName.KEYPHRASE_IN_H2.value: (
            "Understanding {keyphrase}: Key Insights",
            'Add at least one H2 heading containing "{keyphrase}". This improves content structure '
            "and SEO.",
        ),
        CheckName.IMAGE_ALT_ATTRIBUTES.value: (
            "{keyphrase} - descriptive image",
            'Add descriptive alt text to all images. Include "{keyphrase}" where relevant, but keep '
            "it natural and descriptive.",
        ),
        CheckName.INTERNAL_LINKS.value: (
            "",
            "Add internal links to related pages on your site. This helps distribute link equity "
            "and improves user navigation.",
        ),
        CheckName.OUTBOUND_LINKS.value: (
            "",
            "Include 1-2 outbound links to authoritative, relevant sources. This adds credibility "
            "and context to your content.",
        ),
        "default": (
            "",
            'Review and optimize this SEO element for "{keyphrase}". Follow best practices for '
            "improved search visibility.",
        ),
    },
    "de": {
        CheckName.KEYPHRASE_IN_TITLE.value: (
            "{keyphrase} - Professioneller Leitfaden | Ihre Marke",
            'Fügen Sie "{keyphrase}" zu Ihrem Titel hinzu. Optimale Länge: 50-60 Zeichen.',
        ),
        CheckName.KEYPHRASE_IN_META_DESCRIPTION.value: (
            "Entdecken Sie Expertenwissen über {keyphrase}. Unser umfassender Leitfaden bietet "
            "praktische Tipps und bewährte Strategien.",
            'Integrieren Sie "{keyphrase}" natürlich in Ihre Meta-Beschreibung. Halten Sie sie '
            "zwischen 120-155 Zeichen.",
        ),
        "default": ("", 'Überprüfen und optimieren Sie dieses SEO-Element für "{keyphrase}".'),
    },
    "fr": {
        CheckName.KEYPHRASE_IN_TITLE.value: (
            "{keyphrase} - Guide Professionnel | Votre Marque",
            'Ajoutez "{keyphrase}" à votre titre. Longueur optimale : 50-60 caractères.',
        ),
        CheckName.KEYPHRASE_IN_META_DESCRIPTION.value: (
            "Découvrez des conseils d'experts sur {keyphrase}. Notre guide complet offre des "
            "conseils pratiques et des stratégies éprouvées.",
            'Incluez "{keyphrase}" naturellement dans votre méta-description. Gardez-la entre '
            "120-155 caractères.",
        ),
        "default": ("", 'Examinez et optimisez cet élément SEO pour "{keyphrase}".'),
    },
    "es": {
        CheckName.KEYPHRASE_IN_TITLE.value: (
            "{keyphrase} - Guía Profesional | Tu Marca",
            'Añade "{keyphrase}" a tu título. Longitud óptima: 50-60 caracteres.',
        ),
        CheckName.KEYPHRASE_IN_META_DESCRIPTION.value: (
            "Descubre información experta sobre {keyphrase}. Nuestra guía completa ofrece consejos "
            "prácticos y estrategias probadas.",
            'Incluye "{keyphrase}" de forma natural en tu meta descripción. Mantenla entre 120-155 '
            "caracteres.",
        ),
        "default": ("", 'Revisa y optimiza este elemento SEO para "{keyphrase}".'),
    },
    "it": {"default": ("", 'Rivedi e ottimizza questo elemento SEO per "{keyphrase}".')},
    "ja": {"default": ("", '"{keyphrase}"のSEO要素を確認し、最適化してください。')},
    "pt": {"default": ("", 'Revise e otimize este elemento SEO para "{keyphrase}".')},
    "nl": {"default": ("", 'Controleer en optimaliseer dit SEO-element voor "{keyphrase}".')},
    "pl": {"default": ("", 'Sprawdź i zoptymalizuj ten element SEO dla "{keyphrase}".')},
}


def generate_fallback_recommendation(
    check_title: str,
    keyphrase: str,
    language_code: Optional[str] = DEFAULT_LANGUAGE_CODE,
    page_type: Optional[str] = None,
) -> str:
    """Deterministic guidance used when the completion service is unavailable.

    Lookup falls back from the requested language to English, and from the
    check's template to the language's default template.

    Args:
        check_title: Title of the failed check
        keyphrase: Target keyphrase
        language_code: Requested output language
        page_type: Optional page type such as "homepage" or "blog post"

    Returns:
        Ready-to-paste text for copyable checks, advice otherwise
    """
    title = _check_key(check_title)
    page_type = (page_type or "page").lower()

    language_templates = _FALLBACK_TEMPLATES.get(language_code or "", _FALLBACK_TEMPLATES["en"])
    copyable, advice = (
        language_templates.get(title)
        or language_templates.get("default")
        or _FALLBACK_TEMPLATES["en"]["default"]
    )

    values = {
        "keyphrase": keyphrase,
        "page_type": page_type,
        "title_kind": "Solutions" if page_type == "homepage" else "Guide",
        "slug": to_url_slug(keyphrase),
    }
    if needs_copyable_content(title) and copyable:
        text = copyable.format(**values)
        if text:
            return text
    return advice.format(**values)


# =============================================================================
# Prompts and output handling
# =============================================================================

def build_prompts(
    check_title: str,
    keyphrase: str,
    context: str = "",
    language_code: Optional[str] = DEFAULT_LANGUAGE_CODE,
    page_type: Optional[str] = None,
    secondary_keywords: SecondaryKeywords = None,
) -> tuple[str, str]:
    """Build the (system, user) prompt pair for one failed check."""
    title = _check_key(check_title)
    copyable = needs_copyable_content(title)
    secondary = parse_secondary_keywords(secondary_keywords)
    language = get_language_by_code(language_code)

    advanced_context = ""
    if page_type or secondary:
        advanced_context = "\n\nAdvanced Context:"
        if page_type:
            advanced_context += f"\n- Page Type: {page_type}"
        if secondary:
            advanced_context += f"\n- Secondary Keywords: {', '.join(secondary)}"

    language_instruction = ""
    if language is not None and language.code != DEFAULT_LANGUAGE_CODE:
        language_instruction = (
            f"\n\nIMPORTANT: Generate all content in {language.name} ({language.native_name}). "
            "Provide recommendations entirely in this language."
        )

    context_hint = (
        " Consider the page type and additional context provided to make recommendations "
        "more relevant and specific."
        if advanced_context else ""
    )
    page_type_hint = f" for a {page_type.lower()}" if page_type else ""

    if copyable:
        system_prompt = (
            "You are an SEO expert providing ready-to-use content.\n"
            f"Create a single, concise, and optimized {title.lower()} that naturally incorporates "
            "the keyphrase.\n"
            "Return ONLY the final content with no additional explanation, quotes, or formatting.\n"
            "The content must be directly usable by copying and pasting.\n"
            f"Focus on being specific, clear, and immediately usable.{context_hint}{language_instruction}"
        )
    else:
        system_prompt = (
            "You are an SEO expert providing actionable advice.\n"
            f'Provide a concise recommendation for the SEO check "{title}".'
            f"{context_hint}{language_instruction}"
        )

    if title == CheckName.KEYPHRASE_IN_URL.value:
        user_prompt = (
            f'Create an SEO-friendly URL slug for the keyphrase "{keyphrase}".\n'
            f"Current URL: {context or 'None'}{advanced_context}\n"
            "Requirements:\n"
            "- Extract ONLY the page slug from the URL (the part after the last slash, "
            "excluding query parameters)\n"
            "- Ignore protocol (http/https), domain name, and folder paths\n"
            "- Use lowercase letters only\n"
            "- Separate words with hyphens\n"
            "- Include the main keyphrase naturally\n"
            "- Keep it concise and readable\n"
            'Return ONLY the page slug (no protocol, domain, folders, or slashes) with no '
            "explanations or other text."
        )
    elif title == CheckName.KEYPHRASE_IN_H2.value:
        user_prompt = (
            f'Create a perfect H2 heading for the keyphrase "{keyphrase}".\n'
            f"Current H2 headings: {context or 'None'}{advanced_context}\n"
            f'The H2 heading must contain the exact words "{keyphrase}" literally in the text.\n'
            "Requirements:\n"
            f'- Include the exact words "{keyphrase}", not synonyms\n'
            "- Keep it engaging and readable (40-60 characters ideal)\n"
            f"- Make it compelling and relevant{page_type_hint}\n"
            "- Use title case capitalization\n"
            "Return ONLY the H2 heading text with no explanations, quotes, or additional formatting."
        )
    elif copyable:
        user_prompt = (
            f'Create a perfect {title.lower()} for the keyphrase "{keyphrase}".\n'
            f"Current content: {context or 'None'}{advanced_context}\n"
            "Remember to:\n"
            "- Keep optimal length for the content type (title: 50-60 chars, meta description: "
            "120-155 chars, introduction: 2-3 sentences, image alt text: short and descriptive)\n"
            f"- Make it compelling and relevant{page_type_hint}\n"
            "- For introductions, rewrite the existing content to naturally include the keyphrase "
            "while keeping the original message\n"
            "- ONLY return the final content with no explanations or formatting"
        )
    else:
        user_prompt = (
            f'Fix this SEO issue: "{title}" for keyphrase "{keyphrase}" if a keyphrase is '
            "appropriate for the check.\n"
            f"Current status: {context or 'Not specified'}{advanced_context}\n"
            "Provide concise but actionable advice in a couple of sentences"
            f"{' tailored' + page_type_hint if page_type else ''}."
        )

    return system_prompt, user_prompt


def sanitize_text(text: Optional[str]) -> str:
    """Normalize completion output for display and copying.

    Decodes HTML entities, replaces typographic punctuation with plain
    equivalents, drops zero-width characters and strips quotes wrapping the
    whole string. Letters outside ASCII are kept.
    """
    if not text:
        return ""
    cleaned = html.unescape(text).translate(_SMART_CHARACTERS)
    cleaned = _ZERO_WIDTH_RE.sub("", cleaned).strip()
    while (
        len(cleaned) >= 2
        and cleaned[0] == cleaned[-1]
        and cleaned[0] in _WRAPPING_QUOTES
    ):
        cleaned = cleaned[1:-1].strip()
    return cleaned


def detect_language_mismatch(
    text: str,
    language_code: Optional[str],
    threshold: float = 0.3,
) -> bool:
    """Heuristically flag English output when another language was requested.

    Returns True when more than ``threshold`` of the words are common
    English function words. Texts of five words or fewer are never flagged.
    """
    if not text or not language_code or language_code == DEFAULT_LANGUAGE_CODE:
        return False

    words = text.lower().split()
    if len(words) <= 5:
        return False

    function_words = sum(1 for word in words if word.strip(".,;:!?\"'()") in _ENGLISH_FUNCTION_WORDS)
    return function_words / len(words) > threshold


# =============================================================================
# Recommender
# =============================================================================

class Recommender:
    """Produces guidance for failed checks.

    Holds no per-request state, so one instance can serve concurrent
    analyses.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        retry_policy: Optional[RetryPolicy] = None,
        enabled: bool = True,
        sleep: Sleep = asyncio.sleep,
        thresholds: Optional[AnalysisThresholds] = None,
    ):
        """Initialize the recommender.

        Args:
            llm_client: Completion client; fallback-only when None
            retry_policy: Backoff schedule for failed calls
            enabled: False skips the completion service entirely
            sleep: Awaitable used between retries
            thresholds: Supplies the language-mismatch ratio
        """
        self.llm_client = llm_client
        self.retry_policy = retry_policy or RetryPolicy()
        self.enabled = enabled
        self._sleep = sleep
        self.thresholds = thresholds or AnalysisThresholds()

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> "Recommender":
        """Build a recommender, with an LLM client only when a key is configured."""
        llm_client = None
        if config.use_ai_recommendations and config.llm_api_key:
            llm_client = LLMClient(
                api_key=config.llm_api_key,
                model=config.llm_model,
                provider=config.llm_provider,
                max_tokens=config.llm_max_tokens,
                temperature=config.llm_temperature,
            )
        return cls(llm_client=llm_client, enabled=config.use_ai_recommendations, **kwargs)

    @property
    def uses_service(self) -> bool:
        return self.enabled and self.llm_client is not None

    async def recommend(
        self,
        check_title: str,
        keyphrase: str,
        context: str = "",
        language_code: Optional[str] = DEFAULT_LANGUAGE_CODE,
        page_type: Optional[str] = None,
        secondary_keywords: SecondaryKeywords = None,
    ) -> str:
        """Guidance for one failed check; never raises for service failures."""
        text, _ = await self.recommend_with_trace(
            check_title, keyphrase, context, language_code, page_type, secondary_keywords
        )
        return text

    async def recommend_with_trace(
        self,
        check_title: str,
        keyphrase: str,
        context: str = "",
        language_code: Optional[str] = DEFAULT_LANGUAGE_CODE,
        page_type: Optional[str] = None,
        secondary_keywords: SecondaryKeywords = None,
    ) -> tuple[str, RecommendationAttempt]:
        """Like ``recommend`` but also returns the state-machine trace."""
        title = _check_key(check_title)
        language_code = language_code or DEFAULT_LANGUAGE_CODE
        attempt = RecommendationAttempt(check_title=title)

        def fallback(reason: str) -> tuple[str, RecommendationAttempt]:
            logger.info(f"Using fallback recommendation for '{title}': {reason}")
            attempt.advance(RecommendationState.FALLBACK)
            return generate_fallback_recommendation(title, keyphrase, language_code, page_type), attempt

        if not self.enabled:
            return fallback("AI recommendations disabled")
        if self.llm_client is None:
            return fallback("no completion service credential configured")

        system_prompt, user_prompt = build_prompts(
            title, keyphrase, context, language_code, page_type, secondary_keywords
        )
        try:
            raw = await self._call_with_retry(system_prompt, user_prompt, attempt)
        except RecommendationError as e:
            return fallback(str(e))

        text = sanitize_text(raw)
        if not text:
            return fallback("completion was empty after sanitizing")

        if detect_language_mismatch(text, language_code, self.thresholds.language_mismatch_ratio):
            language = get_language_by_code(language_code)
            name = language.name if language else language_code
            logger.warning(f"Completion for '{title}' may be in English instead of {name}")

        return text, attempt

    async def _call_with_retry(
        self,
        system_prompt: str,
        user_prompt: str,
        attempt: RecommendationAttempt,
    ) -> str:
        """Call the service, backing off between failures.

        Raises:
            RecommendationError: When every attempt failed
        """
        policy = self.retry_policy
        last_error: Optional[Exception] = None

        for number in range(1, policy.max_attempts + 1):
            attempt.advance(RecommendationState.CALLING)
            attempt.attempts = number
            try:
                text = await self.llm_client.complete(system_prompt, user_prompt)
                attempt.advance(RecommendationState.SUCCESS)
                return text
            except Exception as e:
                last_error = e
                attempt.errors.append(str(e))
                if number >= policy.max_attempts:
                    break
                delay = policy.delay_for(number)
                attempt.advance(RecommendationState.RETRYING)
                attempt.delays.append(delay)
                logger.warning(
                    f"Recommendation call for '{attempt.check_title}' "
                    f"via {self.llm_client.source_api} failed "
                    f"(attempt {number}/{policy.max_attempts}): {e}. Retrying in {delay:.1f}s..."
                )
                await self._sleep(delay)

        attempt.advance(RecommendationState.EXHAUSTED)
        raise RecommendationError(attempt.check_title, attempt.attempts, last_error) from last_error
