"""Keyword matching and keyphrase density.

Matching is a case-insensitive substring test with no word-boundary
handling, so "art" matches "article". Callers relying on whole-word
semantics must normalize their input first.
"""

import re
from typing import Iterable, Optional, Union

from onpage_seo.models import KeywordMatchResult, KeywordResult

SecondaryKeywords = Optional[Union[str, Iterable[str]]]

_PROTOCOL_RE = re.compile(r"^https?://")
_DOMAIN_RE = re.compile(r"^[^/]*/")
_SEPARATOR_RE = re.compile(r"[_-]")


def parse_secondary_keywords(secondary_keywords: SecondaryKeywords) -> list[str]:
    """Split a comma-separated keyword string (or list) into clean keywords.

    Args:
        secondary_keywords: "a, b, c" or an iterable of keywords

    Returns:
        Keywords in input order with blanks removed
    """
    if not secondary_keywords:
        return []
    if isinstance(secondary_keywords, str):
        candidates = secondary_keywords.split(",")
    else:
        candidates = list(secondary_keywords)
    return [k.strip() for k in candidates if k and k.strip()]


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split()) if text else 0


def _match(haystack: str, primary_keyword: str, secondary_keywords: SecondaryKeywords) -> KeywordMatchResult:
    primary_passed = primary_keyword.lower() in haystack
    results = [KeywordResult(keyword=primary_keyword, passed=primary_passed, is_primary=True)]

    if primary_passed:
        return KeywordMatchResult(
            found=True,
            matched_keyword=primary_keyword,
            keyword_results=tuple(results),
        )

    for keyword in parse_secondary_keywords(secondary_keywords):
        passed = keyword.lower() in haystack
        results.append(KeywordResult(keyword=keyword, passed=passed, is_primary=False))
        if passed:
            return KeywordMatchResult(
                found=True,
                matched_keyword=keyword,
                keyword_results=tuple(results),
            )

    return KeywordMatchResult(found=False, keyword_results=tuple(results))


def check_keyword_match(
    content: str,
    primary_keyword: str,
    secondary_keywords: SecondaryKeywords = None,
) -> KeywordMatchResult:
    """Match the primary keyword, falling back to secondary keywords in order.

    The primary keyword is always evaluated first. Secondary keywords are only
    tried when it fails, and evaluation stops at the first one that matches.

    Args:
        content: Text to search
        primary_keyword: Target keyphrase
        secondary_keywords: Comma-separated string or iterable of fallbacks

    Returns:
        KeywordMatchResult with per-keyword outcomes
    """
    if not content or not primary_keyword:
        return KeywordMatchResult(found=False)
    return _match(content.lower(), primary_keyword, secondary_keywords)


def normalize_url_for_matching(url: str) -> str:
    """Reduce a URL to its path with word separators turned into spaces.

    ``https://x.com/web-development-guide`` becomes ``web development guide``.
    """
    normalized = url.lower()
    normalized = _PROTOCOL_RE.sub("", normalized)
    normalized = _DOMAIN_RE.sub("", normalized, count=1)
    normalized = _SEPARATOR_RE.sub(" ", normalized)
    return normalized.replace("%20", " ")


def check_url_keyword_match(
    url: str,
    primary_keyword: str,
    secondary_keywords: SecondaryKeywords = None,
) -> KeywordMatchResult:
    """Match keywords against a URL slug so hyphenated slugs match phrases.

    Args:
        url: Absolute or relative URL
        primary_keyword: Target keyphrase
        secondary_keywords: Comma-separated string or iterable of fallbacks

    Returns:
        KeywordMatchResult with per-keyword outcomes
    """
    if not url or not primary_keyword:
        return KeywordMatchResult(found=False)
    return _match(normalize_url_for_matching(url), primary_keyword, secondary_keywords)


def calculate_combined_keyphrase_density(
    content: str,
    primary_keyword: str,
    secondary_keywords: SecondaryKeywords = None,
) -> float:
    """Combined keyphrase density as a percentage of total words.

    Each keyword's non-overlapping substring occurrences are counted
    independently and summed, so overlapping keywords are counted twice.

    Returns:
        Density percentage, 0.0 when content or keyphrase is empty
    """
    if not content or not primary_keyword:
        return 0.0

    lowered = content.lower()
    keywords = [primary_keyword] + parse_secondary_keywords(secondary_keywords)
    occurrences = sum(lowered.count(keyword.lower()) for keyword in keywords if keyword)

    word_count = count_words(lowered) or 1
    return occurrences / word_count * 100
