"""Tests for keyword matching and density."""

import pytest

from onpage_seo.keywords import (
    calculate_combined_keyphrase_density,
    check_keyword_match,
    check_url_keyword_match,
    count_words,
    normalize_url_for_matching,
    parse_secondary_keywords,
)


class TestParseSecondaryKeywords:
    """Test cases for secondary keyword parsing."""

    def test_comma_separated_string(self):
        assert parse_secondary_keywords(" seo audit, ,site audit ,") == ["seo audit", "site audit"]

    def test_list_input(self):
        assert parse_secondary_keywords(["a", " ", "b "]) == ["a", "b"]

    @pytest.mark.parametrize("value", [None, "", []])
    def test_empty_input(self, value):
        assert parse_secondary_keywords(value) == []


class TestCheckKeywordMatch:
    """Test cases for primary/secondary keyword matching."""

    def test_primary_match_is_case_insensitive(self):
        result = check_keyword_match("Learn SEO Basics", "seo basics")

        assert result.found is True
        assert result.matched_keyword == "seo basics"
        assert len(result.keyword_results) == 1
        assert result.keyword_results[0].is_primary is True

    def test_primary_wins_over_secondary(self):
        """A matching primary keyword is reported even when secondaries also match."""
        result = check_keyword_match("seo and marketing", "seo", "marketing")

        assert result.found is True
        assert result.matched_keyword == "seo"

    def test_secondary_fallback_in_order(self):
        result = check_keyword_match("a guide to site audits", "seo", "ranking, site audit, guide")

        assert result.found is True
        assert result.matched_keyword == "site audit"
        # Evaluation stops at the first matching secondary
        assert [r.keyword for r in result.keyword_results] == ["seo", "ranking", "site audit"]
        assert [r.passed for r in result.keyword_results] == [False, False, True]

    def test_no_match(self):
        result = check_keyword_match("nothing relevant", "seo", ["ranking"])

        assert result.found is False
        assert result.matched_keyword is None
        assert all(not r.passed for r in result.keyword_results)

    def test_substring_semantics(self):
        """Matching has no word boundaries."""
        assert check_keyword_match("Read this article", "art").found is True

    @pytest.mark.parametrize("content,keyword", [("", "seo"), ("seo", ""), (None, "seo")])
    def test_empty_inputs_do_not_match(self, content, keyword):
        result = check_keyword_match(content, keyword)
        assert result.found is False
        assert result.keyword_results == ()


class TestUrlMatching:
    """Test cases for URL normalization and matching."""

    def test_normalize_strips_protocol_and_domain(self):
        assert normalize_url_for_matching("https://x.com/web-development-guide") == "web development guide"

    def test_normalize_underscores_and_encoded_spaces(self):
        assert normalize_url_for_matching("http://x.com/blog/seo_tips%20today") == "blog/seo tips today"

    def test_hyphenated_slug_matches_phrase(self):
        result = check_url_keyword_match("https://x.com/web-development-guide", "web development guide")
        assert result.found is True

    def test_domain_is_not_matched(self):
        result = check_url_keyword_match("https://seo.example.com/about", "seo")
        assert result.found is False

    def test_secondary_match_in_url(self):
        result = check_url_keyword_match("https://x.com/site-audit", "seo", "site audit")
        assert result.matched_keyword == "site audit"


class TestDensity:
    """Test cases for keyphrase density."""

    def test_count_words(self):
        assert count_words("  one two\nthree\tfour ") == 4
        assert count_words("") == 0

    def test_density_percentage(self):
        content = " ".join(["seo"] + ["word"] * 99)
        assert calculate_combined_keyphrase_density(content, "seo") == pytest.approx(1.0)

    def test_secondary_keywords_add_up(self):
        content = "seo tools and ranking tips " + " ".join(["word"] * 95)
        density = calculate_combined_keyphrase_density(content, "seo", "ranking")
        assert density == pytest.approx(2.0)

    def test_empty_content(self):
        assert calculate_combined_keyphrase_density("", "seo") == 0.0
        assert calculate_combined_keyphrase_density("seo", "") == 0.0
