"""Tests for SEO analyzer."""

import asyncio

import pytest

from onpage_seo.analyzer import SEOAnalyzer, is_home_page_url
from onpage_seo.config import AnalysisThresholds, Config
from onpage_seo.exceptions import AnalysisTimeoutError, FetchError
from onpage_seo.models import H2Element, HostOverride
from onpage_seo.recommendations import Recommender
from onpage_seo.scraper import PageScraper


class StaticScraper:
    """Scraper stand-in that returns fixed signals."""

    def __init__(self, signals, delay=0.0):
        self.signals = signals
        self.delay = delay
        self.calls = []

    async def scrape(self, url, keyphrase=""):
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.signals


class CountingRecommender:
    """Recommender stand-in that records concurrency."""

    def __init__(self):
        self.active = 0
        self.max_active = 0
        self.calls = []

    async def recommend(self, check_title, keyphrase, context="", language_code="en",
                        page_type=None, secondary_keywords=None):
        self.calls.append((check_title, context, language_code, page_type, secondary_keywords))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return f"Fix {check_title}: {context}"


def make_analyzer(scraper, recommender=None, **config_kwargs):
    return SEOAnalyzer(
        config=Config(**config_kwargs),
        scraper=scraper,
        recommender=recommender or Recommender(),
        thresholds=AnalysisThresholds(),
    )


class TestHomePageDetection:
    """Test cases for homepage inference."""

    @pytest.mark.parametrize("url,expected", [
        ("https://example.com", True),
        ("https://example.com/", True),
        ("https://example.com/?utm=1", True),
        ("https://example.com/blog", False),
    ])
    def test_is_home_page_url(self, url, expected):
        assert is_home_page_url(url) is expected


class TestSEOAnalyzer:
    """Test cases for SEOAnalyzer."""

    def test_analyzer_initialization(self):
        """Defaults are built from config."""
        analyzer = SEOAnalyzer(config=Config(), thresholds=AnalysisThresholds())

        assert isinstance(analyzer.scraper, PageScraper)
        assert analyzer.recommender.uses_service is False

    @pytest.mark.asyncio
    async def test_analyze_end_to_end(self, mock_client_factory, sample_url):
        """Scrape, evaluate and recommend against a mocked page."""
        async with mock_client_factory() as client:
            analyzer = make_analyzer(PageScraper(client=client))
            report = await analyzer.analyze(sample_url, "web development")

        assert report.url == sample_url
        assert report.keyphrase == "web development"
        assert report.is_home_page is False
        assert report.total_checks == 18
        assert report.passed_checks + report.failed_checks == report.total_checks
        assert report.failed
        for check in report.failed:
            assert check.recommendation
        for check in report.checks:
            if check.passed:
                assert check.recommendation is None

    @pytest.mark.asyncio
    async def test_fetch_error_yields_no_report(self, mock_client_factory, sample_url):
        async with mock_client_factory(status_code=500) as client:
            analyzer = make_analyzer(PageScraper(client=client))
            with pytest.raises(FetchError):
                await analyzer.analyze(sample_url, "web development")

    @pytest.mark.asyncio
    async def test_home_page_inferred(self, bare_signals):
        analyzer = make_analyzer(StaticScraper(bare_signals))

        report = await analyzer.analyze("https://example.com/", "seo")
        assert report.is_home_page is True

        report = await analyzer.analyze("https://example.com/", "seo", is_home_page=False)
        assert report.is_home_page is False

    @pytest.mark.asyncio
    async def test_timeout(self, bare_signals):
        analyzer = make_analyzer(StaticScraper(bare_signals, delay=5))

        with pytest.raises(AnalysisTimeoutError) as exc_info:
            await analyzer.analyze("https://example.com/page", "seo", timeout=0.05)

        assert exc_info.value.timeout == 0.05

    @pytest.mark.asyncio
    async def test_zero_timeout_disables_limit(self, bare_signals):
        analyzer = make_analyzer(StaticScraper(bare_signals, delay=0.01), analysis_timeout=0.001)

        report = await analyzer.analyze("https://example.com/page", "seo", timeout=0)
        assert report.total_checks == 18

    @pytest.mark.asyncio
    async def test_recommendations_are_bounded(self, bare_signals):
        recommender = CountingRecommender()
        analyzer = make_analyzer(
            StaticScraper(bare_signals), recommender, max_concurrent_recommendations=2
        )

        report = await analyzer.analyze("https://example.com/page", "seo")

        assert len(recommender.calls) == report.failed_checks
        assert 1 <= recommender.max_active <= 2

    @pytest.mark.asyncio
    async def test_options_reach_recommender(self, bare_signals):
        recommender = CountingRecommender()
        analyzer = make_analyzer(StaticScraper(bare_signals), recommender)

        await analyzer.analyze(
            "https://example.com/page",
            "seo",
            secondary_keywords="audit, ranking",
            page_type="Blog Post",
            language_code="fr",
        )

        _, _, language, page_type, secondary = recommender.calls[0]
        assert language == "fr"
        assert page_type == "Blog Post"
        assert secondary == ["audit", "ranking"]

    @pytest.mark.asyncio
    async def test_per_h2_suggestions(self, good_signals):
        recommender = CountingRecommender()
        analyzer = make_analyzer(StaticScraper(good_signals), recommender)
        override = HostOverride(h2_elements=(
            H2Element(id="h2-a", index=0, text="Pricing"),
            H2Element(id="h2-b", index=3, text="Contact"),
        ))

        report = await analyzer.analyze(good_signals.url, "web development", host_override=override)

        h2 = report.get_check("Keyphrase in H2 Headings")
        assert h2.recommendation == "Fix Keyphrase in H2 Headings: Pricing Contact"
        assert [r.to_dict() for r in h2.h2_recommendations] == [
            {"h2Index": 0, "h2Text": "Pricing", "suggestion": "Fix Keyphrase in H2 Headings: Pricing"},
            {"h2Index": 3, "h2Text": "Contact", "suggestion": "Fix Keyphrase in H2 Headings: Contact"},
        ]

    @pytest.mark.asyncio
    async def test_passing_h2_has_no_suggestions(self, good_signals):
        analyzer = make_analyzer(StaticScraper(good_signals), CountingRecommender())
        override = HostOverride(h2_elements=(H2Element(id="a", index=0, text="Web development basics"),))

        report = await analyzer.analyze(good_signals.url, "web development", host_override=override)

        h2 = report.get_check("Keyphrase in H2 Headings")
        assert h2.passed is True
        assert h2.h2_recommendations is None
        assert "h2Recommendations" not in h2.to_dict()

    def test_analyze_sync(self, bare_signals):
        analyzer = make_analyzer(StaticScraper(bare_signals))

        report = analyzer.analyze_sync("https://example.com/page", "seo")

        assert report.total_checks == 18
        title = report.get_check("Keyphrase in Title")
        assert title.recommendation == "seo - Professional Guide | Your Brand"

    @pytest.mark.asyncio
    async def test_unsupported_language_uses_default(self, bare_signals):
        recommender = CountingRecommender()
        analyzer = make_analyzer(StaticScraper(bare_signals), recommender)

        await analyzer.analyze("https://example.com/page", "seo", language_code="xx")

        assert {call[2] for call in recommender.calls} == {"en"}
