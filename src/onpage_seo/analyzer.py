"""On-page SEO analyzer: scrape, evaluate, recommend."""

import asyncio
import logging
from typing import Optional
from urllib.parse import urlparse

from onpage_seo.checks import CheckEngine, CheckEngineConfig
from onpage_seo.config import AnalysisThresholds, Config
from onpage_seo.constants import CheckName
from onpage_seo.exceptions import AnalysisTimeoutError
from onpage_seo.keywords import SecondaryKeywords, parse_secondary_keywords
from onpage_seo.languages import DEFAULT_LANGUAGE_CODE, get_default_language, is_language_supported
from onpage_seo.models import AnalysisReport, Check, H2Recommendation, HostOverride
from onpage_seo.recommendations import Recommender
from onpage_seo.scraper import PageScraper

logger = logging.getLogger(__name__)


def is_home_page_url(url: str) -> bool:
    """Whether a URL points at a site root."""
    return urlparse(url).path in ("", "/")


class SEOAnalyzer:
    """Analyzes a single page against a target keyphrase."""

    def __init__(
        self,
        config: Optional[Config] = None,
        scraper: Optional[PageScraper] = None,
        engine: Optional[CheckEngine] = None,
        recommender: Optional[Recommender] = None,
        thresholds: Optional[AnalysisThresholds] = None,
    ):
        """Initialize the analyzer.

        Args:
            config: Runtime configuration, read from the environment when omitted
            scraper: Page scraper, built from config when omitted
            engine: Check engine, built from thresholds when omitted
            recommender: Recommendation source, built from config when omitted
            thresholds: Analysis thresholds, read from the environment when omitted
        """
        self.config = config or Config.from_env()
        thresholds = thresholds or AnalysisThresholds.from_env()
        self.scraper = scraper or PageScraper(
            user_agent=self.config.user_agent,
            timeout=self.config.request_timeout,
        )
        self.engine = engine or CheckEngine(CheckEngineConfig(thresholds=thresholds))
        self.recommender = recommender or Recommender.from_config(self.config, thresholds=thresholds)

    async def analyze(
        self,
        url: str,
        keyphrase: str,
        is_home_page: Optional[bool] = None,
        host_override: Optional[HostOverride] = None,
        secondary_keywords: SecondaryKeywords = None,
        page_type: Optional[str] = None,
        language_code: str = DEFAULT_LANGUAGE_CODE,
        timeout: Optional[float] = None,
    ) -> AnalysisReport:
        """Analyze a page and attach recommendations to failed checks.

        Args:
            url: Page to analyze
            keyphrase: Primary keyphrase
            is_home_page: Inferred from the URL path when None
            host_override: Optional higher-fidelity data from the host
            secondary_keywords: Comma-separated string or iterable of fallbacks
            page_type: Optional page type passed to recommendations
            language_code: Language for recommendations
            timeout: Overall limit in seconds; config default when None, no
                limit when 0

        Returns:
            AnalysisReport for the page

        Raises:
            FetchError: If the page could not be fetched
            AnalysisTimeoutError: If the analysis did not finish in time
        """
        if is_home_page is None:
            is_home_page = is_home_page_url(url)
        if not is_language_supported(language_code):
            default = get_default_language()
            logger.warning(f"Unsupported language {language_code!r}, using {default.name}")
            language_code = default.code

        pipeline = self._run(
            url, keyphrase, is_home_page, host_override, secondary_keywords, page_type, language_code
        )

        timeout = self.config.analysis_timeout if timeout is None else timeout
        if not timeout or timeout <= 0:
            return await pipeline

        try:
            return await asyncio.wait_for(pipeline, timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Analysis of {url} timed out after {timeout}s")
            raise AnalysisTimeoutError(url, timeout) from e

    async def _run(
        self,
        url: str,
        keyphrase: str,
        is_home_page: bool,
        host_override: Optional[HostOverride],
        secondary_keywords: SecondaryKeywords,
        page_type: Optional[str],
        language_code: str,
    ) -> AnalysisReport:
        signals = await self.scraper.scrape(url, keyphrase)
        report = self.engine.evaluate(
            signals,
            keyphrase,
            url,
            is_home_page=is_home_page,
            secondary_keywords=secondary_keywords,
            host_override=host_override,
        )

        await self.attach_recommendations(
            report, secondary_keywords, page_type, language_code
        )

        logger.info(
            f"Analysis of {url} complete: score {report.score}, "
            f"{report.passed_checks}/{report.total_checks} checks passed"
        )
        return report

    async def attach_recommendations(
        self,
        report: AnalysisReport,
        secondary_keywords: SecondaryKeywords = None,
        page_type: Optional[str] = None,
        language_code: str = DEFAULT_LANGUAGE_CODE,
    ) -> AnalysisReport:
        """Fill in recommendations for every failed check, concurrently.

        Args:
            report: Report whose failed checks get recommendations
            secondary_keywords: Passed through to the recommender
            page_type: Passed through to the recommender
            language_code: Language for recommendations

        Returns:
            The same report, updated in place
        """
        failed = report.failed
        if not failed:
            return report

        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrent_recommendations))
        secondary = parse_secondary_keywords(secondary_keywords)

        async def recommend(check_title: str, context: str) -> str:
            async with semaphore:
                return await self.recommender.recommend(
                    check_title,
                    report.keyphrase,
                    context=context,
                    language_code=language_code,
                    page_type=page_type,
                    secondary_keywords=secondary,
                )

        async def fill(check: Check) -> None:
            check.recommendation = await recommend(check.title, check.context)
            if check.title == CheckName.KEYPHRASE_IN_H2.value and check.h2_elements:
                suggestions = await asyncio.gather(
                    *(recommend(check.title, element.text) for element in check.h2_elements)
                )
                check.h2_recommendations = [
                    H2Recommendation(h2_index=element.index, h2_text=element.text, suggestion=text)
                    for element, text in zip(check.h2_elements, suggestions)
                ]

        await asyncio.gather(*(fill(check) for check in failed))
        return report

    def analyze_sync(self, url: str, keyphrase: str, **kwargs) -> AnalysisReport:
        """Blocking wrapper around ``analyze`` for scripts and the CLI."""
        return asyncio.run(self.analyze(url, keyphrase, **kwargs))
