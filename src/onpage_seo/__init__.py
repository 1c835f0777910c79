"""On-page SEO analyzer with AI-assisted recommendations."""

__version__ = "0.1.0"

from onpage_seo.analyzer import SEOAnalyzer, is_home_page_url
from onpage_seo.checks import CheckEngine, CheckEngineConfig, calculate_seo_score
from onpage_seo.config import AnalysisThresholds, Config
from onpage_seo.constants import CheckName
from onpage_seo.exceptions import (
    AnalysisTimeoutError,
    FetchError,
    PartialDataError,
    RecommendationError,
    SEOAnalysisError,
)
from onpage_seo.llm import LLMClient
from onpage_seo.models import (
    AnalysisReport,
    Check,
    H2Element,
    HostOverride,
    PageAsset,
    PageSignals,
)
from onpage_seo.recommendations import Recommender, RetryPolicy
from onpage_seo.scraper import PageScraper, scrape_web_page

__all__ = [
    "SEOAnalyzer",
    "is_home_page_url",
    "CheckEngine",
    "CheckEngineConfig",
    "calculate_seo_score",
    "AnalysisThresholds",
    "Config",
    "CheckName",
    "AnalysisTimeoutError",
    "FetchError",
    "PartialDataError",
    "RecommendationError",
    "SEOAnalysisError",
    "LLMClient",
    "AnalysisReport",
    "Check",
    "H2Element",
    "HostOverride",
    "PageAsset",
    "PageSignals",
    "Recommender",
    "RetryPolicy",
    "PageScraper",
    "scrape_web_page",
]
