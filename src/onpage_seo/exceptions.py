"""Exception types raised by the on-page SEO analyzer."""

from typing import Optional


class SEOAnalysisError(Exception):
    """Base class for analyzer errors."""


class FetchError(SEOAnalysisError):
    """Raised when the analyzed page cannot be retrieved.

    Covers network failures and non-2xx responses alike. The message is
    always prefixed with ``Failed to analyze page:``.
    """

    PREFIX = "Failed to analyze page"

    def __init__(self, url: str, cause: str, status_code: Optional[int] = None):
        self.url = url
        self.cause = cause
        self.status_code = status_code
        super().__init__(f"{self.PREFIX}: {cause}")


class PartialDataError(SEOAnalysisError):
    """Raised when a field a check depends on is missing or empty."""

    def __init__(self, field_name: str, message: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message or f"No {field_name} found on the page")


class RecommendationError(SEOAnalysisError):
    """Raised when the completion service fails after all retries."""

    def __init__(self, check_title: str, attempts: int, last_error: Optional[BaseException] = None):
        self.check_title = check_title
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Recommendation for '{check_title}' failed after {attempts} attempts: {last_error}"
        )


class AnalysisTimeoutError(SEOAnalysisError):
    """Raised when an analysis does not finish within its time limit."""

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Analysis of {url} timed out after {timeout:.1f}s")
