from dotenv import load_dotenv
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Optional
from pathlib import Path
import json
import logging
import os

load_dotenv()  # Loads variables from .env file

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() not in {"0", "false", "no", "off"}


@dataclass
class Config:
    """Configuration for the on-page SEO analyzer."""
    llm_api_key: Optional[str] = None
    llm_model: str = "gpt-3.5-turbo"
    llm_provider: str = "openai"
    llm_max_tokens: int = 500
    llm_temperature: float = 0.5
    use_ai_recommendations: bool = True
    user_agent: Optional[str] = None
    request_timeout: float = 30.0
    analysis_timeout: float = 120.0
    max_concurrent_recommendations: int = 5
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Returns:
            Config: Configuration instance with values from environment
        """
        return cls(
            llm_api_key=os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY"),
            llm_model=os.getenv("LLM_MODEL", "gpt-3.5-turbo"),
            llm_provider=os.getenv("LLM_PROVIDER", "openai"),
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "500")),
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.5")),
            use_ai_recommendations=_env_flag("USE_AI_RECOMMENDATIONS"),
            user_agent=os.getenv("USER_AGENT"),
            request_timeout=float(os.getenv("TIMEOUT", "30")),
            analysis_timeout=float(os.getenv("ANALYSIS_TIMEOUT", "120")),
            max_concurrent_recommendations=int(os.getenv("MAX_CONCURRENT_RECOMMENDATIONS", "5")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


@dataclass
class AnalysisThresholds:
    """Configurable thresholds for on-page checks."""

    # Content
    min_words_homepage: int = 300
    min_words_page: int = 600
    min_keyphrase_density: float = 0.5  # percentage
    max_keyphrase_density: float = 2.5  # percentage

    # Resources
    min_minified_ratio: float = 0.8
    min_next_gen_ratio: float = 0.5
    max_image_size_bytes: int = 500000  # 500KB

    # Display
    shortened_name_length: int = 10

    # Recommendations
    language_mismatch_ratio: float = 0.3

    def _apply(self, values: dict[str, Any], describe: Callable[[str], str]) -> "AnalysisThresholds":
        """Set known fields from ``values``; bad values keep their default."""
        for item in fields(self):
            if item.name not in values:
                continue
            raw = values[item.name]
            try:
                setattr(self, item.name, _coerce(raw, item.type))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid value for {describe(item.name)}: {raw!r}")
        return self

    @classmethod
    def from_env(cls, prefix: str = "SEO_THRESHOLD_") -> "AnalysisThresholds":
        """Load thresholds from ``SEO_THRESHOLD_<FIELD>`` environment variables.

        e.g. SEO_THRESHOLD_MIN_WORDS_PAGE=800
        """
        values = {}
        for item in fields(cls):
            env_key = f"{prefix}{item.name.upper()}"
            if env_key in os.environ:
                values[item.name] = os.environ[env_key]
        return cls()._apply(values, lambda name: f"{prefix}{name.upper()}")

    @classmethod
    def from_file(cls, path: str) -> "AnalysisThresholds":
        """Load thresholds from a JSON file.

        The file may hold the fields at its top level or under a
        ``thresholds`` key. A missing file gives the defaults.

        Raises:
            ValueError: If the file is not valid JSON or not a JSON object
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.warning(f"Thresholds file {path} not found, using defaults")
            return cls()

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        values = data.get("thresholds", data) if isinstance(data, dict) else None
        if not isinstance(values, dict):
            raise ValueError(f"Thresholds file {path} must contain a JSON object")

        unknown = sorted(set(values) - {item.name for item in fields(cls)})
        if unknown:
            logger.warning(f"Ignoring unknown thresholds in {path}: {', '.join(unknown)}")
        return cls()._apply(values, lambda name: f"{name} in {path}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _coerce(value: Any, field_type: Any) -> Any:
    """Convert an env string or JSON value to an int or float field."""
    if isinstance(value, bool):
        raise TypeError("booleans are not thresholds")
    if field_type in (int, "int"):
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{value} is not a whole number")
        return int(value)
    return float(value)
