"""Tests for configuration loading."""

import json
import logging
from unittest.mock import patch

import pytest

from onpage_seo.config import AnalysisThresholds, Config


class TestConfig:
    """Test cases for Config."""

    def test_defaults(self):
        config = Config()

        assert config.llm_model == "gpt-3.5-turbo"
        assert config.llm_max_tokens == 500
        assert config.llm_temperature == 0.5
        assert config.use_ai_recommendations is True
        assert config.max_concurrent_recommendations == 5

    def test_from_env(self):
        env = {
            "LLM_API_KEY": "key",
            "LLM_PROVIDER": "anthropic",
            "LLM_MODEL": "claude-3-haiku-20240307",
            "USE_AI_RECOMMENDATIONS": "false",
            "TIMEOUT": "10",
            "ANALYSIS_TIMEOUT": "60",
            "MAX_CONCURRENT_RECOMMENDATIONS": "3",
            "LOG_LEVEL": "DEBUG",
        }
        with patch.dict("os.environ", env, clear=True):
            config = Config.from_env()

        assert config.llm_api_key == "key"
        assert config.llm_provider == "anthropic"
        assert config.use_ai_recommendations is False
        assert config.request_timeout == 10.0
        assert config.analysis_timeout == 60.0
        assert config.max_concurrent_recommendations == 3
        assert config.log_level == "DEBUG"

    def test_openai_key_fallback(self):
        with patch.dict("os.environ", {"OPENAI_API_KEY": "sk-test"}, clear=True):
            assert Config.from_env().llm_api_key == "sk-test"


class TestAnalysisThresholds:
    """Test cases for AnalysisThresholds."""

    def test_defaults(self):
        thresholds = AnalysisThresholds()

        assert thresholds.min_words_homepage == 300
        assert thresholds.min_words_page == 600
        assert thresholds.min_keyphrase_density == 0.5
        assert thresholds.max_keyphrase_density == 2.5
        assert thresholds.max_image_size_bytes == 500000

    def test_from_env(self):
        env = {"SEO_THRESHOLD_MIN_WORDS_PAGE": "800", "SEO_THRESHOLD_MAX_KEYPHRASE_DENSITY": "3.5"}
        with patch.dict("os.environ", env):
            thresholds = AnalysisThresholds.from_env()

        assert thresholds.min_words_page == 800
        assert thresholds.max_keyphrase_density == 3.5

    def test_invalid_env_value_keeps_default(self, caplog):
        with patch.dict("os.environ", {"SEO_THRESHOLD_MIN_WORDS_PAGE": "lots"}):
            with caplog.at_level(logging.WARNING, logger="onpage_seo.config"):
                thresholds = AnalysisThresholds.from_env()

        assert thresholds.min_words_page == 600
        assert "SEO_THRESHOLD_MIN_WORDS_PAGE" in caplog.text

    def test_from_file(self, tmp_path):
        path = tmp_path / "thresholds.json"
        path.write_text(json.dumps({"thresholds": {"min_words_homepage": 250, "unknown": 1}}))

        thresholds = AnalysisThresholds.from_file(str(path))

        assert thresholds.min_words_homepage == 250
        assert thresholds.min_words_page == 600

    def test_from_missing_file(self, tmp_path):
        assert AnalysisThresholds.from_file(str(tmp_path / "missing.json")) == AnalysisThresholds()

    def test_file_values_are_type_checked(self, tmp_path, caplog):
        path = tmp_path / "thresholds.json"
        path.write_text(json.dumps({
            "min_words_page": "many",
            "min_words_homepage": 250.0,
            "max_keyphrase_density": 3,
            "min_next_gen_ratio": True,
        }))

        with caplog.at_level(logging.WARNING, logger="onpage_seo.config"):
            thresholds = AnalysisThresholds.from_file(str(path))

        assert thresholds.min_words_page == 600
        assert thresholds.min_words_homepage == 250
        assert isinstance(thresholds.min_words_homepage, int)
        assert thresholds.max_keyphrase_density == 3.0
        assert thresholds.min_next_gen_ratio == 0.5
        assert "min_words_page in" in caplog.text
        assert "min_next_gen_ratio in" in caplog.text

    def test_file_must_hold_an_object(self, tmp_path):
        path = tmp_path / "thresholds.json"
        path.write_text("[1, 2]")

        with pytest.raises(ValueError, match="JSON object"):
            AnalysisThresholds.from_file(str(path))

    def test_to_dict(self):
        data = AnalysisThresholds().to_dict()

        assert data["min_words_page"] == 600
        assert data["language_mismatch_ratio"] == 0.3
