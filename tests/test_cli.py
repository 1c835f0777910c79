"""Tests for the command line interface."""

import json
from unittest.mock import patch

import pytest

from onpage_seo.checks import build_report
from onpage_seo.cli import build_parser, main, print_report
from onpage_seo.exceptions import FetchError
from onpage_seo.models import Check, H2Recommendation


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("onpage_seo.cli.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture
def report():
    checks = [
        Check(title="Keyphrase in Title", description="Great!", passed=True, priority="high",
              matched_keyword="seo"),
        Check(title="Keyphrase in H2 Headings", description="H2 headings do not contain...",
              passed=False, priority="medium", recommendation="Add an H2",
              h2_recommendations=[H2Recommendation(h2_index=0, h2_text="Pricing", suggestion="SEO Pricing")]),
    ]
    return build_report(checks, "seo", "https://example.com/page", False)


class TestParser:
    """Test cases for argument parsing."""

    def test_analyze_arguments(self):
        args = build_parser().parse_args([
            "analyze", "https://example.com/", "-k", "seo", "--home",
            "--secondary", "a, b", "--language", "fr", "--json", "--timeout", "30",
        ])

        assert args.command == "analyze"
        assert args.keyphrase == "seo"
        assert args.is_home_page is True
        assert args.secondary == "a, b"
        assert args.language == "fr"
        assert args.json is True
        assert args.timeout == 30.0

    def test_home_defaults_to_auto(self):
        args = build_parser().parse_args(["analyze", "https://example.com/", "-k", "seo"])
        assert args.is_home_page is None

    def test_unsupported_language_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["analyze", "https://example.com/", "-k", "seo", "--language", "xx"])


class TestMain:
    """Test cases for running the CLI."""

    def test_json_output(self, report, capsys):
        with patch("onpage_seo.cli.SEOAnalyzer") as mock_analyzer:
            mock_analyzer.return_value.analyze_sync.return_value = report
            exit_code = main(["analyze", "https://example.com/page", "-k", "seo", "--json", "--no-ai"])

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["score"] == report.score
        assert data["checks"][1]["h2Recommendations"][0]["suggestion"] == "SEO Pricing"

        config = mock_analyzer.call_args.kwargs["config"]
        assert config.use_ai_recommendations is False
        kwargs = mock_analyzer.return_value.analyze_sync.call_args.kwargs
        assert kwargs["is_home_page"] is None
        assert kwargs["language_code"] == "en"

    def test_override_file(self, report, tmp_path):
        path = tmp_path / "override.json"
        path.write_text(json.dumps({"title": "Host Title", "h2Elements": []}))

        with patch("onpage_seo.cli.SEOAnalyzer") as mock_analyzer:
            mock_analyzer.return_value.analyze_sync.return_value = report
            main(["analyze", "https://example.com/page", "-k", "seo", "--override", str(path), "--json"])

        override = mock_analyzer.return_value.analyze_sync.call_args.kwargs["host_override"]
        assert override.title == "Host Title"
        assert override.h2_elements == ()

    def test_thresholds_file(self, report, tmp_path):
        path = tmp_path / "thresholds.json"
        path.write_text(json.dumps({"min_words_page": 400}))

        with patch("onpage_seo.cli.SEOAnalyzer") as mock_analyzer:
            mock_analyzer.return_value.analyze_sync.return_value = report
            main(["analyze", "https://example.com/page", "-k", "seo", "--thresholds", str(path), "--json"])

        assert mock_analyzer.call_args.kwargs["thresholds"].min_words_page == 400

    def test_bad_override_file(self, tmp_path, capsys):
        exit_code = main([
            "analyze", "https://example.com/page", "-k", "seo", "--override", str(tmp_path / "nope.json"),
        ])

        assert exit_code == 2
        assert "could not read override file" in capsys.readouterr().err

    def test_bad_thresholds_file(self, tmp_path, capsys):
        path = tmp_path / "thresholds.json"
        path.write_text("{not json")

        with patch("onpage_seo.cli.SEOAnalyzer") as mock_analyzer:
            exit_code = main([
                "analyze", "https://example.com/page", "-k", "seo", "--thresholds", str(path),
            ])

        assert exit_code == 2
        assert "could not read thresholds file" in capsys.readouterr().err
        mock_analyzer.assert_not_called()

    def test_fetch_error_exit_code(self, capsys):
        with patch("onpage_seo.cli.SEOAnalyzer") as mock_analyzer:
            mock_analyzer.return_value.analyze_sync.side_effect = FetchError(
                "https://example.com/page", "Failed to fetch page: 404 Not Found", status_code=404
            )
            exit_code = main(["analyze", "https://example.com/page", "-k", "seo"])

        assert exit_code == 1
        assert "Failed to analyze page: Failed to fetch page: 404 Not Found" in capsys.readouterr().err


class TestPrintReport:
    """Test cases for the human-readable report."""

    def test_print_report(self, report, capsys):
        print_report(report)
        out = capsys.readouterr().out

        assert f"Score: {report.score}/100" in out
        assert "Checks passed: 1/2" in out
        assert "[MEDIUM] Keyphrase in H2 Headings" in out
        assert "Add an H2" in out
        assert "SEO Pricing" in out


class TestLoggingOptions:
    """Test cases for the logging flags."""

    def test_log_level_passed_through(self, report, no_logging_setup, tmp_path):
        log_file = str(tmp_path / "run.log")
        with patch("onpage_seo.cli.SEOAnalyzer") as mock_analyzer:
            mock_analyzer.return_value.analyze_sync.return_value = report
            main(["--log-level", "DEBUG", "--log-file", log_file,
                  "analyze", "https://example.com/page", "-k", "seo", "--json"])

        no_logging_setup.assert_called_once_with(level="DEBUG", log_file=log_file)
