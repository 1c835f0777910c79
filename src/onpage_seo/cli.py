"""Command line entry point: ``onpage-seo analyze URL -k KEYPHRASE``."""

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from onpage_seo.analyzer import SEOAnalyzer
from onpage_seo.config import AnalysisThresholds, Config
from onpage_seo.exceptions import SEOAnalysisError
from onpage_seo.languages import DEFAULT_LANGUAGE_CODE, get_supported_language_codes
from onpage_seo.logging_config import setup_logging
from onpage_seo.models import AnalysisReport, HostOverride


PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="onpage-seo",
        description="Analyze a web page for on-page SEO against a target keyphrase",
    )
    parser.add_argument("--log-level", default=None,
                        help="Logging level (default: LOG_LEVEL from .env, else INFO)")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze a single page")
    analyze.add_argument("url", help="Page URL to analyze")
    analyze.add_argument("-k", "--keyphrase", required=True, help="Target keyphrase")
    home = analyze.add_mutually_exclusive_group()
    home.add_argument("--home", dest="is_home_page", action="store_const", const=True,
                      help="Treat the page as a homepage (lower content-length threshold)")
    home.add_argument("--not-home", dest="is_home_page", action="store_const", const=False,
                      help="Treat the page as a regular page")
    analyze.set_defaults(is_home_page=None)
    analyze.add_argument("--secondary", default=None,
                         help='Comma-separated secondary keywords, e.g. "seo audit, site audit"')
    analyze.add_argument("--page-type", default=None,
                         help="Page type used to tailor recommendations (e.g. homepage, blog post)")
    analyze.add_argument("--language", default=DEFAULT_LANGUAGE_CODE,
                         choices=get_supported_language_codes(),
                         help="Language for recommendations (default: en)")
    analyze.add_argument("--override", type=Path, default=None, metavar="FILE",
                         help="JSON file with host-provided page data (title, h2Elements, ...)")
    analyze.add_argument("--thresholds", type=Path, default=None, metavar="FILE",
                         help="JSON file overriding analysis thresholds")
    analyze.add_argument("--timeout", type=float, default=None,
                         help="Overall analysis timeout in seconds (0 disables)")
    analyze.add_argument("--no-ai", action="store_true",
                         help="Skip the completion service and use rule-based recommendations")
    analyze.add_argument("--json", action="store_true", help="Print the report as JSON")

    return parser


def print_report(report: AnalysisReport) -> None:
    """Print a human-readable report."""
    print("\n" + "=" * 60)
    print(f"SEO Analysis: {report.url}")
    print("=" * 60)
    print(f"Keyphrase: {report.keyphrase}")
    print(f"Page type: {'homepage' if report.is_home_page else 'regular page'}")
    print(f"\nScore: {report.score}/100")
    print(f"Checks passed: {report.passed_checks}/{report.total_checks}")

    passed = [check for check in report.checks if check.passed]
    failed = sorted(report.failed, key=lambda c: PRIORITY_ORDER.get(c.priority, 1))

    if failed:
        print(f"\n❌ Failed checks ({len(failed)}):")
        for check in failed:
            print(f"\n  [{check.priority.upper()}] {check.title}")
            print(f"    {check.description}")
            if check.recommendation:
                print(f"    → {check.recommendation}")
            for item in check.image_data or []:
                print(f"      • {item.short_name} ({item.size} KB, {item.mime_type})")
            for suggestion in check.h2_recommendations or []:
                print(f"      • H2 #{suggestion.h2_index} \"{suggestion.h2_text}\" → {suggestion.suggestion}")

    if passed:
        print(f"\n✅ Passed checks ({len(passed)}):")
        for check in passed:
            print(f"  • {check.title}: {check.description}")
    print()


def _load_override(path: Optional[Path]) -> Optional[HostOverride]:
    if path is None:
        return None
    with open(path, "r", encoding="utf-8") as f:
        return HostOverride.from_dict(json.load(f))


def run_analyze(args: argparse.Namespace, config: Config) -> int:
    if args.no_ai:
        config = replace(config, use_ai_recommendations=False)

    try:
        host_override = _load_override(args.override)
    except (OSError, ValueError) as e:
        print(f"Error: could not read override file {args.override}: {e}", file=sys.stderr)
        return 2

    try:
        thresholds = (
            AnalysisThresholds.from_file(str(args.thresholds)) if args.thresholds
            else AnalysisThresholds.from_env()
        )
    except (OSError, ValueError) as e:
        print(f"Error: could not read thresholds file {args.thresholds}: {e}", file=sys.stderr)
        return 2

    analyzer = SEOAnalyzer(config=config, thresholds=thresholds)
    try:
        report = analyzer.analyze_sync(
            args.url,
            args.keyphrase,
            is_home_page=args.is_home_page,
            host_override=host_override,
            secondary_keywords=args.secondary,
            page_type=args.page_type,
            language_code=args.language,
            timeout=args.timeout,
        )
    except SEOAnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_report(report)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return a process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = Config.from_env()
    setup_logging(level=args.log_level or config.log_level, log_file=args.log_file)

    if args.command == "analyze":
        return run_analyze(args, config)

    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
