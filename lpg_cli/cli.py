"""
LPG CLI - Main Command Line Interface

This module provides the command line entry point for building language
identification profiles from per-language directories.
"""

from __future__ import annotations
import logging
import sys
import json
from typing import Optional, List
import argparse

from lpg_core.config_runtime import BuildSettings
from lpg_core.logging_monitoring import setup_logging
from lpg_profiles.orchestrator import ProfileOrchestrator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SKIPPED = 1
EXIT_USAGE = 2


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        prog="lpg",
        description="Build n-gram language identification profiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Each language code names a directory holding <code>.properties,
stopwords.txt, <code>.urls and/or a cached <code>.strings corpus.

Examples:
  lpg se
  lpg --clean se sma smj
  lpg --base-dir profiles --max-mb 5 --jobs 4 nb nn
        """
    )

    parser.add_argument(
        "languages",
        nargs="*",
        metavar="LANG",
        help="Language codes to build"
    )

    parser.add_argument(
        "-c", "--clean",
        action="store_true",
        help="Delete the cached .strings corpus before rebuilding"
    )

    parser.add_argument(
        "--base-dir",
        help="Directory containing the language directories (default: $LPG_BASE_DIR or cwd)"
    )

    parser.add_argument("--max-mb", type=float, help="Crawl text budget in megabytes (default: 3)")
    parser.add_argument("--min-frequency", type=int, help="Drop n-grams seen fewer times (default: 5)")
    parser.add_argument("--timeout", type=float, help="Per-fetch timeout in seconds (default: 30)")
    parser.add_argument("--jobs", type=int, help="Languages to build in parallel (default: 1)")

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )

    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log records as JSON lines"
    )

    parser.add_argument(
        "--report",
        action="store_true",
        help="Print a JSON build report to stdout"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0"
    )

    return parser


def cli(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    setup_logging(parsed_args.verbose, parsed_args.debug, parsed_args.log_json)

    if not parsed_args.languages:
        logger.error("No language profiles given as arguments, exiting")
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    settings = BuildSettings.from_env(
        base_dir=parsed_args.base_dir,
        max_total_megabytes=parsed_args.max_mb,
        min_frequency=parsed_args.min_frequency,
        fetch_timeout=parsed_args.timeout,
        jobs=parsed_args.jobs,
    )
    logger.debug(f"Build settings: {settings.to_dict()}")

    try:
        orchestrator = ProfileOrchestrator(settings)
        if parsed_args.clean:
            orchestrator.clean(parsed_args.languages)
        reports = orchestrator.build_all(parsed_args.languages)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except ValueError as e:
        logger.error(f"Error: {e}", exc_info=parsed_args.debug)
        return EXIT_USAGE

    if parsed_args.report:
        print(json.dumps([r.to_dict() for r in reports], indent=2, ensure_ascii=False))

    skipped = [r.language for r in reports if not r.succeeded]
    if skipped:
        logger.warning(f"Skipped profiles: {', '.join(skipped)}")
        return EXIT_SKIPPED
    return EXIT_OK


def main():
    """Main entry point"""
    sys.exit(cli())


if __name__ == "__main__":
    main()
