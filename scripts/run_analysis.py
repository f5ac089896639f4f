#!/usr/bin/env python3
"""NewsMapper CLI — compile a GDELT query and run sentiment analytics.

Usage:
    python scripts/run_analysis.py --resource "Oil & Gas" --country Mali --query-only
    python scripts/run_analysis.py --region Amazon --resource Mining --timespan 30d
    python scripts/run_analysis.py --input-file tone.csv --format tone --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is on sys.path for consistent import resolution
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.defaults import DEFAULT_SENTIMENT_TIMESPAN, GLOBAL_REGION  # noqa: E402
from config.settings import NewsMapperConfig  # noqa: E402
from newsmapper.analysis.narrative import format_report  # noqa: E402
from newsmapper.analysis.timeseries_parser import TimeseriesFormat  # noqa: E402
from newsmapper.models.query import FacetState  # noqa: E402
from newsmapper.pipeline import (  # noqa: E402
    analyze_text,
    build_viewer_sections,
    make_query_builder,
    resolve_query,
    run_sentiment_analysis,
)
from newsmapper.utils.logging_utils import configure_logging  # noqa: E402

logger = logging.getLogger("newsmapper.cli")


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argparse argument parser for facet selection and analysis."""
    parser = argparse.ArgumentParser(
        prog="run_analysis",
        description="NewsMapper — GDELT query builder and news-sentiment analytics",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # ── Facets ──────────────────────────────────────────────────────────────────
    parser.add_argument("--resource", type=str, default="", help="Resource facet label")
    parser.add_argument("--region", type=str, default=GLOBAL_REGION, help="Region facet label")
    parser.add_argument("--country", type=str, default="", help="Country facet")
    parser.add_argument(
        "--custom",
        type=str,
        default="",
        help="Custom search text (overrides --resource; commas become OR)",
    )
    parser.add_argument(
        "--timespan",
        type=str,
        default=DEFAULT_SENTIMENT_TIMESPAN,
        help="GDELT timespan code for the sentiment timeline (e.g., 1d, 7d, 1y)",
    )

    # ── Modes ───────────────────────────────────────────────────────────────────
    parser.add_argument(
        "--query-only",
        action="store_true",
        default=False,
        help="Print the compiled query and viewer URLs without fetching anything",
    )
    parser.add_argument(
        "--input-file",
        type=str,
        default=None,
        help="Analyze a saved timeline file instead of fetching from GDELT",
    )
    parser.add_argument(
        "--format",
        type=str,
        default=TimeseriesFormat.TONE.value,
        choices=[f.value for f in TimeseriesFormat],
        help="Format of --input-file",
    )

    # ── Output and logging ──────────────────────────────────────────────────────
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Emit the report as JSON instead of plain text",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity level (defaults to LOG_LEVEL from the environment)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write log records to this file",
    )

    return parser


def args_to_facets(args: argparse.Namespace) -> FacetState:
    """Convert parsed CLI arguments to a FacetState."""
    return FacetState(
        resource=args.resource,
        region=args.region,
        country=args.country,
        custom=args.custom,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint — returns the process exit code."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    config = NewsMapperConfig()
    configure_logging(log_level=args.log_level or config.log_level, log_file=args.log_file)

    facets = args_to_facets(args)
    try:
        builder = make_query_builder(config)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    if args.query_only:
        query = resolve_query(facets, config.default_query, builder)
        sections = build_viewer_sections(facets, config, builder)
        if args.json:
            print(json.dumps({"query": query, "sections": sections}, indent=2))
        else:
            print(query)
            for section in sections.values():
                print(f"{section['title']}\n  {section['url']}")
        return 0

    if args.input_file:
        try:
            raw = Path(args.input_file).read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Cannot read %s: %s", args.input_file, exc)
            return 2
        report = analyze_text(raw, TimeseriesFormat(args.format), args.timespan, config)
    else:
        try:
            report = run_sentiment_analysis(facets, args.timespan, config)
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            return 130

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_report(report))
    return 0 if report.success else 1


if __name__ == "__main__":
    sys.exit(main())
