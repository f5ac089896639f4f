"""NewsMapper pipeline: facets → query → fetch → parse → analyze.

Wires the pure components to the HTTP client. The only place where a compiled
query meets the network, and the only place that substitutes the default
query for an empty facet selection.

Usage:
    from config.settings import NewsMapperConfig
    from newsmapper.models.query import FacetState
    from newsmapper.pipeline import run_sentiment_analysis

    facets = FacetState(resource="Oil & Gas", country="Mali")
    report = run_sentiment_analysis(facets, "1y", NewsMapperConfig())
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from config.settings import NewsMapperConfig
from newsmapper.analysis.lexicon import ResourceLexicon
from newsmapper.analysis.query_builder import QueryBuilder, describe_facets
from newsmapper.analysis.timeseries_parser import TimeseriesFormat, parse_timeseries
from newsmapper.analysis.tone_analyzer import SentimentAnalytics
from newsmapper.clients.gdelt_client import (
    GDELTClient,
    build_headlines_url,
    build_map_url,
    build_sentiment_url,
)
from newsmapper.models.events import SentimentReport
from newsmapper.models.query import FacetState
from newsmapper.utils.logging_utils import get_query_logger
from newsmapper.utils.timespan import section_title

logger = logging.getLogger(__name__)

FETCH_FAILED_ERROR = "Failed to fetch sentiment data"


def make_query_builder(config: NewsMapperConfig) -> QueryBuilder:
    """Build a QueryBuilder, loading the lexicon override file when configured.

    Raises:
        ValueError: If ``config.lexicon_path`` is set but cannot be loaded.
    """
    if config.lexicon_path:
        logger.info("Loading lexicon from %s", config.lexicon_path)
        return QueryBuilder(lexicon=ResourceLexicon.from_yaml(config.lexicon_path))
    return QueryBuilder()


def resolve_query(
    facets: FacetState,
    default: str,
    builder: Optional[QueryBuilder] = None,
) -> str:
    """Compile facets, falling back to ``default`` when nothing is selected.

    Args:
        facets: Current facet selection.
        default: Query used when the facets compile to an empty string.
        builder: QueryBuilder to use (a default-lexicon builder when None).

    Returns:
        Non-empty query string (assuming ``default`` is non-empty).
    """
    query = (builder or QueryBuilder()).build(facets)
    if not query:
        logger.debug("Empty facet selection, using default query %r", default)
        return default
    return query


def build_viewer_sections(
    facets: FacetState,
    config: Optional[NewsMapperConfig] = None,
    builder: Optional[QueryBuilder] = None,
) -> Dict[str, Dict[str, str]]:
    """Compute the title and GDELT URL for each viewer section.

    All three sections share one compiled query; each uses its own timespan.

    Returns:
        ``{"map": {...}, "headlines": {...}, "sentiment": {...}}`` where each
        entry holds ``title``, ``url`` and ``timespan``.
    """
    config = config or NewsMapperConfig()
    builder = builder or make_query_builder(config)
    query = resolve_query(facets, config.default_query, builder)
    description = describe_facets(facets, builder.global_region)

    urls = {
        "map": build_map_url(query, config.map_timespan),
        "headlines": build_headlines_url(
            query, config.headlines_timespan, config.headlines_max_records
        ),
        "sentiment": build_sentiment_url(query, config.sentiment_timespan),
    }
    return {
        section: {
            "title": section_title(section, description, config.timespan_for(section)),
            "url": url,
            "timespan": config.timespan_for(section),
        }
        for section, url in urls.items()
    }


def analyze_text(
    raw_text: Optional[str],
    fmt: TimeseriesFormat = TimeseriesFormat.TONE,
    timespan: str = "",
    config: Optional[NewsMapperConfig] = None,
) -> SentimentReport:
    """Parse and analyze an already-fetched timeline body."""
    config = config or NewsMapperConfig()
    series = parse_timeseries(
        raw_text,
        fmt,
        max_replication=config.max_bucket_replication,
        half_width=config.open_bucket_half_width,
    )
    return SentimentAnalytics().analyze(series, timespan)


def run_sentiment_analysis(
    facets: FacetState,
    timespan: Optional[str] = None,
    config: Optional[NewsMapperConfig] = None,
    client: Optional[GDELTClient] = None,
) -> SentimentReport:
    """Fetch and analyze the tone timeline for a facet selection.

    Args:
        facets: Current facet selection.
        timespan: GDELT timespan code; defaults to the configured sentiment span.
        config: Runtime configuration (environment defaults when None).
        client: GDELT client to use; a client is created (and closed) when None.

    Returns:
        SentimentReport. Transport failure and empty data are both reported
        with ``success=False`` and distinct error messages.
    """
    config = config or NewsMapperConfig()
    timespan = (timespan or config.sentiment_timespan).strip()
    query = resolve_query(facets, config.default_query, make_query_builder(config))
    qlog = get_query_logger(__name__, query)

    owns_client = client is None
    if client is None:
        client = GDELTClient.from_config(config)

    try:
        qlog.info("Fetching tone timeline (timespan=%s)", timespan)
        raw = client.fetch_tone_timeline(query, timespan, "csv")
    finally:
        if owns_client:
            client.close()

    if raw is None:
        qlog.warning("Tone timeline fetch failed")
        return SentimentReport(success=False, error=FETCH_FAILED_ERROR, timespan=timespan)

    report = analyze_text(raw, TimeseriesFormat.TONE, timespan, config)
    if report.success:
        qlog.info(
            "Sentiment: %d points, %s, trend %s",
            report.data_points,
            report.classification.overall.value,
            report.overall_trend.direction.value,
        )
    else:
        qlog.info("Sentiment: %s", report.error)
    return report
