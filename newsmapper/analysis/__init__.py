"""NewsMapper analysis package.

Pure analytical functions only — no I/O, no API calls, no side effects.
All functions operate on typed models from newsmapper.models.
"""

from newsmapper.analysis.lexicon import DEFAULT_LEXICON, ResourceLexicon
from newsmapper.analysis.narrative import format_report, generate_narrative
from newsmapper.analysis.query_builder import QueryBuilder, build_query, describe_facets
from newsmapper.analysis.spike_detector import detect_episodic_spikes
from newsmapper.analysis.timeseries_parser import TimeseriesFormat, parse_timeseries
from newsmapper.analysis.tone_analyzer import (
    SentimentAnalytics,
    analyze_sentiment,
    calculate_trend,
    calculate_volatility,
    classify_tone,
    classify_volatility,
)

__all__ = [
    "DEFAULT_LEXICON",
    "ResourceLexicon",
    "QueryBuilder",
    "build_query",
    "describe_facets",
    "TimeseriesFormat",
    "parse_timeseries",
    "detect_episodic_spikes",
    "SentimentAnalytics",
    "analyze_sentiment",
    "calculate_trend",
    "calculate_volatility",
    "classify_tone",
    "classify_volatility",
    "generate_narrative",
    "format_report",
]
