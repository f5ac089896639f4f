"""NewsMapper — GDELT query builder and news-sentiment analytics.

Public API surface:
    - NewsMapperConfig: Runtime configuration
    - FacetState: Facet selection (resource, region, country, custom text)
    - build_query: Compile facets into a GDELT query string
    - analyze_sentiment: Analyze a parsed tone timeline
    - run_sentiment_analysis: Fetch and analyze the tone timeline for facets
"""

__version__ = "1.0.0"
__author__ = "NewsMapper Contributors"

from config.settings import NewsMapperConfig
from newsmapper.analysis.query_builder import QueryBuilder, build_query
from newsmapper.analysis.tone_analyzer import analyze_sentiment
from newsmapper.models.query import FacetState
from newsmapper.pipeline import resolve_query, run_sentiment_analysis

__all__ = [
    "__version__",
    "NewsMapperConfig",
    "FacetState",
    "QueryBuilder",
    "build_query",
    "analyze_sentiment",
    "resolve_query",
    "run_sentiment_analysis",
]
