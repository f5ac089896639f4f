"""NewsMapper data models package.

All parser and analytics outputs are defined here as typed dataclasses.
Never return raw Dict from analysis code — always use the typed models.
"""

from newsmapper.models.events import (
    EpisodicSpikeStats,
    NegativeShare,
    RecencyComparison,
    SentimentReport,
    SummaryStatistics,
    TimeseriesObservation,
    ToneClass,
    ToneClassification,
    TrendDirection,
    TrendResult,
    VolatilityClass,
)
from newsmapper.models.query import FacetState

__all__ = [
    # query
    "FacetState",
    # events
    "TimeseriesObservation",
    "TrendDirection",
    "TrendResult",
    "ToneClass",
    "VolatilityClass",
    "SummaryStatistics",
    "ToneClassification",
    "RecencyComparison",
    "EpisodicSpikeStats",
    "NegativeShare",
    "SentimentReport",
]
