"""Time-series and sentiment report data models for NewsMapper.

Defines the typed structures produced by the timeseries parser and the
sentiment analytics engine. All report types are frozen value objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class TimeseriesObservation:
    """A single time bucket from a GDELT tone or volume timeline."""

    timestamp: str     # Opaque, ordered; input order is chronological
    value: float       # Tone value or bucket midpoint
    label: str = ""    # Series or bucket label from the source row


class TrendDirection(str, Enum):
    """Qualitative direction of a least-squares trend line."""

    INSUFFICIENT_DATA = "insufficient data"
    STABLE = "no clear trend"
    INCREASINGLY_POSITIVE = "increasingly positive"
    SLIGHTLY_IMPROVING = "slightly improving"
    INCREASINGLY_NEGATIVE = "increasingly negative"
    SLIGHTLY_DECLINING = "slightly declining"

    @property
    def is_positive(self) -> bool:
        return self in (TrendDirection.INCREASINGLY_POSITIVE, TrendDirection.SLIGHTLY_IMPROVING)

    @property
    def is_negative(self) -> bool:
        return self in (TrendDirection.INCREASINGLY_NEGATIVE, TrendDirection.SLIGHTLY_DECLINING)


class ToneClass(str, Enum):
    """Classification bucket for an average tone value."""

    HIGHLY_POSITIVE = "Highly Positive"
    MODERATELY_POSITIVE = "Moderately Positive"
    NEUTRAL = "Neutral/Mixed"
    MODERATELY_NEGATIVE = "Moderately Negative"
    HIGHLY_NEGATIVE = "Highly Negative"
    EXTREMELY_NEGATIVE = "Extremely Negative"


class VolatilityClass(str, Enum):
    """Classification bucket for the population standard deviation of tone."""

    VERY_STABLE = "very stable"
    STABLE = "stable"
    MODERATE = "moderate"
    VOLATILE = "volatile"
    HIGHLY_VOLATILE = "highly volatile"


@dataclass(frozen=True)
class TrendResult:
    """Ordinary least-squares fit of value against observation index."""

    slope: float
    intercept: float
    r_squared: float
    direction: TrendDirection
    significant: bool = False   # r_squared above the significance cut-off


@dataclass(frozen=True)
class SummaryStatistics:
    average: float
    minimum: float
    maximum: float
    volatility: float   # Population standard deviation


@dataclass(frozen=True)
class ToneClassification:
    overall: ToneClass
    volatility: VolatilityClass


@dataclass(frozen=True)
class RecencyComparison:
    """Trailing "recent" window compared against the preceding history.

    historical_mean is None when the whole series fits inside the recent
    window; mean_shift is 0.0 in that case.
    """

    window_size: int
    recent_mean: float
    historical_mean: Optional[float]
    mean_shift: float
    recent_trend: TrendResult


@dataclass(frozen=True)
class EpisodicSpikeStats:
    """Sharp negative excursions below the series mean."""

    spike_count: int
    spike_share: float          # spike_count / total observations
    has_episodic_spikes: bool
    spike_timestamps: Tuple[str, ...] = ()


@dataclass(frozen=True)
class NegativeShare:
    percent_negative: float
    consistently_negative: bool
    mostly_negative: bool


@dataclass(frozen=True)
class SentimentReport:
    """Aggregate result of a sentiment analysis call.

    When ``success`` is False only ``error`` and ``timespan`` are meaningful;
    every other section is None or empty.
    """

    success: bool
    error: str = ""
    timespan: str = ""
    data_points: int = 0
    statistics: Optional[SummaryStatistics] = None
    classification: Optional[ToneClassification] = None
    overall_trend: Optional[TrendResult] = None
    recency: Optional[RecencyComparison] = None
    episodic_spikes: Optional[EpisodicSpikeStats] = None
    negative_share: Optional[NegativeShare] = None
    narrative: str = ""
    timestamps: Tuple[str, ...] = field(default_factory=tuple)
    values: Tuple[float, ...] = field(default_factory=tuple)

    @property
    def recent_trend(self) -> Optional[TrendResult]:
        return self.recency.recent_trend if self.recency else None

    def check_complete(self) -> None:
        """Raise ValueError when a successful report lacks an analysis section."""
        missing = [
            name
            for name in (
                "statistics",
                "classification",
                "overall_trend",
                "recency",
                "episodic_spikes",
                "negative_share",
            )
            if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(f"Successful SentimentReport is missing: {', '.join(missing)}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-ready dict with display rounding applied.

        Statistics are rounded to 2 decimal places and slopes to 4, matching
        what the viewer shows.
        """
        if not self.success:
            return {"success": False, "error": self.error, "timespan": self.timespan}

        self.check_complete()

        recent = self.recency.recent_trend
        return {
            "success": True,
            "timespan": self.timespan,
            "dataPoints": self.data_points,
            "statistics": {
                "average": round(self.statistics.average, 2),
                "minimum": round(self.statistics.minimum, 2),
                "maximum": round(self.statistics.maximum, 2),
                "volatility": round(self.statistics.volatility, 2),
            },
            "classification": {
                "overall": self.classification.overall.value,
                "volatility": self.classification.volatility.value,
            },
            "trend": {
                "overall": self.overall_trend.direction.value,
                "overallSlope": round(self.overall_trend.slope, 4),
                "overallRSquared": round(self.overall_trend.r_squared, 4),
                "overallSignificant": self.overall_trend.significant,
                "recent": recent.direction.value,
                "recentSlope": round(recent.slope, 4),
                "recentRSquared": round(recent.r_squared, 4),
            },
            "recency": {
                "windowSize": self.recency.window_size,
                "recentMean": round(self.recency.recent_mean, 2),
                "historicalMean": (
                    round(self.recency.historical_mean, 2)
                    if self.recency.historical_mean is not None
                    else None
                ),
                "meanShift": round(self.recency.mean_shift, 2),
            },
            "episodicSpikes": {
                "count": self.episodic_spikes.spike_count,
                "share": round(self.episodic_spikes.spike_share, 4),
                "hasEpisodicSpikes": self.episodic_spikes.has_episodic_spikes,
                "dates": list(self.episodic_spikes.spike_timestamps),
            },
            "negativeShare": {
                "percent": round(self.negative_share.percent_negative, 1),
                "consistentlyNegative": self.negative_share.consistently_negative,
                "mostlyNegative": self.negative_share.mostly_negative,
            },
            "narrative": self.narrative,
            "rawData": {"dates": list(self.timestamps), "tones": list(self.values)},
        }
