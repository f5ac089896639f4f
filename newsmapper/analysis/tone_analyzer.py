"""Sentiment analytics for GDELT tone timelines.

Computes trend (least squares with R²), volatility, tone classification, a
recent-vs-historical comparison, episodic negative spikes and negative share,
then renders the narrative sentence. Pure functions, no I/O.

Every division is guarded: zero denominators yield a neutral value so NaN
never reaches classification. An empty series produces an unsuccessful
report instead of raising.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from config.defaults import (
    CONSISTENTLY_NEGATIVE_PCT,
    MOSTLY_NEGATIVE_PCT,
    RECENT_WINDOW_FRACTION,
    RECENT_WINDOW_MIN,
    TONE_HIGHLY_NEGATIVE,
    TONE_HIGHLY_POSITIVE,
    TONE_MODERATELY_NEGATIVE,
    TONE_MODERATELY_POSITIVE,
    TONE_NEUTRAL,
    TREND_FLAT_SLOPE,
    TREND_MIN_R_SQUARED,
    TREND_SIGNIFICANT_R_SQUARED,
    TREND_STRONG_SLOPE,
    VOLATILITY_MODERATE,
    VOLATILITY_STABLE,
    VOLATILITY_VERY_STABLE,
    VOLATILITY_VOLATILE,
)
from newsmapper.analysis.narrative import NarrativeFlags, generate_narrative
from newsmapper.analysis.spike_detector import detect_episodic_spikes, mean_and_std
from newsmapper.models.events import (
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

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA_ERROR = "No sentiment data available for this query"


def calculate_trend(
    values: Sequence[float],
    flat_slope: float = TREND_FLAT_SLOPE,
    strong_slope: float = TREND_STRONG_SLOPE,
    min_r_squared: float = TREND_MIN_R_SQUARED,
    significant_r_squared: float = TREND_SIGNIFICANT_R_SQUARED,
) -> TrendResult:
    """Fit value = slope * index + intercept by ordinary least squares.

    Args:
        values: Tone values in chronological order (x = 0..n-1).
        flat_slope: |slope| below this is no clear trend.
        strong_slope: |slope| above this is "increasingly" positive/negative.
        min_r_squared: R² below this is no clear trend.
        significant_r_squared: R² above this marks the trend significant.

    Returns:
        TrendResult; direction is INSUFFICIENT_DATA when fewer than 2 values.
    """
    n = len(values)
    if n < 2:
        return TrendResult(
            slope=0.0,
            intercept=float(values[0]) if n == 1 else 0.0,
            r_squared=0.0,
            direction=TrendDirection.INSUFFICIENT_DATA,
        )
    if min(values) == max(values):
        return TrendResult(
            slope=0.0,
            intercept=float(values[0]),
            r_squared=0.0,
            direction=TrendDirection.STABLE,
        )

    sum_x = sum_y = sum_xy = sum_xx = 0.0
    for i, y in enumerate(values):
        sum_x += i
        sum_y += y
        sum_xy += i * y
        sum_xx += i * i

    denominator = n * sum_xx - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator else 0.0
    intercept = (sum_y - slope * sum_x) / n

    mean_y = sum_y / n
    ss_total = sum((y - mean_y) ** 2 for y in values)
    ss_residual = sum((y - (slope * i + intercept)) ** 2 for i, y in enumerate(values))
    r_squared = 1.0 - ss_residual / ss_total if ss_total > 0 else 0.0
    r_squared = min(max(r_squared, 0.0), 1.0)

    if r_squared < min_r_squared or abs(slope) < flat_slope:
        direction = TrendDirection.STABLE
    elif slope > strong_slope:
        direction = TrendDirection.INCREASINGLY_POSITIVE
    elif slope > flat_slope:
        direction = TrendDirection.SLIGHTLY_IMPROVING
    elif slope < -strong_slope:
        direction = TrendDirection.INCREASINGLY_NEGATIVE
    else:
        direction = TrendDirection.SLIGHTLY_DECLINING

    return TrendResult(
        slope=slope,
        intercept=intercept,
        r_squared=r_squared,
        direction=direction,
        significant=r_squared > significant_r_squared,
    )


def calculate_volatility(values: Sequence[float]) -> float:
    """Population standard deviation of the values (0.0 when empty)."""
    return mean_and_std(values)[1]


def classify_volatility(volatility: float) -> VolatilityClass:
    if volatility < VOLATILITY_VERY_STABLE:
        return VolatilityClass.VERY_STABLE
    if volatility < VOLATILITY_STABLE:
        return VolatilityClass.STABLE
    if volatility < VOLATILITY_MODERATE:
        return VolatilityClass.MODERATE
    if volatility < VOLATILITY_VOLATILE:
        return VolatilityClass.VOLATILE
    return VolatilityClass.HIGHLY_VOLATILE


def classify_tone(average: float) -> ToneClass:
    """Classify an average tone; lower bounds are inclusive."""
    if average >= TONE_HIGHLY_POSITIVE:
        return ToneClass.HIGHLY_POSITIVE
    if average >= TONE_MODERATELY_POSITIVE:
        return ToneClass.MODERATELY_POSITIVE
    if average >= TONE_NEUTRAL:
        return ToneClass.NEUTRAL
    if average >= TONE_MODERATELY_NEGATIVE:
        return ToneClass.MODERATELY_NEGATIVE
    if average >= TONE_HIGHLY_NEGATIVE:
        return ToneClass.HIGHLY_NEGATIVE
    return ToneClass.EXTREMELY_NEGATIVE


def recent_window_size(
    n: int,
    minimum: int = RECENT_WINDOW_MIN,
    fraction: float = RECENT_WINDOW_FRACTION,
) -> int:
    """Number of trailing observations forming the "recent" window.

    max(minimum, ceil(fraction * n)), never more than n.
    """
    if n <= 0:
        return 0
    return min(n, max(minimum, math.ceil(fraction * n)))


def compare_recent(
    values: Sequence[float],
    minimum: int = RECENT_WINDOW_MIN,
    fraction: float = RECENT_WINDOW_FRACTION,
) -> RecencyComparison:
    """Compare the trailing window against the preceding history.

    When the whole series fits in the window there is no history:
    historical_mean is None and mean_shift is 0.0.
    """
    window = recent_window_size(len(values), minimum, fraction)
    recent = list(values[len(values) - window:]) if window else []
    historical = list(values[:len(values) - window])

    recent_mean = sum(recent) / len(recent) if recent else 0.0
    historical_mean: Optional[float] = sum(historical) / len(historical) if historical else None
    shift = recent_mean - historical_mean if historical_mean is not None else 0.0

    return RecencyComparison(
        window_size=window,
        recent_mean=recent_mean,
        historical_mean=historical_mean,
        mean_shift=shift,
        recent_trend=calculate_trend(recent),
    )


def compute_negative_share(
    values: Sequence[float],
    consistently_pct: float = CONSISTENTLY_NEGATIVE_PCT,
    mostly_pct: float = MOSTLY_NEGATIVE_PCT,
) -> NegativeShare:
    """Percentage of observations below zero, with the two negativity flags."""
    if not values:
        return NegativeShare(percent_negative=0.0, consistently_negative=False, mostly_negative=False)
    pct = 100.0 * sum(1 for v in values if v < 0) / len(values)
    return NegativeShare(
        percent_negative=pct,
        consistently_negative=pct > consistently_pct,
        mostly_negative=pct > mostly_pct,
    )


class SentimentAnalytics:
    """Turns a tone timeline into a SentimentReport.

    Args:
        recent_window_min: Minimum size of the trailing "recent" window.
        recent_window_fraction: Fraction of the series forming the recent window.
    """

    def __init__(
        self,
        recent_window_min: int = RECENT_WINDOW_MIN,
        recent_window_fraction: float = RECENT_WINDOW_FRACTION,
    ) -> None:
        self.recent_window_min = recent_window_min
        self.recent_window_fraction = recent_window_fraction

    def analyze(
        self,
        series: Optional[Sequence[TimeseriesObservation]],
        timespan: str = "",
    ) -> SentimentReport:
        """Analyze a tone timeline.

        Args:
            series: Observations in chronological order; None is treated as empty.
            timespan: Timespan code the series was fetched for (echoed in the report).

        Returns:
            SentimentReport; success is False when the series is empty.
        """
        if not series:
            logger.debug("Sentiment analysis: empty series (timespan=%s)", timespan)
            return SentimentReport(success=False, error=INSUFFICIENT_DATA_ERROR, timespan=timespan)

        observations = list(series)
        values = [o.value for o in observations]
        n = len(values)

        average, volatility = mean_and_std(values)
        statistics = SummaryStatistics(
            average=average,
            minimum=min(values),
            maximum=max(values),
            volatility=volatility,
        )
        classification = ToneClassification(
            overall=classify_tone(average),
            volatility=classify_volatility(volatility),
        )
        overall_trend = calculate_trend(values)
        recency = compare_recent(values, self.recent_window_min, self.recent_window_fraction)
        spikes = detect_episodic_spikes(observations)
        negative = compute_negative_share(values)

        flags = NarrativeFlags(
            consistently_negative=negative.consistently_negative,
            has_episodic_spikes=spikes.has_episodic_spikes,
            declining=overall_trend.direction.is_negative,
            significant=overall_trend.significant,
        )
        narrative = generate_narrative(flags)

        logger.debug(
            "Sentiment analysis: n=%d avg=%.3f slope=%.4f r2=%.3f -> %s",
            n, average, overall_trend.slope, overall_trend.r_squared, classification.overall.value,
        )

        return SentimentReport(
            success=True,
            timespan=timespan,
            data_points=n,
            statistics=statistics,
            classification=classification,
            overall_trend=overall_trend,
            recency=recency,
            episodic_spikes=spikes,
            negative_share=negative,
            narrative=narrative,
            timestamps=tuple(o.timestamp for o in observations),
            values=tuple(values),
        )


def analyze_sentiment(
    series: Optional[Sequence[TimeseriesObservation]],
    timespan: str = "",
) -> SentimentReport:
    """Analyze a tone timeline with default thresholds."""
    return SentimentAnalytics().analyze(series, timespan)
