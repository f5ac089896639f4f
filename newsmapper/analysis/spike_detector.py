"""Episodic negative spike detection for NewsMapper.

Finds sharp negative tone excursions in a timeline: observations far below the
series mean that are also clearly negative in absolute terms. Pure functions,
no I/O or external calls.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

from config.defaults import SPIKE_SHARE_THRESHOLD, SPIKE_STD_MULTIPLIER, SPIKE_TONE_CEILING
from newsmapper.models.events import EpisodicSpikeStats, TimeseriesObservation

logger = logging.getLogger(__name__)


def mean_and_std(values: Sequence[float]) -> Tuple[float, float]:
    """Return (mean, population standard deviation); (0.0, 0.0) when empty."""
    n = len(values)
    if n == 0:
        return 0.0, 0.0
    if min(values) == max(values):
        return float(values[0]), 0.0
    mean = sum(values) / n
    variance = sum((v - mean) ** 2 for v in values) / n
    std_dev = math.sqrt(variance) if variance > 0 else 0.0
    return mean, std_dev


def find_negative_spikes(
    observations: Sequence[TimeseriesObservation],
    std_multiplier: float = SPIKE_STD_MULTIPLIER,
    tone_ceiling: float = SPIKE_TONE_CEILING,
) -> List[TimeseriesObservation]:
    """Return observations below ``mean - k*std`` and below ``tone_ceiling``.

    Zero-variance series are handled naturally: nothing lies strictly below
    the mean, so no spikes are returned.

    Args:
        observations: Timeline observations in chronological order.
        std_multiplier: k in the mean - k*std cut-off.
        tone_ceiling: Absolute tone a spike must also fall below.

    Returns:
        Spike observations in input order.
    """
    if not observations:
        return []

    mean, std_dev = mean_and_std([o.value for o in observations])
    cutoff = mean - std_multiplier * std_dev
    return [o for o in observations if o.value < cutoff and o.value < tone_ceiling]


def detect_episodic_spikes(
    observations: Sequence[TimeseriesObservation],
    std_multiplier: float = SPIKE_STD_MULTIPLIER,
    tone_ceiling: float = SPIKE_TONE_CEILING,
    share_threshold: float = SPIKE_SHARE_THRESHOLD,
) -> EpisodicSpikeStats:
    """Summarize episodic negative spikes for a timeline.

    The series is flagged when spikes make up strictly more than
    ``share_threshold`` of all observations.

    Args:
        observations: Timeline observations in chronological order.
        std_multiplier: k in the mean - k*std cut-off.
        tone_ceiling: Absolute tone a spike must also fall below.
        share_threshold: Spike share above which the series is flagged.

    Returns:
        EpisodicSpikeStats (all zero for an empty series).
    """
    if not observations:
        return EpisodicSpikeStats(spike_count=0, spike_share=0.0, has_episodic_spikes=False)

    spikes = find_negative_spikes(observations, std_multiplier, tone_ceiling)
    share = len(spikes) / len(observations)
    flagged = share > share_threshold
    if flagged:
        logger.debug(
            "Episodic negative spikes: %d of %d observations (%.1f%%)",
            len(spikes), len(observations), share * 100,
        )
    return EpisodicSpikeStats(
        spike_count=len(spikes),
        spike_share=share,
        has_episodic_spikes=flagged,
        spike_timestamps=tuple(o.timestamp for o in spikes),
    )
