"""Unit tests for newsmapper.analysis.spike_detector.

Covers:
- mean_and_std: population statistics, empty and constant input
- find_negative_spikes: statistical and absolute cut-offs
- detect_episodic_spikes: fixture, strict share threshold, empty input
"""

from __future__ import annotations

import pytest

from newsmapper.analysis.spike_detector import (
    detect_episodic_spikes,
    find_negative_spikes,
    mean_and_std,
)
from newsmapper.models.events import TimeseriesObservation


# ── Helpers ───────────────────────────────────────────────────────────────────────

def _make_series(values):
    return [TimeseriesObservation(timestamp=f"2024-02-{i + 1:02d}", value=v) for i, v in enumerate(values)]


# ── mean_and_std ──────────────────────────────────────────────────────────────────

class TestMeanAndStd:
    def test_population_statistics(self):
        """Standard deviation divides by n, not n - 1."""
        mean, std = mean_and_std([0.0] * 8 + [-10.0, -10.0])
        assert mean == pytest.approx(-2.0)
        assert std == pytest.approx(4.0)

    def test_empty(self):
        """An empty sequence yields zeros."""
        assert mean_and_std([]) == (0.0, 0.0)

    def test_constant(self):
        """A constant sequence has exactly zero spread."""
        assert mean_and_std([-2.5] * 7) == (-2.5, 0.0)


# ── find_negative_spikes ──────────────────────────────────────────────────────────

class TestFindNegativeSpikes:
    def test_fixture_spike_dates(self, tone_series):
        """The four -9.0 observations in the fixture are spikes."""
        spikes = find_negative_spikes(tone_series)
        assert [s.timestamp for s in spikes] == [
            "2024-01-06",
            "2024-01-13",
            "2024-01-20",
            "2024-01-27",
        ]

    def test_dip_above_tone_ceiling_not_spike(self):
        """A statistical outlier that is not below -2 is not a spike."""
        assert find_negative_spikes(_make_series([1.0] * 19 + [-1.5])) == []

    def test_constant_series_has_no_spikes(self):
        """Nothing lies below the mean of a constant series."""
        assert find_negative_spikes(_make_series([-6.0] * 10)) == []

    def test_custom_multiplier(self):
        """A larger multiplier raises the bar for a spike."""
        series = _make_series([0.0] * 8 + [-10.0, -10.0])
        assert len(find_negative_spikes(series, std_multiplier=1.5)) == 2
        assert find_negative_spikes(series, std_multiplier=3.0) == []


# ── detect_episodic_spikes ────────────────────────────────────────────────────────

class TestDetectEpisodicSpikes:
    def test_fixture_flagged(self, tone_series):
        """Four spikes in thirty observations exceed the 10% share."""
        stats = detect_episodic_spikes(tone_series)
        assert stats.spike_count == 4
        assert stats.spike_share == pytest.approx(4 / 30)
        assert stats.has_episodic_spikes
        assert len(stats.spike_timestamps) == 4

    def test_share_threshold_is_strict(self):
        """Exactly 10% spikes is not flagged."""
        stats = detect_episodic_spikes(_make_series([0.0] * 9 + [-10.0]))
        assert stats.spike_count == 1
        assert stats.spike_share == pytest.approx(0.1)
        assert not stats.has_episodic_spikes

    def test_above_threshold_flagged(self):
        """Twenty percent spikes is flagged."""
        stats = detect_episodic_spikes(_make_series([0.0] * 8 + [-10.0, -10.0]))
        assert stats.has_episodic_spikes
        assert stats.spike_timestamps == ("2024-02-09", "2024-02-10")

    def test_empty(self):
        """An empty series has no spikes."""
        stats = detect_episodic_spikes([])
        assert stats.spike_count == 0
        assert stats.spike_share == 0.0
        assert not stats.has_episodic_spikes
