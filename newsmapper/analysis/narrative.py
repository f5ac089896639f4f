"""Narrative rendering for NewsMapper sentiment reports.

The qualitative summary sentence comes from an ordered rule table of
(name, predicate, message) entries evaluated top to bottom; the first match
wins. The last rule always matches.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Tuple

from newsmapper.models.events import SentimentReport
from newsmapper.utils.timespan import timespan_label


@dataclass(frozen=True)
class NarrativeFlags:
    """Boolean inputs to the narrative rule table."""

    consistently_negative: bool
    has_episodic_spikes: bool
    declining: bool        # Overall trend direction is one of the negative directions
    significant: bool      # Overall trend R² above the significance cut-off


@dataclass(frozen=True)
class NarrativeRule:
    name: str
    predicate: Callable[[NarrativeFlags], bool]
    message: str


NARRATIVE_RULES: Tuple[NarrativeRule, ...] = (
    NarrativeRule(
        "negative_with_spikes",
        lambda f: f.consistently_negative and f.has_episodic_spikes,
        "Coverage is persistently negative, with episodic sharp negative spikes.",
    ),
    NarrativeRule(
        "negative_and_declining",
        lambda f: f.consistently_negative and f.declining and f.significant,
        "Coverage is persistently negative and has deteriorated significantly over the period.",
    ),
    NarrativeRule(
        "persistently_negative",
        lambda f: f.consistently_negative,
        "Coverage is persistently negative, with no significant change in direction.",
    ),
    NarrativeRule(
        "episodic_spikes",
        lambda f: f.has_episodic_spikes,
        "Coverage is generally mixed but punctuated by episodic negative spikes.",
    ),
    NarrativeRule(
        "significant_decline",
        lambda f: f.declining and f.significant,
        "Coverage tone is on a significant downward trend.",
    ),
    NarrativeRule(
        "no_dominant_pattern",
        lambda f: True,
        "No persistent negativity or significant decline detected in coverage tone.",
    ),
)


def match_rule(flags: NarrativeFlags) -> NarrativeRule:
    """Return the first rule whose predicate holds for ``flags``."""
    for rule in NARRATIVE_RULES:
        if rule.predicate(flags):
            return rule
    return NARRATIVE_RULES[-1]


def generate_narrative(flags: NarrativeFlags) -> str:
    return match_rule(flags).message


def format_report(report: SentimentReport) -> str:
    """Render a report as the plain-text analysis summary shown to users."""
    if not report.success:
        return report.error
    report.check_complete()

    stats = report.statistics
    classification = report.classification
    overall = report.overall_trend
    recency = report.recency

    lines: List[str] = ["Sentiment Analysis"]
    span = timespan_label(report.timespan)
    if span:
        lines[0] += f" ({span.strip('()')})"
    lines += [
        "",
        f"Classification: {classification.overall.value} (average tone: {stats.average:.2f})",
        f"Overall Trend: Coverage is {overall.direction.value} over the time period"
        + (" (significant)" if overall.significant else ""),
        f"Recent Trend: Most recent sentiment is {recency.recent_trend.direction.value}",
    ]
    if recency.historical_mean is not None:
        lines.append(
            f"Recent vs. Historical: {recency.recent_mean:.2f} vs. "
            f"{recency.historical_mean:.2f} (shift {recency.mean_shift:+.2f})"
        )
    lines += [
        f"Volatility: Coverage tone is {classification.volatility.value} "
        f"(std. deviation: {stats.volatility:.2f})",
        "",
        report.narrative,
        "",
        f"Analysis based on {report.data_points} data points",
        f"Range: {stats.minimum:.2f} to {stats.maximum:.2f}",
    ]
    return "\n".join(lines)
