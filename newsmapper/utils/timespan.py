"""Timespan code utilities for NewsMapper.

GDELT accepts TIMESPAN values such as '1d', '7d', '30d', '1m', '1y', '48h'
or '15min'. Timespans are always explicit parameters; there is no module-level
"current timespan".
"""

from __future__ import annotations

from typing import Dict

_TIMESPAN_LABELS: Dict[str, str] = {
    "1d": "today",
    "7d": "past week",
    "30d": "past month",
    "1m": "past month",
    "365d": "past year",
    "1y": "past year",
}

_SECTION_PREFIXES: Dict[str, str] = {
    "map": "News Map",
    "headlines": "Headlines",
    "sentiment": "Sentiment",
}


def timespan_label(timespan: str) -> str:
    """Return the display label for a timespan code.

    Known codes map to phrases ("7d" -> "past week"); anything else is passed
    through in parentheses ("90d" -> "(90d)"). An empty code yields "".
    """
    code = (timespan or "").strip()
    if not code:
        return ""
    return _TIMESPAN_LABELS.get(code, f"({code})")


def section_title(section: str, description: str, timespan: str) -> str:
    """Compose a viewer section heading.

    Map and headline headings carry the timespan label; the sentiment heading
    shows the raw timespan code in parentheses.

    Args:
        section: "map", "headlines" or "sentiment".
        description: Human-readable query label (see describe_facets).
        timespan: Timespan code shown in the heading.

    Returns:
        e.g. "Headlines: Coal, Africa - past week" or "Sentiment: Coal (1y)".
    """
    try:
        prefix = _SECTION_PREFIXES[section]
    except KeyError:
        raise ValueError(f"Unknown section {section!r}") from None

    code = (timespan or "").strip()
    if not code:
        return f"{prefix}: {description}"
    if section == "sentiment":
        return f"{prefix}: {description} ({code})"
    label = timespan_label(code)
    if label.startswith("("):
        return f"{prefix}: {description} {label}"
    return f"{prefix}: {description} - {label}"
