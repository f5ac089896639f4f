"""GDELT timeline parsing for NewsMapper.

Turns the raw text of a GDELT timeline response into TimeseriesObservation
lists. Malformed rows are common upstream noise and are skipped, never raised.
An empty result means "insufficient data", not a transport failure.

Supported shapes:
- TONE:          CSV rows of ``date, series label, tone`` (TimelineTone).
- VOLUME_BUCKETS: CSV rows of ``date, bucket label, article count`` where the
                 bucket label names a tone range ("< -10", "-10 to -5", "> 10").
                 Each row is replicated min(count, cap) times at the bucket
                 midpoint. This approximates the per-article tone distribution;
                 it is not a faithful reconstruction and biases variance.
- TIMELINE_JSON: DOC 2.0 JSON ``{"timeline": [{"series", "data": [...]}]}``.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
import re
from enum import Enum
from typing import Any, List, Optional, Union

from config.defaults import MAX_BUCKET_REPLICATION, OPEN_BUCKET_HALF_WIDTH
from newsmapper.models.events import TimeseriesObservation
from newsmapper.utils.date_utils import normalize_timestamp

logger = logging.getLogger(__name__)

_NUMBER = r"[-+]?\d+(?:\.\d+)?"
_RANGE_RE = re.compile(rf"^({_NUMBER})\s*to\s*({_NUMBER})$", re.IGNORECASE)
_BELOW_RE = re.compile(rf"^(?:value\s*)?<\s*({_NUMBER})$", re.IGNORECASE)
_ABOVE_RE = re.compile(rf"^(?:value\s*)?>\s*({_NUMBER})$", re.IGNORECASE)


class TimeseriesFormat(str, Enum):
    TONE = "tone"
    VOLUME_BUCKETS = "volume_buckets"
    TIMELINE_JSON = "timeline_json"


def bucket_midpoint(label: str, half_width: float = OPEN_BUCKET_HALF_WIDTH) -> Optional[float]:
    """Map a tone-range bucket label to a representative value.

    Closed ranges ("5 to 10") map to their midpoint; open ranges ("< -10",
    "> 10") map to the bound pushed outward by ``half_width``.

    Args:
        label: Bucket label from the volume timeline.
        half_width: Offset applied to open-ended bounds.

    Returns:
        Representative tone value, or None for an unrecognized label.
    """
    label = " ".join(label.strip().split())
    match = _RANGE_RE.match(label)
    if match:
        low, high = float(match.group(1)), float(match.group(2))
        return (low + high) / 2.0
    match = _BELOW_RE.match(label)
    if match:
        return float(match.group(1)) - half_width
    match = _ABOVE_RE.match(label)
    if match:
        return float(match.group(1)) + half_width
    return None


def _parse_float(raw: str) -> Optional[float]:
    try:
        value = float(raw.strip())
    except (ValueError, AttributeError):
        return None
    return value if math.isfinite(value) else None


def _csv_rows(raw_text: str) -> List[List[str]]:
    """Split CSV text into rows, dropping blank lines and the header row."""
    text = raw_text.lstrip("\ufeff").strip()
    if not text:
        return []
    rows = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
    return rows[1:]


def parse_tone_csv(raw_text: str) -> List[TimeseriesObservation]:
    """Parse per-observation ``date, series, value`` rows.

    Rows with fewer than three columns, an empty date, or a non-numeric value
    are dropped.
    """
    observations: List[TimeseriesObservation] = []
    rows = _csv_rows(raw_text)
    for row in rows:
        if len(row) < 3:
            continue
        date = row[0].strip()
        value = _parse_float(row[2])
        if not date or value is None:
            continue
        observations.append(TimeseriesObservation(timestamp=date, value=value, label=row[1].strip()))

    skipped = len(rows) - len(observations)
    if skipped:
        logger.debug("Tone CSV: skipped %d of %d rows", skipped, len(rows))
    return observations


def parse_volume_buckets_csv(
    raw_text: str,
    max_replication: int = MAX_BUCKET_REPLICATION,
    half_width: float = OPEN_BUCKET_HALF_WIDTH,
) -> List[TimeseriesObservation]:
    """Parse ``date, bucket label, count`` rows into synthetic observations.

    Each recognized bucket emits min(count, max_replication) observations at
    the bucket's representative value. Unrecognized labels, non-numeric counts
    and non-positive counts emit nothing.

    Args:
        raw_text: Raw CSV text.
        max_replication: Cap on observations emitted per row.
        half_width: Offset for open-ended buckets (see bucket_midpoint).

    Returns:
        Observations in input order.
    """
    observations: List[TimeseriesObservation] = []
    unknown_labels = set()
    for row in _csv_rows(raw_text):
        if len(row) < 3:
            continue
        date = row[0].strip()
        label = row[1].strip()
        count = _parse_float(row[2])
        if not date or count is None:
            continue

        midpoint = bucket_midpoint(label, half_width)
        if midpoint is None:
            unknown_labels.add(label)
            continue

        copies = min(int(count), max_replication)
        observations.extend(
            TimeseriesObservation(timestamp=date, value=midpoint, label=label)
            for _ in range(max(copies, 0))
        )

    if unknown_labels:
        logger.debug("Volume buckets: skipped unrecognized labels %s", sorted(unknown_labels))
    return observations


def parse_timeline_json(
    payload: Union[str, dict, None],
    series: Optional[str] = None,
) -> List[TimeseriesObservation]:
    """Parse a DOC 2.0 JSON timeline into observations.

    Args:
        payload: Raw JSON text or an already-decoded dict.
        series: Series name to select; defaults to the first series.

    Returns:
        Observations with ISO-normalized timestamps.
    """
    if isinstance(payload, str):
        try:
            payload = json.loads(payload) if payload.strip() else None
        except json.JSONDecodeError:
            logger.warning("Timeline JSON: unparseable body (length=%d)", len(payload))
            return []
    if not isinstance(payload, dict):
        return []

    timeline = payload.get("timeline") or []
    chosen: Optional[dict] = None
    for entry in timeline:
        if not isinstance(entry, dict):
            continue
        if series is None or entry.get("series") == series:
            chosen = entry
            break
    if chosen is None:
        return []

    label = str(chosen.get("series", ""))
    observations: List[TimeseriesObservation] = []
    for point in chosen.get("data") or []:
        if not isinstance(point, dict):
            continue
        date = normalize_timestamp(str(point.get("date") or ""))
        value = _coerce_value(point.get("value"))
        if not date or value is None:
            continue
        observations.append(TimeseriesObservation(timestamp=date, value=value, label=label))
    return observations


def _coerce_value(raw: Any) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw) if math.isfinite(raw) else None
    if isinstance(raw, str):
        return _parse_float(raw)
    return None


def parse_timeseries(
    raw_text: Optional[str],
    fmt: Union[TimeseriesFormat, str] = TimeseriesFormat.TONE,
    max_replication: int = MAX_BUCKET_REPLICATION,
    half_width: float = OPEN_BUCKET_HALF_WIDTH,
) -> List[TimeseriesObservation]:
    """Parse a raw GDELT timeline response in the given format.

    Args:
        raw_text: Response body; None or blank yields an empty list.
        fmt: TimeseriesFormat member or its string value.
        max_replication: Bucket replication cap (VOLUME_BUCKETS only).
        half_width: Open-bucket offset (VOLUME_BUCKETS only).

    Returns:
        Observations in input order; empty when nothing parses.

    Raises:
        ValueError: If ``fmt`` is not a known format.
    """
    fmt = TimeseriesFormat(fmt)
    if not raw_text or not raw_text.strip():
        return []

    if fmt is TimeseriesFormat.TONE:
        return parse_tone_csv(raw_text)
    if fmt is TimeseriesFormat.VOLUME_BUCKETS:
        return parse_volume_buckets_csv(raw_text, max_replication, half_width)
    return parse_timeline_json(raw_text)
