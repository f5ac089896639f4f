"""Date normalization utilities for NewsMapper.

GDELT timeline dates differ between output formats: CSV rows carry ISO dates,
JSON timelines carry compact stamps such as 20241203T150000Z. Route JSON
timestamps through normalize_timestamp() before building observations.
"""

from __future__ import annotations

import re
from datetime import datetime

from dateutil import parser as dateutil_parser

# YYYYMMDDTHHMMSSZ (GDELT JSON timeline) and YYYYMMDDHHMMSS (GDELT compact)
_GDELT_COMPACT_RE = re.compile(r"^(\d{8})T?(\d{6})Z?$")


def normalize_timestamp(raw: str) -> str:
    """Normalize a GDELT timestamp variant to ISO form.

    Midnight timestamps collapse to ``YYYY-MM-DD``; sub-day buckets keep their
    time as ``YYYY-MM-DD HH:MM:SS``.

    Args:
        raw: Raw date or datetime string from a GDELT response.

    Returns:
        Normalized timestamp, or the stripped original on parse failure.
    """
    if not raw:
        return ""
    raw = raw.strip()

    match = _GDELT_COMPACT_RE.match(raw)
    try:
        if match:
            parsed = datetime.strptime(match.group(1) + match.group(2), "%Y%m%d%H%M%S")
        elif len(raw) == 8 and raw.isdigit():
            parsed = datetime.strptime(raw, "%Y%m%d")
        else:
            parsed = dateutil_parser.parse(raw)
    except (ValueError, OverflowError, TypeError):
        return raw

    if (parsed.hour, parsed.minute, parsed.second) == (0, 0, 0):
        return parsed.strftime("%Y-%m-%d")
    return parsed.strftime("%Y-%m-%d %H:%M:%S")
