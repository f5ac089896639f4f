"""NewsMapper — NewsMapperConfig and environment-based configuration loading.

All runtime configuration flows through NewsMapperConfig. Section timespans are
explicit fields here and explicit parameters downstream; there is no ambient
"current timespan" state anywhere in the package.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from config.defaults import (
    DEFAULT_HEADLINES_TIMESPAN,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAP_TIMESPAN,
    DEFAULT_QUERY,
    DEFAULT_SENTIMENT_TIMESPAN,
    GDELT_BACKOFF_BASE,
    GDELT_MAX_RETRIES,
    GDELT_REQUEST_TIMEOUT,
    GDELT_STAGGER_SECONDS,
    HEADLINES_MAX_RECORDS,
    MAX_BUCKET_REPLICATION,
    OPEN_BUCKET_HALF_WIDTH,
)

# Load .env file if present; silently skip if missing
load_dotenv()


@dataclass
class NewsMapperConfig:
    """Single configuration object passed to the pipeline and the CLI."""

    # ── Query ──────────────────────────────────────────────────────────────────
    default_query: str = field(
        default_factory=lambda: os.getenv("NEWSMAPPER_DEFAULT_QUERY", DEFAULT_QUERY)
    )
    lexicon_path: Optional[str] = field(
        default_factory=lambda: os.getenv("NEWSMAPPER_LEXICON_PATH") or None
    )

    # ── Section timespans ──────────────────────────────────────────────────────
    map_timespan: str = DEFAULT_MAP_TIMESPAN
    headlines_timespan: str = DEFAULT_HEADLINES_TIMESPAN
    sentiment_timespan: str = DEFAULT_SENTIMENT_TIMESPAN
    headlines_max_records: int = HEADLINES_MAX_RECORDS

    # ── Bucketed-volume reconstruction ─────────────────────────────────────────
    max_bucket_replication: int = MAX_BUCKET_REPLICATION
    open_bucket_half_width: float = OPEN_BUCKET_HALF_WIDTH

    # ── GDELT fetch configuration ──────────────────────────────────────────────
    gdelt_stagger_seconds: float = GDELT_STAGGER_SECONDS
    gdelt_max_retries: int = GDELT_MAX_RETRIES
    gdelt_backoff_base: float = GDELT_BACKOFF_BASE
    gdelt_request_timeout: int = field(
        default_factory=lambda: int(os.getenv("GDELT_REQUEST_TIMEOUT", GDELT_REQUEST_TIMEOUT))
    )

    # ── Logging ────────────────────────────────────────────────────────────────
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL))

    def __post_init__(self) -> None:
        for name in ("map_timespan", "headlines_timespan", "sentiment_timespan"):
            value = getattr(self, name)
            if not value or not value.strip():
                raise ValueError(f"NewsMapperConfig.{name} must be a non-empty timespan code")
            setattr(self, name, value.strip())

        if self.max_bucket_replication < 1:
            self.max_bucket_replication = 1

        if self.headlines_max_records < 1:
            raise ValueError(
                f"headlines_max_records must be positive, got {self.headlines_max_records}"
            )

    def timespan_for(self, section: str) -> str:
        """Return the configured timespan code for a viewer section.

        Args:
            section: One of "map", "headlines", "sentiment".

        Returns:
            The timespan code for that section.
        """
        try:
            return {
                "map": self.map_timespan,
                "headlines": self.headlines_timespan,
                "sentiment": self.sentiment_timespan,
            }[section]
        except KeyError:
            raise ValueError(f"Unknown section {section!r}") from None
