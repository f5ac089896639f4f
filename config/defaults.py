"""NewsMapper — All default threshold values and configuration constants.

All tuneable values live here. Never hard-code magic numbers in source files.
Import constants from this module; override via NewsMapperConfig at runtime.
"""

# ── Query defaults ─────────────────────────────────────────────────────────────
# Query sent upstream when the facets compile to the empty string
DEFAULT_QUERY: str = "petroleum OR lng"

# Region value that never contributes a location clause
GLOBAL_REGION: str = "Global"

# ── Section timespans ──────────────────────────────────────────────────────────
DEFAULT_MAP_TIMESPAN: str = "1d"
DEFAULT_HEADLINES_TIMESPAN: str = "1d"
DEFAULT_SENTIMENT_TIMESPAN: str = "1y"

# Maximum articles requested for the headline list
HEADLINES_MAX_RECORDS: int = 50

# ── Trend classification ───────────────────────────────────────────────────────
# |slope| below this value is reported as no clear trend
TREND_FLAT_SLOPE: float = 0.005

# Slope beyond this magnitude is "increasingly" positive/negative
TREND_STRONG_SLOPE: float = 0.02

# R² below this value is reported as no clear trend
TREND_MIN_R_SQUARED: float = 0.1

# R² above this value makes a trend significant
TREND_SIGNIFICANT_R_SQUARED: float = 0.15

# ── Volatility classes (population std dev upper bounds) ───────────────────────
VOLATILITY_VERY_STABLE: float = 1.0
VOLATILITY_STABLE: float = 2.0
VOLATILITY_MODERATE: float = 3.0
VOLATILITY_VOLATILE: float = 5.0

# ── Average tone classes (inclusive lower bounds) ──────────────────────────────
TONE_HIGHLY_POSITIVE: float = 3.0
TONE_MODERATELY_POSITIVE: float = 1.0
TONE_NEUTRAL: float = -1.0
TONE_MODERATELY_NEGATIVE: float = -3.0
TONE_HIGHLY_NEGATIVE: float = -5.0

# ── Recency window ─────────────────────────────────────────────────────────────
# Minimum number of trailing observations treated as "recent"
RECENT_WINDOW_MIN: int = 10

# Fraction of the series treated as "recent" when larger than the minimum
RECENT_WINDOW_FRACTION: float = 0.2

# ── Episodic negative spikes ───────────────────────────────────────────────────
# Spike when value < mean - SPIKE_STD_MULTIPLIER * std_dev ...
SPIKE_STD_MULTIPLIER: float = 1.5

# ... and value < SPIKE_TONE_CEILING
SPIKE_TONE_CEILING: float = -2.0

# Series flagged when spikes exceed this share of observations
SPIKE_SHARE_THRESHOLD: float = 0.10

# ── Negative share (percent of observations below zero) ────────────────────────
CONSISTENTLY_NEGATIVE_PCT: float = 75.0
MOSTLY_NEGATIVE_PCT: float = 60.0

# ── Bucketed-volume reconstruction ─────────────────────────────────────────────
# Maximum synthetic observations emitted per bucket row
MAX_BUCKET_REPLICATION: int = 10

# Offset applied to an open-ended bucket bound ("< -10", "> 10")
OPEN_BUCKET_HALF_WIDTH: float = 2.5

# ── GDELT rate limits ──────────────────────────────────────────────────────────
# Minimum seconds between successive GDELT API submissions
GDELT_STAGGER_SECONDS: float = 0.75

# Maximum retry attempts on GDELT HTTP failures
GDELT_MAX_RETRIES: int = 3

# Base seconds for GDELT exponential backoff
GDELT_BACKOFF_BASE: float = 2.0

# HTTP request timeout for GDELT calls (seconds)
GDELT_REQUEST_TIMEOUT: int = 30

# ── Logging ────────────────────────────────────────────────────────────────────
DEFAULT_LOG_LEVEL: str = "INFO"
