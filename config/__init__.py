"""NewsMapper configuration package."""

from config.defaults import (
    DEFAULT_HEADLINES_TIMESPAN,
    DEFAULT_MAP_TIMESPAN,
    DEFAULT_QUERY,
    DEFAULT_SENTIMENT_TIMESPAN,
    GLOBAL_REGION,
    HEADLINES_MAX_RECORDS,
    MAX_BUCKET_REPLICATION,
)
from config.settings import NewsMapperConfig

__all__ = [
    "NewsMapperConfig",
    "DEFAULT_QUERY",
    "GLOBAL_REGION",
    "DEFAULT_MAP_TIMESPAN",
    "DEFAULT_HEADLINES_TIMESPAN",
    "DEFAULT_SENTIMENT_TIMESPAN",
    "HEADLINES_MAX_RECORDS",
    "MAX_BUCKET_REPLICATION",
]
