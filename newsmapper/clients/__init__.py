"""NewsMapper clients package.

HTTP API clients only — no business logic in this layer.
"""

from newsmapper.clients.gdelt_client import (
    GDELTClient,
    build_headlines_url,
    build_map_url,
    build_sentiment_url,
    build_tone_data_url,
    build_volume_url,
)

__all__ = [
    "GDELTClient",
    "build_headlines_url",
    "build_map_url",
    "build_sentiment_url",
    "build_tone_data_url",
    "build_volume_url",
]
