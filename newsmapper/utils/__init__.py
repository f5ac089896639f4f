"""NewsMapper utilities package.

Stateless helpers: date normalization, timespan vocabulary, logging setup.
"""

from newsmapper.utils.date_utils import normalize_timestamp
from newsmapper.utils.logging_utils import configure_logging, get_logger, get_query_logger
from newsmapper.utils.timespan import section_title, timespan_label

__all__ = [
    "normalize_timestamp",
    "configure_logging",
    "get_logger",
    "get_query_logger",
    "section_title",
    "timespan_label",
]
