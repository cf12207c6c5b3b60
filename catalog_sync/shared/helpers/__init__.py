"""
Helpers module for the catalog sync service
"""

from .datetime_utils import (
    now_utc,
    seconds_until_next_hour,
)
from .string_utils import (
    strip_emoji,
    slugify,
    extract_numeric_gid,
)

__all__ = [
    "now_utc",
    "seconds_until_next_hour",
    "strip_emoji",
    "slugify",
    "extract_numeric_gid",
]
