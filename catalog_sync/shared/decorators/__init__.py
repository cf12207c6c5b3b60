"""
Decorators module for the catalog sync service
"""

from .retry import async_retry
from .timing import async_timing

__all__ = [
    "async_retry",
    "async_timing",
]
