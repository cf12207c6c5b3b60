"""
Timing decorator for long-running pipeline steps
"""

import time
from functools import wraps
from typing import Callable, Optional

from catalog_sync.core.logging import get_logger

logger = get_logger(__name__)


def async_timing(threshold_ms: Optional[float] = None):
    """Log how long an async callable took; warn above ``threshold_ms``"""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            started = time.monotonic()
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "Timed step failed",
                    function=func.__qualname__,
                    elapsed_ms=round((time.monotonic() - started) * 1000, 2),
                    error=str(e),
                )
                raise
            finally:
                elapsed_ms = round((time.monotonic() - started) * 1000, 2)
                if threshold_ms and elapsed_ms > threshold_ms:
                    logger.warning(
                        "Timed step exceeded threshold",
                        function=func.__qualname__,
                        elapsed_ms=elapsed_ms,
                        threshold_ms=threshold_ms,
                    )
                else:
                    logger.debug(
                        "Timed step finished",
                        function=func.__qualname__,
                        elapsed_ms=elapsed_ms,
                    )

        return wrapper

    return decorator
