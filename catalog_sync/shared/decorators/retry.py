"""
Retry decorator for transient transport failures
"""

import asyncio
from functools import wraps
from typing import Callable, Optional, Tuple, Type, Union

from catalog_sync.core.logging import get_logger

logger = get_logger(__name__)


def async_retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    max_delay: Optional[float] = None,
    exceptions: Union[Type[Exception], Tuple[Type[Exception], ...]] = Exception,
):
    """
    Retry an async callable on the given exception types.

    The delay grows by ``backoff`` after every failed attempt and is capped at
    ``max_delay`` when one is given. The last exception is re-raised once
    ``max_attempts`` is exhausted.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            wait = delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(
                            f"Giving up after {max_attempts} attempts",
                            function=func.__qualname__,
                            error=str(e),
                        )
                        raise
                    logger.warning(
                        f"Attempt {attempt} failed, retrying in {wait}s",
                        function=func.__qualname__,
                        error=str(e),
                    )
                    await asyncio.sleep(wait)
                    wait = wait * backoff
                    if max_delay is not None:
                        wait = min(wait, max_delay)

        return wrapper

    return decorator
