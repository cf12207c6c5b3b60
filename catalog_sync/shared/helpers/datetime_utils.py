"""
DateTime utility functions for the catalog sync service
"""

from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)


def seconds_until_next_hour(now: datetime, hour: int) -> float:
    """Seconds from ``now`` until the next occurrence of ``hour``:00 UTC"""
    now = now.astimezone(timezone.utc)
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()
