"""
Time source helpers.

All persisted timestamps are naive UTC (``DateTime`` columns without a
timezone). Services that compare against "now" take a ``Clock`` so tests
can pin the current time instead of patching the system clock.
"""

from datetime import datetime, timezone
from typing import Callable


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def fixed_clock(moment: datetime) -> Clock:
    """
    Build a clock that always returns ``moment``.

    Example:
        >>> clock = fixed_clock(datetime(2026, 1, 1, 9, 0))
        >>> clock()
        datetime.datetime(2026, 1, 1, 9, 0)
    """
    return lambda: moment
