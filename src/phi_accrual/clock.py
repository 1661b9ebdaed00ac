"""Millisecond time sources for heartbeat timestamps.

A ``Clock`` is any zero-argument callable returning integer milliseconds
since an arbitrary but consistent epoch.  The failure detector only ever
subtracts two readings of the same clock, so the epoch itself is irrelevant.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeAlias

__all__ = ["Clock", "monotonic_clock_ms", "wall_clock_ms"]


Clock: TypeAlias = Callable[[], int]


def wall_clock_ms() -> int:
    """Milliseconds since the Unix epoch.

    Examples
    --------
    >>> wall_clock_ms() > 1_420_070_400_000
    True
    """
    return time.time_ns() // 1_000_000


def monotonic_clock_ms() -> int:
    """Milliseconds from a clock that never goes backwards.

    Preferable to ``wall_clock_ms`` when the host clock may be adjusted
    while the detector is running.
    """
    return time.monotonic_ns() // 1_000_000
