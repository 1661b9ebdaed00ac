"""Bounded window of heartbeat inter-arrival intervals."""

from __future__ import annotations

import math
from collections import deque

__all__ = ["SampleWindow"]


class SampleWindow:
    """Sliding window of the most recent heartbeat intervals (ms).

    Keeps a running sum and sum of squares next to the samples so that
    ``mean`` and ``variance`` are O(1).  Intervals are Python ints, so the
    subtract-on-evict bookkeeping stays exact no matter how many samples
    pass through the window.

    Parameters
    ----------
    capacity : int
        Maximum number of intervals retained.  Once full, every ``append``
        evicts the oldest interval.

    Raises
    ------
    ValueError
        If *capacity* is smaller than 1.

    Examples
    --------
    >>> window = SampleWindow(3).append(900).append(1100)
    >>> window.mean()
    1000.0
    >>> window.append(1000).append(1200).intervals
    (1100, 1000, 1200)
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            msg = f"capacity must be >= 1, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._intervals: deque[int] = deque()
        # (count, sum, sum of squares), replaced in a single assignment so
        # readers without the owner's lock never see a half-applied append.
        self._totals: tuple[int, int, int] = (0, 0, 0)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def intervals(self) -> tuple[int, ...]:
        """Retained intervals, oldest first."""
        return tuple(self._intervals)

    @property
    def sum(self) -> int:
        return self._totals[1]

    @property
    def sum_of_squares(self) -> int:
        return self._totals[2]

    def __len__(self) -> int:
        return self._totals[0]

    def append(self, interval: int) -> SampleWindow:
        """Add *interval*, evicting the oldest sample when at capacity.

        Returns the window itself so bootstrap samples can be chained.
        """
        count, total, squares = self._totals
        self._intervals.append(interval)
        count += 1
        total += interval
        squares += interval * interval
        if count > self._capacity:
            dropped = self._intervals.popleft()
            count -= 1
            total -= dropped
            squares -= dropped * dropped
        self._totals = (count, total, squares)
        return self

    def mean(self) -> float:
        """Mean of the retained intervals.

        Raises ``ZeroDivisionError`` on an empty window.
        """
        count, total, _ = self._totals
        return total / count

    def variance(self) -> float:
        """Population variance of the retained intervals.

        Computed as ``E[x^2] - E[x]^2``, which can come out as a tiny
        negative number when the true variance is close to zero.
        """
        count, total, squares = self._totals
        mean = total / count
        return squares / count - mean * mean

    def std_deviation(self) -> float:
        return math.sqrt(max(self.variance(), 0.0))

    def __repr__(self) -> str:
        return f"SampleWindow(capacity={self._capacity}, size={len(self)})"
