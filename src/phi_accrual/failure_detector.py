"""Phi accrual failure detection for a single heartbeat stream.

Implements the phi accrual failure detector described by Hayashibara et al.,
which outputs a continuous suspicion level rather than a binary alive/dead
decision.  This allows each consumer to choose its own threshold.
"""

from __future__ import annotations

import logging
import math
import threading

from phi_accrual.clock import Clock, wall_clock_ms
from phi_accrual.config import FailureDetectorConfig
from phi_accrual.history import SampleWindow

__all__ = ["PhiAccrualFailureDetector"]

logger = logging.getLogger("phi_accrual.failure_detector")

# Largest argument math.exp accepts without raising OverflowError.
_MAX_EXP_ARG = 709.0


def _phi(elapsed_ms: float, mean_ms: float, std_deviation_ms: float) -> float:
    # Logistic approximation of the normal CDF tail (Bowling et al.).
    y = (elapsed_ms - mean_ms) / std_deviation_ms
    exponent = -y * (1.5976 + 0.070566 * y * y)
    e = math.inf if exponent > _MAX_EXP_ARG else math.exp(exponent)
    if elapsed_ms > mean_ms:
        if e == 0.0:
            return math.inf
        return -math.log10(e / (1.0 + e))
    return -math.log10(1.0 - 1.0 / (1.0 + e))


class PhiAccrualFailureDetector:
    """Phi accrual failure detector (Hayashibara et al.).

    Outputs a continuous suspicion level (phi) instead of a binary alive/dead
    signal.  ``phi = -log10(1 - CDF(elapsed))`` where CDF is the normal
    distribution fitted to the observed heartbeat interval history.

    One detector monitors one peer.  Timestamps are integer milliseconds on
    any consistent scale; methods taking an optional timestamp read the
    detector's *clock* when it is omitted.

    ``add`` is serialized by an internal lock.  ``phi`` and ``is_available``
    never block; they read whatever state the latest completed ``add`` left.

    Parameters
    ----------
    threshold : float
        Phi value at or above which the peer is considered unavailable.  A
        low threshold detects real crashes quickly but produces more false
        suspicions; a high one makes fewer mistakes but reacts slower.
    max_sample_size : int
        Number of intervals used to estimate the mean and standard
        deviation of heartbeat inter-arrival times.
    min_std_deviation_ms : float
        Floor for the standard deviation estimate.  Too low a value makes
        the detector over-sensitive to sudden but normal deviations.
    acceptable_heartbeat_pause_ms : int
        Grace period added to the mean interval, absorbing expected pauses
        such as garbage collection or a dropped packet.
    first_heartbeat_estimate_ms : int
        Expected interval used to bootstrap the statistics with two samples
        and a rather high standard deviation, since the environment is
        unknown at start.
    clock : Clock
        Time source used when a timestamp is not passed explicitly.

    Raises
    ------
    ValueError
        If any of the numeric parameters is out of range.

    Examples
    --------
    >>> fd = PhiAccrualFailureDetector()
    >>> fd.phi(1_000)
    0.0
    >>> fd.add(1_000)
    >>> fd.add(2_000)
    >>> fd.is_available(3_000)
    True
    >>> fd.is_available(20_000)
    False
    """

    def __init__(
        self,
        *,
        threshold: float = 16.0,
        max_sample_size: int = 200,
        min_std_deviation_ms: float = 500.0,
        acceptable_heartbeat_pause_ms: int = 0,
        first_heartbeat_estimate_ms: int = 500,
        clock: Clock = wall_clock_ms,
    ) -> None:
        if threshold <= 0:
            msg = f"threshold must be > 0, got {threshold}"
            raise ValueError(msg)
        if max_sample_size < 1:
            msg = f"max_sample_size must be >= 1, got {max_sample_size}"
            raise ValueError(msg)
        if min_std_deviation_ms <= 0:
            msg = f"min_std_deviation_ms must be > 0, got {min_std_deviation_ms}"
            raise ValueError(msg)
        if acceptable_heartbeat_pause_ms < 0:
            msg = (
                "acceptable_heartbeat_pause_ms must be >= 0, "
                f"got {acceptable_heartbeat_pause_ms}"
            )
            raise ValueError(msg)
        if first_heartbeat_estimate_ms <= 0:
            msg = (
                "first_heartbeat_estimate_ms must be > 0, "
                f"got {first_heartbeat_estimate_ms}"
            )
            raise ValueError(msg)

        self._threshold = threshold
        self._max_sample_size = max_sample_size
        self._min_std_deviation_ms = min_std_deviation_ms
        self._acceptable_heartbeat_pause_ms = acceptable_heartbeat_pause_ms
        self._first_heartbeat_estimate_ms = first_heartbeat_estimate_ms
        self._clock = clock

        std_deviation_ms = first_heartbeat_estimate_ms // 4
        self._history = (
            SampleWindow(max_sample_size)
            .append(first_heartbeat_estimate_ms - std_deviation_ms)
            .append(first_heartbeat_estimate_ms + std_deviation_ms)
        )
        self._lock = threading.Lock()
        self._last_heartbeat: int | None = None

        logger.debug(
            "Created failure detector (threshold=%s, max_sample_size=%d, "
            "min_std_deviation_ms=%s, acceptable_heartbeat_pause_ms=%s, "
            "first_heartbeat_estimate_ms=%s)",
            threshold,
            max_sample_size,
            min_std_deviation_ms,
            acceptable_heartbeat_pause_ms,
            first_heartbeat_estimate_ms,
        )

    @classmethod
    def from_config(
        cls,
        config: FailureDetectorConfig,
        *,
        clock: Clock = wall_clock_ms,
    ) -> PhiAccrualFailureDetector:
        """Build a detector from a ``FailureDetectorConfig``.

        Examples
        --------
        >>> from phi_accrual.config import load_config
        >>> fd = PhiAccrualFailureDetector.from_config(load_config())
        """
        return cls(
            threshold=config.threshold,
            max_sample_size=config.max_sample_size,
            min_std_deviation_ms=config.min_std_deviation_ms,
            acceptable_heartbeat_pause_ms=config.acceptable_heartbeat_pause_ms,
            first_heartbeat_estimate_ms=config.first_heartbeat_estimate_ms,
            clock=clock,
        )

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def max_sample_size(self) -> int:
        return self._max_sample_size

    @property
    def min_std_deviation_ms(self) -> float:
        return self._min_std_deviation_ms

    @property
    def acceptable_heartbeat_pause_ms(self) -> int:
        return self._acceptable_heartbeat_pause_ms

    @property
    def first_heartbeat_estimate_ms(self) -> int:
        return self._first_heartbeat_estimate_ms

    @property
    def last_heartbeat(self) -> int | None:
        """Timestamp of the latest recorded heartbeat, ``None`` before the first."""
        return self._last_heartbeat

    @property
    def history(self) -> SampleWindow:
        """The interval window backing the estimate.

        Mutating it directly bypasses the detector lock.
        """
        return self._history

    def _phi_for_elapsed(self, elapsed_ms: int) -> float:
        mean_ms = self._history.mean() + self._acceptable_heartbeat_pause_ms
        std_deviation_ms = max(
            self._history.std_deviation(), self._min_std_deviation_ms
        )
        return _phi(elapsed_ms, mean_ms, std_deviation_ms)

    def phi(self, timestamp_ms: int | None = None) -> float:
        """Calculate the suspicion level as of *timestamp_ms*.

        Parameters
        ----------
        timestamp_ms : int | None
            Point in time to evaluate, defaulting to the clock's now.

        Returns
        -------
        float
            The phi value.  ``0.0`` if no heartbeat has been recorded yet;
            ``inf`` if the peer is almost certainly down.
        """
        last_heartbeat = self._last_heartbeat
        if last_heartbeat is None:
            return 0.0
        if timestamp_ms is None:
            timestamp_ms = self._clock()
        return self._phi_for_elapsed(timestamp_ms - last_heartbeat)

    def is_available(self, timestamp_ms: int | None = None) -> bool:
        """Check if the peer is considered available (phi below threshold).

        Returns
        -------
        bool
            ``True`` if ``phi(timestamp_ms) < threshold``.
        """
        return self.phi(timestamp_ms) < self._threshold

    def add(self, timestamp_ms: int | None = None) -> None:
        """Record arrival of a heartbeat at *timestamp_ms*.

        The interval since the previous heartbeat is added to the history
        only if the peer was still considered available when it arrived.
        An anomalous gap is dropped so it does not skew the estimate, while
        the next interval is measured from this heartbeat.

        Parameters
        ----------
        timestamp_ms : int | None
            Arrival time of the heartbeat, defaulting to the clock's now.
        """
        if timestamp_ms is None:
            timestamp_ms = self._clock()
        with self._lock:
            previous = self._last_heartbeat
            self._last_heartbeat = timestamp_ms
            if previous is None:
                return
            interval_ms = timestamp_ms - previous
            # Judge the gap that just ended, not the zero elapsed since the swap.
            phi = self._phi_for_elapsed(interval_ms)
            if phi < self._threshold:
                self._history.append(interval_ms)
            else:
                logger.debug(
                    "Discarding heartbeat interval of %d ms (phi=%.2f)",
                    interval_ms,
                    phi,
                )

    def heartbeat(self, timestamp_ms: int | None = None) -> None:
        """Alias of ``add``."""
        self.add(timestamp_ms)

    def __repr__(self) -> str:
        return (
            f"PhiAccrualFailureDetector(threshold={self._threshold}, "
            f"last_heartbeat={self._last_heartbeat}, history={self._history!r})"
        )
