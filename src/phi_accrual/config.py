"""TOML-based configuration for phi accrual failure detectors.

Provides ``load_config`` / ``discover_config`` for loading
``phi_accrual.toml`` into a frozen ``FailureDetectorConfig``.

A config file looks like::

    [failure_detector]
    threshold = 12.0
    max_sample_size = 1000
    min_std_deviation_ms = 100.0
    acceptable_heartbeat_pause_ms = 3000
    first_heartbeat_estimate_ms = 1000
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

__all__ = [
    "CONFIG_FILE_NAME",
    "FailureDetectorConfig",
    "discover_config",
    "load_config",
]

CONFIG_FILE_NAME = "phi_accrual.toml"


@dataclass(frozen=True)
class FailureDetectorConfig:
    """Settings for one ``PhiAccrualFailureDetector``.

    Field names and defaults mirror the detector's keyword arguments, so a
    config read from ``[failure_detector]`` maps onto it one to one.  Range
    checks happen in ``PhiAccrualFailureDetector.from_config``, which raises
    ``ValueError`` for a bad value.

    Parameters
    ----------
    threshold : float
        Suspicion level from which ``is_available`` reports ``False``.
    max_sample_size : int
        Capacity of the interval window.
    min_std_deviation_ms : float
        Lower bound applied to the estimated jitter.
    acceptable_heartbeat_pause_ms : int
        Expected pause tolerated on top of the mean interval.
    first_heartbeat_estimate_ms : int
        Interval the two bootstrap samples are centred on.

    Examples
    --------
    >>> FailureDetectorConfig(acceptable_heartbeat_pause_ms=3000).threshold
    16.0
    """

    threshold: float = 16.0
    max_sample_size: int = 200
    min_std_deviation_ms: float = 500.0
    acceptable_heartbeat_pause_ms: int = 0
    first_heartbeat_estimate_ms: int = 500


def discover_config(start: Path | None = None) -> Path | None:
    """Find the nearest ``phi_accrual.toml`` at or above *start*.

    *start* defaults to the working directory.  Each ancestor up to the
    filesystem root is checked in turn, so a project-level file applies to
    code run from any of its subdirectories.

    Returns
    -------
    Path | None
        The first file found, or ``None``.
    """
    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None) -> FailureDetectorConfig:
    """Load a ``FailureDetectorConfig`` from a TOML file.

    If *path* is ``None``, auto-discovers ``phi_accrual.toml`` by walking up
    from the current working directory.  Returns the default config if no
    file is found.  Settings are read from the ``[failure_detector]`` table;
    a file without that table yields the defaults.

    Parameters
    ----------
    path : Path | None
        Explicit path to a TOML config file.

    Returns
    -------
    FailureDetectorConfig

    Raises
    ------
    FileNotFoundError
        If an explicit *path* is given but does not exist.
    TypeError
        If the ``[failure_detector]`` table contains an unknown key.

    Examples
    --------
    >>> config = load_config(Path("phi_accrual.toml"))
    >>> config.threshold
    12.0
    """
    if path is None:
        discovered = discover_config()
        if discovered is None:
            return FailureDetectorConfig()
        path = discovered

    if not path.exists():
        msg = f"Config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open("rb") as f:
        raw = tomllib.load(f)

    detector_raw: dict[str, Any] = raw.get("failure_detector", {})
    return FailureDetectorConfig(**detector_raw)
