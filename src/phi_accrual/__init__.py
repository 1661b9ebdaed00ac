from phi_accrual.clock import Clock, monotonic_clock_ms, wall_clock_ms
from phi_accrual.config import (
    FailureDetectorConfig,
    discover_config,
    load_config,
)
from phi_accrual.failure_detector import PhiAccrualFailureDetector
from phi_accrual.history import SampleWindow

__all__ = [
    "Clock",
    "FailureDetectorConfig",
    "PhiAccrualFailureDetector",
    "SampleWindow",
    "discover_config",
    "load_config",
    "monotonic_clock_ms",
    "wall_clock_ms",
]
