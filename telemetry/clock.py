"""Clock selection for timing measurements.

Marks and frame samples use a precision monotonic clock when the host
provides one with sub-millisecond resolution, and fall back to wall-clock
milliseconds otherwise. Callers only ever see reduced precision, never an
error.
"""
import time
from typing import Callable

from logging_config import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]

PRECISION_RESOLUTION_SECONDS = 1e-3


def precision_ms() -> float:
    """Monotonic high-resolution time in milliseconds"""
    return time.perf_counter() * 1000.0


def wall_ms() -> float:
    """Wall-clock time in milliseconds"""
    return time.time() * 1000.0


def has_precision_timing() -> bool:
    try:
        info = time.get_clock_info("perf_counter")
    except Exception as e:
        logger.debug("Precision clock unavailable", error=str(e))
        return False
    return info.monotonic and info.resolution < PRECISION_RESOLUTION_SECONDS


def select_clock() -> Clock:
    """Pick the best available millisecond clock"""
    if has_precision_timing():
        return precision_ms
    logger.info("Precision timing unavailable, using wall clock", event_type="clock_fallback")
    return wall_ms
