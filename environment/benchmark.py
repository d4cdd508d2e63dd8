"""Fixed computational micro-benchmark used to place a device in a performance category"""
import math
import time
from typing import Callable

from .models import GpuTier, PerformanceCategory, PerformanceInfo
from .rules import classify_benchmark

BENCHMARK_LIMIT = 10_000


def is_prime(number: int) -> bool:
    """Trial division up to the square root"""
    for divisor in range(2, math.isqrt(number) + 1):
        if number % divisor == 0:
            return False
    return number > 1


def count_primes(limit: int = BENCHMARK_LIMIT) -> int:
    """Count primes in [1, limit)"""
    return sum(1 for number in range(1, limit) if is_prime(number))


def run_benchmark(clock: Callable[[], float] = time.perf_counter) -> PerformanceInfo:
    """Run the prime-counting workload and categorize its wall-clock duration.

    ``clock`` returns seconds. The workload is deliberately fixed so results
    stay comparable between runs in one session.
    """
    start = clock()
    count_primes(BENCHMARK_LIMIT)
    duration_ms = max((clock() - start) * 1000.0, 0.0)
    return PerformanceInfo(category=classify_benchmark(duration_ms), benchmark_ms=duration_ms)


def adjust_gpu_tier(tier: GpuTier, category: PerformanceCategory) -> GpuTier:
    """Nudge an ambiguous mid-tier GPU toward the measured CPU performance.

    Only MID moves. LOW and HIGH tiers are left as classified, and MID
    stays put when performance is MEDIUM.
    """
    if tier is not GpuTier.MID:
        return tier
    if category is PerformanceCategory.LOW:
        return GpuTier.LOW
    if category is PerformanceCategory.HIGH:
        return GpuTier.HIGH
    return tier
