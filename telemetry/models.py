"""Telemetry data models"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

# Built-in metric names, always present in a metrics snapshot
FPS = "fps"
FRAME_TIME_MS = "frame_time_ms"
CPU_TIME_MS = "cpu_time_ms"
GPU_TIME_MS = "gpu_time_ms"
MEMORY_USAGE_RATIO = "memory_usage_ratio"

BUILTIN_METRICS = (FPS, FRAME_TIME_MS, CPU_TIME_MS, GPU_TIME_MS, MEMORY_USAGE_RATIO)


class SamplerState(Enum):
    """Frame sampler lifecycle"""
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class MeasureRecord:
    """Most recent duration recorded under a measure name"""
    name: str
    duration: float
    timestamp: float


@dataclass
class PerformanceReport:
    """Point-in-time snapshot of everything the monitor has collected"""
    timestamp: float
    metrics: Dict[str, float]
    measures: Dict[str, float]
    counters: Dict[str, int]
    frame_count: int
    monitoring_enabled: bool
    sampler_state: SamplerState = SamplerState.IDLE
    history_length: Optional[int] = None

    def to_dict(self) -> Dict:
        return {
            "timestamp": self.timestamp,
            "metrics": dict(self.metrics),
            "measures": dict(self.measures),
            "counters": dict(self.counters),
            "frame_count": self.frame_count,
            "monitoring_enabled": self.monitoring_enabled,
            "sampler_state": self.sampler_state.value,
            "history_length": self.history_length,
        }
