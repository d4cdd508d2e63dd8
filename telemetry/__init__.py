"""Runtime performance telemetry: marks, measures, counters and frame rate"""
from .monitor import PerformanceMonitor
from .models import PerformanceReport, SamplerState
from .sampler import AsyncioFrameScheduler, FrameSampler, FrameScheduler, ManualFrameScheduler
from .store import TelemetryStore

__all__ = [
    'PerformanceMonitor',
    'PerformanceReport',
    'SamplerState',
    'FrameSampler',
    'FrameScheduler',
    'AsyncioFrameScheduler',
    'ManualFrameScheduler',
    'TelemetryStore',
]
