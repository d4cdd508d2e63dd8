"""Environment classification: raw runtime signals to capability tiers"""
from .detection import CapabilityDetector
from .context import DeviceContext
from .models import CapabilityProfile, CapabilityFlag, GpuTier, PerformanceCategory, QualityLevel
from .signals import EnvironmentSignals, FileSignalSource, SignalSource, StaticSignalSource

__all__ = [
    'CapabilityDetector',
    'DeviceContext',
    'CapabilityProfile',
    'CapabilityFlag',
    'GpuTier',
    'PerformanceCategory',
    'QualityLevel',
    'EnvironmentSignals',
    'SignalSource',
    'StaticSignalSource',
    'FileSignalSource',
]
