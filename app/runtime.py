"""Composition root tying capability detection and performance telemetry together"""
from typing import Any, Dict, Optional

from config import Config
from environment.context import DeviceContext
from environment.detection import CapabilityDetector
from environment.models import CapabilityProfile, QualityLevel
from environment.signals import FileSignalSource, SignalSource, StaticSignalSource
from logging_config import get_logger, log_detection_complete
from telemetry.monitor import PerformanceMonitor
from telemetry.sampler import FrameScheduler

logger = get_logger(__name__)


class TelemetryRuntime:
    """Owns the single capability detector and performance monitor of a process"""

    def __init__(self, config: Config, signal_source: Optional[SignalSource] = None,
                 scheduler: Optional[FrameScheduler] = None,
                 detector: Optional[CapabilityDetector] = None,
                 monitor: Optional[PerformanceMonitor] = None):
        self.config = config
        if signal_source is None:
            signal_source = (FileSignalSource(config.signals_file) if config.signals_file
                             else StaticSignalSource())
        self.device = DeviceContext(detector or CapabilityDetector(signal_source))
        self.monitor = monitor or PerformanceMonitor(
            scheduler=scheduler,
            history_length=config.history_length,
            enabled=config.monitoring_enabled,
        )

    def start(self) -> None:
        """Initialize monitoring from configuration"""
        self.monitor.initialize(enabled=self.config.monitoring_enabled,
                                history_length=self.config.history_length)

    def stop(self) -> None:
        self.monitor.stop_frame_monitoring()

    def detect(self, force_redetect: bool = False) -> CapabilityProfile:
        """Run capability detection with the configured benchmark setting"""
        had_profile = self.device.detector.has_profile
        profile = self.device.detector.detect(force_redetect=force_redetect,
                                              run_benchmark=self.config.run_benchmark)
        if force_redetect or not had_profile:
            log_detection_complete(logger, profile)
        return profile

    def get_adaptive_quality(self) -> QualityLevel:
        """Recommended quality, stepped down one level while the live frame rate is low"""
        self.detect()
        quality = self.device.get_recommended_quality()
        fps = self.monitor.get_fps()
        if self.monitor.store.frame_count > 0 and fps < self.config.low_fps_threshold:
            logger.debug("Low frame rate, lowering quality", fps=round(fps, 1),
                         threshold=self.config.low_fps_threshold, recommended=quality.value)
            return quality.step_down()
        return quality

    def status(self) -> Dict[str, Any]:
        profile = self.detect()
        return {
            "service": {
                "name": self.config.service_name,
                "version": self.config.service_version,
            },
            "device": self.device.get_simplified_capabilities(),
            "recommended_quality": self.device.get_recommended_quality().value,
            "adaptive_quality": self.get_adaptive_quality().value,
            "browser_supported": profile.browser.supported,
            "monitoring": {
                "enabled": self.monitor.is_enabled(),
                "frame_monitoring_active": self.monitor.is_frame_monitoring_active(),
                "fps": self.monitor.get_fps(),
                "frame_count": self.monitor.store.frame_count,
            },
        }
