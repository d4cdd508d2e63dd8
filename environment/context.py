"""Query facade over the detected capability profile"""
from typing import Any, Dict, Optional

from .detection import CapabilityDetector
from .models import (
    CapabilityFlag,
    CapabilityProfile,
    DeviceType,
    GpuTier,
    PerformanceCategory,
    QualityLevel,
)

SLOW_CONNECTION_TYPES = ("2g", "slow-2g")
SLOW_DOWNLINK_MBPS = 0.5


class DeviceContext:
    """Read-only predicates over the capability profile.

    Every accessor runs detection with default options the first time it is
    needed and reads the cached profile afterwards.
    """

    def __init__(self, detector: Optional[CapabilityDetector] = None):
        self._detector = detector or CapabilityDetector()

    @property
    def detector(self) -> CapabilityDetector:
        return self._detector

    def profile(self) -> CapabilityProfile:
        return self._detector.detect()

    def redetect(self, run_benchmark: bool = True) -> CapabilityProfile:
        """Discard the cached profile and detect again"""
        return self._detector.detect(force_redetect=True, run_benchmark=run_benchmark)

    def is_mobile(self) -> bool:
        return self.profile().device.type is DeviceType.MOBILE

    def is_tablet(self) -> bool:
        return self.profile().device.type is DeviceType.TABLET

    def supports_touch(self) -> bool:
        return self.profile().device.touch_capable

    def supports_webgl2(self) -> bool:
        return self.profile().has(CapabilityFlag.WEBGL2)

    def get_performance_category(self) -> PerformanceCategory:
        return self.profile().performance.category

    def has_high_end_gpu(self) -> bool:
        return self.profile().gpu.tier is GpuTier.HIGH

    def is_browser_supported(self) -> bool:
        return self.profile().browser.supported

    def prefers_reduced_motion(self) -> bool:
        return self.profile().system.prefers_reduced_motion

    def prefers_dark_mode(self) -> bool:
        return self.profile().system.prefers_dark_mode

    def is_connection_slow(self) -> bool:
        """2G-class connection or a downlink below half a megabit"""
        connection = self.profile().connection
        return (connection.type in SLOW_CONNECTION_TYPES
                or connection.downlink_mbps < SLOW_DOWNLINK_MBPS)

    def is_power_saving_mode(self) -> bool:
        """Whether the user or device is likely trying to save power or data"""
        profile = self.profile()
        return (profile.connection.save_data
                or profile.system.prefers_reduced_motion
                or (profile.device.type is DeviceType.MOBILE
                    and profile.performance.category is PerformanceCategory.LOW))

    def get_recommended_quality(self) -> QualityLevel:
        profile = self.profile()
        if profile.gpu.tier is GpuTier.LOW or profile.performance.category is PerformanceCategory.LOW:
            return QualityLevel.LOW
        if profile.gpu.tier is GpuTier.HIGH:
            return QualityLevel.HIGH
        return QualityLevel.MEDIUM

    def has_adequate_webgl_support(self) -> bool:
        """Low-tier GPUs get by with v1; mid and high tiers need v2"""
        profile = self.profile()
        if not profile.has(CapabilityFlag.WEBGL):
            return False
        if profile.gpu.tier is GpuTier.LOW:
            return True
        return profile.has(CapabilityFlag.WEBGL2)

    def get_simplified_capabilities(self) -> Dict[str, Any]:
        """Condensed view for quick decisions"""
        profile = self.profile()
        return {
            "gpu": profile.gpu.tier.value,
            "mobile": profile.device.type is not DeviceType.DESKTOP,
            "touch_device": profile.device.touch_capable,
            "screen_size": profile.screen.size.value,
            "webgl2": profile.has(CapabilityFlag.WEBGL2),
            "high_dpi": profile.device.pixel_ratio > 1,
            "performance": profile.performance.category.value,
            "supports_web_audio": profile.has(CapabilityFlag.WEB_AUDIO),
            "battery_optimization": (profile.system.prefers_reduced_motion
                                     or profile.connection.save_data
                                     or profile.device.type is DeviceType.MOBILE),
            "dark_mode": profile.system.prefers_dark_mode,
            "allows_local_storage": profile.has(CapabilityFlag.LOCAL_STORAGE),
            "audio_support": profile.has(CapabilityFlag.WEB_AUDIO),
        }
