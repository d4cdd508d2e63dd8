"""Tests for the capability query facade"""
from unittest.mock import Mock

from environment.context import DeviceContext
from environment.models import (
    CapabilityFlag,
    CapabilityProfile,
    ConnectionInfo,
    DeviceInfo,
    DeviceType,
    GpuInfo,
    GpuTier,
    PerformanceCategory,
    PerformanceInfo,
    QualityLevel,
    SystemInfo,
)


def make_context(**profile_fields) -> DeviceContext:
    detector = Mock()
    detector.detect.return_value = CapabilityProfile(**profile_fields)
    return DeviceContext(detector)


def capabilities(**flags):
    result = {flag: False for flag in CapabilityFlag}
    for name, value in flags.items():
        result[CapabilityFlag(name)] = value
    return result


class TestRecommendedQuality:
    """Quality recommendation from GPU tier and performance category"""

    def test_low_gpu_is_low(self):
        context = make_context(gpu=GpuInfo(tier=GpuTier.LOW),
                               performance=PerformanceInfo(category=PerformanceCategory.HIGH))
        assert context.get_recommended_quality() is QualityLevel.LOW

    def test_low_performance_is_low(self):
        context = make_context(gpu=GpuInfo(tier=GpuTier.HIGH),
                               performance=PerformanceInfo(category=PerformanceCategory.LOW))
        assert context.get_recommended_quality() is QualityLevel.LOW

    def test_high_gpu_is_high(self):
        context = make_context(gpu=GpuInfo(tier=GpuTier.HIGH),
                               performance=PerformanceInfo(category=PerformanceCategory.MEDIUM))
        assert context.get_recommended_quality() is QualityLevel.HIGH

    def test_mid_gpu_is_medium(self):
        context = make_context(gpu=GpuInfo(tier=GpuTier.MID),
                               performance=PerformanceInfo(category=PerformanceCategory.HIGH))
        assert context.get_recommended_quality() is QualityLevel.MEDIUM

    def test_step_down(self):
        assert QualityLevel.HIGH.step_down() is QualityLevel.MEDIUM
        assert QualityLevel.MEDIUM.step_down() is QualityLevel.LOW
        assert QualityLevel.LOW.step_down() is QualityLevel.LOW


class TestConnectionAndPower:
    """Connection speed and power saving predicates"""

    def test_slow_connection_types(self):
        assert make_context(connection=ConnectionInfo(type="2g", downlink_mbps=5)).is_connection_slow()
        assert make_context(connection=ConnectionInfo(type="slow-2g", downlink_mbps=5)).is_connection_slow()

    def test_slow_downlink(self):
        assert make_context(connection=ConnectionInfo(type="4g", downlink_mbps=0.3)).is_connection_slow()
        assert not make_context(connection=ConnectionInfo(type="4g", downlink_mbps=10)).is_connection_slow()

    def test_save_data_always_means_power_saving(self):
        context = make_context(
            connection=ConnectionInfo(type="4g", downlink_mbps=50, save_data=True),
            device=DeviceInfo(type=DeviceType.DESKTOP),
            performance=PerformanceInfo(category=PerformanceCategory.HIGH),
        )
        assert context.is_power_saving_mode() is True

    def test_reduced_motion_means_power_saving(self):
        context = make_context(system=SystemInfo(prefers_reduced_motion=True))
        assert context.is_power_saving_mode() is True

    def test_slow_mobile_means_power_saving(self):
        context = make_context(device=DeviceInfo(type=DeviceType.MOBILE),
                               performance=PerformanceInfo(category=PerformanceCategory.LOW))
        assert context.is_power_saving_mode() is True

    def test_slow_desktop_is_not_power_saving(self):
        context = make_context(device=DeviceInfo(type=DeviceType.DESKTOP),
                               performance=PerformanceInfo(category=PerformanceCategory.LOW))
        assert context.is_power_saving_mode() is False


class TestGraphicsSupport:
    """Adequate graphics support depends on tier"""

    def test_no_webgl(self):
        context = make_context(gpu=GpuInfo(tier=GpuTier.LOW), capabilities=capabilities())
        assert context.has_adequate_webgl_support() is False

    def test_low_tier_needs_only_v1(self):
        context = make_context(gpu=GpuInfo(tier=GpuTier.LOW), capabilities=capabilities(webgl=True))
        assert context.has_adequate_webgl_support() is True

    def test_mid_tier_needs_v2(self):
        without_v2 = make_context(gpu=GpuInfo(tier=GpuTier.MID), capabilities=capabilities(webgl=True))
        with_v2 = make_context(gpu=GpuInfo(tier=GpuTier.HIGH), capabilities=capabilities(webgl=True, webgl2=True))

        assert without_v2.has_adequate_webgl_support() is False
        assert with_v2.has_adequate_webgl_support() is True
        assert with_v2.supports_webgl2() is True


class TestSimplePredicates:
    """Device and preference accessors"""

    def test_device_type_predicates(self):
        mobile = make_context(device=DeviceInfo(type=DeviceType.MOBILE, touch_capable=True))
        tablet = make_context(device=DeviceInfo(type=DeviceType.TABLET))

        assert mobile.is_mobile() and not mobile.is_tablet()
        assert mobile.supports_touch()
        assert tablet.is_tablet() and not tablet.is_mobile()

    def test_preferences(self):
        context = make_context(system=SystemInfo(prefers_dark_mode=True))
        assert context.prefers_dark_mode() is True
        assert context.prefers_reduced_motion() is False

    def test_gpu_and_performance_accessors(self):
        context = make_context(gpu=GpuInfo(tier=GpuTier.HIGH),
                               performance=PerformanceInfo(category=PerformanceCategory.LOW))
        assert context.has_high_end_gpu() is True
        assert context.get_performance_category() is PerformanceCategory.LOW
        assert context.is_browser_supported() is True

    def test_accessors_trigger_detection_with_defaults(self):
        context = make_context()
        context.is_mobile()
        context.detector.detect.assert_called_with()

    def test_redetect_forces_detection(self):
        context = make_context()
        context.redetect(run_benchmark=False)
        context.detector.detect.assert_called_with(force_redetect=True, run_benchmark=False)

    def test_simplified_capabilities(self):
        context = make_context(
            device=DeviceInfo(type=DeviceType.TABLET, pixel_ratio=2.0),
            capabilities=capabilities(web_audio=True, local_storage=True),
        )
        summary = context.get_simplified_capabilities()

        assert summary["mobile"] is True
        assert summary["high_dpi"] is True
        assert summary["battery_optimization"] is False
        assert summary["supports_web_audio"] is True
        assert summary["audio_support"] is True
        assert summary["allows_local_storage"] is True
        assert summary["gpu"] == "mid"
        assert summary["screen_size"] == "medium"
        assert summary["performance"] == "medium"
