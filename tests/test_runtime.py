"""Tests for the telemetry runtime"""
from unittest.mock import patch

from config import Config
from app.runtime import TelemetryRuntime
from environment.models import GpuTier, QualityLevel
from environment.signals import EnvironmentSignals, FileSignalSource, GraphicsContextInfo, StaticSignalSource
from telemetry.monitor import PerformanceMonitor
from telemetry.sampler import ManualFrameScheduler


class FakeClock:
    """Millisecond clock advanced by hand"""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def rtx_signals() -> EnvironmentSignals:
    contexts = {
        2: GraphicsContextInfo(api_version=2, vendor="NVIDIA Corporation",
                               renderer="NVIDIA GeForce RTX 3080"),
    }
    return EnvironmentSignals(
        user_agent="Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0",
        viewport_width=1920,
        viewport_height=1080,
        graphics_context_factory=contexts.get,
    )


class TestTelemetryRuntime:
    """Detection and monitoring composed together"""

    def setup_method(self):
        self.config = Config(run_benchmark=False, history_length=10, low_fps_threshold=30)
        self.clock = FakeClock()
        self.scheduler = ManualFrameScheduler()
        self.monitor = PerformanceMonitor(scheduler=self.scheduler, clock=self.clock, memory_probe=None)
        self.runtime = TelemetryRuntime(
            self.config,
            signal_source=StaticSignalSource(rtx_signals()),
            monitor=self.monitor,
        )

    def pump(self, delta, frames):
        for _ in range(frames):
            self.clock.advance(delta)
            self.scheduler.run_pending()

    def test_detect_respects_benchmark_setting(self):
        profile = self.runtime.detect()

        assert profile.gpu.tier is GpuTier.HIGH
        assert profile.performance.benchmark_ms == 0

    @patch("app.runtime.log_detection_complete")
    def test_detection_logged_once_per_profile(self, mock_log):
        self.runtime.detect()
        self.runtime.detect()
        assert mock_log.call_count == 1

        self.runtime.detect(force_redetect=True)
        assert mock_log.call_count == 2

    def test_start_applies_config(self):
        self.runtime.start()

        assert self.monitor.history_length == 10
        assert self.monitor.is_frame_monitoring_active()

    def test_start_disabled(self):
        self.runtime.config = Config(run_benchmark=False, monitoring_enabled=False)
        self.runtime.start()

        assert not self.monitor.is_enabled()
        assert not self.monitor.is_frame_monitoring_active()

    def test_stop(self):
        self.runtime.start()
        self.runtime.stop()

        assert not self.monitor.is_frame_monitoring_active()

    def test_adaptive_quality_without_frames(self):
        assert self.runtime.get_adaptive_quality() is QualityLevel.HIGH

    def test_adaptive_quality_with_smooth_frames(self):
        self.runtime.start()
        self.pump(16, 5)

        assert self.runtime.get_adaptive_quality() is QualityLevel.HIGH

    def test_adaptive_quality_steps_down_on_slow_frames(self):
        self.runtime.start()
        self.pump(50, 5)

        assert self.monitor.get_fps() == 20
        assert self.runtime.device.get_recommended_quality() is QualityLevel.HIGH
        assert self.runtime.get_adaptive_quality() is QualityLevel.MEDIUM

    def test_status(self):
        self.runtime.start()
        self.pump(20, 2)

        status = self.runtime.status()

        assert status["service"]["name"] == "device-telemetry"
        assert status["device"]["gpu"] == "high"
        assert status["recommended_quality"] == "high"
        assert status["adaptive_quality"] == "high"
        assert status["browser_supported"] is True
        assert status["monitoring"]["frame_count"] == 2

    def test_signal_source_from_config(self, tmp_path):
        runtime = TelemetryRuntime(Config(signals_file=tmp_path / "signals.json"))

        assert isinstance(runtime.device.detector._signal_source, FileSignalSource)

    def test_default_signal_source(self):
        runtime = TelemetryRuntime(Config())

        assert isinstance(runtime.device.detector._signal_source, StaticSignalSource)

    def test_status_with_mistyped_signals_file(self, tmp_path):
        path = tmp_path / "signals.json"
        path.write_text('{"device_pixel_ratio": "2", "user_agent": null, "device_memory_gb": "8"}')
        runtime = TelemetryRuntime(Config(signals_file=path, run_benchmark=False),
                                   scheduler=ManualFrameScheduler())

        status = runtime.status()

        assert status["device"]["high_dpi"] is True
        assert status["browser_supported"] is True
