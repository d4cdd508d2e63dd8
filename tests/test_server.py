"""Tests for the status server"""
import pytest
from fastapi.testclient import TestClient

from config import Config
from app.runtime import TelemetryRuntime
from app.server import TelemetryServer
from environment.signals import EnvironmentSignals, GraphicsContextInfo, StaticSignalSource
from telemetry.monitor import PerformanceMonitor
from telemetry.sampler import AsyncioFrameScheduler, ManualFrameScheduler

IPHONE_UA = ("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
             "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1")


class TestTelemetryServer:
    """HTTP routes over the runtime"""

    def setup_method(self):
        contexts = {1: GraphicsContextInfo(api_version=1, vendor="ARM", renderer="Mali-400 MP")}
        signals = EnvironmentSignals(
            user_agent=IPHONE_UA,
            viewport_width=390,
            viewport_height=844,
            device_pixel_ratio=3,
            touch_start_supported=True,
            graphics_context_factory=contexts.get,
        )
        self.config = Config(run_benchmark=False)
        self.scheduler = ManualFrameScheduler()
        self.clock_value = 0.0
        monitor = PerformanceMonitor(scheduler=self.scheduler, clock=lambda: self.clock_value, memory_probe=None)
        self.runtime = TelemetryRuntime(self.config, signal_source=StaticSignalSource(signals), monitor=monitor)
        self.server = TelemetryServer(self.config, runtime=self.runtime)
        self.client = TestClient(self.server.get_app())

    def test_health(self):
        response = self.client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["profile_detected"] is False
        assert data["frame_monitoring_active"] is False

    def test_capabilities(self):
        response = self.client.get("/capabilities")

        assert response.status_code == 200
        data = response.json()
        assert data["device"]["type"] == "mobile"
        assert data["browser"]["name"] == "Safari"
        assert data["gpu"]["tier"] == "low"
        assert data["capabilities"]["webgl"] is True
        assert data["capabilities"]["webgl2"] is False
        assert self.client.get("/health").json()["profile_detected"] is True

    def test_capability_summary(self):
        data = self.client.get("/capabilities/summary").json()

        assert data["mobile"] is True
        assert data["high_dpi"] is True
        assert data["adequate_webgl"] is True
        assert data["browser_supported"] is True
        assert data["connection_slow"] is True

    def test_redetect(self):
        first = self.runtime.detect()
        response = self.client.post("/capabilities/redetect")

        assert response.status_code == 200
        assert self.runtime.detect() is not first

    def test_performance(self):
        self.runtime.start()
        self.runtime.monitor.increment_counter("requests", 2)

        data = self.client.get("/performance").json()

        assert data["counters"] == {"requests": 2}
        assert data["monitoring_enabled"] is True
        assert data["sampler_state"] == "running"
        assert "fps" in data["metrics"]

    def test_quality(self):
        data = self.client.get("/quality").json()

        assert data["recommended"] == "low"
        assert data["adaptive"] == "low"
        assert data["fps"] == 0

    def test_status(self):
        data = self.client.get("/status").json()

        assert data["service"]["name"] == "device-telemetry"
        assert data["device"]["gpu"] == "low"
        assert "uptime_seconds" in data["service"]

    def test_default_runtime_uses_asyncio_scheduler(self):
        server = TelemetryServer(Config(run_benchmark=False, refresh_rate_hz=50))

        scheduler = server.runtime.monitor.sampler.scheduler
        assert isinstance(scheduler, AsyncioFrameScheduler)
        assert scheduler.interval == pytest.approx(0.02)
