"""FastAPI status server exposing capability and performance readings"""
import time
from typing import Optional
from fastapi import FastAPI
from config import Config
from app.runtime import TelemetryRuntime
from logging_config import get_logger, log_error
from telemetry.sampler import AsyncioFrameScheduler


logger = get_logger(__name__)


class TelemetryServer:
    """Read-only HTTP view over the telemetry runtime"""

    def __init__(self, config: Config, runtime: Optional[TelemetryRuntime] = None):
        self.config = config
        self.runtime = runtime or TelemetryRuntime(
            config, scheduler=AsyncioFrameScheduler(config.frame_interval_seconds)
        )
        self.app = FastAPI(
            title="Device Telemetry",
            version=config.service_version,
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )
        self.app.state.start_time = time.time()

        self._setup_routes()
        self._setup_events()

    def _setup_routes(self):
        """Setup FastAPI routes"""

        @self.app.get('/health')
        def health_check():
            """Health check endpoint"""
            monitor = self.runtime.monitor
            return {
                "status": "healthy",
                "uptime_seconds": round(time.time() - self.app.state.start_time, 1),
                "monitoring_enabled": monitor.is_enabled(),
                "frame_monitoring_active": monitor.is_frame_monitoring_active(),
                "profile_detected": self.runtime.device.detector.has_profile,
            }

        @self.app.get('/capabilities')
        def get_capabilities():
            """Full capability profile"""
            return self.runtime.detect().to_dict()

        @self.app.get('/capabilities/summary')
        def get_capability_summary():
            """Simplified capabilities and derived predicates"""
            self.runtime.detect()
            device = self.runtime.device
            summary = device.get_simplified_capabilities()
            summary.update({
                "connection_slow": device.is_connection_slow(),
                "power_saving": device.is_power_saving_mode(),
                "adequate_webgl": device.has_adequate_webgl_support(),
                "browser_supported": device.is_browser_supported(),
            })
            return summary

        @self.app.post('/capabilities/redetect')
        def redetect_capabilities():
            """Discard the cached profile and detect again"""
            return self.runtime.detect(force_redetect=True).to_dict()

        @self.app.get('/performance')
        def get_performance():
            """Current performance report"""
            return self.runtime.monitor.create_report().to_dict()

        @self.app.get('/quality')
        def get_quality():
            """Recommended and frame-rate adjusted quality"""
            self.runtime.detect()
            return {
                "recommended": self.runtime.device.get_recommended_quality().value,
                "adaptive": self.runtime.get_adaptive_quality().value,
                "fps": round(self.runtime.monitor.get_fps(), 1),
            }

        @self.app.get('/status')
        def get_status():
            """Detailed status information"""
            status = self.runtime.status()
            status["service"]["uptime_seconds"] = round(time.time() - self.app.state.start_time, 1)
            return status

    def _setup_events(self):
        """Setup FastAPI startup/shutdown events"""

        @self.app.on_event("startup")
        async def startup_event():
            """Start frame sampling on the server's event loop"""
            self.app.state.start_time = time.time()
            try:
                self.runtime.start()
            except Exception as e:
                log_error(logger, e, {"component": "server", "phase": "startup"})
            logger.info(
                "Application startup complete",
                service_name=self.config.service_name,
                monitoring_enabled=self.runtime.monitor.is_enabled(),
                event_type="server_startup_complete"
            )

        @self.app.on_event("shutdown")
        async def shutdown_event():
            """Stop frame sampling"""
            logger.info("Shutting down device telemetry", event_type="server_shutdown")
            self.runtime.stop()

    def get_app(self) -> FastAPI:
        """Get FastAPI application instance"""
        return self.app
