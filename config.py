"""Configuration for the device telemetry service"""
import logging
from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Settings read from environment variables"""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    service_name: str = Field(default="device-telemetry", description="Service name")
    service_version: str = Field(default="1.0.0", description="Service version")

    # Performance monitoring
    monitoring_enabled: bool = Field(default=True, description="Enable performance monitoring")
    history_length: int = Field(default=60, ge=1, description="Frame intervals kept for smoothing")
    refresh_rate_hz: float = Field(default=60.0, gt=0, description="Frame sampling rate")
    low_fps_threshold: float = Field(default=30.0, ge=0, description="FPS below which quality steps down")

    # Capability detection
    run_benchmark: bool = Field(default=True, description="Run the micro-benchmark during detection")
    signals_file: Optional[Path] = Field(default=None, description="JSON file with environment signals")

    # Status server
    http_port: int = Field(default=9100, ge=1, le=65535, description="Status server port")
    http_host: str = Field(default="127.0.0.1", description="Status server host")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Log file")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('log_file')
    @classmethod
    def ensure_log_directory(cls, v):
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def frame_interval_seconds(self) -> float:
        """Delay between two frame samples"""
        return 1.0 / self.refresh_rate_hz
