"""Capability profile models produced by the classification engine"""
from dataclasses import dataclass, field, fields, asdict
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping


class BrowserName(Enum):
    """Browser families recognised from the identification string"""
    EDGE = "Edge"
    CHROME = "Chrome"
    FIREFOX = "Firefox"
    SAFARI = "Safari"
    INTERNET_EXPLORER = "Internet Explorer"
    UNKNOWN = "Unknown"


class BrowserEngine(Enum):
    BLINK = "Blink"
    GECKO = "Gecko"
    WEBKIT = "WebKit"
    TRIDENT = "Trident"
    UNKNOWN = "Unknown"


class DeviceType(Enum):
    DESKTOP = "desktop"
    TABLET = "tablet"
    MOBILE = "mobile"


class Orientation(Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"


class PointerType(Enum):
    MOUSE = "mouse"
    TOUCH = "touch"
    MIXED = "mixed"


class ScreenSize(Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class OperatingSystem(Enum):
    WINDOWS = "Windows"
    MACOS = "macOS"
    IOS = "iOS"
    ANDROID = "Android"
    LINUX = "Linux"
    UNKNOWN = "Unknown"


class GpuTier(Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"


class PerformanceCategory(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class QualityLevel(Enum):
    """Recommended rendering quality"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def step_down(self) -> "QualityLevel":
        """Return the next lower quality level (LOW stays LOW)"""
        if self is QualityLevel.HIGH:
            return QualityLevel.MEDIUM
        return QualityLevel.LOW


class CapabilityFlag(Enum):
    """Feature flags probed on the runtime"""
    WEBGL = "webgl"
    WEBGL2 = "webgl2"
    WEBGPU = "webgpu"
    CANVAS_2D = "canvas2d"
    WEB_AUDIO = "web_audio"
    WEB_WORKERS = "web_workers"
    LOCAL_STORAGE = "local_storage"
    SESSION_STORAGE = "session_storage"
    WEB_ASSEMBLY = "web_assembly"
    SHARED_ARRAY_BUFFER = "shared_array_buffer"
    OFFSCREEN_CANVAS = "offscreen_canvas"
    PERFORMANCE = "performance"
    GEOLOCATION = "geolocation"
    BLUETOOTH = "bluetooth"
    BATTERY_API = "battery_api"


# Flags derived from graphics-context acquisition rather than from probes
GRAPHICS_FLAGS = (CapabilityFlag.WEBGL, CapabilityFlag.WEBGL2)


@dataclass(frozen=True)
class BrowserInfo:
    name: BrowserName = BrowserName.UNKNOWN
    version: str = "Unknown"
    engine: BrowserEngine = BrowserEngine.UNKNOWN
    supported: bool = True


@dataclass(frozen=True)
class DeviceInfo:
    type: DeviceType = DeviceType.DESKTOP
    orientation: Orientation = Orientation.LANDSCAPE
    pixel_ratio: float = 1.0
    touch_capable: bool = False
    pointer_type: PointerType = PointerType.MOUSE


@dataclass(frozen=True)
class ScreenInfo:
    width: int = 0
    height: int = 0
    size: ScreenSize = ScreenSize.MEDIUM
    aspect_ratio: float = 0.0


@dataclass(frozen=True)
class SystemInfo:
    os: OperatingSystem = OperatingSystem.UNKNOWN
    os_version: str = "Unknown"
    ram_hint: str = "unknown"
    locale: str = "en-US"
    prefers_reduced_motion: bool = False
    prefers_dark_mode: bool = False


@dataclass(frozen=True)
class GpuInfo:
    vendor: str = "unknown"
    renderer: str = "unknown"
    tier: GpuTier = GpuTier.MID
    antialiasing: bool = True
    api_version: int = 1


@dataclass(frozen=True)
class ConnectionInfo:
    type: str = "unknown"
    downlink_mbps: float = 0.0
    save_data: bool = False


@dataclass(frozen=True)
class PerformanceInfo:
    category: PerformanceCategory = PerformanceCategory.MEDIUM
    benchmark_ms: float = 0.0


def _default_capabilities() -> Dict[CapabilityFlag, bool]:
    return {flag: False for flag in CapabilityFlag}


@dataclass(frozen=True)
class CapabilityProfile:
    """Structured result of a detection run.

    A profile is built once per detection and never mutated afterwards;
    forced re-detection replaces it with a new instance.
    """
    browser: BrowserInfo = field(default_factory=BrowserInfo)
    device: DeviceInfo = field(default_factory=DeviceInfo)
    screen: ScreenInfo = field(default_factory=ScreenInfo)
    system: SystemInfo = field(default_factory=SystemInfo)
    gpu: GpuInfo = field(default_factory=GpuInfo)
    capabilities: Mapping[CapabilityFlag, bool] = field(default_factory=_default_capabilities)
    connection: ConnectionInfo = field(default_factory=ConnectionInfo)
    performance: PerformanceInfo = field(default_factory=PerformanceInfo)

    def __post_init__(self):
        # Callers share the cached profile, so the flag mapping is read-only
        object.__setattr__(self, "capabilities", MappingProxyType(dict(self.capabilities)))

    def has(self, flag: CapabilityFlag) -> bool:
        """Check a single capability flag"""
        return self.capabilities.get(flag, False)

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-friendly representation"""
        data = {}
        for profile_field in fields(self):
            value = getattr(self, profile_field.name)
            if profile_field.name == "capabilities":
                data["capabilities"] = {flag.value: supported for flag, supported in value.items()}
            else:
                data[profile_field.name] = asdict(value)
        return _enum_values(data)


def _enum_values(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {_enum_values(k): _enum_values(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_enum_values(v) for v in value]
    return value
