"""Capability detection: maps raw environment signals onto a capability profile"""
import dataclasses
import logging
import threading
from typing import Callable, Dict, Optional, Tuple, TypeVar

from .benchmark import adjust_gpu_tier, run_benchmark
from .models import (
    GRAPHICS_FLAGS,
    BrowserEngine,
    BrowserInfo,
    BrowserName,
    CapabilityFlag,
    CapabilityProfile,
    ConnectionInfo,
    DeviceInfo,
    GpuInfo,
    GpuTier,
    Orientation,
    PerformanceInfo,
    PointerType,
    ScreenInfo,
    SystemInfo,
)
from .rules import classify_gpu_tier, classify_screen_size, match_browser, match_device_type, match_os
from .signals import (
    DARK_MODE,
    POINTER_COARSE,
    POINTER_FINE,
    REDUCED_MOTION,
    EnvironmentSignals,
    GraphicsContextFactory,
    GraphicsContextInfo,
    NetworkInformation,
    SignalSource,
    StaticSignalSource,
    run_probe,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Graphics API versions tried in order of preference
GRAPHICS_API_VERSIONS = (2, 1)


def detect_browser(user_agent: str) -> BrowserInfo:
    """Identify browser family, engine and version"""
    rule = match_browser(user_agent)
    if rule is None:
        return BrowserInfo(name=BrowserName.UNKNOWN, version="Unknown", engine=BrowserEngine.UNKNOWN)
    return BrowserInfo(
        name=rule.name,
        version=rule.extract_version(user_agent),
        engine=rule.engine,
        supported=rule.supported,
    )


def detect_device(signals: EnvironmentSignals) -> DeviceInfo:
    """Classify device type, pointer and orientation"""
    touch_capable = signals.touch_start_supported or signals.max_touch_points > 0

    if signals.matches_media(POINTER_COARSE):
        pointer_type = PointerType.TOUCH
    elif signals.matches_media(POINTER_FINE):
        pointer_type = PointerType.MOUSE
    else:
        pointer_type = PointerType.MIXED

    if signals.viewport_width > signals.viewport_height:
        orientation = Orientation.LANDSCAPE
    else:
        orientation = Orientation.PORTRAIT

    return DeviceInfo(
        type=match_device_type(signals.user_agent),
        orientation=orientation,
        pixel_ratio=float(signals.device_pixel_ratio or 1.0),
        touch_capable=touch_capable,
        pointer_type=pointer_type,
    )


def detect_screen(width: int, height: int) -> ScreenInfo:
    return ScreenInfo(
        width=width,
        height=height,
        size=classify_screen_size(width, height),
        aspect_ratio=width / height if height else 0.0,
    )


def detect_system(signals: EnvironmentSignals) -> SystemInfo:
    """Identify the OS and read user preferences"""
    os_name, os_version = match_os(signals.user_agent)

    if signals.device_memory_gb:
        ram_hint = f"{signals.device_memory_gb:g}GB"
    else:
        ram_hint = "unknown"

    return SystemInfo(
        os=os_name,
        os_version=os_version,
        ram_hint=ram_hint,
        locale=signals.locale or "en-US",
        prefers_reduced_motion=signals.matches_media(REDUCED_MOTION),
        prefers_dark_mode=signals.matches_media(DARK_MODE),
    )


def acquire_graphics_context(factory: Optional[GraphicsContextFactory]) -> Optional[GraphicsContextInfo]:
    """Acquire the best available graphics context, v2 first"""
    if factory is None:
        return None
    for version in GRAPHICS_API_VERSIONS:
        context = factory(version)
        if context is not None:
            return context
    return None


def detect_gpu(factory: Optional[GraphicsContextFactory]) -> Tuple[GpuInfo, Dict[CapabilityFlag, bool]]:
    """Classify the GPU from an acquired graphics context.

    Without a context the tier is LOW and the remaining fields keep their
    defaults. Returns the GPU info and the graphics API flags.
    """
    flags = {flag: False for flag in GRAPHICS_FLAGS}
    try:
        context = acquire_graphics_context(factory)
    except Exception as e:
        logger.warning(f"Graphics context acquisition failed: {e}")
        context = None

    if context is None:
        return GpuInfo(tier=GpuTier.LOW), flags

    api_version = 2 if context.api_version >= 2 else 1
    flags[CapabilityFlag.WEBGL] = True
    flags[CapabilityFlag.WEBGL2] = api_version == 2

    renderer = context.renderer or "unknown"
    return GpuInfo(
        vendor=context.vendor or "unknown",
        renderer=renderer,
        tier=classify_gpu_tier(renderer),
        antialiasing=bool(context.antialiasing),
        api_version=api_version,
    ), flags


def detect_capabilities(signals: EnvironmentSignals,
                        graphics_flags: Dict[CapabilityFlag, bool]) -> Dict[CapabilityFlag, bool]:
    """Resolve every capability flag; failing probes resolve to False"""
    capabilities = {}
    for flag in CapabilityFlag:
        if flag in graphics_flags:
            capabilities[flag] = graphics_flags[flag]
        else:
            capabilities[flag] = run_probe(signals.feature_probes.get(flag)).is_supported
    return capabilities


def detect_connection(network: Optional[NetworkInformation]) -> ConnectionInfo:
    if network is None:
        return ConnectionInfo()
    return ConnectionInfo(
        type=network.effective_type or "unknown",
        downlink_mbps=max(float(network.downlink or 0.0), 0.0),
        save_data=bool(network.save_data),
    )


class CapabilityDetector:
    """Detect and cache the capability profile of the current environment.

    Detection is serialized by a lock, so concurrent callers on a cold cache
    share one detection run and receive the same profile instance.
    """

    def __init__(self, signal_source: Optional[SignalSource] = None,
                 benchmark: Callable[[], PerformanceInfo] = run_benchmark):
        self._signal_source = signal_source or StaticSignalSource()
        self._benchmark = benchmark
        self._profile_cache: Optional[CapabilityProfile] = None
        self._lock = threading.Lock()

    @property
    def has_profile(self) -> bool:
        return self._profile_cache is not None

    def detect(self, force_redetect: bool = False, run_benchmark: bool = True) -> CapabilityProfile:
        """Return the cached profile, detecting it first if needed.

        With ``force_redetect`` the cache is discarded and everything is
        recomputed, including the benchmark unless ``run_benchmark`` is False.
        """
        with self._lock:
            if not force_redetect and self._profile_cache is not None:
                return self._profile_cache
            self._profile_cache = self._detect(run_benchmark)
            return self._profile_cache

    def reset(self) -> None:
        """Drop the cached profile"""
        with self._lock:
            self._profile_cache = None

    def _detect(self, run_benchmark: bool) -> CapabilityProfile:
        logger.info("Detecting device capabilities")
        signals = self._read_signals()

        no_graphics = (GpuInfo(tier=GpuTier.LOW), dict.fromkeys(GRAPHICS_FLAGS, False))
        gpu, graphics_flags = self._step("gpu", detect_gpu, no_graphics, signals.graphics_context_factory)
        performance = PerformanceInfo()
        if run_benchmark:
            performance = self._run_benchmark()
            gpu = dataclasses.replace(gpu, tier=adjust_gpu_tier(gpu.tier, performance.category))

        profile = CapabilityProfile(
            browser=self._step("browser", detect_browser, BrowserInfo(), signals.user_agent),
            device=self._step("device", detect_device, DeviceInfo(), signals),
            screen=self._step("screen", detect_screen, ScreenInfo(),
                              signals.viewport_width, signals.viewport_height),
            system=self._step("system", detect_system, SystemInfo(), signals),
            gpu=gpu,
            capabilities=self._step("capabilities", detect_capabilities,
                                    _all_unsupported(), signals, graphics_flags),
            connection=self._step("connection", detect_connection, ConnectionInfo(), signals.network),
            performance=performance,
        )

        logger.info(f"Device detection complete: {profile.device.type.value}, "
                    f"gpu tier {profile.gpu.tier.value}, "
                    f"performance {profile.performance.category.value} "
                    f"({profile.performance.benchmark_ms:.1f}ms)")
        return profile

    def _step(self, name: str, step: Callable[..., T], default: T, *args) -> T:
        """Run one detection sub-step, falling back to its default on failure"""
        try:
            return step(*args)
        except Exception as e:
            logger.warning(f"{name.capitalize()} detection failed, using defaults: {e}")
            return default

    def _read_signals(self) -> EnvironmentSignals:
        try:
            return self._signal_source.read_signals()
        except Exception as e:
            logger.warning(f"Signal source {type(self._signal_source).__name__} failed: {e}")
            return EnvironmentSignals()

    def _run_benchmark(self) -> PerformanceInfo:
        try:
            return self._benchmark()
        except Exception as e:
            logger.warning(f"Performance benchmark failed: {e}")
            return PerformanceInfo()


def _all_unsupported() -> Dict[CapabilityFlag, bool]:
    return {flag: False for flag in CapabilityFlag}
