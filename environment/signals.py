"""Raw environment signals consumed by the classification engine.

The engine never probes the host itself. A signal source hands it
already-normalized facts (identification string, viewport, media query
results, feature probes, graphics context factory, network information)
and the engine maps them onto a capability profile.
"""
import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from .models import CapabilityFlag

logger = logging.getLogger(__name__)


# Media queries understood by the device and preference sub-steps
POINTER_COARSE = "(pointer: coarse)"
POINTER_FINE = "(pointer: fine)"
REDUCED_MOTION = "(prefers-reduced-motion: reduce)"
DARK_MODE = "(prefers-color-scheme: dark)"


@dataclass
class GraphicsContextInfo:
    """Description of an acquired graphics context"""
    api_version: int
    vendor: Optional[str] = None
    renderer: Optional[str] = None
    antialiasing: bool = True


@dataclass
class NetworkInformation:
    effective_type: Optional[str] = None
    downlink: Optional[float] = None
    save_data: bool = False


GraphicsContextFactory = Callable[[int], Optional[GraphicsContextInfo]]
FeatureProbe = Callable[[], bool]


class ProbeResult(Enum):
    """Outcome of a best-effort feature probe"""
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"
    INDETERMINATE = "indeterminate"

    @property
    def is_supported(self) -> bool:
        return self is ProbeResult.SUPPORTED


def run_probe(probe: Optional[FeatureProbe]) -> ProbeResult:
    """Evaluate a probe without letting its failure escape"""
    if probe is None:
        return ProbeResult.UNSUPPORTED
    try:
        return ProbeResult.SUPPORTED if probe() else ProbeResult.UNSUPPORTED
    except Exception as e:
        logger.debug(f"Feature probe {getattr(probe, '__name__', probe)!r} failed: {e}")
        return ProbeResult.INDETERMINATE


@dataclass
class EnvironmentSignals:
    """Normalized facts about the runtime environment"""
    user_agent: str = ""
    viewport_width: int = 0
    viewport_height: int = 0
    device_pixel_ratio: Optional[float] = None
    touch_start_supported: bool = False
    max_touch_points: int = 0
    media_queries: Dict[str, bool] = field(default_factory=dict)
    device_memory_gb: Optional[float] = None
    locale: Optional[str] = None
    graphics_context_factory: Optional[GraphicsContextFactory] = None
    feature_probes: Dict[CapabilityFlag, FeatureProbe] = field(default_factory=dict)
    network: Optional[NetworkInformation] = None

    def matches_media(self, query: str) -> bool:
        """Evaluate a media query, unknown queries never match"""
        return bool(self.media_queries.get(query, False))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EnvironmentSignals":
        """Build signals from a JSON-style mapping.

        Capability booleans become constant probes and the ``graphics``
        mapping (keyed by API version) becomes a graphics context factory.
        Unknown capability names are ignored, and values of the wrong type
        fall back to the field default.
        """
        probes: Dict[CapabilityFlag, FeatureProbe] = {}
        for name, supported in _as_mapping(data.get("capabilities")).items():
            try:
                flag = CapabilityFlag(name)
            except ValueError:
                logger.warning(f"Ignoring unknown capability flag: {name}")
                continue
            probes[flag] = _constant_probe(bool(supported))

        network = None
        network_data = _as_mapping(data.get("network"))
        if network_data:
            network = NetworkInformation(
                effective_type=_as_str(network_data.get("effective_type")),
                downlink=_as_float(network_data.get("downlink")),
                save_data=bool(network_data.get("save_data", False)),
            )

        factory = None
        contexts = {}
        for version, info in _as_mapping(data.get("graphics")).items():
            api_version = _as_int(version)
            if api_version is None or not isinstance(info, Mapping):
                continue
            contexts[api_version] = GraphicsContextInfo(
                api_version=api_version,
                vendor=_as_str(info.get("vendor")),
                renderer=_as_str(info.get("renderer")),
                antialiasing=bool(info.get("antialiasing", True)),
            )
        if contexts:
            factory = contexts.get

        return cls(
            user_agent=_as_str(data.get("user_agent")) or "",
            viewport_width=_as_int(data.get("viewport_width")) or 0,
            viewport_height=_as_int(data.get("viewport_height")) or 0,
            device_pixel_ratio=_as_float(data.get("device_pixel_ratio")),
            touch_start_supported=bool(data.get("touch_start_supported", False)),
            max_touch_points=_as_int(data.get("max_touch_points")) or 0,
            media_queries={str(k): bool(v) for k, v in _as_mapping(data.get("media_queries")).items()},
            device_memory_gb=_as_float(data.get("device_memory_gb")),
            locale=_as_str(data.get("locale")),
            graphics_context_factory=factory,
            feature_probes=probes,
            network=network,
        )


def _constant_probe(value: bool) -> FeatureProbe:
    return lambda: value


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_float(value: Any) -> Optional[float]:
    """Numeric value or numeric string as float, anything else is None"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric signal value: {value!r}")
        return None
    if not math.isfinite(number):
        return None
    return number


def _as_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    return int(number) if number is not None else None


class SignalSource(ABC):
    """Supplies raw environment signals to the detector"""

    @abstractmethod
    def read_signals(self) -> EnvironmentSignals:
        pass


class StaticSignalSource(SignalSource):
    """Signal source wrapping a fixed set of signals"""

    def __init__(self, signals: Optional[EnvironmentSignals] = None):
        self._signals = signals or EnvironmentSignals()

    def read_signals(self) -> EnvironmentSignals:
        return self._signals


class FileSignalSource(SignalSource):
    """Reads signals from a JSON document on disk"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read_signals(self) -> EnvironmentSignals:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read signals from {self.path}: {e}")
            return EnvironmentSignals()

        if not isinstance(data, dict):
            logger.warning(f"Signals file {self.path} does not contain an object")
            return EnvironmentSignals()

        try:
            return EnvironmentSignals.from_dict(data)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Malformed signals in {self.path}: {e}")
            return EnvironmentSignals()
