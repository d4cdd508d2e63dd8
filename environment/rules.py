"""Ordered classification tables.

Every table is evaluated top to bottom and the first matching rule wins,
so precedence is the order of the entries. Edge must stay ahead of Chrome
and Safari (its identifier contains both), tablet ahead of mobile.
"""
import re
from dataclasses import dataclass
from typing import Callable, Optional, Pattern, Sequence, Tuple

from .models import (
    BrowserEngine,
    BrowserName,
    DeviceType,
    GpuTier,
    OperatingSystem,
    PerformanceCategory,
    ScreenSize,
)

UNKNOWN_VERSION = "Unknown"

# Viewport area thresholds (exclusive upper bounds)
SMALL_SCREEN_MAX_AREA = 500_000
MEDIUM_SCREEN_MAX_AREA = 1_200_000

# Benchmark duration thresholds in milliseconds (exclusive upper bounds)
HIGH_PERFORMANCE_MAX_MS = 50.0
MEDIUM_PERFORMANCE_MAX_MS = 150.0


def _first_group(pattern: Pattern[str], text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(1) if match else None


def normalize_version(version: str) -> str:
    """Turn ``10_15_0`` style versions into ``10.15``"""
    return re.sub(r"\.0$", "", version.replace("_", "."))


@dataclass(frozen=True)
class BrowserRule:
    name: BrowserName
    engine: BrowserEngine
    markers: Tuple[str, ...]
    version_pattern: Pattern[str]
    supported: bool = True

    def matches(self, user_agent: str) -> bool:
        return any(marker in user_agent for marker in self.markers)

    def extract_version(self, user_agent: str) -> str:
        return _first_group(self.version_pattern, user_agent) or UNKNOWN_VERSION


BROWSER_RULES: Sequence[BrowserRule] = (
    BrowserRule(BrowserName.EDGE, BrowserEngine.BLINK, ("Edg",), re.compile(r"Edg/([\d.]+)")),
    BrowserRule(BrowserName.CHROME, BrowserEngine.BLINK, ("Chrome",), re.compile(r"Chrome/([\d.]+)")),
    BrowserRule(BrowserName.FIREFOX, BrowserEngine.GECKO, ("Firefox",), re.compile(r"Firefox/([\d.]+)")),
    BrowserRule(BrowserName.SAFARI, BrowserEngine.WEBKIT, ("Safari",), re.compile(r"Version/([\d.]+)")),
    BrowserRule(
        BrowserName.INTERNET_EXPLORER,
        BrowserEngine.TRIDENT,
        ("MSIE", "Trident"),
        re.compile(r"(?:MSIE |rv:)([\d.]+)"),
        supported=False,
    ),
)


def match_browser(user_agent: str) -> Optional[BrowserRule]:
    for rule in BROWSER_RULES:
        if rule.matches(user_agent):
            return rule
    return None


DEVICE_TYPE_RULES: Sequence[Tuple[DeviceType, Pattern[str]]] = (
    (DeviceType.TABLET, re.compile(r"(tablet|ipad|playbook|silk)|(android(?!.*mobi))", re.IGNORECASE)),
    (
        DeviceType.MOBILE,
        re.compile(r"Mobile|Android|iP(hone|od)|IEMobile|BlackBerry|Kindle|Silk-Accelerated|(hpw|web)OS|Opera M(obi|ini)"),
    ),
)


def match_device_type(user_agent: str) -> DeviceType:
    for device_type, pattern in DEVICE_TYPE_RULES:
        if pattern.search(user_agent):
            return device_type
    return DeviceType.DESKTOP


WINDOWS_NT_VERSIONS: Sequence[Tuple[str, str]] = (
    ("Windows NT 10.0", "10"),
    ("Windows NT 6.3", "8.1"),
    ("Windows NT 6.2", "8"),
    ("Windows NT 6.1", "7"),
    ("Windows NT 6.0", "Vista"),
    ("Windows NT 5.1", "XP"),
)


def _windows_version(user_agent: str) -> str:
    for marker, version in WINDOWS_NT_VERSIONS:
        if marker in user_agent:
            return version
    return UNKNOWN_VERSION


def _pattern_version(pattern: str, normalize: bool = False) -> Callable[[str], str]:
    compiled = re.compile(pattern)

    def extract(user_agent: str) -> str:
        version = _first_group(compiled, user_agent)
        if version is None:
            return UNKNOWN_VERSION
        return normalize_version(version) if normalize else version

    return extract


@dataclass(frozen=True)
class OsRule:
    os: OperatingSystem
    detector: Pattern[str]
    extract_version: Callable[[str], str]

    def matches(self, user_agent: str) -> bool:
        return self.detector.search(user_agent) is not None


OS_RULES: Sequence[OsRule] = (
    OsRule(OperatingSystem.WINDOWS, re.compile(r"Windows"), _windows_version),
    OsRule(OperatingSystem.MACOS, re.compile(r"Macintosh"), _pattern_version(r"Mac OS X (\d+[._]\d+[._]?\d*)", normalize=True)),
    OsRule(OperatingSystem.IOS, re.compile(r"iPad|iPhone|iPod"), _pattern_version(r"OS (\d+[._]\d+[._]?\d*)", normalize=True)),
    OsRule(OperatingSystem.ANDROID, re.compile(r"Android"), _pattern_version(r"Android (\d+(\.\d+)+)")),
    OsRule(OperatingSystem.LINUX, re.compile(r"Linux"), lambda user_agent: UNKNOWN_VERSION),
)


def match_os(user_agent: str) -> Tuple[OperatingSystem, str]:
    for rule in OS_RULES:
        if rule.matches(user_agent):
            return rule.os, rule.extract_version(user_agent)
    return OperatingSystem.UNKNOWN, UNKNOWN_VERSION


@dataclass(frozen=True)
class GpuTierRule:
    """A GPU vendor family with a base tier and the parts that deviate from it"""
    family: str
    markers: Tuple[str, ...]
    base_tier: GpuTier
    exception_tier: GpuTier
    exception_markers: Tuple[str, ...] = ()
    exception_patterns: Tuple[Pattern[str], ...] = ()

    def matches(self, renderer: str) -> bool:
        return any(marker in renderer for marker in self.markers)

    def classify(self, renderer: str) -> GpuTier:
        if any(marker in renderer for marker in self.exception_markers):
            return self.exception_tier
        if any(pattern.search(renderer) for pattern in self.exception_patterns):
            return self.exception_tier
        return self.base_tier


# Renderer strings are lower-cased before matching
GPU_TIER_RULES: Sequence[GpuTierRule] = (
    GpuTierRule("intel", ("intel",), GpuTier.LOW, GpuTier.MID, exception_markers=("iris", "arc", "xe")),
    GpuTierRule(
        "nvidia", ("nvidia",), GpuTier.HIGH, GpuTier.MID,
        exception_markers=("mx",),
        exception_patterns=(re.compile(r"gt ?\d{3}"),),
    ),
    GpuTierRule("amd", ("amd", "radeon"), GpuTier.MID, GpuTier.HIGH, exception_markers=("vega", "rx", "radeon pro")),
    GpuTierRule("apple", ("apple",), GpuTier.MID, GpuTier.HIGH, exception_markers=("m1", "m2")),
    GpuTierRule(
        "mobile", ("mali", "adreno", "powervr"), GpuTier.LOW, GpuTier.MID,
        exception_patterns=(
            re.compile(r"mali-g\d{2}"),
            re.compile(r"adreno \(tm\) 6\d{2}"),
            re.compile(r"adreno \(tm\) 7\d{2}"),
        ),
    ),
)

DEFAULT_GPU_TIER = GpuTier.MID


def classify_gpu_tier(renderer: str) -> GpuTier:
    """Map a renderer string onto a GPU tier"""
    renderer = renderer.lower()
    for rule in GPU_TIER_RULES:
        if rule.matches(renderer):
            return rule.classify(renderer)
    return DEFAULT_GPU_TIER


def classify_screen_size(width: int, height: int) -> ScreenSize:
    area = width * height
    if area < SMALL_SCREEN_MAX_AREA:
        return ScreenSize.SMALL
    if area < MEDIUM_SCREEN_MAX_AREA:
        return ScreenSize.MEDIUM
    return ScreenSize.LARGE


def classify_benchmark(duration_ms: float) -> PerformanceCategory:
    if duration_ms < HIGH_PERFORMANCE_MAX_MS:
        return PerformanceCategory.HIGH
    if duration_ms < MEDIUM_PERFORMANCE_MAX_MS:
        return PerformanceCategory.MEDIUM
    return PerformanceCategory.LOW
