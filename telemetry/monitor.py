"""Performance monitor: marks, measures, counters and frame-rate sampling"""
import time
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, Optional

from logging_config import get_logger
from .clock import Clock, select_clock
from .models import FPS, FRAME_TIME_MS, MeasureRecord, PerformanceReport
from .sampler import FrameSampler, FrameScheduler, ManualFrameScheduler, MemoryProbe, process_memory_ratio
from .store import DEFAULT_HISTORY_LENGTH, MIN_HISTORY_LENGTH, TelemetryStore

logger = get_logger(__name__)


class PerformanceMonitor:
    """Owns the telemetry store and the frame sampler.

    Recording operations (mark, measure, spans, counters, custom metrics)
    silently do nothing while monitoring is disabled. Reads, counter
    resets and ``clear`` always apply.
    """

    def __init__(self, scheduler: Optional[FrameScheduler] = None, clock: Optional[Clock] = None,
                 memory_probe: Optional[MemoryProbe] = process_memory_ratio,
                 history_length: int = DEFAULT_HISTORY_LENGTH, enabled: bool = True):
        self._clock = clock or select_clock()
        self._enabled = enabled
        self.store = TelemetryStore(history_length)
        self.sampler = FrameSampler(self.store, scheduler or ManualFrameScheduler(),
                                    self._clock, memory_probe)

    def initialize(self, enabled: bool = True, history_length: int = DEFAULT_HISTORY_LENGTH) -> None:
        """Reset all state, apply configuration and start sampling if enabled"""
        if history_length < MIN_HISTORY_LENGTH:
            logger.warning("Invalid history length, clamping",
                           history_length=history_length, clamped_to=MIN_HISTORY_LENGTH)
            history_length = MIN_HISTORY_LENGTH

        self.sampler.stop()
        self._enabled = enabled
        self.store.history_length = history_length
        self.clear()

        if enabled:
            self.start_frame_monitoring()

        logger.info(f"Performance monitoring {'enabled' if enabled else 'disabled'}",
                    history_length=history_length, event_type="monitor_initialize")

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        if enabled and not self.sampler.is_running:
            self.start_frame_monitoring()

    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def history_length(self) -> int:
        return self.store.history_length

    def clear(self) -> None:
        self.store.clear()

    def mark(self, name: str) -> None:
        if not self._enabled:
            return
        self.store.set_mark(name, self._clock())

    def measure(self, name: str, start_mark: str, end_mark: str) -> Optional[float]:
        """Duration between two marks, stored under ``name``; None if a mark is missing"""
        if not self._enabled:
            return None

        duration = self.store.duration_between(start_mark, end_mark)
        if duration is None:
            logger.debug("Cannot measure, mark missing", measure=name,
                         start_mark=start_mark, end_mark=end_mark)
            return None

        self.store.set_measure(name, duration)
        return duration

    def start_measure(self, name: str) -> None:
        if not self._enabled:
            return
        start_mark = f"{name}-start"
        self.mark(start_mark)
        self.store.active_spans[name] = start_mark

    def end_measure(self, name: str) -> Optional[float]:
        if not self._enabled:
            return None

        start_mark = self.store.active_spans.get(name)
        if start_mark is None:
            logger.warning("No active measurement found", measure=name, event_type="measure_missing_start")
            return None

        end_mark = f"{name}-end"
        self.mark(end_mark)
        duration = self.measure(name, start_mark, end_mark)
        del self.store.active_spans[name]
        return duration

    @contextmanager
    def span(self, name: str) -> Iterator[None]:
        """Measure the enclosed block under ``name``"""
        self.start_measure(name)
        try:
            yield
        finally:
            self.end_measure(name)

    def get_measure(self, name: str) -> Optional[float]:
        return self.store.measures.get(name)

    def get_last_measure(self, name: str) -> Optional[MeasureRecord]:
        duration = self.store.measures.get(name)
        if duration is None:
            return None
        return MeasureRecord(name=name, duration=duration, timestamp=time.time() * 1000.0)

    def get_all_measures(self) -> Dict[str, float]:
        return dict(self.store.measures)

    def increment_counter(self, name: str, delta: int = 1) -> None:
        if not self._enabled:
            return
        self.store.increment(name, delta)

    def get_counter(self, name: str) -> int:
        return self.store.counters.get(name, 0)

    def reset_counter(self, name: str) -> None:
        self.store.counters[name] = 0

    def start_frame_monitoring(self) -> None:
        if not self._enabled:
            return
        self.sampler.start()

    def stop_frame_monitoring(self) -> None:
        """Stop sampling; takes effect on the next scheduled frame"""
        self.sampler.stop()

    def is_frame_monitoring_active(self) -> bool:
        return self.sampler.is_running

    def get_fps(self) -> float:
        return self.store.metrics[FPS]

    def get_frame_time(self) -> float:
        return self.store.metrics[FRAME_TIME_MS]

    def get_metrics(self) -> Dict[str, float]:
        return dict(self.store.metrics)

    def set_custom_metric(self, name: str, value: float) -> None:
        if not self._enabled:
            return
        self.store.metrics[name] = value

    def get_custom_metric(self, name: str) -> Optional[float]:
        return self.store.metrics.get(name)

    def create_report(self) -> PerformanceReport:
        return PerformanceReport(
            timestamp=time.time() * 1000.0,
            metrics=dict(self.store.metrics),
            measures=dict(self.store.measures),
            counters=dict(self.store.counters),
            frame_count=self.store.frame_count,
            monitoring_enabled=self._enabled,
            sampler_state=self.sampler.state,
            history_length=self.store.history_length,
        )

    def log_metrics(self, names: Optional[Iterable[str]] = None) -> None:
        """Log current metrics, or only the named fps/frame_time/frames/measures/counters"""
        if not self._enabled:
            return

        names = list(names or [])
        if not names:
            logger.info(
                "Performance metrics",
                fps=round(self.get_fps(), 1),
                frame_time_ms=round(self.get_frame_time(), 2),
                frames=self.store.frame_count,
                measures={k: round(v, 2) for k, v in self.store.measures.items()},
                counters=dict(self.store.counters),
                event_type="performance_metrics"
            )
            return

        selected = {}
        for name in names:
            if name == "fps":
                selected["fps"] = round(self.get_fps(), 1)
            elif name == "frame_time":
                selected["frame_time_ms"] = round(self.get_frame_time(), 2)
            elif name == "frames":
                selected["frames"] = self.store.frame_count
            elif name in self.store.measures:
                selected[name] = round(self.store.measures[name], 2)
            elif name in self.store.counters:
                selected[name] = self.store.counters[name]
        logger.info("Performance metrics", metrics=selected, event_type="performance_metrics")
