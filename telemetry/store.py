"""In-process store for marks, measures, counters and frame intervals"""
from collections import deque
from typing import Deque, Dict, Optional

from .models import BUILTIN_METRICS, FPS, FRAME_TIME_MS

MIN_HISTORY_LENGTH = 1
DEFAULT_HISTORY_LENGTH = 60


class TelemetryStore:
    """Mutable registry backing the performance monitor.

    ``frame_history`` is a FIFO window of recent frame intervals capped at
    ``history_length``; fps and frame time are always derived from its
    mean. The store does no timing itself and has no notion of being
    enabled, so every method applies unconditionally.
    """

    def __init__(self, history_length: int = DEFAULT_HISTORY_LENGTH):
        self.marks: Dict[str, float] = {}
        self.measures: Dict[str, float] = {}
        self.counters: Dict[str, int] = {}
        self.active_spans: Dict[str, str] = {}
        self.metrics: Dict[str, float] = {name: 0.0 for name in BUILTIN_METRICS}
        self.frame_count = 0
        self._history_length = max(int(history_length), MIN_HISTORY_LENGTH)
        self.frame_history: Deque[float] = deque(maxlen=self._history_length)

    @property
    def history_length(self) -> int:
        return self._history_length

    @history_length.setter
    def history_length(self, value: int) -> None:
        self._history_length = max(int(value), MIN_HISTORY_LENGTH)
        # Keep the newest samples when shrinking
        self.frame_history = deque(self.frame_history, maxlen=self._history_length)

    def set_mark(self, name: str, timestamp: float) -> None:
        self.marks[name] = timestamp

    def get_mark(self, name: str) -> Optional[float]:
        return self.marks.get(name)

    def duration_between(self, start_mark: str, end_mark: str) -> Optional[float]:
        """Time between two marks, None if either is missing"""
        start = self.get_mark(start_mark)
        end = self.get_mark(end_mark)
        if start is None or end is None:
            return None
        return end - start

    def set_measure(self, name: str, duration: float) -> None:
        self.measures[name] = duration

    def increment(self, name: str, delta: int = 1) -> int:
        self.counters[name] = self.counters.get(name, 0) + delta
        return self.counters[name]

    def record_frame_interval(self, delta: float) -> None:
        """Push a frame interval and refresh the smoothed frame metrics"""
        self.frame_history.append(delta)
        frame_time = sum(self.frame_history) / len(self.frame_history)
        self.metrics[FRAME_TIME_MS] = frame_time
        if frame_time > 0:
            self.metrics[FPS] = 1000.0 / frame_time
        self.frame_count += 1

    def clear(self) -> None:
        """Drop collected data, keeping configuration and derived metrics"""
        self.marks.clear()
        self.measures.clear()
        self.counters.clear()
        self.active_spans.clear()
        self.frame_history.clear()
        self.frame_count = 0
