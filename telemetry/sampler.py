"""Frame sampler driven by a display-refresh style scheduler"""
import asyncio
import psutil
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from logging_config import get_logger
from .clock import Clock
from .models import MEMORY_USAGE_RATIO, SamplerState
from .store import TelemetryStore

logger = get_logger(__name__)

FrameCallback = Callable[[], None]
MemoryProbe = Callable[[], Optional[float]]

DEFAULT_FRAME_INTERVAL = 1.0 / 60.0


class FrameScheduler(ABC):
    """Runs a callback once on the next refresh"""

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> None:
        pass


class AsyncioFrameScheduler(FrameScheduler):
    """Schedules frames on an asyncio event loop, ``interval`` seconds apart"""

    def __init__(self, interval: float = DEFAULT_FRAME_INTERVAL, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.interval = interval
        self._loop = loop

    def request_frame(self, callback: FrameCallback) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(self.interval, callback)


class ManualFrameScheduler(FrameScheduler):
    """Queues frame callbacks until the host pumps them with run_pending()"""

    def __init__(self):
        self._pending: List[FrameCallback] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending.append(callback)

    def run_pending(self) -> int:
        """Run the callbacks queued so far; ones they queue wait for the next call"""
        callbacks, self._pending = self._pending, []
        for callback in callbacks:
            callback()
        return len(callbacks)


class ProcessMemoryProbe:
    """Resident memory of this process as a fraction of total system memory.

    The process handle and the total are read once, on the first sample.
    """

    def __init__(self):
        self._process: Optional[psutil.Process] = None
        self._total = 0

    def __call__(self) -> Optional[float]:
        if self._process is None:
            self._process = psutil.Process()
            self._total = psutil.virtual_memory().total
        if not self._total:
            return None
        return self._process.memory_info().rss / self._total


process_memory_ratio = ProcessMemoryProbe()


class FrameSampler:
    """Self-rescheduling frame sampler.

    A two-state machine: ``start`` moves IDLE -> RUNNING and requests the
    first frame, each tick samples and re-arms while RUNNING, and ``stop``
    only flips the state so the next pending tick returns without
    re-arming. Each start opens a new generation; ticks left over from an
    earlier run are dropped.
    """

    def __init__(self, store: TelemetryStore, scheduler: FrameScheduler, clock: Clock,
                 memory_probe: Optional[MemoryProbe] = process_memory_ratio):
        self.store = store
        self.scheduler = scheduler
        self._clock = clock
        self._memory_probe = memory_probe
        self._state = SamplerState.IDLE
        self._generation = 0
        self._last_sample_time = 0.0

    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SamplerState.RUNNING

    def start(self) -> None:
        if self.is_running:
            return
        self._state = SamplerState.RUNNING
        self._generation += 1
        self._last_sample_time = self._clock()
        self._arm(self._generation)
        logger.debug("Frame sampling started", generation=self._generation, event_type="sampler_start")

    def stop(self) -> None:
        if self.is_running:
            logger.debug("Frame sampling stopping", generation=self._generation, event_type="sampler_stop")
        self._state = SamplerState.IDLE

    def tick(self, generation: int) -> None:
        """Take one sample and re-arm, unless stopped or superseded"""
        if self._state is not SamplerState.RUNNING or generation != self._generation:
            return

        now = self._clock()
        delta = now - self._last_sample_time
        self._last_sample_time = now
        self.store.record_frame_interval(delta)
        self._sample_memory()

        self._arm(generation)

    def _arm(self, generation: int) -> None:
        try:
            self.scheduler.request_frame(lambda: self.tick(generation))
        except Exception as e:
            self._state = SamplerState.IDLE
            logger.warning("Could not schedule next frame, sampling stopped",
                           error=str(e), event_type="sampler_error")

    def _sample_memory(self) -> None:
        if self._memory_probe is None:
            return
        try:
            ratio = self._memory_probe()
        except Exception as e:
            logger.debug("Memory usage probe failed", error=str(e))
            return
        if ratio is not None:
            self.store.metrics[MEMORY_USAGE_RATIO] = ratio
