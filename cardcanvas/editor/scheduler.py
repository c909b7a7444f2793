"""
Frame schedulers.

The animation driver and the resize debouncer never touch a real display
loop directly; they go through a ``FrameScheduler`` so tests can advance
time deterministically.
"""

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..constants import FRAME_INTERVAL_MS

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class FrameScheduler(ABC):
    """Cooperative, single-threaded frame and timer scheduling."""

    @abstractmethod
    def now(self) -> float:
        """Current time in milliseconds."""
        pass

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> Any:
        """Run ``callback(timestamp_ms)`` on the next frame. Returns a cancel handle."""
        pass

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Any:
        """Run ``callback()`` after ``delay_ms``. Returns a cancel handle."""
        pass

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Cancel a pending frame or timer. Unknown or fired handles are ignored."""
        pass


class ManualFrameScheduler(FrameScheduler):
    """
    Deterministic scheduler whose clock only moves when told to.

    Frames fire every ``frame_interval`` ms of advanced time. Callbacks
    requested during a frame run on the following frame.
    """

    def __init__(self, frame_interval: float = FRAME_INTERVAL_MS, start: float = 0.0):
        self.frame_interval = frame_interval
        self._now = start
        self._ids = itertools.count(1)
        self._frames: Dict[int, FrameCallback] = {}
        self._timers: List[Tuple[float, int, Callable[[], None]]] = []
        self._cancelled_timers = set()
        self.frames_run = 0

    def now(self) -> float:
        return self._now

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._frames[handle] = callback
        return handle

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        heapq.heappush(self._timers, (self._now + max(0.0, delay_ms), handle, callback))
        return handle

    def cancel(self, handle: Any) -> None:
        if self._frames.pop(handle, None) is None:
            self._cancelled_timers.add(handle)

    @property
    def pending(self) -> int:
        """Number of frame callbacks and live timers waiting to run."""
        timers = sum(1 for _, h, _ in self._timers if h not in self._cancelled_timers)
        return len(self._frames) + timers

    def _run_timers(self) -> None:
        while self._timers and self._timers[0][0] <= self._now:
            _, handle, callback = heapq.heappop(self._timers)
            if handle in self._cancelled_timers:
                self._cancelled_timers.discard(handle)
                continue
            callback()

    def step(self) -> None:
        """Advance one frame interval and run whatever is due."""
        self._now += self.frame_interval
        self._run_timers()
        frames, self._frames = self._frames, {}
        if frames:
            self.frames_run += 1
        for callback in frames.values():
            callback(self._now)

    def advance(self, ms: float) -> None:
        """Advance the clock by ``ms``, one frame at a time."""
        target = self._now + ms
        while self._now + self.frame_interval <= target:
            self.step()
        if self._now < target:
            self._now = target
            self._run_timers()

    def run_until_idle(self, max_ms: float = 60_000.0) -> None:
        """Step until nothing is pending or ``max_ms`` of clock time passes."""
        deadline = self._now + max_ms
        while self.pending and self._now < deadline:
            self.step()


class AsyncioFrameScheduler(FrameScheduler):
    """Drives frames from an asyncio event loop at a fixed refresh rate."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None, frame_interval: float = FRAME_INTERVAL_MS):
        self.loop = loop or asyncio.get_running_loop()
        self.frame_interval = frame_interval

    def now(self) -> float:
        return self.loop.time() * 1000.0

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        return self.loop.call_later(self.frame_interval / 1000.0, lambda: callback(self.now()))

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_ms) / 1000.0, callback)

    def cancel(self, handle: Any) -> None:
        if handle is not None:
            handle.cancel()
