"""Clock implementations used to schedule countdowns and round transitions."""

from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable


class TimerHandle(ABC):
    """A scheduled callback that can be cancelled any number of times."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the callback from running. No-op if it already ran or was cancelled."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """True once cancel() has been called."""


class Clock(ABC):
    """Schedules callbacks on the engine's single thread of control."""

    @abstractmethod
    def now_ms(self) -> float:
        """Current time in milliseconds on this clock's timeline."""

    @abstractmethod
    def after(self, duration_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* once, *duration_ms* from now."""


# ── asyncio ──────────────────────────────────────────────────────────────────

class _AsyncioTimer(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioClock(Clock):
    """
    Clock backed by an asyncio event loop.

    Callbacks run on the loop's thread. Other threads must hand work to the
    loop with ``loop.call_soon_threadsafe`` rather than calling the engine
    directly.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.loop = loop or asyncio.get_running_loop()

    def now_ms(self) -> float:
        return self.loop.time() * 1000.0

    def after(self, duration_ms: float, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioTimer(self.loop.call_later(max(0.0, duration_ms) / 1000.0, callback))


# ── Virtual time ─────────────────────────────────────────────────────────────

class _ManualTimer(TimerHandle):
    def __init__(self, deadline_ms: float, callback: Callable[[], None]) -> None:
        self.deadline_ms = deadline_ms
        self.callback = callback
        self.fired = False
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualClock(Clock):
    """
    Virtual-time clock: nothing happens until advance() is called.

    Due callbacks fire in deadline order; callbacks with the same deadline
    fire in the order they were scheduled. A callback scheduled while
    advancing still fires in the same call if its deadline falls inside the
    advanced window.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms = float(start_ms)
        self._queue: list[tuple[float, int, _ManualTimer]] = []
        self._sequence = itertools.count()

    def now_ms(self) -> float:
        return self._now_ms

    def after(self, duration_ms: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(self._now_ms + max(0.0, duration_ms), callback)
        heapq.heappush(self._queue, (timer.deadline_ms, next(self._sequence), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that have neither fired nor been cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, duration_ms: float) -> int:
        """
        Move time forward and fire everything that falls due.

        Returns:
            The number of callbacks that ran.
        """
        target = self._now_ms + duration_ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            deadline, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now_ms = deadline
            timer.fired = True
            timer.callback()
            fired += 1
        self._now_ms = target
        return fired

    def run_until_idle(self, limit: int = 10_000) -> int:
        """Fire scheduled callbacks one deadline at a time until none remain."""
        fired = 0
        while fired < limit:
            live = [entry for entry in self._queue if not entry[2].cancelled]
            if not live:
                break
            fired += self.advance(min(entry[0] for entry in live) - self._now_ms)
        return fired

