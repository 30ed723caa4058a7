"""Deferred-callback scheduling with an injectable time source.

Everything time-dependent in tasknav (readiness polling, the scroll
settle delay, highlight auto-clear) goes through a :class:`Scheduler`.
Production code wraps an asyncio event loop; tests drive a
:class:`ManualScheduler` whose clock only moves when told to.

All delays are in milliseconds.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable


class TimerHandle(ABC):
    """A scheduled callback that may be cancelled before it fires."""

    @abstractmethod
    def cancel(self) -> None: ...

    @property
    @abstractmethod
    def cancelled(self) -> bool: ...


class Scheduler(ABC):
    """Single-threaded deferred callback scheduler."""

    @abstractmethod
    def now_ms(self) -> float:
        """Current time on this scheduler's clock, in milliseconds."""
        ...

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* once, no earlier than *delay_ms* from now."""
        ...


# ---------------------------------------------------------------------------
# asyncio-backed scheduler
# ---------------------------------------------------------------------------


class _AsyncioTimer(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop.

    When *loop* is omitted, the running loop is looked up on each call,
    so the scheduler must then be used from inside that loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def now_ms(self) -> float:
        return self.loop.time() * 1000

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioTimer(self.loop.call_later(max(delay_ms, 0) / 1000, callback))


# ---------------------------------------------------------------------------
# Virtual-clock scheduler
# ---------------------------------------------------------------------------


class _ManualTimer(TimerHandle):
    def __init__(self, due_ms: float, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Deterministic scheduler whose clock advances only via :meth:`advance`.

    Callbacks due at the same instant run in the order they were
    scheduled. Callbacks may schedule further callbacks; those run in the
    same :meth:`advance` call if they fall due within it.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = start_ms
        self._queue: list[tuple[float, int, _ManualTimer]] = []
        self._seq = itertools.count()

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(self._now + max(delay_ms, 0), callback)
        heapq.heappush(self._queue, (timer.due_ms, next(self._seq), timer))
        return timer

    @property
    def pending_count(self) -> int:
        """Number of scheduled callbacks that are neither fired nor cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward by *delta_ms*, firing due callbacks.

        Returns the number of callbacks that ran.
        """
        target = self._now + delta_ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = due
            timer.fired = True
            timer.callback()
            fired += 1
        self._now = target
        return fired

    def run_pending(self) -> int:
        """Fire every callback already due at the current time."""
        return self.advance(0)
