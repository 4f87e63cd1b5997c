"""Cancellable one-shot timers and the clocks that drive them."""
from __future__ import annotations

import asyncio
import heapq
import time
from itertools import count
from typing import Callable, List, Protocol, Tuple

TimerCallback = Callable[[], None]


class TimerHandle:
    """Handle for a scheduled callback; cancelling it suppresses the callback for good."""

    def __init__(self, callback: TimerCallback, on_cancel: Callable[[], object] | None = None) -> None:
        self._callback = callback
        self._on_cancel = on_cancel
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> bool:
        """True while the callback may still run."""
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        if not self.pending:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()

    def fire(self) -> None:
        """Run the callback once unless the handle was cancelled."""
        if not self.pending:
            return
        self._fired = True
        self._callback()


class Scheduler(Protocol):
    """Minimal timer source used by the engine and the typewriter."""

    def now(self) -> float:
        """Return the current time in milliseconds."""

    def call_later(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""


def wall_clock_ms() -> float:
    """Return wall-clock time in milliseconds."""
    return time.time() * 1000.0


class ManualScheduler:
    """Deterministic scheduler driven by an explicit virtual clock."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)
        self._sequence = count()
        self._queue: List[Tuple[float, int, TimerHandle]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        handle = TimerHandle(callback)
        due = self._now + max(0.0, float(delay_ms))
        heapq.heappush(self._queue, (due, next(self._sequence), handle))
        return handle

    @property
    def has_pending(self) -> bool:
        return any(handle.pending for _, _, handle in self._queue)

    def next_due(self) -> float | None:
        """Return the due time of the earliest live timer, if any."""
        self._drop_dead()
        if not self._queue:
            return None
        return self._queue[0][0]

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward and fire every timer that came due. Returns the fire count."""
        target = self._now + max(0.0, float(delta_ms))
        fired = 0
        while True:
            self._drop_dead()
            if not self._queue or self._queue[0][0] > target:
                break
            due, _, handle = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            handle.fire()
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, max_fires: int = 10_000) -> int:
        """Fire timers in due order until none remain (timers may schedule more)."""
        fired = 0
        while fired < max_fires:
            due = self.next_due()
            if due is None:
                break
            fired += self.advance(due - self._now)
        return fired

    def _drop_dead(self) -> None:
        while self._queue and not self._queue[0][2].pending:
            heapq.heappop(self._queue)


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop's ``call_later``."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return wall_clock_ms()

    def call_later(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        loop = self._get_loop()
        loop_handle: asyncio.TimerHandle | None = None

        def cancel_loop_handle() -> None:
            if loop_handle is not None:
                loop_handle.cancel()

        handle = TimerHandle(callback, on_cancel=cancel_loop_handle)
        loop_handle = loop.call_later(max(0.0, delay_ms) / 1000.0, handle.fire)
        return handle
