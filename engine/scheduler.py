"""
scheduler.py — Single-Shot Timers
==================================
The only suspension points of the playback engine are timers.  This
module owns them so the controller never touches a real clock.

    sched = VirtualScheduler()
    t = sched.call_later(650, callback)
    sched.advance(650)                 # → callback fired exactly once

Two clocks:
  • VirtualScheduler   – time moves only when advance() is called.  Tests
                         drive the controller deterministically with it.
  • MonotonicScheduler – time.monotonic(); the host loop calls tick()
                         periodically (the web app ticks on every request).

Guarantees:
  - Timers fire in (due time, scheduling order).  A later-scheduled timer
    never fires before an earlier one with the same due time.
  - A cancelled timer never fires, even if it is already due.
  - Timers scheduled from inside a callback are honoured in the same
    run if they are already due.

Thread safety:
  None.  Everything runs on one thread; the web layer serialises access.
"""

import heapq
import itertools
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Timer handle
# ---------------------------------------------------------------------------
class Timer:
    """
    Attributes:
        due_ms    : Absolute clock time (ms) at which the timer fires.
        seq       : Tie-breaker preserving scheduling order.
        callback  : Zero-arg callable.
        cancelled : Set by Scheduler.cancel(); a cancelled timer is skipped.
        fired     : Set once the callback has run.
    """

    __slots__ = ("due_ms", "seq", "callback", "cancelled", "fired")

    def __init__(self, due_ms: float, seq: int, callback: Callable[[], None]):
        self.due_ms    = due_ms
        self.seq       = seq
        self.callback  = callback
        self.cancelled = False
        self.fired     = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "fired" if self.fired else "pending"
        return f"Timer(due={self.due_ms}, seq={self.seq}, {state})"


# ---------------------------------------------------------------------------
# Base scheduler
# ---------------------------------------------------------------------------
class Scheduler(ABC):
    def __init__(self):
        self._heap: List[Tuple[float, int, Timer]] = []
        self._seq = itertools.count()

    @abstractmethod
    def now(self) -> float:
        """Current clock time in milliseconds."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Timer:
        """Schedule `callback` to run once, `delay_ms` from now."""
        timer = Timer(self.now() + max(0, delay_ms), next(self._seq), callback)
        heapq.heappush(self._heap, (timer.due_ms, timer.seq, timer))
        return timer

    def cancel(self, timer) -> None:
        if timer is not None and timer.active:
            timer.cancelled = True

    def cancel_all(self) -> None:
        for _, _, timer in self._heap:
            timer.cancelled = True
        self._heap.clear()

    @property
    def pending(self) -> int:
        """Number of timers that are still going to fire."""
        return sum(1 for _, _, t in self._heap if t.active)

    def next_due(self):
        self._drop_cancelled()
        return self._heap[0][0] if self._heap else None

    def run_due(self) -> int:
        """Fire every timer whose due time has passed.  Returns the count."""
        fired = 0
        now = self.now()
        while True:
            self._drop_cancelled()
            if not self._heap or self._heap[0][0] > now:
                return fired
            _, _, timer = heapq.heappop(self._heap)
            timer.fired = True
            timer.callback()
            fired += 1

    def _drop_cancelled(self) -> None:
        while self._heap and self._heap[0][2].cancelled:
            heapq.heappop(self._heap)


# ---------------------------------------------------------------------------
# Virtual clock (tests, replays)
# ---------------------------------------------------------------------------
class VirtualScheduler(Scheduler):
    def __init__(self, start_ms: float = 0.0):
        super().__init__()
        self._now = start_ms

    def now(self) -> float:
        return self._now

    def advance(self, ms: float) -> int:
        """
        Move the clock forward by `ms`, firing timers at their exact due
        times in order.  Returns the number of timers fired.
        """
        end   = self._now + ms
        fired = 0
        while True:
            due = self.next_due()
            if due is None or due > end:
                break
            self._now = max(self._now, due)
            fired += self.run_due()
        self._now = end
        return fired

    def run_until_idle(self, limit_ms: float = 60_000) -> int:
        """Advance until no timer is pending (bounded by `limit_ms`)."""
        start = self._now
        fired = 0
        while self.pending and self._now - start < limit_ms:
            due = self.next_due()
            fired += self.advance(due - self._now)
        return fired


# ---------------------------------------------------------------------------
# Wall clock (web app)
# ---------------------------------------------------------------------------
class MonotonicScheduler(Scheduler):
    def now(self) -> float:
        return time.monotonic() * 1000.0

    def tick(self) -> int:
        """Call periodically from the host loop; fires anything due."""
        fired = self.run_due()
        if fired:
            logger.debug("tick fired %d timer(s)", fired)
        return fired
