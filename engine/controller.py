"""
controller.py — Playback State Machine
=======================================
The PlaybackController is the ONLY object the UI interacts with during a
run.  It owns the sequence, the target, the trace built from them and the
playback state, and exposes a start/step/play/reset/retarget API.

State machine:
    idle       →  start()            →  searching | found | not-found
    searching  →  step / tick        →  searching | found | not-found
    found      →  step_backward()    →  searching
    not-found  →  step_backward()    →  searching
    any        →  reset / retarget   →  idle

Entering searching from any other status sets is_playing to
settings.auto_play, so stepping back from a result replays it.

Timers (all single-shot, all on the injected Scheduler):
    advance   – step_delay ms, one step forward while searching & playing
    loop      – max(220, step_delay + 120) ms after a terminal step when
                loop_on_complete is set; picks a new target
                (a step_delay change restarts a pending cooldown)
    restart   – 80 / 160 ms after an armed pending restart; calls start()

Every timer captures the controller epoch when it is scheduled.  reset,
retarget, regenerate and close bump the epoch and cancel the handles, so
a stale callback can never touch the state.

Thread safety:
  This class is NOT thread-safe.  Drive it from one thread; the web
  layer holds a lock around every call.
"""

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional

from config import Settings, DEFAULT_SETTINGS
from search import Direction, Step, Trace, build_trace, get_variant
from sequence import generate, middle_value, pick_loop_target
from engine.scheduler import Scheduler, MonotonicScheduler

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
class Status(str, Enum):
    IDLE      = "idle"
    SEARCHING = "searching"
    FOUND     = "found"
    NOT_FOUND = "not-found"

    @property
    def is_terminal(self) -> bool:
        return self in (Status.FOUND, Status.NOT_FOUND)


TRANSITIONS: Dict[Status, FrozenSet[Status]] = {
    Status.IDLE:      frozenset({Status.SEARCHING, Status.FOUND, Status.NOT_FOUND}),
    Status.SEARCHING: frozenset({Status.FOUND, Status.NOT_FOUND, Status.IDLE}),
    Status.FOUND:     frozenset({Status.SEARCHING, Status.IDLE}),
    Status.NOT_FOUND: frozenset({Status.SEARCHING, Status.IDLE}),
}

STATUS_LABELS = {
    Status.IDLE:      "Awaiting input",
    Status.SEARCHING: "Searching…",
    Status.FOUND:     "Target located!",
    Status.NOT_FOUND: "Target not present",
}


@dataclass(frozen=True)
class PlaybackState:
    status:             Status = Status.IDLE
    current_step_index: int    = -1
    is_playing:         bool   = False
    pending_restart:    bool   = False

    def to_dict(self) -> dict:
        return {
            "status":             self.status.value,
            "current_step_index": self.current_step_index,
            "is_playing":         self.is_playing,
            "pending_restart":    self.pending_restart,
        }


def coerce_target(value) -> Optional[float]:
    """Parse user input into a finite number, or None if it is unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------
class PlaybackController:
    """
    Attributes:
        settings  : Current immutable Settings snapshot.
        scheduler : Timer source (VirtualScheduler in tests).
        sequence  : Current sequence; generated from the settings unless
                    one is passed in.
        target    : Value being searched for.
        trace     : Steps for (sequence, target, settings.variant).
        on_change : Optional callback(PlaybackState) fired after every
                    observable change.  The UI hooks its re-render here.
    """

    def __init__(
        self,
        settings: Settings = DEFAULT_SETTINGS,
        scheduler: Optional[Scheduler] = None,
        target=None,
        on_change: Optional[Callable[[PlaybackState], None]] = None,
        sequence=None,
    ):
        self.settings:  Settings  = settings
        self.scheduler: Scheduler = scheduler if scheduler is not None else MonotonicScheduler()
        self.on_change            = on_change

        self._state:  PlaybackState = PlaybackState()
        self._epoch:  int           = 0
        self._closed: bool          = False

        self._advance_timer = None
        self._loop_timer    = None
        self._restart_timer = None

        if sequence is not None:
            self.sequence = tuple(sequence)
        else:
            self.sequence = generate(settings.array_size, settings.min_value,
                                     settings.max_value, settings.seed)
        chosen = coerce_target(target)
        self.target = chosen if chosen is not None else middle_value(self.sequence)
        self.trace: Trace = build_trace(self.sequence, self.target, settings.variant)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def status(self) -> Status:
        return self._state.status

    @property
    def current_step_index(self) -> int:
        return self._state.current_step_index

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def pending_restart(self) -> bool:
        return self._state.pending_restart

    @property
    def last_index(self) -> int:
        return len(self.trace) - 1

    @property
    def current_step(self) -> Optional[Step]:
        idx = self._state.current_step_index
        if 0 <= idx < len(self.trace):
            return self.trace[idx]
        return None

    @property
    def next_step(self) -> Optional[Step]:
        """The upcoming step, when peeking is enabled."""
        if not self.settings.peek_next_step:
            return None
        idx = self._state.current_step_index + 1
        if 0 <= idx < len(self.trace):
            return self.trace[idx]
        return None

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self._state.status]

    @property
    def variant_info(self):
        return get_variant(self.settings.variant)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> bool:
        """Jump to step 0 and begin (auto-)playing.  Empty trace → not-found."""
        self._cancel("_restart_timer")
        if not self.trace:
            self._set(status=Status.NOT_FOUND, pending_restart=False)
            logger.debug("start on empty trace → not-found")
            self._notify()
            return False

        self._set(is_playing=self.settings.auto_play, pending_restart=False)
        self._goto(0)
        return True

    def reset(self) -> None:
        """Back to IDLE; the trace is kept."""
        self._invalidate()
        self._set(status=Status.IDLE, current_step_index=-1,
                  is_playing=False, pending_restart=False)
        self._notify()

    def retarget(self, new_target) -> bool:
        """
        Search for `new_target` instead.  Returns False, leaving every
        piece of state untouched, if the value is not a finite number.
        """
        value = coerce_target(new_target)
        if value is None:
            logger.warning("Rejected target %r", new_target)
            return False
        self._retarget(value)
        return True

    def regenerate(self, seed: Optional[int] = None) -> None:
        """Build a brand-new sequence (optionally from a new seed)."""
        if seed is not None:
            self.settings = self.settings.update("seed", seed)
        self._rebuild_sequence()

    def apply_settings(self, settings: Settings) -> None:
        """Swap in a new settings snapshot and run the reset cascade."""
        old = self.settings
        if settings == old:
            return
        self.settings = settings

        if settings.array_key() != old.array_key():
            self._rebuild_sequence()
            return

        if settings.variant != old.variant:
            self.trace = build_trace(self.sequence, self.target, settings.variant)
            self.reset()
            return

        reschedule = settings.step_delay != old.step_delay
        if settings.auto_play != old.auto_play and self.status is Status.SEARCHING:
            self._set(is_playing=settings.auto_play)
            reschedule = True
        if reschedule:
            self._sync_advance()

        cooldown_changed = settings.step_delay != old.step_delay and self._loop_timer is not None
        if settings.loop_on_complete != old.loop_on_complete or cooldown_changed:
            self._cancel("_loop_timer")
            if settings.loop_on_complete and self._at_terminal():
                self._schedule_loop()

        if settings.ease_motion != old.ease_motion and self._restart_timer is not None:
            self._arm_restart()

        self._notify()

    def close(self) -> None:
        """Tear down: cancel every timer; nothing fires afterwards."""
        self._closed = True
        self._invalidate()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def step_forward(self) -> bool:
        """Advance one step.  Returns False if already at the end."""
        if self._state.current_step_index >= self.last_index:
            return False
        self._goto(self._state.current_step_index + 1)
        return True

    def step_backward(self) -> bool:
        """Rewind one step.  Returns False if already at the start."""
        if self._state.current_step_index <= 0:
            return False
        self._goto(self._state.current_step_index - 1)
        return True

    def goto_step(self, index: int) -> bool:
        """Scrub to an arbitrary step index."""
        if not 0 <= index < len(self.trace):
            return False
        self._goto(index)
        return True

    # ------------------------------------------------------------------
    # Play / Pause
    # ------------------------------------------------------------------
    def toggle_play(self) -> bool:
        """Flip play/pause.  Disabled once the search has finished."""
        if self._state.status.is_terminal or not self.trace:
            return False
        self._set(is_playing=not self._state.is_playing)
        self._sync_advance()
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict:
        current = self.current_step
        nxt     = self.next_step
        info    = self.variant_info
        return {
            **self._state.to_dict(),
            "status_label": self.status_label,
            "target":       self.target,
            "sequence":     list(self.sequence),
            "trace":        [s.to_dict() for s in self.trace],
            "total_steps":  len(self.trace),
            "current_step": current.to_dict() if current else None,
            "next_step":    nxt.to_dict() if nxt else None,
            "explanation":  current.explanation(self.target) if current else "",
            "pseudocode_line": info.pseudocode_line(current) if info else -1,
            "settings":     self.settings.to_dict(),
        }

    # ------------------------------------------------------------------
    # Internal: state
    # ------------------------------------------------------------------
    def _set(self, **changes) -> None:
        new = replace(self._state, **changes)
        old_status = self._state.status
        if new.status is not old_status and new.status not in TRANSITIONS[old_status]:
            raise RuntimeError(f"Illegal transition {old_status.value} → {new.status.value}")
        if new.status is not old_status:
            logger.debug("status %s → %s", old_status.value, new.status.value)
        self._state = new

    def _goto(self, index: int) -> None:
        step    = self.trace[index]
        playing = self._state.is_playing

        if step.direction is Direction.FOUND:
            status, playing = Status.FOUND, False
        elif step.direction is Direction.MISS and index == self.last_index:
            status, playing = Status.NOT_FOUND, False
        else:
            status = Status.SEARCHING
            if self._state.status is not Status.SEARCHING:
                playing = self.settings.auto_play

        self._cancel("_loop_timer")
        self._set(status=status, current_step_index=index, is_playing=playing)

        if self.settings.loop_on_complete and self._at_terminal():
            self._schedule_loop()
        self._sync_advance()
        self._notify()

    def _at_terminal(self) -> bool:
        step = self.current_step
        return (
            step is not None
            and self._state.current_step_index == self.last_index
            and step.is_terminal
        )

    def _retarget(self, value) -> None:
        logger.info("retarget %r → %r", self.target, value)
        self.target = value
        self.trace  = build_trace(self.sequence, value, self.settings.variant)
        self._invalidate()
        self._set(status=Status.IDLE, current_step_index=-1,
                  is_playing=False, pending_restart=False)
        if self.settings.auto_play:
            self._arm_restart()
        self._notify()

    def _rebuild_sequence(self) -> None:
        s = self.settings
        self.sequence = generate(s.array_size, s.min_value, s.max_value, s.seed)
        self.target   = middle_value(self.sequence)
        self.trace    = build_trace(self.sequence, self.target, s.variant)
        logger.info("regenerated sequence (seed=%d, size=%d), target → %r",
                    s.seed, len(self.sequence), self.target)
        self.reset()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self._state)

    # ------------------------------------------------------------------
    # Internal: timers
    # ------------------------------------------------------------------
    def _invalidate(self) -> None:
        self._epoch += 1
        for name in ("_advance_timer", "_loop_timer", "_restart_timer"):
            self._cancel(name)

    def _cancel(self, name: str) -> None:
        timer = getattr(self, name)
        if timer is not None:
            self.scheduler.cancel(timer)
            setattr(self, name, None)

    def _guard(self, epoch: int, callback: Callable[[], None]) -> Callable[[], None]:
        def fire():
            if self._closed or epoch != self._epoch:
                return
            callback()
        return fire

    def _sync_advance(self) -> None:
        self._cancel("_advance_timer")
        s = self._state
        if s.status is Status.SEARCHING and s.is_playing and s.current_step_index < self.last_index:
            self._advance_timer = self.scheduler.call_later(
                self.settings.step_delay, self._guard(self._epoch, self._on_advance),
            )

    def _on_advance(self) -> None:
        self._advance_timer = None
        s = self._state
        if s.status is Status.SEARCHING and s.is_playing and s.current_step_index < self.last_index:
            self._goto(s.current_step_index + 1)

    def _schedule_loop(self) -> None:
        index = self._state.current_step_index
        self._loop_timer = self.scheduler.call_later(
            self.settings.loop_cooldown_ms,
            self._guard(self._epoch, lambda: self._on_loop(index)),
        )

    def _on_loop(self, index: int) -> None:
        self._loop_timer = None
        s = self.settings
        nxt = pick_loop_target(self.sequence, s.seed, index, s.min_value, s.max_value)
        logger.debug("auto-loop picked %r", nxt)
        self._retarget(nxt)

    def _arm_restart(self) -> None:
        self._cancel("_restart_timer")
        self._set(pending_restart=True)
        self._restart_timer = self.scheduler.call_later(
            self.settings.restart_delay_ms, self._guard(self._epoch, self._on_restart),
        )

    def _on_restart(self) -> None:
        self._restart_timer = None
        if self.trace:
            self.start()
            return
        self._set(status=Status.NOT_FOUND, pending_restart=False)
        self._notify()
