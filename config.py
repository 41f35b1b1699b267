"""
config.py — Settings Snapshot
==============================
Immutable configuration record shared by the generator, the trace
builder and the playback controller.

    from config import Settings, DEFAULT_SETTINGS

    s = DEFAULT_SETTINGS.update("array_size", 50)   # → array_size == 36

Design decisions:
  - Settings is a frozen dataclass.  Changing a value yields a NEW
    snapshot; the controller swaps it in via apply_settings() and runs
    the reset cascade.  Nobody observes a live mutable object.
  - Clamping happens in update(), not in the consumers, so every
    snapshot the core ever sees is already valid.
  - from_dict() is lenient (stored settings may be stale or hand-edited),
    update() is strict (a bad value from the UI is a 400).
"""

import logging
import math
import random
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


VARIANTS = ("iterative", "recursive")

ARRAY_SIZE_RANGE = (4, 36)
STEP_DELAY_RANGE = (120, 2000)
SEED_MODULUS     = 100000
MIN_VALUE_GAP    = 2


class SettingsError(ValueError):
    """Raised when a settings update names an unknown key or carries a bad value."""


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Settings:
    """
    Attributes:
        array_size       : Number of elements in the generated sequence (4–36).
        min_value        : Soft lower bound of the sequence.
        max_value        : Soft upper bound of the sequence.
        seed             : Drives the sequence generator and the loop-target draw.
        step_delay       : Milliseconds between auto-advance ticks.
        auto_play        : Start playing immediately on start / restart.
        loop_on_complete : Pick a new target and restart when a run ends.
        variant          : "iterative" or "recursive".
        ease_motion      : Reduced-motion preference; shortens the restart delay.
        peek_next_step   : Renderer shows the upcoming midpoint.
        show_indices     : Renderer prints index labels under the cells.
        show_bounds      : Renderer draws the low/high markers.
    """

    array_size:       int  = 12
    min_value:        int  = 2
    max_value:        int  = 90
    seed:             int  = 9473
    step_delay:       int  = 650
    auto_play:        bool = True
    loop_on_complete: bool = False
    variant:          str  = "iterative"
    ease_motion:      bool = False
    peek_next_step:   bool = True
    show_indices:     bool = True
    show_bounds:      bool = True

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------
    def update(self, key: str, value: Any) -> "Settings":
        """Return a new snapshot with `key` set to a clamped `value`."""
        key = _normalise_key(key)
        if key not in _FIELD_NAMES:
            raise SettingsError(f"Unknown setting: {key}")

        if key in _BOOL_FIELDS:
            return replace(self, **{key: _coerce_bool(key, value)})

        if key == "variant":
            if value not in VARIANTS:
                raise SettingsError(f"Unknown variant: {value!r}")
            return replace(self, variant=value)

        number = _coerce_int(key, value)

        if key == "array_size":
            lo, hi = ARRAY_SIZE_RANGE
            return replace(self, array_size=min(hi, max(lo, number)))
        if key in _BOUND_FIELDS:
            return self.with_bounds(**{key: number})
        if key == "step_delay":
            lo, hi = STEP_DELAY_RANGE
            return replace(self, step_delay=min(hi, max(lo, number)))
        # seed
        return replace(self, seed=abs(number) % SEED_MODULUS)

    def update_many(self, values: Dict[str, Any]) -> "Settings":
        """Apply several updates; min_value and max_value are clamped as a pair."""
        s = self
        bounds = {}
        for k, v in values.items():
            key = _normalise_key(k)
            if key in _BOUND_FIELDS:
                bounds[key] = _coerce_int(key, v)
            else:
                s = s.update(key, v)
        return s.with_bounds(**bounds)

    def with_bounds(self, min_value: Optional[int] = None,
                    max_value: Optional[int] = None) -> "Settings":
        """
        Set the value range, keeping max_value at least MIN_VALUE_GAP above
        min_value.  A lone min_value gives way to the current max_value;
        otherwise max_value is the one pushed up.
        """
        lo = self.min_value if min_value is None else min_value
        hi = self.max_value if max_value is None else max_value
        if max_value is None:
            lo = min(lo, hi - MIN_VALUE_GAP)
        else:
            hi = max(hi, lo + MIN_VALUE_GAP)
        return replace(self, min_value=lo, max_value=hi)

    # ------------------------------------------------------------------
    # Derived timings
    # ------------------------------------------------------------------
    @property
    def loop_cooldown_ms(self) -> int:
        return max(220, self.step_delay + 120)

    @property
    def restart_delay_ms(self) -> int:
        return 80 if self.ease_motion else 160

    def array_key(self) -> tuple:
        """The fields that determine the generated sequence."""
        return (self.array_size, self.min_value, self.max_value, self.seed)

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Settings":
        """Merge stored values over the defaults; bad entries are dropped."""
        s = cls()
        bounds = {}
        for k, v in (data or {}).items():
            key = _normalise_key(k)
            try:
                if key in _BOUND_FIELDS:
                    bounds[key] = _coerce_int(key, v)
                else:
                    s = s.update(key, v)
            except SettingsError as exc:
                logger.warning("Ignoring stored setting %s=%r: %s", k, v, exc)
        return s.with_bounds(**bounds)


DEFAULT_SETTINGS = Settings()


def random_seed() -> int:
    """A fresh seed for the "new array" action."""
    return random.randint(1000, 90999)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
_FIELD_NAMES = {f.name for f in fields(Settings)}
_BOOL_FIELDS = {f.name for f in fields(Settings) if f.type in (bool, "bool")}
_BOUND_FIELDS = ("min_value", "max_value")


def _normalise_key(key: str) -> str:
    # accept the camelCase keys a browser client sends
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def _coerce_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise SettingsError(f"{key} expects a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise SettingsError(f"{key} expects a number, got {value!r}") from None
    if not math.isfinite(number):
        raise SettingsError(f"{key} must be finite, got {value!r}")
    return math.floor(number)


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "1", "on", "yes"):
        return True
    if isinstance(value, str) and value.lower() in ("false", "0", "off", "no", ""):
        return False
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    raise SettingsError(f"{key} expects a boolean, got {value!r}")
