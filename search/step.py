"""
step.py — Search Step Snapshot
===============================
Every search variant is a generator that yields Step objects.
A Step is one probe of the search:

    • the live window  [low, high]
    • the midpoint inspected and the value found there
    • the outcome  (go left, go right, found, missing)
    • how deep into the loop / recursion we are

Design decisions:
  - Step is a frozen dataclass.  The variant generator is the only
    writer; the controller and renderer are pure readers.
  - Equality covers exactly (low, high, mid, value, direction, depth), so
    traces from different variants can be compared with ==.
  - Labels and explanations are derived properties, never stored.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Direction(str, Enum):
    LEFT  = "left"
    RIGHT = "right"
    FOUND = "found"
    MISS  = "miss"

    @property
    def is_terminal(self) -> bool:
        return self in (Direction.FOUND, Direction.MISS)


DIRECTION_LABELS = {
    Direction.LEFT:  "Search left half",
    Direction.RIGHT: "Search right half",
    Direction.FOUND: "Target found",
    Direction.MISS:  "Target missing",
}


@dataclass(frozen=True)
class Step:
    """
    Attributes:
        low       : Left edge of the live window.
        high      : Right edge of the live window (may be < low on a miss).
        mid       : floor((low + high) / 2).
        value     : sequence[mid], or None on the terminal miss step.
        direction : Outcome of this probe.
        depth     : 0-based iteration / recursion depth.
    """

    low:       int
    high:      int
    mid:       int
    value:     Optional[int]
    direction: Direction
    depth:     int

    @property
    def label(self) -> str:
        return DIRECTION_LABELS[self.direction]

    @property
    def is_terminal(self) -> bool:
        return self.direction.is_terminal

    def explanation(self, target) -> str:
        """Plain-English "why" text for the explanation panel."""
        if self.direction is Direction.FOUND:
            return (
                f"sequence[{self.mid}] = {self.value} equals the target {target}. "
                f"Found after {self.depth + 1} probe(s)."
            )
        if self.direction is Direction.LEFT:
            return (
                f"sequence[{self.mid}] = {self.value} is greater than {target}, "
                f"so the target can only be left of mid: high ← {self.mid - 1}."
            )
        if self.direction is Direction.RIGHT:
            return (
                f"sequence[{self.mid}] = {self.value} is less than {target}, "
                f"so the target can only be right of mid: low ← {self.mid + 1}."
            )
        return (
            f"low ({self.low}) passed high ({self.high}); the window is empty. "
            f"{target} is not in the sequence."
        )

    def as_tuple(self) -> Tuple:
        return (self.low, self.high, self.mid, self.value, self.direction.value, self.depth)

    def to_dict(self) -> dict:
        return {
            "low":       self.low,
            "high":      self.high,
            "mid":       self.mid,
            "value":     self.value,
            "direction": self.direction.value,
            "depth":     self.depth,
            "label":     self.label,
        }


Trace = Tuple[Step, ...]


# ---------------------------------------------------------------------------
# Shared probe logic
# ---------------------------------------------------------------------------
def probe(sequence, target, low: int, high: int, depth: int) -> Step:
    """Inspect the midpoint of a non-empty window [low, high]."""
    mid   = (low + high) // 2
    value = sequence[mid]
    if value == target:
        direction = Direction.FOUND
    elif value > target:
        direction = Direction.LEFT
    else:
        direction = Direction.RIGHT
    return Step(low=low, high=high, mid=mid, value=value, direction=direction, depth=depth)


def miss(low: int, high: int, depth: int) -> Step:
    """Terminal step for an emptied window."""
    return Step(low=low, high=high, mid=(low + high) // 2, value=None,
                direction=Direction.MISS, depth=depth)
