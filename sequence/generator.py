"""
generator.py — Sorted Sequence Generator
=========================================
Deterministic synthesis of the strictly increasing integer sequence the
search runs over, plus the seeded helpers that pick targets from it.

Algorithm:
  1. Pick a base step ≈ spread / (size + 1).
  2. Walk forward adding base step + a bounded jitter (≤ 0.8 × base step),
     never going backwards and always leaving headroom for the remaining
     positions under max_value.
  3. Shift the whole run down if it overshot max_value, up if it starts
     below min_value.
  4. Repair pass: bump any value that is not strictly above its predecessor.

Count and strict monotonicity are hard guarantees.  The [min, max] window
is a soft target: a degenerate range is allowed to spill over.
"""

import logging
import math
import random
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

Sequence = Tuple[int, ...]


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------
def generate(size: int, min_value: int, max_value: int, seed: int) -> Sequence:
    """
    Returns a strictly increasing tuple of exactly `size` ints.

    Args:
        size      : Number of elements (≤ 0 yields an empty tuple).
        min_value : Soft lower bound.
        max_value : Soft upper bound.
        seed      : Seed of the private random stream (0 behaves like 1).
    """
    if size <= 0:
        return ()

    rng       = random.Random(seed or 1)
    spread    = max(max_value - min_value, size + 4)
    base_step = max(1, spread // (size + 1))
    cursor    = min_value + base_step
    values    = []

    # -- forward pass --
    for index in range(size):
        jitter = _round_half_up((rng.random() - 0.5) * base_step * 0.8)
        cursor = max(cursor + 1, cursor + jitter + base_step)

        remaining   = size - index
        max_allowed = max_value - (remaining - 1)
        if cursor > max_allowed:
            cursor = max_allowed
        if values and cursor <= values[-1]:
            cursor = values[-1] + 1
        values.append(cursor)

    # -- uniform shift back into the window --
    overflow = values[-1] - max_value
    if overflow > 0:
        values = [v - overflow for v in values]

    underflow = min_value - values[0]
    if underflow > 0:
        values = [v + underflow for v in values]

    # -- monotonic repair --
    for i in range(1, len(values)):
        if values[i] <= values[i - 1]:
            values[i] = values[i - 1] + 1

    logger.debug(
        "generated sequence size=%d range=[%d, %d] seed=%d → [%d … %d]",
        size, min_value, max_value, seed, values[0], values[-1],
    )
    return tuple(values)


# ---------------------------------------------------------------------------
# Target helpers
# ---------------------------------------------------------------------------
def middle_value(sequence: Sequence) -> Optional[int]:
    """The element the target is recentered on after a regeneration."""
    if not sequence:
        return None
    return sequence[len(sequence) // 2]


def pick_loop_target(
    sequence: Sequence,
    seed: int,
    step_index: int,
    min_value: int,
    max_value: int,
) -> int:
    """
    Pure, reproducible choice of the next auto-loop target.

    Draws a uniform index from a stream seeded with
    seed * 3 + 7 + step_index.  If no element can be selected (empty
    sequence) falls back to a random value inside [min_value, max_value].
    """
    rng   = random.Random(seed * 3 + 7 + step_index)
    index = math.floor(rng.random() * len(sequence))
    if 0 <= index < len(sequence):
        return sequence[index]
    return _round_half_up(min_value + rng.random() * (max_value - min_value))
