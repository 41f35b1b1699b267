"""
iterative.py — Iterative Binary Search
=======================================
Generator-based loop formulation.  Yields a Step for every probe and one
terminal MISS step if the window empties without a match.

Pseudocode lines are 0-indexed and match the PSEUDOCODE constant
exported alongside the generator so the UI can highlight them live.
"""

from typing import Generator, List

from search.step import Direction, Step, miss, probe


PSEUDOCODE: List[str] = [
    "def binary_search(a, target):",          # 0
    "    low, high ← 0, len(a) - 1",          # 1
    "    while low <= high:",                 # 2
    "        mid ← (low + high) // 2",        # 3
    "        if a[mid] == target: return mid",  # 4
    "        elif a[mid] > target:",          # 5
    "            high ← mid - 1",             # 6
    "        else:",                          # 7
    "            low ← mid + 1",              # 8
    "    return NOT FOUND",                   # 9
]

LINE_FOR_DIRECTION = {
    Direction.FOUND: 4,
    Direction.LEFT:  6,
    Direction.RIGHT: 8,
    Direction.MISS:  9,
}


def iterative_search(sequence, target) -> Generator[Step, None, None]:
    """
    Yields Step snapshots for every probe of the loop.

    Args:
        sequence : Strictly increasing sequence to search.
        target   : Value to look for.
    """
    if not sequence:
        return

    low, high, depth = 0, len(sequence) - 1, 0

    while low <= high:
        step = probe(sequence, target, low, high, depth)
        yield step

        if step.direction is Direction.FOUND:
            return
        if step.direction is Direction.LEFT:
            high = step.mid - 1
        else:
            low = step.mid + 1
        depth += 1

    yield miss(low, high, depth)
