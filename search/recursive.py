"""
recursive.py — Recursive Binary Search
=======================================
Divide-and-conquer formulation.  Each call yields its own probe and then
delegates to the chosen half with `yield from`, so the step stream is the
same shape as the iterative loop's.

A match stops the recursion immediately; an emptied window is the base
case and yields the terminal MISS step.
"""

from typing import Generator, List

from search.step import Direction, Step, miss, probe


PSEUDOCODE: List[str] = [
    "def search(a, target, low, high):",        # 0
    "    if low > high: return NOT FOUND",      # 1
    "    mid ← (low + high) // 2",              # 2
    "    if a[mid] == target: return mid",      # 3
    "    if a[mid] > target:",                  # 4
    "        return search(a, target, low, mid - 1)",   # 5
    "    return search(a, target, mid + 1, high)",      # 6
]

LINE_FOR_DIRECTION = {
    Direction.MISS:  1,
    Direction.FOUND: 3,
    Direction.LEFT:  5,
    Direction.RIGHT: 6,
}


def recursive_search(sequence, target) -> Generator[Step, None, None]:
    """Yields Step snapshots for every call of the recursion."""
    if not sequence:
        return
    yield from _visit(sequence, target, 0, len(sequence) - 1, 0)


def _visit(sequence, target, low: int, high: int, depth: int) -> Generator[Step, None, None]:
    if low > high:
        yield miss(low, high, depth)
        return

    step = probe(sequence, target, low, high, depth)
    yield step

    if step.direction is Direction.LEFT:
        yield from _visit(sequence, target, low, step.mid - 1, depth + 1)
    elif step.direction is Direction.RIGHT:
        yield from _visit(sequence, target, step.mid + 1, high, depth + 1)
