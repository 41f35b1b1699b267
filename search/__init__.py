"""
search/__init__.py — Variant Registry & Trace Builder
======================================================
Single source of truth for every binary-search formulation the
visualizer knows about.

    from search import REGISTRY, get_variant, build_trace

REGISTRY is a dict:
    {
        "iterative": VariantInfo(key, label, fn, pseudocode, …),
        "recursive": VariantInfo(…),
    }

Both variants must yield identical step streams for the same input;
build_trace() materialises either one into an immutable Trace.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from search.step import Direction, Step, Trace, DIRECTION_LABELS
from search.iterative import iterative_search as _iterative, PSEUDOCODE as _it_pc, \
    LINE_FOR_DIRECTION as _it_lines
from search.recursive import recursive_search as _recursive, PSEUDOCODE as _rec_pc, \
    LINE_FOR_DIRECTION as _rec_lines


# ---------------------------------------------------------------------------
# VariantInfo — metadata card for each formulation
# ---------------------------------------------------------------------------
@dataclass
class VariantInfo:
    key:              str                         # registry key, e.g. "iterative"
    label:            str                         # human label
    fn:               Callable                    # the step generator
    pseudocode:       List[str]                   # lines for the side-panel
    line_for:         Dict[Direction, int] = field(default_factory=dict)
    complexity_time:  str = "O(log n)"
    complexity_space: str = ""
    description:      str = ""

    def pseudocode_line(self, step: Optional[Step]) -> int:
        """Line to highlight for `step`, -1 when nothing is selected."""
        if step is None:
            return -1
        return self.line_for.get(step.direction, -1)


# ---------------------------------------------------------------------------
# THE REGISTRY
# ---------------------------------------------------------------------------
REGISTRY: Dict[str, VariantInfo] = {

    "iterative": VariantInfo(
        key="iterative", label="Iterative", fn=_iterative,
        pseudocode=_it_pc, line_for=_it_lines,
        complexity_space="O(1)",
        description="A while-loop narrows [low, high] in place.",
    ),

    "recursive": VariantInfo(
        key="recursive", label="Recursive", fn=_recursive,
        pseudocode=_rec_pc, line_for=_rec_lines,
        complexity_space="O(log n)",
        description="Each call handles one half; the call stack holds the depth.",
    ),
}


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------
def get_variant(key: str) -> Optional[VariantInfo]:
    """Return VariantInfo by key, or None."""
    return REGISTRY.get(key)


def list_variants() -> List[VariantInfo]:
    """Return all registered variants in insertion order."""
    return list(REGISTRY.values())


def build_trace(sequence, target, variant: str = "iterative") -> Trace:
    """Run `variant` over `sequence` and collect every Step it yields."""
    info = get_variant(variant)
    if info is None:
        raise ValueError(f"Unknown variant: {variant}")
    return tuple(info.fn(sequence, target))


__all__ = [
    "Direction",
    "DIRECTION_LABELS",
    "Step",
    "Trace",
    "VariantInfo",
    "REGISTRY",
    "get_variant",
    "list_variants",
    "build_trace",
]
