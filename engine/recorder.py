"""
recorder.py — Run Recorder & Analytics
========================================
Records a complete search run (all Steps), then computes the analytics
metrics the UI needs for the Analytics panel and Comparison Mode.

Usage:
    rec = Recorder()
    rec.start(variant="recursive", sequence=seq, target=14)
    rec.run_to_completion()          # exhausts the generator
    metrics = rec.get_metrics()      # the analytics card
    rec.export()                     # serialisable snapshot for save/replay

Comparison Mode:
    The UI holds two Recorders (one per variant), runs both to completion
    on the SAME sequence and target, then calls compare(rec1, rec2) →
    ComparisonResult.  Both variants are expected to agree step for step;
    `equivalent` and `first_divergence` report whether they do.
"""

import logging
import time
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any

from search import Direction, Step, VariantInfo, get_variant

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metrics dataclass — what the Analytics panel renders
# ---------------------------------------------------------------------------
@dataclass
class RunMetrics:
    variant:       str            = ""
    variant_label: str            = ""
    target:        Any            = None
    sequence_size: int            = 0
    total_steps:   int            = 0       # number of Steps yielded
    comparisons:   int            = 0       # probes that read sequence[mid]
    max_depth:     int            = 0
    found:         bool           = False
    found_index:   Optional[int]  = None
    wall_time_ms:  float          = 0.0     # wall-clock time to run to completion


# ---------------------------------------------------------------------------
# ComparisonResult — side-by-side analytics
# ---------------------------------------------------------------------------
@dataclass
class ComparisonResult:
    left:             RunMetrics    = field(default_factory=RunMetrics)
    right:            RunMetrics    = field(default_factory=RunMetrics)
    equivalent:       bool          = True
    first_divergence: Optional[int] = None   # first index whose step differs


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------
class Recorder:
    """
    Attributes:
        steps   : Full list of Steps from the run.
        metrics : Computed RunMetrics (available after run_to_completion).
    """

    def __init__(self):
        self.steps:   List[Step]           = []
        self.metrics: Optional[RunMetrics] = None

        self._info:      Optional[VariantInfo] = None
        self._sequence:  tuple                 = ()
        self._target:    Any                   = None
        self._generator                        = None

    # ------------------------------------------------------------------
    # Setup & run
    # ------------------------------------------------------------------
    def start(self, variant: str, sequence, target) -> None:
        """Initialise the step generator for this run."""
        info = get_variant(variant)
        if info is None:
            raise ValueError(f"Unknown variant: {variant}")

        self._info      = info
        self._sequence  = tuple(sequence)
        self._target    = target
        self.steps      = []
        self.metrics    = None
        self._generator = info.fn(self._sequence, target)

    def run_to_completion(self) -> RunMetrics:
        """Exhaust the generator, record every step, compute metrics."""
        if self._generator is None:
            raise RuntimeError("Call start() first.")

        started = time.monotonic()
        for step in self._generator:
            self.record_step(step)
        self._generator = None
        wall_ms = (time.monotonic() - started) * 1000

        self.metrics = self._compute_metrics(wall_ms)
        logger.debug("recorded %s run: %d steps", self._info.key, len(self.steps))
        return self.metrics

    def get_metrics(self) -> Optional[RunMetrics]:
        return self.metrics

    def record_step(self, step: Step) -> None:
        self.steps.append(step)

    # ------------------------------------------------------------------
    # Export (serialisable snapshot)
    # ------------------------------------------------------------------
    def export(self) -> Dict[str, Any]:
        return {
            "variant":  self._info.key if self._info else "",
            "target":   self._target,
            "sequence": list(self._sequence),
            "metrics":  asdict(self.metrics) if self.metrics else {},
            "steps":    [s.to_dict() for s in self.steps],
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _compute_metrics(self, wall_ms: float) -> RunMetrics:
        info = self._info
        last = self.steps[-1] if self.steps else None
        found = last is not None and last.direction is Direction.FOUND

        return RunMetrics(
            variant=info.key if info else "",
            variant_label=info.label if info else "",
            target=self._target,
            sequence_size=len(self._sequence),
            total_steps=len(self.steps),
            comparisons=sum(1 for s in self.steps if s.value is not None),
            max_depth=max((s.depth for s in self.steps), default=0),
            found=found,
            found_index=last.mid if found else None,
            wall_time_ms=round(wall_ms, 3),
        )


# ---------------------------------------------------------------------------
# Comparison helper
# ---------------------------------------------------------------------------
def compare(left: Recorder, right: Recorder) -> ComparisonResult:
    """Given two completed Recorders, produce a ComparisonResult."""
    l = left.metrics  or RunMetrics()
    r = right.metrics or RunMetrics()

    divergence = None
    for i in range(max(len(left.steps), len(right.steps))):
        a = left.steps[i]  if i < len(left.steps)  else None
        b = right.steps[i] if i < len(right.steps) else None
        if a != b:
            divergence = i
            break

    return ComparisonResult(
        left=l,
        right=r,
        equivalent=divergence is None,
        first_divergence=divergence,
    )


def compare_variants(sequence, target, left: str = "iterative", right: str = "recursive") -> ComparisonResult:
    """Run two variants over the same input and compare them."""
    recorders = []
    for key in (left, right):
        rec = Recorder()
        rec.start(key, sequence, target)
        rec.run_to_completion()
        recorders.append(rec)
    return compare(*recorders)
