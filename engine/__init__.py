"""
engine/
-------
Playback & recording layer.

    from engine import PlaybackController, VirtualScheduler, Recorder, compare
"""

from engine.scheduler  import Scheduler, Timer, VirtualScheduler, MonotonicScheduler
from engine.controller import PlaybackController, PlaybackState, Status, STATUS_LABELS, TRANSITIONS
from engine.recorder   import Recorder, RunMetrics, ComparisonResult, compare, compare_variants

__all__ = [
    "Scheduler",
    "Timer",
    "VirtualScheduler",
    "MonotonicScheduler",
    "PlaybackController",
    "PlaybackState",
    "Status",
    "STATUS_LABELS",
    "TRANSITIONS",
    "Recorder",
    "RunMetrics",
    "ComparisonResult",
    "compare",
    "compare_variants",
]
