"""
sequence/
---------
Data layer.  Public API:

    from sequence import generate, middle_value, pick_loop_target
"""

from sequence.generator import Sequence, generate, middle_value, pick_loop_target

__all__ = [
    "Sequence",
    "generate",
    "middle_value",
    "pick_loop_target",
]
