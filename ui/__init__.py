"""
ui/
---
Presentation layer.

    from ui import render_sequence
    from ui import playback_controls, settings_panel, …
"""

from ui.canvas import render_sequence, cell_state, CanvasConfig

from ui.controls import (
    status_badge,
    playback_controls,
    target_form,
    settings_panel,
    trace_table,
    analytics_panel,
    comparison_panel,
    pseudocode_viewer,
    explanation_panel,
    step_explanation,
)

__all__ = [
    "render_sequence",
    "cell_state",
    "CanvasConfig",
    "status_badge",
    "playback_controls",
    "target_form",
    "settings_panel",
    "trace_table",
    "analytics_panel",
    "comparison_panel",
    "pseudocode_viewer",
    "explanation_panel",
    "step_explanation",
]
