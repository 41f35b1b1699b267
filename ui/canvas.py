"""
canvas.py — SVG Sequence Renderer
==================================
Pure rendering function: sequence + Step → SVG string.

The renderer consumes:
  • sequence   – the generated values, one cell each
  • step       – the current Step snapshot (window, midpoint, outcome)
  • next_step  – optional peek at the following probe
  • settings   – which decorations to draw (indices, bounds)
  • config     – visual config (canvas size, colors, fonts, …)

And produces an SVG string ready to inject into the DOM.

Design decisions:
  - NO mutation.  The caller passes in everything it needs and gets back
    a string.
  - Cell coloring is a dict lookup: cell state → hex color.  Cells
    outside [low, high] are dimmed so the shrinking window is obvious.
"""

from typing import Dict, Optional

from config import Settings, DEFAULT_SETTINGS
from search import Direction, Step


# ---------------------------------------------------------------------------
# Visual Config — color palette, dimensions, fonts
# ---------------------------------------------------------------------------
class CanvasConfig:
    # canvas
    width:  int = 900
    height: int = 200
    bg:     str = "#0d1117"

    # cell fill by state
    cell_colors: Dict[str, str] = {
        "idle":      "#1c2128",   # dark grey
        "window":    "#164e63",   # deep teal, still in play
        "discarded": "#0d1117",   # faded, ruled out
        "mid":       "#0ea5e9",   # cyan, being inspected
        "found":     "#10b981",   # emerald
        "miss":      "#f43f5e",   # rose
    }

    cell_stroke:       str = "#30363d"
    cell_peek_stroke:  str = "#f59e0b"   # amber outline on the next midpoint
    cell_max_width:    int = 64
    cell_height:       int = 56
    cell_gap:          int = 4
    margin:            int = 24

    value_color:       str = "#e6edf3"
    value_faded:       str = "#484f58"
    value_size:        int = 15
    index_color:       str = "#7d8590"
    index_size:        int = 11

    marker_colors: Dict[str, str] = {
        "low":  "#a855f7",
        "mid":  "#0ea5e9",
        "high": "#ec4899",
    }
    marker_size:       int = 12


CONFIG = CanvasConfig()


# ---------------------------------------------------------------------------
# Main Render Function
# ---------------------------------------------------------------------------
def render_sequence(
    sequence,
    step: Optional[Step] = None,
    next_step: Optional[Step] = None,
    settings: Settings = DEFAULT_SETTINGS,
    config: CanvasConfig = CONFIG,
) -> str:
    """
    Returns an SVG string.

    Args:
        sequence  : Values to draw.
        step      : Current search step (or None before the search starts).
        next_step : Peeked next step (outlined), or None.
        settings  : Renderer toggles (show_indices, show_bounds).
        config    : Visual config.
    """
    svg_parts = [
        f'<svg width="{config.width}" height="{config.height}" '
        f'viewBox="0 0 {config.width} {config.height}" '
        f'xmlns="http://www.w3.org/2000/svg" style="background: {config.bg};">',
        f'<rect width="{config.width}" height="{config.height}" fill="{config.bg}"/>',
    ]

    if not sequence:
        svg_parts.append(
            f'<text x="{config.width / 2}" y="{config.height / 2}" text-anchor="middle" '
            f'fill="{config.index_color}">Empty sequence</text>'
        )
        svg_parts.append("</svg>")
        return "\n".join(svg_parts)

    cell_w, x0 = _layout(len(sequence), config)
    y0 = 40

    for i, value in enumerate(sequence):
        x = x0 + i * (cell_w + config.cell_gap)
        svg_parts.append(_render_cell(i, value, x, y0, cell_w, step, next_step, settings, config))

    if step and settings.show_bounds:
        svg_parts.append(_render_markers(step, len(sequence), x0, y0, cell_w, config))

    svg_parts.append("</svg>")
    return "\n".join(svg_parts)


# ---------------------------------------------------------------------------
# Cell Rendering
# ---------------------------------------------------------------------------
def _layout(n: int, config: CanvasConfig):
    usable = config.width - 2 * config.margin - (n - 1) * config.cell_gap
    cell_w = min(config.cell_max_width, usable / n)
    total  = n * cell_w + (n - 1) * config.cell_gap
    return cell_w, (config.width - total) / 2


def cell_state(index: int, step: Optional[Step]) -> str:
    if step is None:
        return "idle"
    if step.value is not None and index == step.mid:
        if step.direction is Direction.FOUND:
            return "found"
        return "mid"
    if step.direction is Direction.MISS:
        return "discarded"
    if step.low <= index <= step.high:
        return "window"
    return "discarded"


def _render_cell(index, value, x, y, w, step, next_step, settings, config) -> str:
    state  = cell_state(index, step)
    fill   = config.cell_colors[state]
    stroke = config.cell_stroke
    stroke_width = 1
    if next_step is not None and next_step.value is not None and next_step.mid == index:
        stroke, stroke_width = config.cell_peek_stroke, 2

    text_color = config.value_faded if state == "discarded" else config.value_color
    cx = x + w / 2

    parts = [
        f'<g class="cell {state}" data-index="{index}">',
        f'  <rect x="{x:.1f}" y="{y}" width="{w:.1f}" height="{config.cell_height}" rx="6" '
        f'fill="{fill}" stroke="{stroke}" stroke-width="{stroke_width}"/>',
        f'  <text x="{cx:.1f}" y="{y + config.cell_height / 2 + 5}" text-anchor="middle" '
        f'font-size="{config.value_size}" fill="{text_color}">{value}</text>',
    ]
    if settings.show_indices:
        parts.append(
            f'  <text x="{cx:.1f}" y="{y - 8}" text-anchor="middle" '
            f'font-size="{config.index_size}" fill="{config.index_color}">{index}</text>'
        )
    parts.append("</g>")
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# low / mid / high markers
# ---------------------------------------------------------------------------
def _render_markers(step: Step, n: int, x0, y0, cell_w, config: CanvasConfig) -> str:
    parts = ['<g class="markers">']
    y = y0 + config.cell_height + 22
    placed: Dict[int, int] = {}

    for name, idx in (("low", step.low), ("mid", step.mid), ("high", step.high)):
        if not 0 <= idx < n:
            continue
        if name == "mid" and step.value is None:
            continue
        row = placed.get(idx, 0)
        placed[idx] = row + 1
        cx = x0 + idx * (cell_w + config.cell_gap) + cell_w / 2
        parts.append(
            f'<text x="{cx:.1f}" y="{y + row * 16}" text-anchor="middle" '
            f'font-size="{config.marker_size}" fill="{config.marker_colors[name]}">{name}</text>'
        )
    parts.append("</g>")
    return "\n".join(parts)
