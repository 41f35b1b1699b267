"""
controls.py — UI Control Panels
=================================
Every UI panel is a pure function that takes state and returns HTML.

Panels:
  • status_badge            – idle / searching / found / not-found pill
  • playback_controls       – start/prev/play/next/reset + step counter
  • target_form             – target input + "new array" button
  • settings_panel          – size, range, seed, delay, toggles, variant
  • trace_table             – every step, current row highlighted
  • analytics_panel         – steps, comparisons, depth, outcome
  • comparison_panel        – iterative vs recursive side by side
  • pseudocode_viewer       – with live line highlighting
  • explanation_panel       – "why this step happened"

Design:
  - All panels are stateless render functions.
  - State is passed in as kwargs.
  - Output is raw HTML strings (no templating engine).
  - The main app stitches them together.
"""

from html import escape
from typing import Optional, List

from config import Settings
from engine import PlaybackState, Status, STATUS_LABELS, RunMetrics, ComparisonResult
from search import Step, VariantInfo


# ---------------------------------------------------------------------------
# Status Badge
# ---------------------------------------------------------------------------
def status_badge(status: Status = Status.IDLE) -> str:
    return f'<span id="status-badge" class="badge {status.value}">{STATUS_LABELS[status]}</span>'


# ---------------------------------------------------------------------------
# Playback Controls
# ---------------------------------------------------------------------------
def playback_controls(state: PlaybackState, total_steps: int = 0) -> str:
    play_icon  = "⏸" if state.is_playing else "▶"
    play_label = "Pause" if state.is_playing else "Play"
    finished   = state.status.is_terminal
    disabled   = "disabled" if finished or not total_steps else ""
    pending    = ' <span class="pending-badge">restarting…</span>' if state.pending_restart else ""

    return f"""
    <div class="panel playback-controls">
      <h3>⏯ Playback</h3>
      <div class="button-row">
        <button id="btn-start" title="Start search">⏮ Start</button>
        <button id="btn-prev" title="Previous step">◀</button>
        <button id="btn-play" title="{play_label}" {disabled}>{play_icon}</button>
        <button id="btn-next" title="Next step">▶</button>
        <button id="btn-reset" title="Reset">⟲</button>
      </div>
      <div class="step-info">
        Step <span id="current-step">{state.current_step_index + 1}</span> / <span id="total-steps">{total_steps}</span>
        {pending}
      </div>
      <input type="range" id="scrubber" min="0" max="{max(total_steps - 1, 0)}"
             value="{max(state.current_step_index, 0)}" {'disabled' if not total_steps else ''}>
    </div>
    """


# ---------------------------------------------------------------------------
# Target Form
# ---------------------------------------------------------------------------
def target_form(target=None) -> str:
    value = "" if target is None else escape(str(target))
    return f"""
    <div class="panel target-form">
      <h3>🎯 Target</h3>
      <input type="number" id="target-input" value="{value}">
      <button id="btn-target" class="btn-primary">Search</button>
      <button id="btn-regenerate" class="btn-secondary">New array</button>
    </div>
    """


# ---------------------------------------------------------------------------
# Settings Panel
# ---------------------------------------------------------------------------
def settings_panel(settings: Settings, variants: List[VariantInfo]) -> str:
    options = []
    for v in variants:
        sel = 'selected' if v.key == settings.variant else ''
        options.append(f'<option value="{v.key}" {sel}>{v.label} — space {v.complexity_space}</option>')

    def number(key, label, value, lo="", hi=""):
        return (f'<label>{label}: <input type="number" class="setting" data-key="{key}" '
                f'value="{value}" min="{lo}" max="{hi}"></label>')

    def toggle(key, label, on):
        return (f'<label><input type="checkbox" class="setting" data-key="{key}" '
                f'{"checked" if on else ""}> {label}</label>')

    return f"""
    <div class="panel settings-panel">
      <h3>⚙ Settings</h3>
      {number("array_size", "Array size", settings.array_size, 4, 36)}
      {number("min_value", "Min value", settings.min_value)}
      {number("max_value", "Max value", settings.max_value)}
      {number("seed", "Seed", settings.seed, 0, 99999)}
      {number("step_delay", "Step delay (ms)", settings.step_delay, 120, 2000)}
      <label>Variant:
        <select class="setting" data-key="variant">{''.join(options)}</select>
      </label>
      {toggle("auto_play", "Auto-play", settings.auto_play)}
      {toggle("loop_on_complete", "Loop with new targets", settings.loop_on_complete)}
      {toggle("ease_motion", "Reduced motion", settings.ease_motion)}
      {toggle("peek_next_step", "Peek next step", settings.peek_next_step)}
      {toggle("show_indices", "Show indices", settings.show_indices)}
      {toggle("show_bounds", "Show low/high markers", settings.show_bounds)}
      <button id="btn-settings-reset" class="btn-secondary">Restore defaults</button>
    </div>
    """


# ---------------------------------------------------------------------------
# Trace Table
# ---------------------------------------------------------------------------
def trace_table(trace, current_index: int = -1) -> str:
    if not trace:
        return '<p class="placeholder">No steps — the sequence is empty.</p>'

    rows = []
    for i, step in enumerate(trace):
        cls = 'current' if i == current_index else ''
        value = "—" if step.value is None else step.value
        rows.append(
            f'<tr class="{cls} {step.direction.value}" data-index="{i}">'
            f'<td>{i + 1}</td><td>{step.low}</td><td>{step.high}</td><td>{step.mid}</td>'
            f'<td>{value}</td><td>{step.depth}</td><td>{step.label}</td></tr>'
        )
    return f"""
    <table class="trace-table">
      <thead>
        <tr><th>#</th><th>low</th><th>high</th><th>mid</th><th>value</th><th>depth</th><th>action</th></tr>
      </thead>
      <tbody>
        {''.join(rows)}
      </tbody>
    </table>
    """


# ---------------------------------------------------------------------------
# Analytics Panel
# ---------------------------------------------------------------------------
def analytics_panel(metrics: Optional[RunMetrics] = None) -> str:
    if not metrics:
        return """
        <div class="panel analytics-panel">
          <h3>📊 Analytics</h3>
          <p class="placeholder">Start a search to see metrics.</p>
        </div>
        """

    outcome = f"✅ Found at index {metrics.found_index}" if metrics.found else "❌ Not Found"
    return f"""
    <div class="panel analytics-panel">
      <h3>📊 Analytics — {metrics.variant_label}</h3>
      <table>
        <tr><td>Target:</td><td><strong>{metrics.target}</strong></td></tr>
        <tr><td>Total Steps:</td><td><strong>{metrics.total_steps}</strong></td></tr>
        <tr><td>Comparisons:</td><td><strong>{metrics.comparisons}</strong></td></tr>
        <tr><td>Max Depth:</td><td><strong>{metrics.max_depth}</strong></td></tr>
        <tr><td>Wall Time:</td><td><strong>{metrics.wall_time_ms:.3f} ms</strong></td></tr>
        <tr><td>Outcome:</td><td><strong>{outcome}</strong></td></tr>
      </table>
    </div>
    """


# ---------------------------------------------------------------------------
# Comparison Panel
# ---------------------------------------------------------------------------
def comparison_panel(comp: Optional[ComparisonResult] = None) -> str:
    if not comp:
        return ""

    l, r = comp.left, comp.right
    verdict = ("✅ Identical traces" if comp.equivalent
               else f"⚠️ Traces diverge at step {comp.first_divergence + 1}")

    def row(label, a, b):
        return f"<tr><td>{label}</td><td>{a}</td><td>{b}</td></tr>"

    return f"""
    <div class="panel comparison-panel">
      <h3>⚖ {l.variant_label} vs {r.variant_label}</h3>
      <table>
        <thead><tr><th></th><th>{l.variant_label}</th><th>{r.variant_label}</th></tr></thead>
        <tbody>
          {row("Steps", l.total_steps, r.total_steps)}
          {row("Comparisons", l.comparisons, r.comparisons)}
          {row("Max depth", l.max_depth, r.max_depth)}
          {row("Found", l.found, r.found)}
        </tbody>
      </table>
      <p class="verdict">{verdict}</p>
    </div>
    """


# ---------------------------------------------------------------------------
# Pseudocode Viewer
# ---------------------------------------------------------------------------
def pseudocode_viewer(
    pseudocode_lines: List[str],
    current_line: int = -1,
    variant_label: str = "",
) -> str:
    if not pseudocode_lines:
        return """
        <div class="code-block">
          <div class="placeholder">Select a variant to view pseudocode</div>
        </div>
        """

    lines_html = []
    for i, line in enumerate(pseudocode_lines):
        highlight = 'highlight' if i == current_line else ''
        lines_html.append(f'<div class="code-line {highlight}" data-line="{i}">{escape(line)}</div>')

    return f"""
    <div class="code-block" title="{escape(variant_label)}">
      {''.join(lines_html)}
    </div>
    """


# ---------------------------------------------------------------------------
# Explanation Panel
# ---------------------------------------------------------------------------
def explanation_panel(explanation: str = "") -> str:
    if not explanation:
        explanation = "▶ Press <strong>Start</strong> to watch the low, mid and high pointers move."
    return f"""<div class="explanation-text">{explanation}</div>"""


def step_explanation(step: Optional[Step], target) -> str:
    return escape(step.explanation(target)) if step else ""
