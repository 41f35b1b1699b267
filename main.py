"""
main.py — Binary Search Visualizer Flask App
=============================================
The web server that powers the visualizer.

Routes:
  GET  /                       – main UI
  GET  /api/state              – current playback state (polled; fires due timers)
  POST /api/start              – start the search from step 0
  POST /api/step/next          – advance one step
  POST /api/step/prev          – rewind one step
  POST /api/step/goto          – jump to step N
  POST /api/play               – toggle play/pause
  POST /api/reset              – back to idle
  POST /api/target             – search for a new target
  POST /api/regenerate         – new array (new seed)
  POST /api/settings           – update one or more settings
  POST /api/settings/reset     – restore default settings
  GET  /api/compare            – iterative vs recursive on the current input
  GET  /api/export             – serialisable snapshot of the current run (+ analytics card)

State management:
  The settings snapshot lives in the Flask session (the browser keeps it
  between visits).  Each session also owns one PlaybackController, kept in
  a server-side registry because its timers cannot be serialised.  The
  registry holds at most MAX_CONTROLLERS entries; the least recently used
  controller is closed and dropped first.  Each controller runs on a
  MonotonicScheduler that is ticked on every request, so the client drives
  timed playback by polling /api/state.
"""

from flask import Flask, render_template_string, request, jsonify, session
import logging
import secrets
import sys
import os
import threading
import uuid
from collections import OrderedDict
from dataclasses import asdict

# add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import Settings, SettingsError, DEFAULT_SETTINGS, random_seed
from search import list_variants
from engine import PlaybackController, MonotonicScheduler, Recorder, compare_variants
from ui import (
    render_sequence,
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

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = secrets.token_hex(32)
app.config.setdefault("SCHEDULER_FACTORY", MonotonicScheduler)
app.config.setdefault("MAX_CONTROLLERS", 256)

# session id → controller, least recently used first
CONTROLLERS: "OrderedDict[str, PlaybackController]" = OrderedDict()
_LOCK = threading.RLock()


# ---------------------------------------------------------------------------
# Session State Helpers
# ---------------------------------------------------------------------------
def get_settings() -> Settings:
    """Deserialise settings from session, or fall back to defaults."""
    return Settings.from_dict(session.get("settings"))


def save_settings(settings: Settings):
    session["settings"] = settings.to_dict()


def get_controller() -> PlaybackController:
    """The caller's controller, created on first use.  Fires due timers."""
    sid = session.get("sid")
    if sid is None:
        sid = session["sid"] = uuid.uuid4().hex
    ctrl = CONTROLLERS.get(sid)
    if ctrl is None:
        ctrl = PlaybackController(get_settings(), app.config["SCHEDULER_FACTORY"]())
        CONTROLLERS[sid] = ctrl
        logger.info("new controller for session %s", sid[:8])
        _evict_idle()
    else:
        CONTROLLERS.move_to_end(sid)
    tick = getattr(ctrl.scheduler, "tick", None)
    if tick is not None:
        tick()
    return ctrl


def _evict_idle() -> None:
    """Close and drop the least recently used controllers beyond the cap."""
    while len(CONTROLLERS) > app.config["MAX_CONTROLLERS"]:
        sid, stale = CONTROLLERS.popitem(last=False)
        stale.close()
        logger.info("evicted controller for session %s", sid[:8])


def state_payload(ctrl: PlaybackController) -> dict:
    """Controller state plus the rendered fragments the page swaps in."""
    data = ctrl.to_dict()
    info = ctrl.variant_info
    step = ctrl.current_step
    data.update({
        "svg":         render_sequence(ctrl.sequence, step, ctrl.next_step, ctrl.settings),
        "badge":       status_badge(ctrl.status),
        "playback":    playback_controls(ctrl.state, len(ctrl.trace)),
        "trace_html":  trace_table(ctrl.trace, ctrl.current_step_index),
        "pseudocode":  pseudocode_viewer(
            pseudocode_lines=info.pseudocode if info else [],
            current_line=data["pseudocode_line"],
            variant_label=info.label if info else "",
        ),
        "explanation": explanation_panel(step_explanation(step, ctrl.target)),
    })
    return data


# ---------------------------------------------------------------------------
# Main UI Route
# ---------------------------------------------------------------------------
@app.route("/")
def index():
    with _LOCK:
        ctrl  = get_controller()
        state = state_payload(ctrl)
        html  = render_template_string(INDEX_TEMPLATE,
            svg=state["svg"],
            badge=state["badge"],
            playback=state["playback"],
            target=target_form(ctrl.target),
            settings=settings_panel(ctrl.settings, list_variants()),
            trace=state["trace_html"],
            pseudocode=state["pseudocode"],
            explanation=state["explanation"],
        )
    return html


@app.route("/api/state")
def api_state():
    with _LOCK:
        return jsonify(state_payload(get_controller()))


# ---------------------------------------------------------------------------
# API: Playback
# ---------------------------------------------------------------------------
@app.route("/api/start", methods=["POST"])
def api_start():
    with _LOCK:
        ctrl = get_controller()
        ctrl.start()
        return jsonify(state_payload(ctrl))


@app.route("/api/step/next", methods=["POST"])
def api_step_next():
    with _LOCK:
        ctrl = get_controller()
        ctrl.step_forward()
        return jsonify(state_payload(ctrl))


@app.route("/api/step/prev", methods=["POST"])
def api_step_prev():
    with _LOCK:
        ctrl = get_controller()
        ctrl.step_backward()
        return jsonify(state_payload(ctrl))


@app.route("/api/step/goto", methods=["POST"])
def api_step_goto():
    data = request.get_json(silent=True) or {}
    try:
        idx = int(data.get("index", 0))
    except (TypeError, ValueError):
        return jsonify({"error": "Invalid step index"}), 400

    with _LOCK:
        ctrl = get_controller()
        if not ctrl.goto_step(idx):
            return jsonify({"error": "Invalid step index"}), 400
        return jsonify(state_payload(ctrl))


@app.route("/api/play", methods=["POST"])
def api_play():
    with _LOCK:
        ctrl = get_controller()
        ctrl.toggle_play()
        return jsonify(state_payload(ctrl))


@app.route("/api/reset", methods=["POST"])
def api_reset():
    with _LOCK:
        ctrl = get_controller()
        ctrl.reset()
        return jsonify(state_payload(ctrl))


# ---------------------------------------------------------------------------
# API: Target & Array
# ---------------------------------------------------------------------------
@app.route("/api/target", methods=["POST"])
def api_target():
    data = request.get_json(silent=True) or {}
    with _LOCK:
        ctrl = get_controller()
        if not ctrl.retarget(data.get("target")):
            return jsonify({"error": "Target must be a finite number"}), 400
        return jsonify(state_payload(ctrl))


@app.route("/api/regenerate", methods=["POST"])
def api_regenerate():
    data = request.get_json(silent=True) or {}
    seed = data.get("seed")
    with _LOCK:
        ctrl = get_controller()
        try:
            ctrl.regenerate(random_seed() if seed is None else seed)
        except SettingsError as e:
            return jsonify({"error": str(e)}), 400
        save_settings(ctrl.settings)
        return jsonify(state_payload(ctrl))


# ---------------------------------------------------------------------------
# API: Config Changes
# ---------------------------------------------------------------------------
@app.route("/api/settings", methods=["POST"])
def api_settings():
    data = request.get_json(silent=True) or {}
    values = data.get("values")
    if values is None and "key" in data:
        values = {data["key"]: data.get("value")}
    if not isinstance(values, dict):
        return jsonify({"error": "Expected {key, value} or {values: {...}}"}), 400

    with _LOCK:
        ctrl = get_controller()
        try:
            new = ctrl.settings.update_many(values)
        except SettingsError as e:
            return jsonify({"error": str(e)}), 400
        ctrl.apply_settings(new)
        save_settings(new)
        return jsonify(state_payload(ctrl))


@app.route("/api/settings/reset", methods=["POST"])
def api_settings_reset():
    with _LOCK:
        ctrl = get_controller()
        ctrl.apply_settings(DEFAULT_SETTINGS)
        save_settings(DEFAULT_SETTINGS)
        return jsonify(state_payload(ctrl))


# ---------------------------------------------------------------------------
# API: Analytics
# ---------------------------------------------------------------------------
@app.route("/api/compare")
def api_compare():
    with _LOCK:
        ctrl = get_controller()
        comp = compare_variants(ctrl.sequence, ctrl.target)
    return jsonify({**asdict(comp), "html": comparison_panel(comp)})


@app.route("/api/export")
def api_export():
    with _LOCK:
        ctrl = get_controller()
        rec = Recorder()
        rec.start(ctrl.settings.variant, ctrl.sequence, ctrl.target)
        rec.run_to_completion()
        payload = rec.export()
        payload["settings"] = ctrl.settings.to_dict()
        payload["html"] = analytics_panel(rec.get_metrics())
    return jsonify(payload)


# ---------------------------------------------------------------------------
# HTML Template
# ---------------------------------------------------------------------------
INDEX_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Binary Search Playground</title>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }

    :root {
      --bg-dark: #0d1117;
      --bg-darker: #010409;
      --bg-panel: #161b22;
      --border: #30363d;
      --text-primary: #e6edf3;
      --text-secondary: #7d8590;
      --accent-cyan: #0ea5e9;
      --accent-emerald: #10b981;
      --accent-amber: #f59e0b;
      --accent-rose: #f43f5e;
    }

    body {
      font-family: -apple-system, BlinkMacSystemFont, sans-serif;
      background: var(--bg-darker);
      color: var(--text-primary);
      display: flex;
      min-height: 100vh;
    }

    #sidebar {
      width: 320px;
      background: var(--bg-dark);
      border-right: 1px solid var(--border);
      padding: 20px 16px;
      overflow-y: auto;
    }

    #main { flex: 1; display: flex; flex-direction: column; gap: 16px; padding: 20px; }

    .panel {
      background: var(--bg-panel);
      border: 1px solid var(--border);
      border-radius: 12px;
      padding: 14px;
      margin-bottom: 14px;
    }
    .panel h3 { font-size: 14px; margin-bottom: 10px; }
    .panel label { display: block; font-size: 13px; margin: 6px 0; color: var(--text-secondary); }
    .panel input[type=number], .panel select { width: 100%; padding: 4px; background: var(--bg-dark);
      color: var(--text-primary); border: 1px solid var(--border); border-radius: 6px; }

    button { background: var(--bg-dark); color: var(--text-primary); border: 1px solid var(--border);
      border-radius: 6px; padding: 6px 10px; cursor: pointer; }
    button:disabled { opacity: 0.4; cursor: default; }
    .btn-primary { background: var(--accent-cyan); border-color: var(--accent-cyan); }
    .button-row { display: flex; gap: 6px; margin-bottom: 8px; }
    #scrubber { width: 100%; }

    .badge { display: inline-block; padding: 4px 14px; border-radius: 999px; font-size: 12px;
      letter-spacing: 0.15em; text-transform: uppercase; background: rgba(14,165,233,0.15); color: var(--accent-cyan); }
    .badge.found { background: rgba(16,185,129,0.15); color: var(--accent-emerald); }
    .badge.not-found { background: rgba(244,63,94,0.15); color: var(--accent-rose); }
    .pending-badge { color: var(--accent-amber); font-size: 12px; }

    .trace-table { width: 100%; border-collapse: collapse; font-size: 13px; }
    .trace-table td, .trace-table th { padding: 4px 8px; border-bottom: 1px solid var(--border); text-align: left; }
    .trace-table tr.current { background: rgba(14,165,233,0.15); }

    #bottom-panel { display: grid; grid-template-columns: 1fr 1fr; gap: 16px; }
    .code-block { font-family: monospace; font-size: 13px; background: var(--bg-panel);
      border: 1px solid var(--border); border-radius: 12px; padding: 12px; white-space: pre; }
    .code-line.highlight { background: rgba(14,165,233,0.25); }
    .explanation-text { background: var(--bg-panel); border: 1px solid var(--border);
      border-radius: 12px; padding: 12px; font-size: 14px; line-height: 1.5; }
    .placeholder { color: var(--text-secondary); }
  </style>
</head>
<body>
  <div id="sidebar">
    <div id="target-panel">{{ target|safe }}</div>
    <div id="playback">{{ playback|safe }}</div>
    <div id="settings">{{ settings|safe }}</div>
    <div id="analytics"></div>
    <div id="comparison"></div>
  </div>

  <div id="main">
    <div>
      <span id="badge">{{ badge|safe }}</span>
      <h1>Binary Search Playground</h1>
    </div>
    <div id="canvas-svg">{{ svg|safe }}</div>
    <div id="bottom-panel">
      <div id="pseudocode">{{ pseudocode|safe }}</div>
      <div id="explanation">{{ explanation|safe }}</div>
    </div>
    <div id="trace">{{ trace|safe }}</div>
  </div>

  <script>
    let polling = null;

    async function post(url, body = {}) {
      const res = await fetch(url, {
        method: 'POST',
        headers: {'Content-Type': 'application/json'},
        body: JSON.stringify(body),
      });
      return res.json();
    }

    function apply(data) {
      if (data.error) { alert(data.error); return; }
      document.getElementById('canvas-svg').innerHTML = data.svg;
      document.getElementById('badge').innerHTML = data.badge;
      document.getElementById('playback').innerHTML = data.playback;
      document.getElementById('trace').innerHTML = data.trace_html;
      document.getElementById('pseudocode').innerHTML = data.pseudocode;
      document.getElementById('explanation').innerHTML = data.explanation;
      if (data.target !== null) document.getElementById('target-input').value = data.target;
      bindPlayback();
      const busy = data.is_playing || data.pending_restart
        || (data.settings.loop_on_complete && data.status !== 'idle');
      if (busy && !polling) {
        polling = setInterval(async () => apply(await (await fetch('/api/state')).json()), 50);
      } else if (!busy && polling) {
        clearInterval(polling);
        polling = null;
      }
    }

    function bindPlayback() {
      const on = (id, fn) => document.getElementById(id)?.addEventListener('click', fn);
      on('btn-start', async () => apply(await post('/api/start')));
      on('btn-prev',  async () => apply(await post('/api/step/prev')));
      on('btn-next',  async () => apply(await post('/api/step/next')));
      on('btn-play',  async () => apply(await post('/api/play')));
      on('btn-reset', async () => apply(await post('/api/reset')));
      document.getElementById('scrubber')?.addEventListener('change', async (e) => {
        apply(await post('/api/step/goto', {index: +e.target.value}));
      });
    }

    bindPlayback();

    document.getElementById('btn-target').addEventListener('click', async () => {
      apply(await post('/api/target', {target: document.getElementById('target-input').value}));
      refreshAnalytics();
    });
    document.getElementById('target-input').addEventListener('keydown', async (e) => {
      if (e.key !== 'Enter') return;
      apply(await post('/api/target', {target: e.target.value}));
      refreshAnalytics();
    });
    document.getElementById('btn-regenerate').addEventListener('click', async () => {
      apply(await post('/api/regenerate'));
      refreshAnalytics();
    });
    document.getElementById('btn-settings-reset').addEventListener('click', async () => {
      apply(await post('/api/settings/reset'));
      location.reload();
    });

    document.querySelectorAll('.setting').forEach((el) => {
      el.addEventListener('change', async (e) => {
        const value = e.target.type === 'checkbox' ? e.target.checked : e.target.value;
        apply(await post('/api/settings', {key: e.target.dataset.key, value}));
        refreshAnalytics();
      });
    });

    async function refreshAnalytics() {
      const comp = await (await fetch('/api/compare')).json();
      document.getElementById('comparison').innerHTML = comp.html;
      const run = await (await fetch('/api/export')).json();
      document.getElementById('analytics').innerHTML = run.html;
    }

    refreshAnalytics();
  </script>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print("=" * 60)
    print("  Binary Search Visualizer")
    print("  Starting Flask server...")
    print("  Open http://localhost:5000")
    print("=" * 60)
    app.run(debug=True, host="0.0.0.0", port=5000)
