# app/ui.py
# The browser-facing page. Every button posts the whole form with an
# ``action`` value; the session's ShipmentApp handles it and the page is
# re-rendered from controller state (post/redirect/get).
import threading
import uuid
from collections import OrderedDict

from flask import Blueprint, current_app, redirect, render_template_string, request, session, url_for
from flask_wtf.csrf import generate_csrf

from client.api import ApiClient
from frontend.controller import ShipmentApp
from services.settings import THEMES

ui_bp = Blueprint("ui", __name__)

PAGE = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <style>
    body { font-family: system-ui, sans-serif; margin: 0; }
    body.theme-dark { background: #1e1f24; color: #eee; }
    body.theme-sepia { background: #f4ecd8; color: #4b3a26; }
    nav { display: flex; gap: .5rem; padding: .75rem 1rem; border-bottom: 1px solid #ccc; }
    main { padding: 1rem; max-width: 960px; }
    .btn.primary { font-weight: 600; }
    .btn.danger { color: #b00020; }
    .error { color: #b00020; }
    .warning { color: #8a6d00; }
    .modal { border: 1px solid #999; padding: 1rem; margin: 1rem 0; }
    .card-actions, .line-items-header, .line-item { display: flex; gap: .5rem; align-items: center; }
  </style>
</head>
<body class="theme-{{ theme or 'light' }}">
  <form method="post">
    <input type="hidden" name="csrf_token" value="{{ csrf_token }}">
    <nav>
      {% for name, label in menu %}
      <button class="menu-item{% if name == active %} active{% endif %}" name="action" value="menu:{{ name }}">{{ label }}</button>
      {% endfor %}
      <span class="theme-picker">
        <label for="themePreference">Theme</label>
        <select id="themePreference" name="theme_preference"
                onchange="this.form.requestSubmit(document.getElementById('applyTheme'))">
          <option value="" {% if not theme %}selected{% endif %}>System</option>
          {% for t in themes %}
          <option value="{{ t }}" {% if t == theme %}selected{% endif %}>{{ t|capitalize }}</option>
          {% endfor %}
        </select>
        <button id="applyTheme" class="btn" name="action" value="theme">Apply</button>
        {% if theme_error %}<span class="error">{{ theme_error }}</span>{% endif %}
      </span>
    </nav>
    <main>
      {{ views.status.render() }}
      {% if phase == "ready-with-error" %}
        <button class="btn" name="action" value="reload">Retry</button>
      {% endif %}
      {{ views[active].render() }}
      {{ views["item-modal"].render() }}
      {{ views["packaging-modal"].render() }}
      {{ views.settings.render() }}
    </main>
  </form>
</body>
</html>
"""

MENU = (("quote", "Quote"), ("items", "Items"), ("packaging", "Packaging"), ("settings", "Settings"))


def make_client() -> ApiClient:
    return ApiClient.from_config(current_app.config)


_apps_lock = threading.Lock()


def _apps() -> OrderedDict:
    return current_app.extensions.setdefault("shipment_apps", OrderedDict())


def get_shipment_app() -> ShipmentApp:
    """The controller bound to this browser session, created and loaded on first use.

    At most ``UI_MAX_SESSIONS`` controllers are kept; the least recently
    used one is dropped and its HTTP session closed.
    """
    apps = _apps()
    token = session.get("ui_token")
    with _apps_lock:
        if token and token in apps:
            apps.move_to_end(token)
            return apps[token]

    shipment = ShipmentApp(make_client())
    shipment.load()
    token = uuid.uuid4().hex
    session["ui_token"] = token

    limit = max(1, int(current_app.config.get("UI_MAX_SESSIONS", 200)))
    evicted = []
    with _apps_lock:
        apps[token] = shipment
        while len(apps) > limit:
            evicted.append(apps.popitem(last=False)[1])
    for old in evicted:
        old.close()
    if evicted:
        current_app.logger.info("Dropped %d idle UI session(s)", len(evicted))
    return shipment


@ui_bp.route("/", methods=["GET", "POST"])
def index():
    shipment = get_shipment_app()

    if request.method == "POST":
        if request.form.get("action") == "reload":
            shipment.load()
        elif not shipment.dispatch(request.form):
            current_app.logger.debug("Unhandled UI action %r", request.form.get("action"))
        return redirect(url_for("ui.index"))

    state = shipment.state
    active = state.active_panel if state.active_panel in ("quote", "items", "packaging") else "quote"
    return render_template_string(
        PAGE,
        title="Postage Quotes",
        csrf_token=generate_csrf(),
        views=shipment.components(),
        menu=MENU,
        active=active,
        phase=state.phase,
        theme=state.theme_preference,
        themes=THEMES,
        theme_error=state.theme_error,
    )
