"""View components for the single-page UI.

Each component is built from its props, renders HTML with ``render()`` and
turns a posted form back into an :class:`Event` with ``event(form)``.
Components never call the backend; the controller owns every side effect.

Buttons carry ``name="action"`` values of the form ``<key>:<event>[:<arg>]``,
e.g. ``items:edit:3f2c...`` or ``quote:remove-line:1``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from jinja2 import DictLoader, Environment
from markupsafe import Markup

from frontend.formatting import format_eta, format_kg, format_money, pricing_source_label
from frontend.state import ModalState, QuoteForm, QuoteLine

# ---------- Templates ----------

ITEMS_PANEL = """
<section class="panel items-panel">
  <header class="panel-header">
    <h2>Items</h2>
    <button class="btn primary" name="action" value="{{ key }}:add">Add item</button>
  </header>
  {% if error %}<p class="error">{{ error }}</p>{% endif %}
  {% if not items %}
    <p class="empty">No items yet.</p>
  {% else %}
    <ul class="cards">
    {% for item in items %}
      <li class="card">
        <h3>{{ item.name }}</h3>
        {% if item.description %}<p>{{ item.description }}</p>{% endif %}
        <p class="meta">{{ item.unit_weight_grams }} g per unit</p>
        <div class="card-actions">
          <button class="btn" name="action" value="{{ key }}:edit:{{ item.id }}">Edit</button>
          <button class="btn danger" name="action" value="{{ key }}:delete:{{ item.id }}">Delete</button>
        </div>
      </li>
    {% endfor %}
    </ul>
  {% endif %}
</section>
"""

PACKAGING_PANEL = """
<section class="panel packaging-panel">
  <header class="panel-header">
    <h2>Packaging</h2>
    <button class="btn primary" name="action" value="{{ key }}:add">Add packaging</button>
  </header>
  {% if error %}<p class="error">{{ error }}</p>{% endif %}
  {% if not packagings %}
    <p class="empty">No packaging yet.</p>
  {% else %}
    <ul class="cards">
    {% for p in packagings %}
      <li class="card">
        <h3>{{ p.name }}</h3>
        {% if p.description %}<p>{{ p.description }}</p>{% endif %}
        <p class="meta">{{ p.length_cm }} x {{ p.width_cm }} x {{ p.height_cm }} cm,
          {{ p.internal_volume_cubic_cm }} cm³, ${{ money(p.packaging_cost_aud) }}</p>
        <div class="card-actions">
          <button class="btn" name="action" value="{{ key }}:edit:{{ p.id }}">Edit</button>
          <button class="btn danger" name="action" value="{{ key }}:delete:{{ p.id }}">Delete</button>
        </div>
      </li>
    {% endfor %}
    </ul>
  {% endif %}
</section>
"""

QUOTE_PANEL = """
<section class="panel quote-panel">
  <h2>Quote</h2>
  {% if not can_quote %}
    <p class="warning">Complete settings, items, and packaging first.</p>
  {% endif %}
  <fieldset class="destination">
    <label>Postcode <input name="destination_postcode" value="{{ form.destination_postcode }}" placeholder="3000"></label>
    <label>Suburb <input name="destination_suburb" value="{{ form.destination_suburb }}" placeholder="Melbourne"></label>
    <label>State <input name="destination_state" value="{{ form.destination_state }}" placeholder="VIC"></label>
    <label>Country <input name="country" value="{{ form.country }}" placeholder="AU"></label>
  </fieldset>
  <label>Packaging
    <select name="packaging_id">
      <option value="" {% if not form.packaging_id %}selected{% endif %}>Select packaging</option>
      {% for p in packagings %}
      <option value="{{ p.id }}" {% if p.id == form.packaging_id %}selected{% endif %}>{{ p.name }}</option>
      {% endfor %}
    </select>
  </label>
  <label><input type="checkbox" name="is_express" value="1" {% if form.is_express %}checked{% endif %}> Express</label>

  <div class="line-items-header">
    <h3>Items</h3>
    <button class="btn" name="action" value="{{ key }}:add-line">Add line</button>
  </div>
  {% for line in form.items %}
  <div class="line-item">
    <select name="line_item_id">
      <option value="" {% if not line.item_id %}selected{% endif %}>Select item</option>
      {% for item in items %}
      <option value="{{ item.id }}" {% if item.id == line.item_id %}selected{% endif %}>{{ item.name }}</option>
      {% endfor %}
    </select>
    <input type="number" min="1" name="line_quantity" value="{{ line.quantity }}">
    <button class="btn danger" name="action" value="{{ key }}:remove-line:{{ loop.index0 }}">Remove</button>
  </div>
  {% endfor %}

  <button class="btn primary" name="action" value="{{ key }}:submit"
          {% if is_loading or not can_quote %}disabled{% endif %}>
    {% if is_loading %}Quoting…{% else %}Get quote{% endif %}
  </button>
  {% if error %}<p class="error">{{ error }}</p>{% endif %}

  {% if result %}
  <div class="quote-result">
    <p>Total weight: {{ result.total_weight_grams }} g ({{ kg(result.weight_in_kg) }} kg)</p>
    <p>Volume weight: {{ kg(result.volume_weight_in_kg) }} kg</p>
    <table>
      <thead><tr><th>Carrier</th><th>Service</th><th>Total</th><th>Details</th></tr></thead>
      <tbody>
      {% for q in result.carrier_quotes %}
        <tr class="carrier-quote">
          <td>{{ q.carrier }}</td>
          <td>{{ q.service_name }}</td>
          <td>{{ result.currency }} ${{ money(q.total_cost_aud) }}</td>
          <td>
            <span>Source: {{ source_label(q.pricing_source) }}</span>
            <span>ETA: {{ format_eta(q) }}</span>
          </td>
        </tr>
      {% endfor %}
      </tbody>
    </table>
  </div>
  {% endif %}
</section>
"""

MODAL = """
{% if modal.show %}
<div class="modal" role="dialog">
  <h2>{{ title }}</h2>
  {% if notice %}<p class="warning">{{ notice }}</p>{% endif %}
  {% for f in fields %}
  <label>{{ f.label }}
    <input name="{{ key }}-{{ f.name }}" type="{{ f.type }}" value="{{ modal.form.get(f.name) if modal.form.get(f.name) is not none else '' }}"
           {% if f.placeholder %}placeholder="{{ f.placeholder }}"{% endif %}
           {% if f.type == 'number' %}step="any"{% endif %}>
  </label>
  {% endfor %}
  {% if modal.error %}<p class="error">{{ modal.error }}</p>{% endif %}
  <div class="modal-actions">
    <button class="btn" name="action" value="{{ key }}:close" formnovalidate>Cancel</button>
    <button class="btn primary" name="action" value="{{ key }}:save" {% if modal.loading %}disabled{% endif %}>
      {% if modal.loading %}Saving…{% else %}{{ save_label }}{% endif %}
    </button>
  </div>
</div>
{% endif %}
"""

STATUS_BANNER = """
{% if is_loading %}<div class="status-banner">Loading data...</div>
{% elif error %}<div class="status-banner error">Failed to load data: {{ error }}</div>{% endif %}
"""

TEMPLATES = {
    "items_panel.html": ITEMS_PANEL,
    "packaging_panel.html": PACKAGING_PANEL,
    "quote_panel.html": QUOTE_PANEL,
    "modal.html": MODAL,
    "status_banner.html": STATUS_BANNER,
}

env = Environment(loader=DictLoader(TEMPLATES), autoescape=True)
env.globals.update(kg=format_kg, money=format_money, source_label=pricing_source_label)


# ---------- Events ----------

@dataclass
class Event:
    name: str
    value: Any = None
    form: dict = field(default_factory=dict)


def _getlist(form, key) -> list:
    if hasattr(form, "getlist"):
        return form.getlist(key)
    value = form.get(key, [])
    return value if isinstance(value, list) else [value]


def _int(value, default=0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def split_action(form) -> tuple[str, str, str]:
    """``"items:edit:abc"`` -> ``("items", "edit", "abc")``."""
    key, _, rest = (form.get("action") or "").partition(":")
    name, _, arg = rest.partition(":")
    return key, name, arg


class Component:
    key = ""
    template = ""

    def context(self) -> dict:
        return {}

    def render(self, csrf_token: str = "") -> Markup:
        html = env.get_template(self.template).render(key=self.key, csrf_token=csrf_token, **self.context())
        return Markup(html)

    def event(self, form) -> Optional[Event]:
        key, name, arg = split_action(form)
        if key != self.key or not name:
            return None
        return self.parse(name, arg, form)

    def parse(self, name, arg, form) -> Optional[Event]:
        return Event(name, arg or None)


# ---------- Panels ----------

class ItemsPanel(Component):
    key = "items"
    template = "items_panel.html"

    def __init__(self, items, error=""):
        self.items = items
        self.error = error

    def context(self):
        return {"items": self.items, "error": self.error}

    def parse(self, name, arg, form):
        if name == "add":
            return Event("add")
        if name == "edit":
            record = next((i for i in self.items if i.id == arg), None)
            return Event("edit", record) if record else None
        if name == "delete" and arg:
            return Event("delete", arg)
        return None


class PackagingPanel(Component):
    key = "packaging"
    template = "packaging_panel.html"

    def __init__(self, packagings, error=""):
        self.packagings = packagings
        self.error = error

    def context(self):
        return {"packagings": self.packagings, "error": self.error}

    def parse(self, name, arg, form):
        if name == "add":
            return Event("add")
        if name == "edit":
            record = next((p for p in self.packagings if p.id == arg), None)
            return Event("edit", record) if record else None
        if name == "delete" and arg:
            return Event("delete", arg)
        return None


class QuotePanel(Component):
    key = "quote"
    template = "quote_panel.html"

    def __init__(self, form: QuoteForm, items, packagings, can_quote=True, is_loading=False,
                 result=None, error="", eta_formatter: Callable = format_eta):
        self.form = form
        self.items = items
        self.packagings = packagings
        self.can_quote = can_quote
        self.is_loading = is_loading
        self.result = result
        self.error = error
        self.eta_formatter = eta_formatter

    def context(self):
        return {
            "form": self.form,
            "items": self.items,
            "packagings": self.packagings,
            "can_quote": self.can_quote,
            "is_loading": self.is_loading,
            "result": self.result,
            "error": self.error,
            "format_eta": self.eta_formatter,
        }

    @staticmethod
    def read_form(form) -> QuoteForm:
        """Rebuild the quote form from the posted fields."""
        ids = _getlist(form, "line_item_id")
        quantities = _getlist(form, "line_quantity")
        lines = [
            QuoteLine(item_id=item_id or "", quantity=_int(quantities[i] if i < len(quantities) else 1, 1))
            for i, item_id in enumerate(ids)
        ]
        return QuoteForm(
            destination_postcode=(form.get("destination_postcode") or "").strip(),
            destination_suburb=(form.get("destination_suburb") or "").strip(),
            destination_state=(form.get("destination_state") or "").strip(),
            country=(form.get("country") or "").strip(),
            packaging_id=form.get("packaging_id") or "",
            is_express=bool(form.get("is_express")),
            items=lines or [QuoteLine()],
        )

    def parse(self, name, arg, form):
        snapshot = {"quote_form": self.read_form(form)}
        if name in ("add-line", "submit"):
            return Event(name, form=snapshot)
        if name == "remove-line":
            return Event(name, _int(arg, -1), form=snapshot)
        return None


# ---------- Modals ----------

@dataclass
class FormField:
    name: str
    label: str
    type: str = "text"
    placeholder: str = ""


class Modal(Component):
    template = "modal.html"
    fields: tuple = ()
    noun = ""

    def __init__(self, modal: ModalState):
        self.modal = modal

    @property
    def title(self):
        return f"{'Edit' if self.modal.editing else 'Add'} {self.noun}"

    def notice(self):
        return ""

    def input_name(self, f: FormField) -> str:
        # modals share the page form with the quote panel, so names are prefixed
        return f"{self.key}-{f.name}"

    def context(self):
        return {
            "modal": self.modal,
            "title": self.title,
            "fields": self.fields,
            "notice": self.notice(),
            "save_label": f"Save {self.noun}",
        }

    def parse(self, name, arg, form):
        if name == "close":
            return Event("close")
        if name == "save":
            values = {f.name: (form.get(self.input_name(f)) or "").strip() for f in self.fields}
            return Event("save", form=values)
        return None


class ItemModal(Modal):
    key = "item-modal"
    noun = "item"
    fields = (
        FormField("name", "Name"),
        FormField("description", "Description"),
        FormField("unit_weight_grams", "Unit weight (g)", "number"),
    )


class PackagingModal(Modal):
    key = "packaging-modal"
    noun = "packaging"
    fields = (
        FormField("name", "Name"),
        FormField("description", "Description"),
        FormField("length_cm", "Length (cm)", "number"),
        FormField("width_cm", "Width (cm)", "number"),
        FormField("height_cm", "Height (cm)", "number"),
        FormField("internal_volume_cubic_cm", "Internal volume (cm³)", "number"),
        FormField("packaging_cost_aud", "Packaging cost (AUD)", "number"),
    )


class SettingsModal(Modal):
    key = "settings"
    noun = "settings"
    fields = (
        FormField("postcode", "Postcode", placeholder="2000"),
        FormField("suburb", "Suburb", placeholder="Sydney"),
        FormField("state", "State", placeholder="NSW"),
        FormField("country", "Country", placeholder="AU"),
    )

    def __init__(self, modal: ModalState, settings_incomplete=False):
        super().__init__(modal)
        self.settings_incomplete = settings_incomplete

    @property
    def title(self):
        return "Origin settings"

    def notice(self):
        return "Origin settings are required before quoting." if self.settings_incomplete else ""


class StatusBanner(Component):
    key = "status"
    template = "status_banner.html"

    def __init__(self, is_loading=False, error=""):
        self.is_loading = is_loading
        self.error = error

    def context(self):
        return {"is_loading": self.is_loading, "error": self.error}
