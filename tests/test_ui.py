import re
from html.parser import HTMLParser

import pytest
from werkzeug.datastructures import MultiDict

from client.models import CarrierQuote, QuoteResult
from conftest import FakeClient


def get_csrf_token(client, path):
    """Fetch CSRF token by visiting the given path."""
    resp = client.get(path)
    match = re.search(r'name="csrf_token" value="([^"]+)"', resp.get_data(as_text=True))
    return match.group(1) if match else None


@pytest.fixture
def backend(monkeypatch, fake_client):
    monkeypatch.setattr("app.ui.make_client", lambda: fake_client)
    return fake_client


def post_action(client, action, **fields):
    token = get_csrf_token(client, "/")
    return client.post("/", data={"csrf_token": token, "action": action, **fields}, follow_redirects=True)


def test_page_renders_quote_panel_and_menu(client, backend):
    resp = client.get("/")
    html = resp.get_data(as_text=True)

    assert resp.status_code == 200
    assert 'class="panel quote-panel"' in html
    assert 'id="themePreference"' in html
    assert re.findall(r'class="menu-item[^"]*"[^>]*>(\w+)<', html) == ["Quote", "Items", "Packaging", "Settings"]
    # first packaging is preselected
    assert '<option value="pack-1" selected>' in html


def test_missing_settings_show_blocking_modal(client, monkeypatch):
    backend = FakeClient(settings=None)
    monkeypatch.setattr("app.ui.make_client", lambda: backend)

    html = client.get("/").get_data(as_text=True)

    assert "Origin settings are required before quoting." in html
    assert "Complete settings, items, and packaging first." in html


def test_post_without_csrf_token_is_rejected(client, backend):
    client.get("/")

    resp = client.post("/", data={"action": "items:delete:item-1"})

    assert resp.status_code == 400
    assert backend.called("delete_item") == []


def test_saving_settings_through_the_page(client, monkeypatch):
    backend = FakeClient(settings=None)
    monkeypatch.setattr("app.ui.make_client", lambda: backend)

    resp = post_action(client, "settings:save", **{
        "settings-postcode": "2000", "settings-suburb": "Sydney", "settings-state": "NSW", "settings-country": "AU",
    })
    html = resp.get_data(as_text=True)

    assert resp.status_code == 200
    assert backend.called("update_origin_settings")[0][1]["postcode"] == "2000"
    assert "Origin settings are required before quoting." not in html


def test_menu_switches_panel(client, backend):
    backend.items = []

    html = post_action(client, "menu:items").get_data(as_text=True)

    assert "No items yet." in html
    assert 'class="panel quote-panel"' not in html


def test_item_modal_flow(client, backend):
    post_action(client, "menu:items")
    html = post_action(client, "items:add").get_data(as_text=True)
    assert "Add item" in html and "Save item" in html

    html = post_action(client, "item-modal:save", **{
        "item-modal-name": "Lamp", "item-modal-description": "", "item-modal-unit_weight_grams": "1200",
    })

    assert backend.called("create_item")[0][1]["name"] == "Lamp"
    assert "Lamp" in html.get_data(as_text=True)


def test_theme_change_is_saved_immediately(client, backend):
    html = post_action(client, "theme", theme_preference="dark").get_data(as_text=True)

    assert backend.called("update_theme_preference") == [("update_theme_preference", "dark")]
    assert '<body class="theme-dark">' in html
    assert '<option value="dark" selected>' in html


def test_quote_submit_shows_result(client, backend):
    backend.quote_result = QuoteResult(
        total_weight_grams=700,
        weight_in_kg=0.7,
        volume_weight_in_kg=0.25,
        carrier_quotes=[CarrierQuote(carrier="AUSPOST", service_name="Derived from rules",
                                     delivery_eta_days_min=3, delivery_eta_days_max=6,
                                     total_cost_aud=16.75, pricing_source="RULES")],
    )

    resp = post_action(
        client,
        "quote:submit",
        destination_postcode="3000",
        destination_suburb="Melbourne",
        destination_state="VIC",
        country="AU",
        packaging_id="pack-1",
        line_item_id="item-1",
        line_quantity="2",
    )
    html = resp.get_data(as_text=True)

    assert backend.called("create_quote")[0][1]["items"] == [{"itemId": "item-1", "quantity": 2}]
    assert "Total weight: 700 g (0.7 kg)" in html
    assert "ETA: 3–6 days" in html
    assert 'value="3000"' in html


class PageFields(HTMLParser):
    """Collects the fields a browser would submit from the page, in document order."""

    def __init__(self):
        super().__init__()
        self.fields = []
        self._select = None

    def handle_starttag(self, tag, attrs):
        attrs = dict(attrs)
        if tag == "input" and attrs.get("name"):
            if attrs.get("type") == "checkbox" and "checked" not in attrs:
                return
            self.fields.append([attrs["name"], attrs.get("value") or ""])
        elif tag == "select":
            self._select = [attrs["name"], None]
            self.fields.append(self._select)
        elif tag == "option" and self._select is not None:
            if self._select[1] is None or "selected" in attrs:
                self._select[1] = attrs.get("value") or ""

    def handle_endtag(self, tag):
        if tag == "select":
            self._select = None


def submit_page(client, action, **changes):
    """Post every field of the current page, as a browser does, with some inputs edited."""
    parser = PageFields()
    parser.feed(client.get("/").get_data(as_text=True))
    fields = [(name, changes.get(name, value)) for name, value in parser.fields]
    fields.append(("action", action))
    return client.post("/", data=MultiDict(fields), follow_redirects=True)


def test_settings_save_from_full_page_keeps_modal_values(client, monkeypatch):
    backend = FakeClient(settings=None)
    monkeypatch.setattr("app.ui.make_client", lambda: backend)

    submit_page(client, "settings:save", **{
        "settings-postcode": "6011",
        "settings-suburb": "Auckland",
        "settings-state": "AKL",
        "settings-country": "NZ",
    })

    [(_, sent)] = backend.called("update_origin_settings")
    assert sent["country"] == "NZ"
    assert sent["postcode"] == "6011"


def test_unsaved_quote_edits_survive_menu_and_theme(client, backend):
    submit_page(client, "menu:items", destination_postcode="3000", destination_suburb="Melbourne")
    html = submit_page(client, "menu:quote").get_data(as_text=True)

    assert 'value="3000"' in html
    assert 'value="Melbourne"' in html

    html = submit_page(client, "theme", theme_preference="sepia", destination_state="VIC").get_data(as_text=True)

    assert backend.called("update_theme_preference") == [("update_theme_preference", "sepia")]
    assert 'value="VIC"' in html
    assert 'value="3000"' in html


def test_idle_controllers_are_dropped_and_closed(app, monkeypatch):
    app.config["UI_MAX_SESSIONS"] = 3
    made = []

    def make():
        made.append(FakeClient())
        return made[-1]

    monkeypatch.setattr("app.ui.make_client", make)
    first = app.test_client()
    first.get("/")
    for _ in range(2):
        app.test_client().get("/")
    # a returning session is the most recently used again
    first.get("/")
    app.test_client().get("/")

    assert len(app.extensions["shipment_apps"]) == 3
    assert [c.closed for c in made] == [False, True, False, False]
