"""The app orchestrator.

``ShipmentApp`` owns one :class:`AppState`, performs every backend call
through an :class:`ApiClient` and reconciles the quote form after
mutations. Lists are always re-fetched after a create/update/delete; they
are never patched locally.
"""

from __future__ import annotations

import logging
from typing import Optional

from client.api import ApiClient, ApiError
from client.models import Item, OriginSettings, Packaging
from frontend import components
from frontend.formatting import format_eta
from frontend.state import (
    PANELS,
    READY,
    READY_WITH_ERROR,
    AppState,
    QuoteLine,
    blank_item_form,
    blank_packaging_form,
    settings_form,
)

log = logging.getLogger(__name__)


def _number(value, cast=int):
    """Form text -> number; blanks and junk become 0 so the backend rejects them."""
    try:
        return cast(value)
    except (TypeError, ValueError):
        try:
            return cast(float(value))
        except (TypeError, ValueError):
            return cast(0)


def _description(form, editing_id):
    """Blank means "none" on create; on edit it is sent as "" so it clears the old text."""
    value = form.get("description") or ""
    return value if editing_id else (value or None)


class ShipmentApp:
    def __init__(self, client: ApiClient, state: Optional[AppState] = None):
        self.client = client
        self.state = state or AppState()

    # ---- Loading -------------------------------------------------------------

    def load(self):
        """Fetch settings, items and packaging; force settings open when unset."""
        s = self.state
        s.is_loading = True
        s.load_error = ""
        try:
            s.settings = self.client.get_origin_settings()
            s.items = self.client.list_items()
            s.packagings = self.client.list_packaging()
        except ApiError as e:
            log.warning("Initial load failed: %s", e.message)
            s.load_error = e.message
            s.phase = READY_WITH_ERROR
            return
        finally:
            s.is_loading = False

        s.phase = READY
        s.theme_preference = (s.settings.theme_preference if s.settings else None) or ""
        self._reconcile_packaging(initial=True)
        self._reconcile_lines()
        if s.settings_incomplete:
            self.open_settings()

    def refresh_items(self):
        self.state.items = self.client.list_items()
        self._reconcile_lines()

    def refresh_packaging(self):
        self.state.packagings = self.client.list_packaging()
        self._reconcile_packaging()

    # ---- Reconciliation ------------------------------------------------------

    def _reconcile_packaging(self, initial=False):
        form = self.state.quote_form
        ids = [p.id for p in self.state.packagings]
        if form.packaging_id and form.packaging_id not in ids:
            form.packaging_id = ids[0] if ids else ""
        elif not form.packaging_id and initial and ids:
            form.packaging_id = ids[0]

    def _reconcile_lines(self):
        form = self.state.quote_form
        ids = {i.id for i in self.state.items}
        for line in form.items:
            if line.item_id and line.item_id not in ids:
                line.item_id = ""
        if not form.items:
            form.items.append(QuoteLine())

    # ---- Navigation ----------------------------------------------------------

    def open_panel(self, name: str):
        if name not in PANELS:
            return
        if name == "settings":
            self.open_settings()
            return
        self.state.active_panel = name
        try:
            if name == "items":
                self.refresh_items()
            elif name == "packaging":
                self.refresh_packaging()
        except ApiError as e:
            self._set_list_error(name, e.message)

    def _set_list_error(self, panel, message):
        if panel == "items":
            self.state.items_error = message
        else:
            self.state.packaging_error = message

    # ---- Settings ------------------------------------------------------------

    def open_settings(self):
        self.state.settings_modal.open(settings_form(self.state.settings))

    def close_settings(self) -> bool:
        """Dismiss the settings modal; refused while settings are incomplete."""
        modal = self.state.settings_modal
        if self.state.settings_incomplete:
            return False
        modal.close()
        return True

    def save_settings(self, form: dict):
        s = self.state
        modal = s.settings_modal
        modal.form = dict(form)
        modal.loading = True
        modal.error = ""
        current = s.settings or OriginSettings()
        payload = OriginSettings(
            postcode=form.get("postcode", ""),
            suburb=form.get("suburb", ""),
            state=form.get("state", ""),
            country=form.get("country", ""),
            theme_preference=current.theme_preference,
            updated_at=current.updated_at,
        )
        try:
            s.settings = self.client.update_origin_settings(payload)
        except ApiError as e:
            modal.error = e.message
            return
        finally:
            modal.loading = False
        log.info("Origin settings saved for %s", s.settings.postcode)
        modal.close()

    def set_theme(self, value: str):
        """Persist the theme right away; the selection stays even if that fails."""
        s = self.state
        s.theme_preference = value or ""
        s.theme_error = ""
        try:
            s.settings = self.client.update_theme_preference(value or None)
        except ApiError as e:
            s.theme_error = e.message

    # ---- Items ---------------------------------------------------------------

    def open_item_modal(self, item: Optional[Item] = None):
        if item is None:
            self.state.item_modal.open(blank_item_form())
            return
        form = {
            "name": item.name,
            "description": item.description or "",
            "unit_weight_grams": item.unit_weight_grams,
        }
        self.state.item_modal.open(form, editing_id=item.id)

    def close_item_modal(self):
        self.state.item_modal.close()

    def save_item(self, form: dict):
        modal = self.state.item_modal
        modal.form = dict(form)
        modal.loading = True
        modal.error = ""
        item = Item(
            name=form.get("name", ""),
            description=_description(form, modal.editing_id),
            unit_weight_grams=_number(form.get("unit_weight_grams")),
        )
        try:
            if modal.editing_id:
                self.client.update_item(modal.editing_id, item)
            else:
                self.client.create_item(item)
            self.refresh_items()
        except ApiError as e:
            modal.error = e.message
            return
        finally:
            modal.loading = False
        self.state.items_error = ""
        modal.close()

    def delete_item(self, item_id: str):
        self.state.items_error = ""
        try:
            self.client.delete_item(item_id)
            self.refresh_items()
        except ApiError as e:
            self.state.items_error = e.message
            return
        log.info("Deleted item %s", item_id)

    # ---- Packaging -----------------------------------------------------------

    def open_packaging_modal(self, packaging: Optional[Packaging] = None):
        if packaging is None:
            self.state.packaging_modal.open(blank_packaging_form())
            return
        form = {
            "name": packaging.name,
            "description": packaging.description or "",
            "length_cm": packaging.length_cm,
            "width_cm": packaging.width_cm,
            "height_cm": packaging.height_cm,
            "internal_volume_cubic_cm": packaging.internal_volume_cubic_cm,
            "packaging_cost_aud": packaging.packaging_cost_aud,
        }
        self.state.packaging_modal.open(form, editing_id=packaging.id)

    def close_packaging_modal(self):
        self.state.packaging_modal.close()

    def save_packaging(self, form: dict):
        modal = self.state.packaging_modal
        modal.form = dict(form)
        modal.loading = True
        modal.error = ""
        packaging = Packaging(
            name=form.get("name", ""),
            description=_description(form, modal.editing_id),
            length_cm=_number(form.get("length_cm")),
            width_cm=_number(form.get("width_cm")),
            height_cm=_number(form.get("height_cm")),
            internal_volume_cubic_cm=_number(form.get("internal_volume_cubic_cm")),
            packaging_cost_aud=_number(form.get("packaging_cost_aud"), float),
        )
        try:
            if modal.editing_id:
                self.client.update_packaging(modal.editing_id, packaging)
            else:
                self.client.create_packaging(packaging)
            self.refresh_packaging()
        except ApiError as e:
            modal.error = e.message
            return
        finally:
            modal.loading = False
        self.state.packaging_error = ""
        modal.close()

    def delete_packaging(self, packaging_id: str):
        self.state.packaging_error = ""
        try:
            self.client.delete_packaging(packaging_id)
            self.refresh_packaging()
        except ApiError as e:
            self.state.packaging_error = e.message
            return
        log.info("Deleted packaging %s", packaging_id)

    # ---- Quote form ----------------------------------------------------------

    def update_quote_form(self, quote_form):
        self.state.quote_form = quote_form
        self._reconcile_lines()

    def add_line(self):
        self.state.quote_form.items.append(QuoteLine())

    def remove_line(self, index: int):
        lines = self.state.quote_form.items
        if 0 <= index < len(lines):
            del lines[index]
        if not lines:
            lines.append(QuoteLine())

    def submit_quote(self):
        s = self.state
        if s.settings_incomplete:
            s.quote_error = "Origin settings must be configured before calculating quotes"
            self.open_settings()
            return
        s.quote_loading = True
        try:
            s.quote_result = self.client.create_quote(s.quote_form.to_request())
            s.quote_error = ""
        except ApiError as e:
            # the previous result stays on screen
            s.quote_error = e.message
        finally:
            s.quote_loading = False

    def close(self):
        self.client.close()

    def format_eta(self, quote) -> str:
        return format_eta(quote)

    # ---- View ----------------------------------------------------------------

    def components(self) -> dict:
        s = self.state
        return {
            "status": components.StatusBanner(s.is_loading, s.load_error),
            "items": components.ItemsPanel(s.items, s.items_error),
            "packaging": components.PackagingPanel(s.packagings, s.packaging_error),
            "quote": components.QuotePanel(
                s.quote_form,
                s.items,
                s.packagings,
                can_quote=s.can_quote,
                is_loading=s.quote_loading,
                result=s.quote_result,
                error=s.quote_error,
                eta_formatter=self.format_eta,
            ),
            "item-modal": components.ItemModal(s.item_modal),
            "packaging-modal": components.PackagingModal(s.packaging_modal),
            "settings": components.SettingsModal(s.settings_modal, s.settings_incomplete),
        }

    def dispatch(self, form) -> bool:
        """Route one posted form to the controller; False when nothing matched."""
        key, name, arg = components.split_action(form)
        if key != "quote" and "destination_postcode" in form:
            # the quote panel was on the page; keep what was typed into it
            self.update_quote_form(components.QuotePanel.read_form(form))
        if key == "menu":
            self.open_panel(name)
            return True
        if key == "theme":
            self.set_theme(form.get("theme_preference") or "")
            return True

        component = self.components().get(key)
        event = component.event(form) if component else None
        if event is None:
            log.debug("Ignored action %r", form.get("action"))
            return False

        handler = self._handlers().get((key, event.name))
        if handler is None:
            return False
        handler(event)
        return True

    def _handlers(self) -> dict:
        def quote_event(then):
            def handle(event):
                self.update_quote_form(event.form["quote_form"])
                then(event)
            return handle

        return {
            ("items", "add"): lambda e: self.open_item_modal(),
            ("items", "edit"): lambda e: self.open_item_modal(e.value),
            ("items", "delete"): lambda e: self.delete_item(e.value),
            ("packaging", "add"): lambda e: self.open_packaging_modal(),
            ("packaging", "edit"): lambda e: self.open_packaging_modal(e.value),
            ("packaging", "delete"): lambda e: self.delete_packaging(e.value),
            ("quote", "add-line"): quote_event(lambda e: self.add_line()),
            ("quote", "remove-line"): quote_event(lambda e: self.remove_line(e.value)),
            ("quote", "submit"): quote_event(lambda e: self.submit_quote()),
            ("item-modal", "close"): lambda e: self.close_item_modal(),
            ("item-modal", "save"): lambda e: self.save_item(e.form),
            ("packaging-modal", "close"): lambda e: self.close_packaging_modal(),
            ("packaging-modal", "save"): lambda e: self.save_packaging(e.form),
            ("settings", "close"): lambda e: self.close_settings(),
            ("settings", "save"): lambda e: self.save_settings(e.form),
        }
