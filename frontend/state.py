"""Application state owned by :class:`frontend.controller.ShipmentApp`.

Views never hold state of their own; they receive these objects and hand
user intent back as events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from client.models import (
    Item,
    OriginSettings,
    Packaging,
    QuoteResult,
    ShipmentItemSelection,
    ShipmentRequest,
)

INITIALIZING = "initializing"
READY = "ready"
READY_WITH_ERROR = "ready-with-error"

PANELS = ("quote", "items", "packaging", "settings")


@dataclass
class QuoteLine:
    item_id: str = ""
    quantity: int = 1


@dataclass
class QuoteForm:
    destination_postcode: str = ""
    destination_suburb: str = ""
    destination_state: str = ""
    country: str = "AU"
    packaging_id: str = ""
    is_express: bool = False
    items: list[QuoteLine] = field(default_factory=lambda: [QuoteLine()])

    def to_request(self) -> ShipmentRequest:
        """Snapshot the form as a request, dropping lines with no item picked."""
        return ShipmentRequest(
            destination_postcode=self.destination_postcode,
            destination_suburb=self.destination_suburb,
            destination_state=self.destination_state,
            country=self.country,
            packaging_id=self.packaging_id,
            is_express=self.is_express,
            items=[
                ShipmentItemSelection(item_id=line.item_id, quantity=line.quantity)
                for line in self.items
                if line.item_id
            ],
        )


@dataclass
class ModalState:
    show: bool = False
    editing: bool = False
    editing_id: Optional[str] = None
    form: dict = field(default_factory=dict)
    error: str = ""
    loading: bool = False

    def open(self, form: dict, editing_id: Optional[str] = None):
        self.show = True
        self.editing = editing_id is not None
        self.editing_id = editing_id
        self.form = form
        self.error = ""
        self.loading = False

    def close(self):
        self.show = False
        self.editing = False
        self.editing_id = None
        self.error = ""
        self.loading = False


def blank_item_form() -> dict:
    return {"name": "", "description": "", "unit_weight_grams": ""}


def blank_packaging_form() -> dict:
    return {
        "name": "",
        "description": "",
        "length_cm": "",
        "width_cm": "",
        "height_cm": "",
        "internal_volume_cubic_cm": "",
        "packaging_cost_aud": "",
    }


def settings_form(settings: Optional[OriginSettings]) -> dict:
    settings = settings or OriginSettings()
    return {
        "postcode": settings.postcode,
        "suburb": settings.suburb,
        "state": settings.state,
        "country": settings.country,
    }


@dataclass
class AppState:
    phase: str = INITIALIZING
    is_loading: bool = False
    load_error: str = ""
    active_panel: str = "quote"

    settings: Optional[OriginSettings] = None
    items: list[Item] = field(default_factory=list)
    packagings: list[Packaging] = field(default_factory=list)

    quote_form: QuoteForm = field(default_factory=QuoteForm)
    quote_result: Optional[QuoteResult] = None
    quote_error: str = ""
    quote_loading: bool = False

    settings_modal: ModalState = field(default_factory=ModalState)
    item_modal: ModalState = field(default_factory=ModalState)
    packaging_modal: ModalState = field(default_factory=ModalState)

    theme_preference: str = ""
    theme_error: str = ""
    items_error: str = ""
    packaging_error: str = ""

    @property
    def settings_incomplete(self) -> bool:
        return self.settings is None or not self.settings.complete

    @property
    def can_quote(self) -> bool:
        return not self.settings_incomplete and bool(self.items) and bool(self.packagings)
