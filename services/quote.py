import logging
import re
from datetime import datetime

from flask import current_app

from quote.providers import ProviderRegistry, QuoteContext, parse_enabled
from services import settings as settings_service
from services import items as item_service
from services import packaging as packaging_service
from services.errors import BadRequestError, ConfigurationError

log = logging.getLogger(__name__)

CURRENCY = "AUD"
# Volume weight: 250 g per 1000 cm3
VOLUME_WEIGHT_KG_PER_CUBIC_CM = 0.25 / 1000.0

_POSTCODE_RE = re.compile(r"^\d{4}$")
_COUNTRY_RE = re.compile(r"^[A-Za-z]{2}$")


def _registry() -> ProviderRegistry:
    return current_app.extensions["carrier_registry"]


def _quantity(selection: dict) -> int:
    try:
        return int(selection.get("quantity"))
    except (TypeError, ValueError):
        raise BadRequestError("Item quantity must be greater than 0")


def validate_request(data: dict) -> None:
    if not isinstance(data, dict):
        raise BadRequestError("ShipmentRequest must not be null")
    postcode = (data.get("destinationPostcode") or "").strip()
    if not postcode:
        raise BadRequestError("Destination postcode is required")
    if not _POSTCODE_RE.match(postcode):
        raise BadRequestError("Destination postcode must be 4 digits")
    country = data.get("country")
    if country is not None and not _COUNTRY_RE.match(str(country)):
        raise BadRequestError("Country must be 2 letters")
    items = data.get("items")
    if not items:
        raise BadRequestError("At least one item is required")
    if not (data.get("packagingId") or "").strip():
        raise BadRequestError("Packaging is required")
    for selection in items:
        if not (selection.get("itemId") or "").strip():
            raise BadRequestError("Item id is required")
        if _quantity(selection) <= 0:
            raise BadRequestError("Item quantity must be greater than 0")


def build_destination(data: dict) -> dict:
    return {
        "postcode": data["destinationPostcode"].strip(),
        "suburb": data.get("destinationSuburb"),
        "state": data.get("destinationState"),
        "country": data.get("country") or "AU",
    }


def resolve_items(selections: list) -> list[tuple[dict, int]]:
    resolved = []
    for selection in selections:
        item = item_service.get_item(selection["itemId"])
        if item is None:
            raise BadRequestError(f"Item with id {selection['itemId']} not found")
        resolved.append((item, _quantity(selection)))
    return resolved


def calculate_quote(data: dict) -> dict:
    """Price a shipment request against every enabled carrier provider."""
    validate_request(data)

    origin = settings_service.get_origin_settings()
    if origin is None:
        raise ConfigurationError("Origin settings must be configured before calculating quotes")

    packaging = packaging_service.get_packaging(data["packagingId"])
    if packaging is None:
        raise BadRequestError(f"Packaging with id {data['packagingId']} not found")

    resolved = resolve_items(data["items"])
    total_weight_grams = sum(item["unitWeightGrams"] * qty for item, qty in resolved)
    total_volume = packaging["internalVolumeCubicCm"]
    volume_weight_kg = total_volume * VOLUME_WEIGHT_KG_PER_CUBIC_CM
    destination = build_destination(data)

    context = QuoteContext(
        origin=origin,
        destination=destination,
        packaging=packaging,
        items=[item for item, _ in resolved],
        total_weight_grams=total_weight_grams,
        volume_weight_kg=volume_weight_kg,
        is_express=bool(data.get("isExpress")),
    )
    enabled = parse_enabled(current_app.config.get("ENABLED_PROVIDERS"))
    carrier_quotes = _registry().collect(context, enabled)

    log.info(
        "Quote %s -> %s: %sg, %s carrier quote(s)",
        origin["postcode"],
        destination["postcode"],
        total_weight_grams,
        len(carrier_quotes),
    )
    return {
        "totalWeightGrams": total_weight_grams,
        "weightInKg": total_weight_grams / 1000.0,
        "volumeWeightInKg": volume_weight_kg,
        "totalVolumeCubicCm": total_volume,
        "origin": origin,
        "destination": destination,
        "packaging": packaging,
        "carrierQuotes": carrier_quotes,
        "currency": CURRENCY,
        "generatedAt": datetime.utcnow().replace(microsecond=0).isoformat() + "Z",
    }
