"""Records exchanged with the backend.

Attributes are snake_case; the JSON wire format is camelCase. ``from_dict``
ignores keys it does not know, and missing keys take the field default, so
partial records (e.g. the packaging summary inside a quote result) load too.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import ClassVar, Optional


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class Record:
    # field name -> Record subclass, or [Record subclass] for lists
    nested: ClassVar[dict] = {}

    @classmethod
    def from_dict(cls, data: Optional[dict]):
        if data is None:
            return None
        kwargs = {}
        for f in fields(cls):
            key = camel(f.name)
            if key not in data:
                continue
            value = data[key]
            kind = cls.nested.get(f.name)
            if isinstance(kind, list):
                value = [kind[0].from_dict(v) for v in (value or [])]
            elif kind is not None:
                value = kind.from_dict(value)
            kwargs[f.name] = value
        return cls(**kwargs)

    def to_dict(self, exclude=()) -> dict:
        out = {}
        for f in fields(self):
            if f.name in exclude:
                continue
            value = getattr(self, f.name)
            if isinstance(value, Record):
                value = value.to_dict()
            elif isinstance(value, list):
                value = [v.to_dict() if isinstance(v, Record) else v for v in value]
            out[camel(f.name)] = value
        return out


@dataclass
class OriginSettings(Record):
    postcode: str = ""
    suburb: str = ""
    state: str = ""
    country: str = ""
    theme_preference: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def complete(self) -> bool:
        return all((self.postcode, self.suburb, self.state, self.country))


@dataclass
class Item(Record):
    id: str = ""
    name: str = ""
    description: Optional[str] = None
    unit_weight_grams: int = 0


@dataclass
class Packaging(Record):
    id: str = ""
    name: str = ""
    description: Optional[str] = None
    length_cm: int = 0
    width_cm: int = 0
    height_cm: int = 0
    internal_volume_cubic_cm: int = 0
    packaging_cost_aud: float = 0.0


@dataclass
class ShipmentItemSelection(Record):
    item_id: str = ""
    quantity: int = 1


@dataclass
class ShipmentRequest(Record):
    nested: ClassVar[dict] = {"items": [ShipmentItemSelection]}

    destination_postcode: str = ""
    destination_suburb: Optional[str] = None
    destination_state: Optional[str] = None
    country: str = "AU"
    packaging_id: str = ""
    is_express: bool = False
    items: list = field(default_factory=list)


@dataclass
class CarrierQuote(Record):
    carrier: str = ""
    service_name: str = ""
    delivery_eta_days_min: Optional[int] = None
    delivery_eta_days_max: Optional[int] = None
    packaging_cost_aud: float = 0.0
    delivery_cost_aud: float = 0.0
    surcharges_aud: Optional[float] = None
    total_cost_aud: float = 0.0
    pricing_source: str = ""
    rule_fallback_used: bool = False
    raw_carrier_ref: Optional[str] = None


@dataclass
class Destination(Record):
    postcode: str = ""
    suburb: Optional[str] = None
    state: Optional[str] = None
    country: str = "AU"


@dataclass
class QuoteResult(Record):
    nested: ClassVar[dict] = {
        "origin": OriginSettings,
        "destination": Destination,
        "packaging": Packaging,
        "carrier_quotes": [CarrierQuote],
    }

    total_weight_grams: int = 0
    weight_in_kg: float = 0.0
    volume_weight_in_kg: float = 0.0
    total_volume_cubic_cm: int = 0
    origin: Optional[OriginSettings] = None
    destination: Optional[Destination] = None
    packaging: Optional[Packaging] = None
    carrier_quotes: list = field(default_factory=list)
    currency: str = "AUD"
    generated_at: Optional[str] = None
