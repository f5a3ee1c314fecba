"""Carrier providers and the registry the quote service asks for prices.

A provider turns a :class:`QuoteContext` into carrier quote dicts (the
camelCase wire shape). Returning ``None`` means "no price from me", which
lets the registry fall back to the rules table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from quote.eta import calculate_eta
from quote.rates import load_rate_table, match_bracket
from services.errors import BadRequestError

log = logging.getLogger(__name__)


@dataclass
class QuoteContext:
    origin: dict
    destination: dict
    packaging: dict
    items: list = field(default_factory=list)
    total_weight_grams: int = 0
    volume_weight_kg: float = 0.0
    is_express: bool = False

    @property
    def weight_kg(self) -> float:
        return self.total_weight_grams / 1000.0


class CarrierProvider:
    name = ""

    def is_enabled(self, enabled_names) -> bool:
        return not enabled_names or self.name in enabled_names

    def quote(self, context: QuoteContext) -> Optional[list[dict]]:
        raise NotImplementedError


class RulesProvider(CarrierProvider):
    """Prices AusPost parcels from the weight-bracket table."""

    name = "auspost_rules"

    def __init__(self, table_loader: Callable = load_rate_table, table_path: Optional[str] = None):
        self.table_loader = table_loader
        self.table_path = table_path

    def quote(self, context):
        table = self.table_loader(self.table_path)
        log.debug(
            "Rules quote for AUSPOST: weight=%sg volume_weight=%skg",
            context.total_weight_grams,
            context.volume_weight_kg,
        )
        by_weight = match_bracket(table, context.weight_kg)
        by_volume = match_bracket(table, context.volume_weight_kg)
        if by_weight is None and by_volume is None:
            raise BadRequestError("No bracket found")

        column = "EXPRESS" if context.is_express else "STANDARD"
        delivery_cost = max(float(b[column]) for b in (by_weight, by_volume) if b is not None)
        packaging_cost = float(context.packaging["packagingCostAud"])

        eta_min, eta_max = calculate_eta(
            context.origin["postcode"],
            context.destination["postcode"],
            context.origin.get("state"),
            context.destination.get("state"),
            context.is_express,
        )

        return [{
            "carrier": "AUSPOST",
            "serviceName": "Derived from rules",
            "deliveryEtaDaysMin": eta_min,
            "deliveryEtaDaysMax": eta_max,
            "packagingCostAud": packaging_cost,
            "deliveryCostAud": delivery_cost,
            "surchargesAud": 0.0,
            "totalCostAud": round(packaging_cost + delivery_cost, 2),
            "pricingSource": "RULES",
            "ruleFallbackUsed": True,
            "rawCarrierRef": None,
        }]


class ProviderRegistry:
    def __init__(self, providers=None, fallback: Optional[CarrierProvider] = None):
        self.providers = {p.name: p for p in (providers or [])}
        self.fallback = fallback or RulesProvider()

    def get(self, name):
        return self.providers.get(name)

    def enabled(self, enabled_names=None):
        return [p for p in self.providers.values() if p.is_enabled(enabled_names)]

    def collect(self, context: QuoteContext, enabled_names=None) -> list[dict]:
        """Ask every enabled provider; use the fallback when none priced it."""
        quotes = []
        for provider in self.enabled(enabled_names):
            try:
                result = provider.quote(context)
            except Exception:
                log.exception("Carrier provider %s failed", provider.name)
                continue
            if result:
                quotes.extend(result)
            else:
                log.info("Carrier provider %s returned no quotes", provider.name)

        if not quotes:
            log.warning("No live carrier quotes, using %s", self.fallback.name)
            quotes = self.fallback.quote(context) or []
        return quotes


def parse_enabled(value) -> set[str]:
    """``"a, b"`` -> ``{"a", "b"}``; blank means all providers."""
    return {part.strip() for part in (value or "").split(",") if part.strip()}
