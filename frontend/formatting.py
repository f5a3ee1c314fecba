from __future__ import annotations

PRICING_SOURCE_LABELS = {"AUSPOST_API": "AusPost API"}


def format_eta(quote) -> str:
    """Render a carrier quote's delivery window in days."""
    low, high = quote.delivery_eta_days_min, quote.delivery_eta_days_max
    if low is None and high is None:
        return "ETA unavailable"
    if low is None or high is None or low == high:
        days = low if low is not None else high
        return f"{days} day" if days == 1 else f"{days} days"
    return f"{low}–{high} days"


def pricing_source_label(source: str) -> str:
    return PRICING_SOURCE_LABELS.get(source, source)


def format_kg(value) -> str:
    """Kilograms without trailing zeros: 0.5, 1.2, 3."""
    return f"{float(value or 0):.3f}".rstrip("0").rstrip(".")


def format_money(value) -> str:
    return f"{float(value or 0):.2f}"
