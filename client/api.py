# client/api.py
# HTTP client for the backend REST surface.
# - One generic request() that normalizes every failure into ApiError
# - Typed endpoint methods that hand back records from client.models
# - get_origin_settings() treats 404 as "not configured yet" and returns None

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import requests

from config import Config
from client.models import (
    Item,
    OriginSettings,
    Packaging,
    QuoteResult,
    ShipmentRequest,
)

log = logging.getLogger(__name__)


class ApiError(Exception):
    """The single error shape every failed request is normalized into."""

    def __init__(self, status: int, message: str, details: Any = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.details = details

    def __repr__(self):
        return f"ApiError(status={self.status!r}, message={self.message!r})"


def _error_message(body: Any) -> Optional[str]:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or None
    return None


class ApiClient:
    def __init__(self, base_url: str | None = None, session: requests.Session | None = None,
                 timeout: float | None = None):
        self.base_url = (base_url if base_url is not None else Config.API_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or Config.API_TIMEOUT

    @classmethod
    def from_config(cls, config) -> "ApiClient":
        return cls(base_url=config.get("API_BASE_URL"), timeout=config.get("API_TIMEOUT"))

    def close(self):
        self.session.close()

    # ---- Generic request ---------------------------------------------------

    def request(self, path: str, method: str = "GET", body: Any = None,
                headers: dict | None = None) -> Any:
        url = f"{self.base_url}{path}"
        merged = {"Content-Type": "application/json", **(headers or {})}
        data = json.dumps(body) if body is not None else None

        try:
            response = self.session.request(method, url, data=data, headers=merged, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("[api] %s %s transport error: %s", method, path, e)
            raise ApiError(0, "Network error", details=str(e)) from e

        if not response.ok:
            message = response.reason or "Request failed"
            details = None
            try:
                details = response.json()
                message = _error_message(details) or message
            except ValueError:
                pass  # body is not JSON; keep the status text
            log.info("[api] %s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message, details)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ---- Settings -----------------------------------------------------------

    def get_origin_settings(self) -> Optional[OriginSettings]:
        try:
            return OriginSettings.from_dict(self.request("/settings/origin"))
        except ApiError as e:
            if e.status == 404:
                return None
            raise

    def update_origin_settings(self, settings: OriginSettings) -> OriginSettings:
        data = self.request("/settings/origin", method="PUT", body=settings.to_dict())
        return OriginSettings.from_dict(data)

    def update_theme_preference(self, theme_preference: Optional[str]) -> OriginSettings:
        data = self.request("/settings/theme", method="PUT", body={"themePreference": theme_preference})
        return OriginSettings.from_dict(data)

    # ---- Items --------------------------------------------------------------

    def list_items(self) -> list[Item]:
        return [Item.from_dict(i) for i in self.request("/items") or []]

    def create_item(self, item: Item) -> Item:
        return Item.from_dict(self.request("/items", method="POST", body=item.to_dict(exclude=("id",))))

    def update_item(self, item_id: str, item: Item) -> Item:
        data = self.request(f"/items/{item_id}", method="PUT", body=item.to_dict(exclude=("id",)))
        return Item.from_dict(data)

    def delete_item(self, item_id: str) -> None:
        return self.request(f"/items/{item_id}", method="DELETE")

    # ---- Packaging ----------------------------------------------------------

    def list_packaging(self) -> list[Packaging]:
        return [Packaging.from_dict(p) for p in self.request("/packaging") or []]

    def create_packaging(self, packaging: Packaging) -> Packaging:
        data = self.request("/packaging", method="POST", body=packaging.to_dict(exclude=("id",)))
        return Packaging.from_dict(data)

    def update_packaging(self, packaging_id: str, packaging: Packaging) -> Packaging:
        data = self.request(f"/packaging/{packaging_id}", method="PUT", body=packaging.to_dict(exclude=("id",)))
        return Packaging.from_dict(data)

    def delete_packaging(self, packaging_id: str) -> None:
        return self.request(f"/packaging/{packaging_id}", method="DELETE")

    # ---- Quotes -------------------------------------------------------------

    def create_quote(self, shipment: ShipmentRequest) -> QuoteResult:
        return QuoteResult.from_dict(self.request("/quotes", method="POST", body=shipment.to_dict()))
