import json

import pytest
import requests

from client.api import ApiClient, ApiError
from client.models import Item, OriginSettings, ShipmentItemSelection, ShipmentRequest

BASE = "http://backend.test/api"


def make_response(status, body=None, reason=""):
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    if body is None:
        resp._content = b""
    elif isinstance(body, (bytes, str)):
        resp._content = body.encode() if isinstance(body, str) else body
    else:
        resp._content = json.dumps(body).encode()
    return resp


class StubSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    closed = False

    def close(self):
        self.closed = True

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def make_client(*responses):
    session = StubSession(*responses)
    return ApiClient(base_url=BASE, session=session, timeout=5), session


def test_structured_error_body_sets_message_and_status():
    body = {"error": {"code": "BAD_REQUEST", "message": "Item name is required"}}
    api, _ = make_client(make_response(400, body, "BAD REQUEST"))

    with pytest.raises(ApiError) as exc:
        api.request("/items", method="POST", body={})

    assert exc.value.status == 400
    assert exc.value.message == "Item name is required"
    assert exc.value.details == body


def test_unparseable_error_body_falls_back_to_status_text():
    api, _ = make_client(make_response(502, "<html>gateway</html>", "Bad Gateway"))

    with pytest.raises(ApiError) as exc:
        api.request("/items")

    assert exc.value.status == 502
    assert exc.value.message == "Bad Gateway"
    assert exc.value.details is None


def test_error_without_status_text_reads_request_failed():
    api, _ = make_client(make_response(500))

    with pytest.raises(ApiError) as exc:
        api.request("/items")

    assert exc.value.message == "Request failed"


def test_error_body_without_message_keeps_status_text():
    api, _ = make_client(make_response(409, {"error": {"code": "X"}}, "Conflict"))

    with pytest.raises(ApiError) as exc:
        api.request("/items")

    assert exc.value.message == "Conflict"
    assert exc.value.details == {"error": {"code": "X"}}


def test_204_resolves_to_none():
    api, session = make_client(make_response(204))

    assert api.delete_item("item-1") is None
    method, url, _ = session.calls[0]
    assert (method, url) == ("DELETE", f"{BASE}/items/item-1")


def test_success_returns_parsed_json_and_sends_json_body():
    api, session = make_client(make_response(201, {"id": "a1", "name": "Mug"}))

    assert api.request("/items", method="POST", body={"name": "Mug"}) == {"id": "a1", "name": "Mug"}

    _, _, kwargs = session.calls[0]
    assert json.loads(kwargs["data"]) == {"name": "Mug"}
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert kwargs["timeout"] == 5


def test_transport_failure_is_a_network_error():
    api, _ = make_client(requests.ConnectionError("connection refused"))

    with pytest.raises(ApiError) as exc:
        api.list_items()

    assert exc.value.status == 0
    assert exc.value.message == "Network error"
    assert "connection refused" in exc.value.details


def test_get_origin_settings_returns_none_on_404():
    body = {"error": {"code": "NOT_FOUND", "message": "Origin settings not configured"}}
    api, _ = make_client(make_response(404, body, "NOT FOUND"))

    assert api.get_origin_settings() is None


def test_get_origin_settings_reraises_other_errors():
    api, _ = make_client(make_response(500, {"error": {"message": "boom"}}, "INTERNAL SERVER ERROR"))

    with pytest.raises(ApiError) as exc:
        api.get_origin_settings()

    assert exc.value.status == 500
    assert exc.value.message == "boom"


def test_get_origin_settings_parses_record():
    body = {
        "postcode": "2000",
        "suburb": "Sydney",
        "state": "NSW",
        "country": "AU",
        "themePreference": "dark",
        "updatedAt": "2024-05-01T10:00:00Z",
    }
    api, _ = make_client(make_response(200, body))

    settings = api.get_origin_settings()

    assert settings == OriginSettings(
        postcode="2000", suburb="Sydney", state="NSW", country="AU",
        theme_preference="dark", updated_at="2024-05-01T10:00:00Z",
    )


def test_update_origin_settings_sends_full_record():
    api, session = make_client(make_response(200, {"postcode": "2000"}))

    api.update_origin_settings(OriginSettings(postcode="2000", suburb="Sydney", state="NSW", country="AU"))

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("PUT", f"{BASE}/settings/origin")
    assert json.loads(kwargs["data"]) == {
        "postcode": "2000",
        "suburb": "Sydney",
        "state": "NSW",
        "country": "AU",
        "themePreference": None,
        "updatedAt": None,
    }


def test_create_quote_posts_request_and_parses_result():
    result = {
        "totalWeightGrams": 700,
        "weightInKg": 0.7,
        "volumeWeightInKg": 0.25,
        "totalVolumeCubicCm": 1000,
        "origin": {"postcode": "2000", "suburb": "Sydney", "state": "NSW", "country": "AU"},
        "destination": {"postcode": "3000", "suburb": "Melbourne", "state": "VIC", "country": "AU"},
        "packaging": {"id": "pack-1", "name": "Small box", "packagingCostAud": 1.5},
        "carrierQuotes": [{
            "carrier": "AUSPOST",
            "serviceName": "Derived from rules",
            "deliveryEtaDaysMin": 3,
            "deliveryEtaDaysMax": 6,
            "totalCostAud": 16.75,
            "pricingSource": "RULES",
            "ruleFallbackUsed": True,
        }],
        "currency": "AUD",
        "generatedAt": "2024-05-01T10:00:00Z",
    }
    api, session = make_client(make_response(200, result))
    shipment = ShipmentRequest(
        destination_postcode="3000",
        packaging_id="pack-1",
        items=[ShipmentItemSelection(item_id="item-1", quantity=2)],
    )

    quote = api.create_quote(shipment)

    _, url, kwargs = session.calls[0]
    assert url == f"{BASE}/quotes"
    assert json.loads(kwargs["data"])["items"] == [{"itemId": "item-1", "quantity": 2}]
    assert quote.destination.suburb == "Melbourne"
    assert quote.packaging.name == "Small box"
    assert quote.carrier_quotes[0].delivery_eta_days_max == 6
    assert quote.carrier_quotes[0].rule_fallback_used is True


def test_create_and_update_payloads_leave_out_id():
    api, session = make_client(
        make_response(201, {"id": "item-9", "name": "Mug", "unitWeightGrams": 350}),
        make_response(200, {"id": "item-9", "name": "Mug", "unitWeightGrams": 400}),
    )
    created = api.create_item(Item(id="ignored", name="Mug", unit_weight_grams=350))
    api.update_item(created.id, Item(id=created.id, name="Mug", unit_weight_grams=400))

    create_body = json.loads(session.calls[0][2]["data"])
    update_method, update_url, update_kwargs = session.calls[1]
    assert "id" not in create_body
    assert created.id == "item-9"
    assert (update_method, update_url) == ("PUT", f"{BASE}/items/item-9")
    assert "id" not in json.loads(update_kwargs["data"])


def test_close_releases_the_session():
    api, session = make_client()

    api.close()

    assert session.closed is True
