import os
import sys

import pytest

# Ensure project root is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config import Config  # noqa: E402
from app import create_app  # noqa: E402
from app.models import db  # noqa: E402
from client.api import ApiError  # noqa: E402
from client.models import Item, OriginSettings, Packaging  # noqa: E402


class TestingConfig(Config):
    TESTING = True
    # Flask-SQLAlchemy keeps one shared connection for in-memory SQLite
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    RATE_TABLE_PATH = ""
    ENABLED_PROVIDERS = ""


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


class FakeClient:
    """In-memory stand-in for ``ApiClient`` that records every call.

    Put an ``ApiError`` in ``errors[method_name]`` to make that call fail.
    """

    def __init__(self, settings=None, items=(), packagings=(), quote_result=None):
        self.settings = settings
        self.items = list(items)
        self.packagings = list(packagings)
        self.quote_result = quote_result
        self.errors = {}
        self.calls = []
        self._seq = 0
        self.closed = False

    def _call(self, name, *args):
        self.calls.append((name, *args))
        if name in self.errors:
            raise self.errors[name]

    def _next_id(self, prefix):
        self._seq += 1
        return f"{prefix}-new-{self._seq}"

    def called(self, name):
        return [c for c in self.calls if c[0] == name]

    def get_origin_settings(self):
        self._call("get_origin_settings")
        return self.settings

    def update_origin_settings(self, settings):
        self._call("update_origin_settings", settings.to_dict())
        self.settings = OriginSettings.from_dict({**settings.to_dict(), "updatedAt": "2024-05-01T10:00:00Z"})
        return self.settings

    def update_theme_preference(self, theme_preference):
        self._call("update_theme_preference", theme_preference)
        current = self.settings or OriginSettings()
        self.settings = OriginSettings.from_dict({**current.to_dict(), "themePreference": theme_preference})
        return self.settings

    def list_items(self):
        self._call("list_items")
        return list(self.items)

    def create_item(self, item):
        self._call("create_item", item.to_dict(exclude=("id",)))
        created = Item.from_dict({**item.to_dict(), "id": self._next_id("item")})
        self.items.append(created)
        return created

    def update_item(self, item_id, item):
        self._call("update_item", item_id, item.to_dict(exclude=("id",)))
        updated = Item.from_dict({**item.to_dict(), "id": item_id})
        self.items = [updated if i.id == item_id else i for i in self.items]
        return updated

    def delete_item(self, item_id):
        self._call("delete_item", item_id)
        self.items = [i for i in self.items if i.id != item_id]

    def list_packaging(self):
        self._call("list_packaging")
        return list(self.packagings)

    def create_packaging(self, packaging):
        self._call("create_packaging", packaging.to_dict(exclude=("id",)))
        created = Packaging.from_dict({**packaging.to_dict(), "id": self._next_id("pack")})
        self.packagings.append(created)
        return created

    def update_packaging(self, packaging_id, packaging):
        self._call("update_packaging", packaging_id, packaging.to_dict(exclude=("id",)))
        updated = Packaging.from_dict({**packaging.to_dict(), "id": packaging_id})
        self.packagings = [updated if p.id == packaging_id else p for p in self.packagings]
        return updated

    def delete_packaging(self, packaging_id):
        self._call("delete_packaging", packaging_id)
        self.packagings = [p for p in self.packagings if p.id != packaging_id]

    def create_quote(self, shipment):
        self._call("create_quote", shipment.to_dict())
        return self.quote_result

    def close(self):
        self.closed = True


SYDNEY = OriginSettings(postcode="2000", suburb="Sydney", state="NSW", country="AU")


@pytest.fixture
def fake_client():
    return FakeClient(
        settings=SYDNEY,
        items=[
            Item(id="item-1", name="Mug", unit_weight_grams=350),
            Item(id="item-2", name="Book", unit_weight_grams=500),
        ],
        packagings=[
            Packaging(id="pack-1", name="Small box", length_cm=10, width_cm=10, height_cm=10,
                      internal_volume_cubic_cm=1000, packaging_cost_aud=1.5),
            Packaging(id="pack-2", name="Satchel", length_cm=30, width_cm=20, height_cm=5,
                      internal_volume_cubic_cm=3000, packaging_cost_aud=0.8),
        ],
    )


@pytest.fixture
def api_error():
    def make(message, status=400):
        return ApiError(status, message, {"error": {"message": message}})
    return make
