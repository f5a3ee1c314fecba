import logging
from typing import Optional

from app.models import db, ItemRecord
from services.errors import BadRequestError, NotFoundError

log = logging.getLogger(__name__)


def item_to_dict(item: ItemRecord) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "unitWeightGrams": item.unit_weight_grams,
    }


def _weight(data: dict) -> int:
    """Return ``unitWeightGrams`` as an int, 0 when absent."""
    value = data.get("unitWeightGrams")
    if value in (None, ""):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequestError("Item unit weight must be a whole number of grams")


def _by_name(name: str) -> Optional[ItemRecord]:
    return ItemRecord.query.filter_by(name=name).first()


def list_items() -> list[dict]:
    return [item_to_dict(i) for i in ItemRecord.query.order_by(ItemRecord.seq).all()]


def get_item(item_id: str) -> Optional[dict]:
    if not item_id or not str(item_id).strip():
        raise BadRequestError("Id must not be null or blank")
    item = ItemRecord.query.filter_by(id=item_id).first()
    return item_to_dict(item) if item else None


def create_item(data: dict) -> dict:
    data = data or {}
    name = (data.get("name") or "").strip()
    if not name:
        raise BadRequestError("Item name is required")
    weight = _weight(data)
    if weight <= 0:
        raise BadRequestError("Item unit weight must be greater than 0")
    if _by_name(name):
        raise BadRequestError(f"Item with name {name} already exists")

    item = ItemRecord(name=name, description=data.get("description"), unit_weight_grams=weight)
    db.session.add(item)
    db.session.commit()
    log.info("Created item %s (%s)", item.id, item.name)
    return item_to_dict(item)


def update_item(item_id: str, data: dict) -> dict:
    """Merge ``data`` into an existing item; blank fields keep their value."""
    if not item_id or not str(item_id).strip():
        raise BadRequestError("id must not be null or blank")
    data = data or {}
    name = (data.get("name") or "").strip()
    if name:
        duplicate = _by_name(name)
        if duplicate and duplicate.id != item_id:
            raise BadRequestError(f"Item with name {name} already exists")

    item = ItemRecord.query.filter_by(id=item_id).first()
    if item is None:
        raise NotFoundError(f"Item with id {item_id} not found")

    weight = _weight(data)
    if name:
        item.name = name
    if data.get("description") is not None:
        item.description = data["description"]
    if weight > 0:
        item.unit_weight_grams = weight
    db.session.commit()
    log.info("Updated item %s", item.id)
    return item_to_dict(item)


def delete_item(item_id: str) -> None:
    if not item_id or not str(item_id).strip():
        raise BadRequestError("id must not be null or blank")
    deleted = ItemRecord.query.filter_by(id=item_id).delete()
    db.session.commit()
    if deleted:
        log.info("Deleted item %s", item_id)
