import logging
from typing import Optional

from app.models import db, PackagingRecord
from services.errors import BadRequestError, NotFoundError

log = logging.getLogger(__name__)

DIMENSIONS = (("lengthCm", "length_cm"), ("widthCm", "width_cm"), ("heightCm", "height_cm"))


def packaging_to_dict(p: PackagingRecord) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "lengthCm": p.length_cm,
        "widthCm": p.width_cm,
        "heightCm": p.height_cm,
        "internalVolumeCubicCm": p.internal_volume_cubic_cm,
        "packagingCostAud": p.packaging_cost_aud,
    }


def _number(data: dict, key: str, cast=int):
    value = data.get(key)
    if value in (None, ""):
        return 0
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise BadRequestError(f"Invalid value for field '{key}'")


def _by_name(name: str) -> Optional[PackagingRecord]:
    return PackagingRecord.query.filter_by(name=name).first()


def list_packaging() -> list[dict]:
    rows = PackagingRecord.query.order_by(PackagingRecord.seq).all()
    return [packaging_to_dict(p) for p in rows]


def get_packaging(packaging_id: str) -> Optional[dict]:
    if not packaging_id or not str(packaging_id).strip():
        raise BadRequestError("Id must not be null or blank")
    p = PackagingRecord.query.filter_by(id=packaging_id).first()
    return packaging_to_dict(p) if p else None


def create_packaging(data: dict) -> dict:
    data = data or {}
    name = (data.get("name") or "").strip()
    if not name:
        raise BadRequestError("Packaging name is required")
    length, width, height = (_number(data, key) for key, _ in DIMENSIONS)
    if length <= 0 or width <= 0 or height <= 0:
        raise BadRequestError("Packaging dimensions (length, height, width) must be greater than 0")
    cost = _number(data, "packagingCostAud", float)
    if cost <= 0:
        raise BadRequestError("Packaging cost must be greater than 0")
    volume = _number(data, "internalVolumeCubicCm")
    if volume <= 0:
        volume = length * width * height
    if _by_name(name):
        raise BadRequestError(f"Packaging with name {name} already exists")

    p = PackagingRecord(
        name=name,
        description=data.get("description"),
        length_cm=length,
        width_cm=width,
        height_cm=height,
        internal_volume_cubic_cm=volume,
        packaging_cost_aud=cost,
    )
    db.session.add(p)
    db.session.commit()
    log.info("Created packaging %s (%s)", p.id, p.name)
    return packaging_to_dict(p)


def update_packaging(packaging_id: str, data: dict) -> dict:
    """Merge ``data`` into existing packaging; non-positive numbers keep their value."""
    if not packaging_id or not str(packaging_id).strip():
        raise BadRequestError("id must not be null or blank")
    data = data or {}
    name = (data.get("name") or "").strip()
    if name:
        duplicate = _by_name(name)
        if duplicate and duplicate.id != packaging_id:
            raise BadRequestError(f"Packaging with name {name} already exists")

    p = PackagingRecord.query.filter_by(id=packaging_id).first()
    if p is None:
        raise NotFoundError(f"Packaging with id {packaging_id} not found")

    if name:
        p.name = name
    if data.get("description") is not None:
        p.description = data["description"]
    for key, attr in DIMENSIONS:
        value = _number(data, key)
        if value > 0:
            setattr(p, attr, value)
    volume = _number(data, "internalVolumeCubicCm")
    if volume > 0:
        p.internal_volume_cubic_cm = volume
    cost = _number(data, "packagingCostAud", float)
    if cost > 0:
        p.packaging_cost_aud = cost
    db.session.commit()
    log.info("Updated packaging %s", p.id)
    return packaging_to_dict(p)


def delete_packaging(packaging_id: str) -> None:
    if not packaging_id or not str(packaging_id).strip():
        raise BadRequestError("id must not be null or blank")
    deleted = PackagingRecord.query.filter_by(id=packaging_id).delete()
    db.session.commit()
    if deleted:
        log.info("Deleted packaging %s", packaging_id)
