import logging
import re
from datetime import datetime
from typing import Optional

from app.models import db, OriginSettingsRecord
from services.errors import BadRequestError

log = logging.getLogger(__name__)

THEMES = ("dark", "light", "sepia")
_POSTCODE_RE = re.compile(r"^\d{4}$")


def _iso(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.replace(microsecond=0).isoformat() + "Z"


def settings_to_dict(record: OriginSettingsRecord) -> dict:
    return {
        "postcode": record.postcode,
        "suburb": record.suburb,
        "state": record.state,
        "country": record.country,
        "themePreference": record.theme_preference,
        "updatedAt": _iso(record.updated_at),
    }


def normalize_theme_preference(value) -> Optional[str]:
    """Lower-case a theme name; blank means "no preference"."""
    if value is None or not str(value).strip():
        return None
    normalized = str(value).strip().lower()
    if normalized not in THEMES:
        raise BadRequestError("Theme preference must be dark, light, or sepia")
    return normalized


def _current() -> Optional[OriginSettingsRecord]:
    return db.session.get(OriginSettingsRecord, 1)


def get_origin_settings() -> Optional[dict]:
    """Return stored origin settings, or None when the address is unset."""
    record = _current()
    if record is None or not record.postcode:
        return None
    return settings_to_dict(record)


def update_origin_settings(data: dict) -> dict:
    data = data or {}
    postcode = (data.get("postcode") or "").strip()
    if not postcode:
        raise BadRequestError("Postcode is required")
    if not _POSTCODE_RE.match(postcode):
        raise BadRequestError("Postcode must be 4 digits")
    for field in ("suburb", "state", "country"):
        if not (data.get(field) or "").strip():
            raise BadRequestError(f"{field.capitalize()} is required")

    theme = normalize_theme_preference(data.get("themePreference"))
    record = _current()
    if record is None:
        record = OriginSettingsRecord(id=1)
        db.session.add(record)
    elif theme is None:
        theme = record.theme_preference

    record.postcode = postcode
    record.suburb = data["suburb"].strip()
    record.state = data["state"].strip()
    record.country = data["country"].strip()
    record.theme_preference = theme
    record.updated_at = datetime.utcnow()
    db.session.commit()
    log.info("Origin settings updated: %s %s", record.postcode, record.suburb)
    return settings_to_dict(record)


def update_theme_preference(theme_preference) -> dict:
    """Store the theme on its own; the address may still be unset."""
    normalized = normalize_theme_preference(theme_preference)
    record = _current()
    if record is None:
        record = OriginSettingsRecord(id=1)
        db.session.add(record)
    record.theme_preference = normalized
    record.updated_at = datetime.utcnow()
    db.session.commit()
    log.info("Theme preference set to %s", normalized)
    return settings_to_dict(record)
