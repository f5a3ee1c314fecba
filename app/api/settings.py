from flask import jsonify

from services import settings as settings_service
from services.errors import NotFoundError
from . import api_bp
from .errors import json_body


@api_bp.get("/settings/origin")
def get_origin():
    origin = settings_service.get_origin_settings()
    if origin is None:
        raise NotFoundError("Origin settings not configured")
    return jsonify(origin)


@api_bp.put("/settings/origin")
def update_origin():
    return jsonify(settings_service.update_origin_settings(json_body()))


@api_bp.put("/settings/theme")
def update_theme():
    data = json_body()
    return jsonify(settings_service.update_theme_preference(data.get("themePreference")))
