from flask import Blueprint

api_bp = Blueprint("api", __name__)

from . import errors, settings, items, packaging, quotes  # noqa: E402,F401
