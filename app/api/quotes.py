from flask import jsonify

from services import quote as quote_service
from . import api_bp
from .errors import json_body


@api_bp.post("/quotes")
def create_quote():
    """Price a ShipmentRequest; see ``services.quote.calculate_quote``."""
    return jsonify(quote_service.calculate_quote(json_body()))
