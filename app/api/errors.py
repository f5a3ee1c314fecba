from datetime import datetime

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from services.errors import ServiceError, BadRequestError
from . import api_bp


def error_response(status, code, message):
    """Build the ``{"error": {...}}`` envelope every failed API call returns."""
    body = {
        "error": {
            "code": code,
            "message": message,
            "timestamp": datetime.utcnow().replace(microsecond=0).isoformat() + "Z",
        }
    }
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None and request.get_data():
        raise BadRequestError("Malformed JSON request body")
    return data or {}


@api_bp.errorhandler(ServiceError)
def handle_service_error(e):
    if e.status_code >= 500:
        current_app.logger.error("%s %s failed: %s", request.method, request.path, e.message)
    return error_response(e.status_code, e.code, e.message)


@api_bp.errorhandler(HTTPException)
def handle_http_error(e):
    code = "NOT_FOUND" if e.code == 404 else "BAD_REQUEST" if e.code < 500 else "INTERNAL_ERROR"
    return error_response(e.code, code, e.description or e.name)


@api_bp.errorhandler(Exception)
def handle_unexpected(e):
    current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
    return error_response(500, "INTERNAL_ERROR", "Internal server error")
