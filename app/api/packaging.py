from flask import jsonify

from services import packaging as packaging_service
from services.errors import NotFoundError
from . import api_bp
from .errors import json_body


@api_bp.get("/packaging")
def list_packaging():
    return jsonify(packaging_service.list_packaging())


@api_bp.post("/packaging")
def create_packaging():
    return jsonify(packaging_service.create_packaging(json_body())), 201


@api_bp.get("/packaging/<packaging_id>")
def get_packaging(packaging_id):
    packaging = packaging_service.get_packaging(packaging_id)
    if packaging is None:
        raise NotFoundError(f"Packaging with id {packaging_id} not found")
    return jsonify(packaging)


@api_bp.put("/packaging/<packaging_id>")
def update_packaging(packaging_id):
    return jsonify(packaging_service.update_packaging(packaging_id, json_body()))


@api_bp.delete("/packaging/<packaging_id>")
def delete_packaging(packaging_id):
    packaging_service.delete_packaging(packaging_id)
    return "", 204
