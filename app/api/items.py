from flask import jsonify

from services import items as item_service
from services.errors import NotFoundError
from . import api_bp
from .errors import json_body


@api_bp.get("/items")
def list_items():
    return jsonify(item_service.list_items())


@api_bp.post("/items")
def create_item():
    return jsonify(item_service.create_item(json_body())), 201


@api_bp.get("/items/<item_id>")
def get_item(item_id):
    item = item_service.get_item(item_id)
    if item is None:
        raise NotFoundError(f"Item with id {item_id} not found")
    return jsonify(item)


@api_bp.put("/items/<item_id>")
def update_item(item_id):
    return jsonify(item_service.update_item(item_id, json_body()))


@api_bp.delete("/items/<item_id>")
def delete_item(item_id):
    # Hard delete
    item_service.delete_item(item_id)
    return "", 204
