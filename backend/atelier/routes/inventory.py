# backend/atelier/routes/inventory.py
"""
Stock ledger routes.

Reads are per store. Authoring (PUT /api/inventory) sets an absolute
level for one (color, store, size); sales, orders and returns move stock
through their own workflows, never through these routes.
"""
from flask import Blueprint, request, jsonify, current_app

from ..models import StockEntry
from ..services import stock_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_stock,
    normalize_size,
    ValidationError,
    NotFoundError,
)
from ..decorators import require_store


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api")

STOCK_SET_POLICY = ModelValidationPolicy(
    writable_fields={"product_color_id", "store", "size", "quantity"},
    required_on_create={"product_color_id", "store", "size", "quantity"},
)


@inventory_bp.get("/<store>/inventory")
@require_store
def list_inventory_route(store):
    """
    Stock entries for a store.

    Query params:
    - variant_id: int (optional) - only this color variant
    """
    variant_id = request.args.get("variant_id")
    try:
        if variant_id is not None:
            if not variant_id.isdigit():
                raise ValidationError("variant_id must be a positive integer")
            variant_id = int(variant_id)
        entries = stock_service.list_stock(store, variant_id=variant_id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"store": store.value, "inventory": [e.to_dict() for e in entries]}), 200


@inventory_bp.get("/<store>/inventory/availability")
@require_store
def availability_route(store):
    """
    Query params:
    - product_color_id: int (required)
    - size: str (required)
    - quantity: int (optional, default 1)
    """
    variant_id = request.args.get("product_color_id", type=int)
    size = request.args.get("size")
    quantity = request.args.get("quantity", default=1, type=int)

    if variant_id is None or size is None:
        return jsonify({"error": "product_color_id and size required"}), 400
    if quantity is None:
        return jsonify({"error": "quantity must be an integer"}), 400

    try:
        size = normalize_size(size)
        available = stock_service.check_availability(variant_id, store, size, quantity)
        on_hand = stock_service.get_quantity_on_hand(variant_id, store, size)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({
        "product_color_id": variant_id,
        "store": store.value,
        "size": size,
        "requested_quantity": quantity,
        "quantity_on_hand": on_hand,
        "available": available,
    }), 200


@inventory_bp.put("/inventory")
def set_stock_route():
    """Set an absolute stock level (creates the entry when missing)."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=StockEntry, payload=payload, policy=STOCK_SET_POLICY, partial=False)
        enforce_rules_stock(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        entry = stock_service.set_stock(
            patch["product_color_id"],
            patch["store"],
            patch["size"],
            patch["quantity"],
        )
        return jsonify({"entry": entry.to_dict()}), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to set stock")
        return jsonify({"error": "Internal server error"}), 500
