# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/atelier/routes/products.py
"""
Catalog routes: products and their color variants.

Listing is per store (only products stocked there); detail, authoring and
deletion are store-independent.
"""
from flask import Blueprint, request, jsonify, current_app

from ..models import Product
from ..services import products_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    parse_store,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_store

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "model_number",
        "brand",
        "product_type",
        "store_price_cents",
        "online_price_cents",
        "specifications",
        "image_url",
    },
    required_on_create={"model_number", "brand", "product_type", "store_price_cents", "online_price_cents"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api")


@products_bp.get("/<store>/products")
@require_store
def list_products_route(store):
    """
    Products stocked in a store.

    Query params:
    - search: str (optional) - model number, brand or product type substring
    """
    search = request.args.get("search")
    products = products_service.list_products(store=store, search=search)
    return jsonify({
        "store": store.value,
        "products": [p.to_dict(include_colors=True, store=store) for p in products],
    }), 200


@products_bp.get("/products/<int:product_id>")
def get_product_route(product_id: int):
    """Product with colors and stock; ?store= narrows stock to one store."""
    store = request.args.get("store")
    try:
        store = parse_store(store) if store else None
        product = products_service.get_product(product_id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"product": product.to_dict(include_colors=True, store=store)}), 200


@products_bp.post("/products")
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        product = products_service.create_product(patch=patch)
        return jsonify({"product": product.to_dict(include_colors=True)}), 201

    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.put("/products/<int:product_id>")
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        product = products_service.update_product(product_id=product_id, patch=patch)
        return jsonify({"product": product.to_dict(include_colors=True)}), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/products/<int:product_id>")
def delete_product_route(product_id: int):
    try:
        products_service.delete_product(product_id=product_id)
        return jsonify({"deleted": True, "product_id": product_id}), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.post("/products/<int:product_id>/colors")
def add_color_route(product_id: int):
    """
    Add a color variant.

    Returns 201 when created, 200 when the color already existed.
    """
    payload = request.get_json(silent=True) or {}
    color_name = payload.get("color_name")
    if not isinstance(color_name, str):
        return jsonify({"error": "color_name required"}), 400

    try:
        color, created = products_service.add_color(product_id=product_id, color_name=color_name)
        return jsonify({"color": color.to_dict(include_inventory=True)}), (201 if created else 200)

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to add color")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/colors/<int:color_id>")
def delete_color_route(color_id: int):
    try:
        products_service.delete_color(color_id=color_id)
        return jsonify({"deleted": True, "color_id": color_id}), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to delete color")
        return jsonify({"error": "Internal server error"}), 500
