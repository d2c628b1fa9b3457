# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/atelier/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Sale
from ..services import sales_service
from ..services.stock_service import InsufficientStockError, StockIntegrityError
from ..validation import ModelValidationPolicy, validate_payload, ValidationError, NotFoundError
from ..decorators import require_store, require_context


sales_bp = Blueprint("sales", __name__, url_prefix="/api")

SALE_POLICY = ModelValidationPolicy(
    writable_fields={"product_color_id", "size", "quantity", "payment_method", "unit_price_cents"},
    required_on_create={"product_color_id", "size", "quantity", "payment_method"},
)


@sales_bp.get("/<store>/sales")
@require_store
def list_sales_route(store):
    limit = request.args.get("limit", default=50, type=int)
    if limit is None or limit <= 0:
        return jsonify({"error": "limit must be a positive integer"}), 400

    sales = sales_service.list_sales(store, limit=min(limit, 500))
    return jsonify({"store": store.value, "sales": [s.to_dict() for s in sales]}), 200


@sales_bp.post("/<store>/sales")
@require_store
@require_context()
def create_sale_route(store):
    """
    Record a sale and debit stock.

    Headers: X-Employee-Id (required)
    Body: product_color_id, size, quantity, payment_method, unit_price_cents (optional)
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Sale, payload=payload, policy=SALE_POLICY, partial=False)

        sale = sales_service.record_sale(
            g.request_context,
            variant_id=patch["product_color_id"],
            size=patch["size"],
            quantity=patch["quantity"],
            payment_method=patch["payment_method"],
            unit_price_cents=patch.get("unit_price_cents"),
        )
        return jsonify({"sale": sale.to_dict()}), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except StockIntegrityError as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/sales/<sale_id>")
def get_sale_route(sale_id: str):
    try:
        sale = sales_service.get_sale(sale_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"sale": sale.to_dict()}), 200
