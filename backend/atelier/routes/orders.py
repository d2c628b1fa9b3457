# Overview: Flask API routes for online orders and their delivery status.

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Order, Store
from ..services import order_service
from ..services.order_service import CustomerInfo
from ..services.stock_service import InsufficientStockError, StockIntegrityError
from ..validation import ModelValidationPolicy, validate_payload, ValidationError, NotFoundError
from ..decorators import require_context


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")

ORDER_POLICY = ModelValidationPolicy(
    writable_fields={
        "product_color_id",
        "size",
        "quantity",
        "payment_method",
        "unit_price_cents",
        "customer_name",
        "customer_phone",
        "customer_emirate",
        "customer_address",
        "tracking_number",
        "notes",
    },
    required_on_create={
        "product_color_id",
        "size",
        "quantity",
        "payment_method",
        "customer_name",
        "customer_phone",
        "customer_emirate",
        "customer_address",
    },
)


@orders_bp.get("")
def list_orders_route():
    """
    Query params:
    - status: pending | in_delivery | delivered | cancelled (optional)
    - limit: int (optional, default 50)
    """
    status = request.args.get("status")
    limit = request.args.get("limit", default=50, type=int)
    if limit is None or limit <= 0:
        return jsonify({"error": "limit must be a positive integer"}), 400

    try:
        orders = order_service.list_orders(status=status, limit=min(limit, 500))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"orders": [o.to_dict() for o in orders]}), 200


@orders_bp.post("")
@require_context(store=Store.ONLINE)
def create_order_route():
    """
    Record an online order and debit online stock.

    Headers: X-Employee-Id (required)
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Order, payload=payload, policy=ORDER_POLICY, partial=False)

        customer = CustomerInfo(
            name=patch["customer_name"],
            phone=patch["customer_phone"],
            emirate=patch["customer_emirate"],
            address=patch["customer_address"],
            tracking_number=patch.get("tracking_number"),
            notes=patch.get("notes"),
        )
        order = order_service.record_order(
            g.request_context,
            variant_id=patch["product_color_id"],
            size=patch["size"],
            quantity=patch["quantity"],
            payment_method=patch["payment_method"],
            customer=customer,
            unit_price_cents=patch.get("unit_price_cents"),
        )
        return jsonify({"order": order.to_dict()}), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except StockIntegrityError as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except Exception:
        current_app.logger.exception("Failed to record order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<order_id>")
def get_order_route(order_id: str):
    try:
        order = order_service.get_order(order_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"order": order.to_dict()}), 200


@orders_bp.put("/<order_id>/status")
def update_order_status_route(order_id: str):
    """Body: {"status": "in_delivery" | "delivered" | "cancelled"}"""
    payload = request.get_json(silent=True) or {}
    status = payload.get("status")
    if not status:
        return jsonify({"error": "status required"}), 400

    try:
        order = order_service.update_order_status(order_id, status)
        return jsonify({"order": order.to_dict()}), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update order status")
        return jsonify({"error": "Internal server error"}), 500
