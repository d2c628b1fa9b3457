# Overview: Flask API routes for returns operations; parses input and returns JSON responses.

# backend/atelier/routes/returns.py
"""
Returns API routes.

A return is recorded at a store: the original item is credited back to
that store's stock; exchanges debit the replacement in the same
transaction.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import return_service
from ..services.return_service import ReturnRequest
from ..services.stock_service import InsufficientStockError, StockIntegrityError
from ..validation import ValidationError, NotFoundError
from ..decorators import require_store, require_context


returns_bp = Blueprint("returns", __name__, url_prefix="/api")


@returns_bp.get("/<store>/returns")
@require_store
def list_returns_route(store):
    limit = request.args.get("limit", default=50, type=int)
    if limit is None or limit <= 0:
        return jsonify({"error": "limit must be a positive integer"}), 400

    returns = return_service.list_returns(store, limit=min(limit, 500))
    return jsonify({"store": store.value, "returns": [r.to_dict() for r in returns]}), 200


@returns_bp.post("/<store>/returns")
@require_store
@require_context()
def create_return_route(store):
    """
    Record a refund or exchange.

    Headers: X-Employee-Id (required)
    Body:
        return_type: refund | exchange_size | exchange_color | exchange_model
        original_product_color_id, original_size, original_quantity
        original_sale_id or original_order_id (optional)
        new_product_color_id, new_size, new_quantity (exchanges only)
        reason (optional)

    Returns:
        201: Return recorded
        400: Invalid input or replacement out of stock
        404: Unknown color, sale or order
    """
    payload = request.get_json(silent=True) or {}

    try:
        return_request = ReturnRequest.from_payload(payload)
        return_doc = return_service.record_return(g.request_context, return_request)
        return jsonify({"return": return_doc.to_dict()}), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except StockIntegrityError as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except Exception:
        current_app.logger.exception("Failed to record return")
        return jsonify({"error": "Internal server error"}), 500
