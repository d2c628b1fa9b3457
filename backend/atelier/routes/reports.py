# Overview: Flask API routes for the store dashboard.

from flask import Blueprint, request, jsonify

from ..services import reporting_service
from ..decorators import require_store

reports_bp = Blueprint("reports", __name__, url_prefix="/api")


@reports_bp.get("/<store>/dashboard")
@require_store
def dashboard_route(store):
    """
    Headline metrics plus best sellers.

    Query params:
    - top: int (optional, default 5) - number of top products
    """
    top = request.args.get("top", default=5, type=int)
    if top is None or top <= 0:
        return jsonify({"error": "top must be a positive integer"}), 400

    return jsonify({
        "metrics": reporting_service.get_dashboard_metrics(store),
        "top_products": reporting_service.get_top_products(store, limit=min(top, 50)),
    }), 200
