# Overview: Dashboard figures for one store; read-only aggregates over sales, orders and stock.

from __future__ import annotations

from datetime import timedelta

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Order, OrderStatus, Product, ProductColor, Sale, StockEntry, Store
from ..time_utils import start_of_day, utcnow
from ..validation import parse_store


def get_dashboard_metrics(store) -> dict:
    """
    Headline numbers for a store dashboard.

    today_sales_cents covers the current UTC day. pending_orders is only
    meaningful for the online store and is 0 for the boutique.
    """
    store = parse_store(store)

    total_products = (
        db.session.query(func.count(func.distinct(ProductColor.product_id)))
        .join(StockEntry, StockEntry.product_color_id == ProductColor.id)
        .filter(StockEntry.store == store)
        .scalar()
    ) or 0

    day_start = start_of_day(utcnow())
    today_sales_cents = (
        db.session.query(func.coalesce(func.sum(Sale.total_cents), 0))
        .filter(
            Sale.store == store,
            Sale.created_at >= day_start,
            Sale.created_at < day_start + timedelta(days=1),
        )
        .scalar()
    ) or 0

    pending_orders = 0
    if store is Store.ONLINE:
        pending_orders = (
            db.session.query(func.count(Order.id))
            .filter(Order.status == OrderStatus.PENDING)
            .scalar()
        ) or 0

    threshold = current_app.config["LOW_STOCK_THRESHOLD"]
    low_stock = (
        db.session.query(func.count(StockEntry.id))
        .filter(StockEntry.store == store, StockEntry.quantity < threshold)
        .scalar()
    ) or 0

    return {
        "store": store.value,
        "total_products": int(total_products),
        "today_sales_cents": int(today_sales_cents),
        "pending_orders": int(pending_orders),
        "low_stock_items": int(low_stock),
        "low_stock_threshold": threshold,
    }


def get_top_products(store, limit: int = 5) -> list[dict]:
    """Products ranked by units sold at the store, with revenue."""
    store = parse_store(store)

    units = func.sum(Sale.quantity).label("units_sold")
    revenue = func.sum(Sale.total_cents).label("revenue_cents")
    rows = (
        db.session.query(Product.id, Product.brand, Product.model_number, units, revenue)
        .join(ProductColor, ProductColor.product_id == Product.id)
        .join(Sale, Sale.product_color_id == ProductColor.id)
        .filter(Sale.store == store)
        .group_by(Product.id, Product.brand, Product.model_number)
        .order_by(units.desc(), Product.id.asc())
        .limit(limit)
        .all()
    )

    return [
        {
            "product_id": row.id,
            "brand": row.brand,
            "model_number": row.model_number,
            "units_sold": int(row.units_sold or 0),
            "revenue_cents": int(row.revenue_cents or 0),
        }
        for row in rows
    ]
