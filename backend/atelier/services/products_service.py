# backend/atelier/services/products_service.py
"""
Catalog Service

Products, their color variants, and the lookups the workflows use to
resolve a variant id into a priced product.

Stock levels are not touched here; authoring goes through
stock_service.set_stock.
"""
from __future__ import annotations

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Product, ProductColor, StockEntry, Sale, Order, Return, Store
from ..validation import ConflictError, NotFoundError, ValidationError, parse_store

PRODUCT_MUTABLE_FIELDS = {
    "model_number",
    "brand",
    "product_type",
    "store_price_cents",
    "online_price_cents",
    "specifications",
    "image_url",
}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _model_number_taken(model_number: str, exclude_id: int | None = None) -> bool:
    query = db.session.query(Product.id).filter(Product.model_number == model_number)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def list_products(store=None, search: str | None = None) -> list[Product]:
    """
    Catalog listing.

    With a store, only products that have stock rows in that store are
    returned. search matches model number, brand or product type
    (case-insensitive substring).
    """
    query = db.session.query(Product)

    if store is not None:
        store = parse_store(store)
        stocked = (
            db.session.query(ProductColor.product_id)
            .join(StockEntry, StockEntry.product_color_id == ProductColor.id)
            .filter(StockEntry.store == store)
        )
        query = query.filter(Product.id.in_(stocked))

    term = (search or "").strip()
    if term:
        pattern = f"%{term}%"
        query = query.filter(
            or_(
                Product.model_number.ilike(pattern),
                Product.brand.ilike(pattern),
                Product.product_type.ilike(pattern),
            )
        )

    return query.order_by(Product.brand.asc(), Product.model_number.asc()).all()


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def get_variant(variant_id: int) -> ProductColor:
    """Resolve a color variant (and, through it, its product)."""
    variant = db.session.get(ProductColor, variant_id)
    if variant is None:
        raise NotFoundError(f"Product color {variant_id} not found")
    return variant


def channel_price(variant: ProductColor, store: Store) -> int:
    return variant.product.price_for(store)


def create_product(*, patch: dict) -> Product:
    """Create product using a validated patch dict."""
    if _model_number_taken(patch["model_number"]):
        raise ConflictError(f"Model number {patch['model_number']} already exists")

    product = Product()
    apply_product_patch(product, patch)
    db.session.add(product)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Model number {patch['model_number']} already exists")
    return product


def update_product(*, product_id: int, patch: dict) -> Product:
    product = get_product(product_id)

    if "model_number" in patch and _model_number_taken(patch["model_number"], exclude_id=product.id):
        raise ConflictError(f"Model number {patch['model_number']} already exists")

    apply_product_patch(product, patch)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Model number {patch.get('model_number')} already exists")
    return product


def _variant_has_history(variant_ids: list[int]) -> bool:
    if not variant_ids:
        return False
    checks = (
        db.session.query(Sale.id).filter(Sale.product_color_id.in_(variant_ids)),
        db.session.query(Order.id).filter(Order.product_color_id.in_(variant_ids)),
        db.session.query(Return.id).filter(
            or_(
                Return.original_product_color_id.in_(variant_ids),
                Return.new_product_color_id.in_(variant_ids),
            )
        ),
    )
    return any(q.first() is not None for q in checks)


def delete_product(*, product_id: int) -> None:
    """
    Delete a product with its colors and stock rows.

    Products referenced by recorded sales, orders or returns are kept;
    the transaction history must stay resolvable.
    """
    product = get_product(product_id)
    if _variant_has_history([c.id for c in product.colors]):
        raise ConflictError("Product has recorded transactions and cannot be deleted")

    db.session.delete(product)
    db.session.commit()


def add_color(*, product_id: int, color_name: str) -> tuple[ProductColor, bool]:
    """
    Get-or-create a color variant by (product, color name).

    Returns (variant, created).
    """
    color_name = (color_name or "").strip()
    if not color_name:
        raise ValidationError("color_name cannot be blank")
    if len(color_name) > 50:
        raise ValidationError("color_name exceeds max length 50")

    product = get_product(product_id)
    existing = (
        db.session.query(ProductColor)
        .filter_by(product_id=product.id, color_name=color_name)
        .first()
    )
    if existing is not None:
        return existing, False

    color = ProductColor(product_id=product.id, color_name=color_name)
    db.session.add(color)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        existing = (
            db.session.query(ProductColor)
            .filter_by(product_id=product.id, color_name=color_name)
            .one()
        )
        return existing, False
    return color, True


def delete_color(*, color_id: int) -> None:
    color = get_variant(color_id)
    if _variant_has_history([color.id]):
        raise ConflictError("Color has recorded transactions and cannot be deleted")

    db.session.delete(color)
    db.session.commit()
