"""
Sales Service

A sale is recorded in one write transaction:
1. validate the request (size catalog, quantity, store/payment pairing)
2. availability pre-check (friendly rejection with on-hand details)
3. allocate the document number and persist the Sale
4. atomic stock debit (the actual safety mechanism)

Any failure rolls the whole transaction back: no sale without its debit,
no debit without its sale.
"""

from __future__ import annotations

from flask import current_app

from ..context import RequestContext
from ..extensions import db
from ..models import Sale, PaymentMethod
from ..validation import (
    NotFoundError,
    enforce_payment_method,
    enforce_price,
    normalize_size,
    parse_store,
    require_id,
    require_positive_quantity,
)
from .concurrency import begin_write, run_with_retry
from .document_service import DOCUMENT_SALE, next_document_number
from .employee_service import get_employee
from .products_service import channel_price, get_variant
from .stock_service import (
    InsufficientStockError,
    apply_debit,
    check_availability,
    get_quantity_on_hand,
)


def compute_sale_totals(unit_price_cents: int, quantity: int, payment_method: PaymentMethod) -> tuple[int, int, int]:
    """
    Returns (subtotal_cents, tax_cents, total_cents).

    Card payments carry VAT at CARD_TAX_RATE_BPS (nearest-cent, half-up);
    every other method is tax-free.
    """
    subtotal = unit_price_cents * quantity
    rate_bps = current_app.config["CARD_TAX_RATE_BPS"] if payment_method is PaymentMethod.CARD else 0
    tax = (subtotal * rate_bps + 5_000) // 10_000
    return subtotal, tax, subtotal + tax


def record_sale(
    context: RequestContext,
    *,
    variant_id: int,
    size,
    quantity: int,
    payment_method,
    unit_price_cents: int | None = None,
) -> Sale:
    """
    Record a sale at context.store and debit its stock.

    unit_price_cents defaults to the variant's channel price.

    Raises:
        ValidationError: bad size/quantity/price or payment method not
            accepted at the store
        NotFoundError: unknown variant or employee
        InsufficientStockError: not enough stock for (variant, store, size)
    """
    store = parse_store(context.store)
    variant_id = require_id(variant_id, "product_color_id")
    size = normalize_size(size)
    quantity = require_positive_quantity(quantity)
    payment_method = enforce_payment_method(store, payment_method)
    if unit_price_cents is not None:
        unit_price_cents = enforce_price(unit_price_cents, "unit_price_cents")

    def _op():
        begin_write()
        get_employee(context.employee_id)
        variant = get_variant(variant_id)
        unit_price = unit_price_cents if unit_price_cents is not None else channel_price(variant, store)

        if not check_availability(variant_id, store, size, quantity):
            raise InsufficientStockError(details={
                "product_color_id": variant_id,
                "store": store.value,
                "size": size,
                "requested_quantity": quantity,
                "on_hand": get_quantity_on_hand(variant_id, store, size),
            })

        _, tax, total = compute_sale_totals(unit_price, quantity, payment_method)
        sale = Sale(
            sale_id=next_document_number(store=store, document_type=DOCUMENT_SALE),
            employee_id=context.employee_id,
            store=store,
            product_color_id=variant_id,
            size=size,
            quantity=quantity,
            unit_price_cents=unit_price,
            payment_method=payment_method,
            tax_cents=tax,
            total_cents=total,
        )
        db.session.add(sale)
        db.session.flush()

        apply_debit(variant_id=variant_id, store=store, size=size, quantity=quantity)

        db.session.commit()
        current_app.logger.info(
            "Recorded sale %s: product_color_id=%s store=%s size=%s qty=%s total_cents=%s",
            sale.sale_id, variant_id, store.value, size, quantity, total,
        )
        return sale

    return run_with_retry(_op)


# =============================================================================
# QUERIES
# =============================================================================

def list_sales(store, limit: int = 50) -> list[Sale]:
    """Most recent sales for a store, newest first."""
    store = parse_store(store)
    return (
        db.session.query(Sale)
        .filter(Sale.store == store)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(limit)
        .all()
    )


def get_sale(sale_id: str) -> Sale:
    sale = db.session.query(Sale).filter_by(sale_id=sale_id).first()
    if sale is None:
        raise NotFoundError(f"Sale {sale_id} not found")
    return sale
