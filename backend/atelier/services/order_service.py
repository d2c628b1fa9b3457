"""
Order Service

Online orders: recorded like a sale against the online store (validate,
persist, atomic debit in one transaction), then moved through the
delivery lifecycle.

LIFECYCLE:
    pending -> in_delivery -> delivered
    pending -> cancelled
    in_delivery -> cancelled

delivered and cancelled are terminal. Cancelling does not restock; stock
comes back through a return against the order.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..context import RequestContext
from ..extensions import db
from ..models import Order, OrderStatus, Store, EMIRATES
from ..validation import (
    NotFoundError,
    ValidationError,
    enforce_payment_method,
    enforce_price,
    normalize_size,
    parse_enum,
    require_id,
    require_positive_quantity,
)
from .concurrency import begin_write, lock_for_update, run_with_retry
from .document_service import DOCUMENT_ORDER, next_document_number
from .employee_service import get_employee
from .products_service import channel_price, get_variant
from .stock_service import (
    InsufficientStockError,
    apply_debit,
    check_availability,
    get_quantity_on_hand,
)


ORDER_STATUS_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.IN_DELIVERY, OrderStatus.CANCELLED}),
    OrderStatus.IN_DELIVERY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    phone: str
    emirate: str
    address: str
    tracking_number: str | None = None
    notes: str | None = None


def _required_text(value, field: str, max_length: int | None = None) -> str:
    text = (value or "").strip() if isinstance(value, str) or value is None else str(value).strip()
    if not text:
        raise ValidationError(f"{field} is required")
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return text


def _optional_text(value, field: str, max_length: int | None = None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return text


def _validate_customer(customer: CustomerInfo) -> CustomerInfo:
    emirate = _required_text(customer.emirate, "customer_emirate", 50)
    matched = next((e for e in EMIRATES if e.lower() == emirate.lower()), None)
    if matched is None:
        raise ValidationError(f"customer_emirate must be one of: {', '.join(EMIRATES)}")

    return CustomerInfo(
        name=_required_text(customer.name, "customer_name", 100),
        phone=_required_text(customer.phone, "customer_phone", 20),
        emirate=matched,
        address=_required_text(customer.address, "customer_address"),
        tracking_number=_optional_text(customer.tracking_number, "tracking_number", 100),
        notes=_optional_text(customer.notes, "notes"),
    )


def record_order(
    context: RequestContext,
    *,
    variant_id: int,
    size,
    quantity: int,
    payment_method,
    customer: CustomerInfo,
    unit_price_cents: int | None = None,
) -> Order:
    """
    Record an online order and debit online stock.

    The store is always online regardless of context.store. Total is
    unit price x quantity (online payments carry no tax).

    Raises:
        ValidationError, NotFoundError, InsufficientStockError
    """
    store = Store.ONLINE
    variant_id = require_id(variant_id, "product_color_id")
    size = normalize_size(size)
    quantity = require_positive_quantity(quantity)
    payment_method = enforce_payment_method(store, payment_method)
    customer = _validate_customer(customer)
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

        order = Order(
            order_id=next_document_number(store=store, document_type=DOCUMENT_ORDER),
            employee_id=context.employee_id,
            customer_name=customer.name,
            customer_phone=customer.phone,
            customer_emirate=customer.emirate,
            customer_address=customer.address,
            tracking_number=customer.tracking_number,
            notes=customer.notes,
            product_color_id=variant_id,
            size=size,
            quantity=quantity,
            unit_price_cents=unit_price,
            payment_method=payment_method,
            total_cents=unit_price * quantity,
            status=OrderStatus.PENDING,
        )
        db.session.add(order)
        db.session.flush()

        apply_debit(variant_id=variant_id, store=store, size=size, quantity=quantity)

        db.session.commit()
        current_app.logger.info(
            "Recorded order %s: product_color_id=%s size=%s qty=%s total_cents=%s",
            order.order_id, variant_id, size, quantity, order.total_cents,
        )
        return order

    return run_with_retry(_op)


def update_order_status(order_id: str, new_status) -> Order:
    """
    Move an order along its lifecycle.

    Raises:
        ValidationError: unknown status or transition not allowed
        NotFoundError: unknown order
    """
    new_status = parse_enum(OrderStatus, new_status, "status")

    def _op():
        begin_write()
        order = lock_for_update(db.session.query(Order).filter_by(order_id=order_id)).first()
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")

        if new_status not in ORDER_STATUS_TRANSITIONS[order.status]:
            raise ValidationError(
                f"Cannot change order status from {order.status.value} to {new_status.value}"
            )

        previous = order.status
        order.status = new_status
        db.session.commit()
        current_app.logger.info(
            "Order %s status %s -> %s", order.order_id, previous.value, new_status.value
        )
        return order

    return run_with_retry(_op)


# =============================================================================
# QUERIES
# =============================================================================

def list_orders(status=None, limit: int = 50) -> list[Order]:
    query = db.session.query(Order)
    if status is not None:
        query = query.filter(Order.status == parse_enum(OrderStatus, status, "status"))
    return query.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).all()


def get_order(order_id: str) -> Order:
    order = db.session.query(Order).filter_by(order_id=order_id).first()
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order
