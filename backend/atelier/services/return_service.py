"""
Return Service

A return credits the original item back to stock. An exchange also debits
the replacement item, and both movements share one transaction: if the
replacement is out of stock, the credit is rolled back with it.

RETURN TYPES:
- refund          original only; refund_amount is set
- exchange_size   different size (usually the same color variant)
- exchange_color  different color variant of the same product
- exchange_model  color variant of a different product

Exchanges carry price_difference (new channel price - original channel
price, per unit) instead of a refund amount.

A return may reference the sale or order it comes from. The reference must
belong to the return's store (orders are always online) and match the
returned variant and size. Returned quantity is cumulative per document:
all returns against one document together cannot exceed its quantity.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from flask import current_app
from sqlalchemy import func

from ..context import RequestContext
from ..extensions import db
from ..models import Order, Return, ReturnType, Sale, Store
from ..validation import (
    NotFoundError,
    ValidationError,
    coerce_int,
    normalize_size,
    parse_enum,
    parse_store,
    require_id,
    require_positive_quantity,
)
from .concurrency import begin_write, lock_for_update, run_with_retry
from .document_service import DOCUMENT_RETURN, next_document_number
from .employee_service import get_employee
from .products_service import channel_price, get_variant
from .stock_service import (
    InsufficientStockError,
    apply_credit,
    apply_debit,
    check_availability,
    get_quantity_on_hand,
)


@dataclass(frozen=True)
class ReturnRequest:
    return_type: ReturnType
    original_product_color_id: int
    original_size: str
    original_quantity: int
    original_sale_id: str | None = None
    original_order_id: str | None = None
    new_product_color_id: int | None = None
    new_size: str | None = None
    new_quantity: int | None = None
    reason: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "ReturnRequest":
        """Build a request from a JSON body; unknown keys are rejected."""
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON payload")

        allowed = {f.name for f in fields(cls)}
        for key in payload:
            if key not in allowed:
                raise ValidationError(f"Field not allowed: {key}")

        required = ("return_type", "original_product_color_id", "original_size", "original_quantity")
        missing = sorted(k for k in required if payload.get(k) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        return cls(
            return_type=parse_enum(ReturnType, payload["return_type"], "return_type"),
            original_product_color_id=coerce_int(payload["original_product_color_id"], "original_product_color_id"),
            original_size=payload["original_size"],
            original_quantity=coerce_int(payload["original_quantity"], "original_quantity"),
            original_sale_id=_blank_to_none(payload.get("original_sale_id")),
            original_order_id=_blank_to_none(payload.get("original_order_id")),
            new_product_color_id=_optional_int(payload, "new_product_color_id"),
            new_size=payload.get("new_size"),
            new_quantity=_optional_int(payload, "new_quantity"),
            reason=_blank_to_none(payload.get("reason")),
        )


def _optional_int(payload: dict, key: str) -> int | None:
    value = payload.get(key)
    return None if value is None else coerce_int(value, key)


def _blank_to_none(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class _Normalized:
    return_type: ReturnType
    variant_id: int
    size: str
    quantity: int
    sale_id: str | None
    order_id: str | None
    new_variant_id: int | None
    new_size: str | None
    new_quantity: int | None
    reason: str | None


def _normalize(request: ReturnRequest) -> _Normalized:
    return_type = parse_enum(ReturnType, request.return_type, "return_type")
    variant_id = require_id(request.original_product_color_id, "original_product_color_id")
    size = normalize_size(request.original_size, "original_size")
    quantity = require_positive_quantity(request.original_quantity, "original_quantity")

    sale_id = _blank_to_none(request.original_sale_id)
    order_id = _blank_to_none(request.original_order_id)
    if sale_id and order_id:
        raise ValidationError("Provide original_sale_id or original_order_id, not both")

    new_fields = (request.new_product_color_id, request.new_size, request.new_quantity)
    if return_type.is_exchange:
        if any(v is None for v in new_fields):
            raise ValidationError(
                "Exchanges require new_product_color_id, new_size and new_quantity"
            )
        new_variant_id = require_id(request.new_product_color_id, "new_product_color_id")
        new_size = normalize_size(request.new_size, "new_size")
        new_quantity = require_positive_quantity(request.new_quantity, "new_quantity")
    else:
        if any(v is not None for v in new_fields):
            raise ValidationError("Refunds cannot carry new item fields")
        new_variant_id = new_size = new_quantity = None

    if return_type is ReturnType.EXCHANGE_SIZE and new_size == size:
        raise ValidationError("exchange_size requires a different size")

    reason = _blank_to_none(request.reason)
    return _Normalized(
        return_type=return_type,
        variant_id=variant_id,
        size=size,
        quantity=quantity,
        sale_id=sale_id,
        order_id=order_id,
        new_variant_id=new_variant_id,
        new_size=new_size,
        new_quantity=new_quantity,
        reason=reason,
    )


def _already_returned(*, sale_id: str | None = None, order_id: str | None = None) -> int:
    query = db.session.query(func.coalesce(func.sum(Return.original_quantity), 0))
    if sale_id is not None:
        query = query.filter(Return.original_sale_id == sale_id)
    else:
        query = query.filter(Return.original_order_id == order_id)
    return int(query.scalar() or 0)


def _load_original_document(req: _Normalized, store: Store) -> tuple[Sale | Order | None, int]:
    """
    Resolve and check the referenced sale or order, if any.

    The document row is locked before earlier returns are summed, so two
    returns against the same document cannot both claim its last units.

    Returns (document, quantity already returned against it).
    """
    if req.sale_id:
        doc = lock_for_update(db.session.query(Sale).filter_by(sale_id=req.sale_id)).first()
        if doc is None:
            raise NotFoundError(f"Sale {req.sale_id} not found")
        if doc.store is not store:
            raise ValidationError(f"Sale {req.sale_id} was not made at the {store.value} store")
        returned = _already_returned(sale_id=req.sale_id)
    elif req.order_id:
        doc = lock_for_update(db.session.query(Order).filter_by(order_id=req.order_id)).first()
        if doc is None:
            raise NotFoundError(f"Order {req.order_id} not found")
        if store is not Store.ONLINE:
            raise ValidationError("Orders can only be returned to the online store")
        returned = _already_returned(order_id=req.order_id)
    else:
        return None, 0

    if doc.product_color_id != req.variant_id or doc.size != req.size:
        raise ValidationError("Returned item does not match the original document")

    remaining = doc.quantity - returned
    if req.quantity > remaining:
        raise ValidationError(
            f"Cannot return {req.quantity}: original quantity {doc.quantity}, "
            f"already returned {returned}, available {remaining}"
        )
    return doc, returned


def _prorate(total_cents: int, part: int, whole: int) -> int:
    """total_cents * part / whole, half-up to the cent."""
    return (total_cents * part * 2 + whole) // (whole * 2)


def _refund_amount(req: _Normalized, doc, returned: int, original_variant, store: Store) -> int:
    """
    Refund for req.quantity units.

    Against a document, each refund is the difference between the prorated
    share of everything returned so far including this one and the share
    already refunded. Refunds against one document therefore sum exactly to
    its total once every unit has come back.
    """
    if doc is None:
        return channel_price(original_variant, store) * req.quantity
    return (
        _prorate(doc.total_cents, returned + req.quantity, doc.quantity)
        - _prorate(doc.total_cents, returned, doc.quantity)
    )


def record_return(context: RequestContext, request: ReturnRequest) -> Return:
    """
    Record a refund or exchange at context.store.

    Raises:
        ValidationError: malformed request, exchange rules violated or
            quantity exceeds what the original document still allows
        NotFoundError: unknown variant, employee, sale or order
        InsufficientStockError: exchange replacement is out of stock
    """
    store = parse_store(context.store)
    req = _normalize(request)

    def _op():
        begin_write()
        get_employee(context.employee_id)
        original_variant = get_variant(req.variant_id)
        doc, returned = _load_original_document(req, store)

        refund_cents = None
        difference_cents = None
        if req.return_type.is_exchange:
            new_variant = get_variant(req.new_variant_id)
            if req.return_type is ReturnType.EXCHANGE_COLOR:
                if new_variant.id == original_variant.id:
                    raise ValidationError("exchange_color requires a different color")
                if new_variant.product_id != original_variant.product_id:
                    raise ValidationError("exchange_color must stay within the same product")
            elif req.return_type is ReturnType.EXCHANGE_MODEL:
                if new_variant.product_id == original_variant.product_id:
                    raise ValidationError("exchange_model requires a different product")

            if not check_availability(req.new_variant_id, store, req.new_size, req.new_quantity):
                raise InsufficientStockError(details={
                    "product_color_id": req.new_variant_id,
                    "store": store.value,
                    "size": req.new_size,
                    "requested_quantity": req.new_quantity,
                    "on_hand": get_quantity_on_hand(req.new_variant_id, store, req.new_size),
                })
            difference_cents = channel_price(new_variant, store) - channel_price(original_variant, store)
        else:
            refund_cents = _refund_amount(req, doc, returned, original_variant, store)

        ret = Return(
            return_id=next_document_number(store=store, document_type=DOCUMENT_RETURN),
            employee_id=context.employee_id,
            store=store,
            original_sale_id=req.sale_id,
            original_order_id=req.order_id,
            return_type=req.return_type,
            original_product_color_id=req.variant_id,
            original_size=req.size,
            original_quantity=req.quantity,
            new_product_color_id=req.new_variant_id,
            new_size=req.new_size,
            new_quantity=req.new_quantity,
            refund_amount_cents=refund_cents,
            price_difference_cents=difference_cents,
            reason=req.reason,
        )
        db.session.add(ret)
        db.session.flush()

        apply_credit(variant_id=req.variant_id, store=store, size=req.size, quantity=req.quantity)
        if req.return_type.is_exchange:
            apply_debit(
                variant_id=req.new_variant_id,
                store=store,
                size=req.new_size,
                quantity=req.new_quantity,
            )

        db.session.commit()
        current_app.logger.info(
            "Recorded return %s (%s): product_color_id=%s size=%s qty=%s store=%s",
            ret.return_id, req.return_type.value, req.variant_id, req.size, req.quantity, store.value,
        )
        return ret

    return run_with_retry(_op)


def list_returns(store, limit: int = 50) -> list[Return]:
    store = parse_store(store)
    return (
        db.session.query(Return)
        .filter(Return.store == store)
        .order_by(Return.created_at.desc(), Return.id.desc())
        .limit(limit)
        .all()
    )
