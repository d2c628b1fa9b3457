# Overview: Inventory ledger; the only code path that reads or mutates StockEntry quantities.

from __future__ import annotations

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import StockEntry, ProductColor, Store
from ..validation import (
    NotFoundError,
    ValidationError,
    normalize_size,
    parse_store,
    require_id,
    require_positive_quantity,
)
from .concurrency import begin_write, lock_for_update, run_with_retry
"""
Stock Ledger Invariants (authoritative)

Keying:
- One StockEntry per (product_color_id, store, size). Store and size are
  validated before any ledger call (closed store enum, configured size catalog).

Business invariants:
- quantity >= 0 after every operation.
- DEBIT is a single conditional update: "quantity -= N WHERE quantity >= N".
  Zero rows affected means the debit is refused; nothing is clamped.
  - entry exists  -> InsufficientStockError (user-facing rejection)
  - entry missing -> StockIntegrityError (stock that was never provisioned)
- CREDIT restores stock. A missing entry is logged and created with the
  credited quantity, so a return never silently loses stock.
- SET (authoring) overwrites or creates; it never produces duplicate rows.

Transactions:
- apply_* functions do not commit; the calling workflow owns the transaction
  (sale/order/return creation commits once, after every mutation succeeded).
- Public debit/credit/set_stock wrap apply_* in their own retrying transaction.
"""


class InsufficientStockError(Exception):
    """Raised when a debit would drive a stock entry below zero."""
    def __init__(self, message: str = "Insufficient inventory", details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class StockIntegrityError(Exception):
    """Raised when a debit targets a stock entry that does not exist."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _key_filter(variant_id: int, store: Store, size: str) -> tuple:
    return (
        StockEntry.product_color_id == variant_id,
        StockEntry.store == store,
        StockEntry.size == size,
    )


def _key_details(variant_id: int, store: Store, size: str) -> dict:
    return {"product_color_id": variant_id, "store": store.value, "size": size}


def _find_entry(variant_id: int, store: Store, size: str, *, lock: bool = False) -> StockEntry | None:
    query = db.session.query(StockEntry).filter(*_key_filter(variant_id, store, size))
    if lock:
        query = lock_for_update(query)
    # Conditional updates bypass the identity map; always reload the row.
    return query.populate_existing().first()


def _normalize_key(variant_id, store, size) -> tuple[int, Store, str]:
    return require_id(variant_id, "product_color_id"), parse_store(store), normalize_size(size)


def _require_variant(variant_id: int) -> ProductColor:
    variant = db.session.get(ProductColor, variant_id)
    if variant is None:
        raise NotFoundError(f"Product color {variant_id} not found")
    return variant


# =============================================================================
# READS
# =============================================================================

def check_availability(variant_id: int, store, size, quantity: int) -> bool:
    """
    True iff the (variant, store, size) entry exists with quantity >= requested.

    A missing entry counts as zero stock. No side effects. The answer is
    advisory only; debits re-check atomically.
    """
    variant_id, store, size = _normalize_key(variant_id, store, size)
    quantity = require_positive_quantity(quantity)

    entry = _find_entry(variant_id, store, size)
    return entry is not None and entry.quantity >= quantity


def get_stock_entry(variant_id: int, store, size) -> StockEntry:
    variant_id, store, size = _normalize_key(variant_id, store, size)
    entry = _find_entry(variant_id, store, size)
    if entry is None:
        raise NotFoundError(
            f"No stock entry for product color {variant_id}, store {store.value}, size {size}"
        )
    return entry


def get_quantity_on_hand(variant_id: int, store, size) -> int:
    variant_id, store, size = _normalize_key(variant_id, store, size)
    entry = _find_entry(variant_id, store, size)
    return entry.quantity if entry else 0


def list_stock(store, variant_id: int | None = None) -> list[StockEntry]:
    """Stock entries for one store, optionally narrowed to a single variant."""
    store = parse_store(store)
    query = db.session.query(StockEntry).filter(StockEntry.store == store)
    if variant_id is not None:
        query = query.filter(StockEntry.product_color_id == require_id(variant_id, "product_color_id"))
    return query.order_by(StockEntry.product_color_id.asc(), StockEntry.size.asc()).all()


# =============================================================================
# MUTATIONS (caller owns the transaction)
# =============================================================================

def apply_debit(*, variant_id: int, store: Store, size: str, quantity: int) -> StockEntry:
    """
    Atomically decrement stock by quantity.

    Expects normalized inputs. Does not commit.
    """
    stmt = (
        update(StockEntry)
        .where(*_key_filter(variant_id, store, size), StockEntry.quantity >= quantity)
        .values(quantity=StockEntry.quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    entry = _find_entry(variant_id, store, size)

    if result.rowcount == 1:
        return entry

    details = _key_details(variant_id, store, size)
    details["requested_quantity"] = quantity

    if entry is None:
        current_app.logger.warning(
            "Debit refused: no stock entry for product_color_id=%s store=%s size=%s",
            variant_id, store.value, size,
        )
        raise StockIntegrityError("Cannot debit stock that was never provisioned", details=details)

    details["on_hand"] = entry.quantity
    raise InsufficientStockError(details=details)


def apply_credit(*, variant_id: int, store: Store, size: str, quantity: int) -> StockEntry:
    """
    Increment stock by quantity, creating the entry when it is missing.

    Expects normalized inputs. Does not commit.
    """
    stmt = (
        update(StockEntry)
        .where(*_key_filter(variant_id, store, size))
        .values(quantity=StockEntry.quantity + quantity)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount:
        return _find_entry(variant_id, store, size)

    current_app.logger.warning(
        "Credit target missing: creating stock entry product_color_id=%s store=%s size=%s quantity=%s",
        variant_id, store.value, size, quantity,
    )
    return _insert_or_apply(variant_id, store, size, quantity, stmt)


def apply_set_stock(*, variant_id: int, store: Store, size: str, quantity: int) -> StockEntry:
    """Overwrite the quantity for a key, creating the entry if absent. Does not commit."""
    entry = _find_entry(variant_id, store, size, lock=True)
    if entry is not None:
        entry.quantity = quantity
        db.session.flush()
        return entry

    stmt = (
        update(StockEntry)
        .where(*_key_filter(variant_id, store, size))
        .values(quantity=quantity)
        .execution_options(synchronize_session=False)
    )
    return _insert_or_apply(variant_id, store, size, quantity, stmt)


def _insert_or_apply(variant_id: int, store: Store, size: str, quantity: int, fallback_stmt) -> StockEntry:
    """
    Insert a new entry inside a savepoint.

    If another session created the same key first, the unique constraint
    fires and fallback_stmt is applied to the existing row instead.
    """
    entry = StockEntry(product_color_id=variant_id, store=store, size=size, quantity=quantity)
    try:
        with db.session.begin_nested():
            db.session.add(entry)
    except IntegrityError:
        db.session.execute(fallback_stmt)
        return _find_entry(variant_id, store, size)
    return entry


# =============================================================================
# STANDALONE OPERATIONS (own transaction)
# =============================================================================

def debit(variant_id: int, store, size, quantity: int) -> StockEntry:
    """Debit outside a workflow (e.g. manual shrink). Commits on success."""
    variant_id, store, size = _normalize_key(variant_id, store, size)
    quantity = require_positive_quantity(quantity)

    def _op():
        begin_write()
        entry = apply_debit(variant_id=variant_id, store=store, size=size, quantity=quantity)
        db.session.commit()
        return entry

    return run_with_retry(_op)


def credit(variant_id: int, store, size, quantity: int) -> StockEntry:
    """Credit outside a workflow (e.g. found stock). Commits on success."""
    variant_id, store, size = _normalize_key(variant_id, store, size)
    quantity = require_positive_quantity(quantity)

    def _op():
        begin_write()
        _require_variant(variant_id)
        entry = apply_credit(variant_id=variant_id, store=store, size=size, quantity=quantity)
        db.session.commit()
        return entry

    return run_with_retry(_op)


def set_stock(variant_id: int, store, size, quantity: int) -> StockEntry:
    """
    Author a stock level directly (catalog management).

    Idempotent: repeating the call with the same quantity leaves exactly one
    entry with that quantity. No availability or debit semantics apply.
    """
    variant_id, store, size = _normalize_key(variant_id, store, size)
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity must be an integer")
    if quantity < 0:
        raise ValidationError("quantity must be >= 0")

    def _op():
        begin_write()
        _require_variant(variant_id)
        entry = apply_set_stock(variant_id=variant_id, store=store, size=size, quantity=quantity)
        db.session.commit()
        return entry

    return run_with_retry(_op)
