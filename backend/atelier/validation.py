from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from flask import current_app
from sqlalchemy import Boolean, Enum, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .models.enums import Store, PaymentMethod, PAYMENT_METHODS_BY_STORE


# Maximum price: AED 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate model number)."""


class NotFoundError(LookupError):
    """404-level missing record."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def parse_enum(enum_cls: type[enum.Enum], value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}")


def coerce_int(value: Any, field: str) -> int:
    """Accept an int or a plain digit string; reject floats, bools and scientific notation."""
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    # Reject floats explicitly
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Enums are String subclasses in SQLAlchemy; match them first
    if isinstance(coltype, Enum) and coltype.enum_class is not None:
        return parse_enum(coltype.enum_class, value, col.key)

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        return coerce_int(value, col.key)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


# =============================================================================
# Domain rules
# =============================================================================

def parse_store(value: Any) -> Store:
    if isinstance(value, Store):
        return value
    try:
        return Store(str(value).strip().lower())
    except ValueError:
        raise ValidationError("Invalid store")


def normalize_size(value: Any, field: str = "size") -> str:
    """
    Canonical string form of a size, checked against the configured catalog.

    Accepts 40, 40.0, "40" and " 40 " as the same size.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} is not a valid size")
        value = int(value)
    size = str(value).strip()
    if size.endswith(".0"):
        size = size[:-2]

    valid_sizes = current_app.config["VALID_SIZES"]
    if size not in valid_sizes:
        raise ValidationError(f"{field} must be one of: {', '.join(valid_sizes)}")
    return size


def require_positive_quantity(value: Any, field: str = "quantity") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    if value <= 0:
        raise ValidationError(f"{field} must be > 0")
    return value


def require_id(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field} must be a positive integer")
    return value


def enforce_price(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    if value < 0:
        raise ValidationError(f"{field} must be >= 0")
    if value > MAX_PRICE_CENTS:
        raise ValidationError(f"{field} cannot exceed {MAX_PRICE_CENTS} (AED {MAX_PRICE_CENTS / 100:,.2f})")
    return value


def enforce_payment_method(store: Store, method: Any) -> PaymentMethod:
    """Each store accepts its own pair of payment methods."""
    method = parse_enum(PaymentMethod, method, "payment_method")
    allowed = PAYMENT_METHODS_BY_STORE[store]
    if method not in allowed:
        names = ", ".join(sorted(m.value for m in allowed))
        raise ValidationError(f"{store.value} accepts only: {names}")
    return method


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    for field in ("store_price_cents", "online_price_cents"):
        if field in patch and patch[field] is not None:
            enforce_price(patch[field], field)


def enforce_rules_stock(patch: dict) -> None:
    # Authoring sets an absolute level, so zero is allowed
    quantity = patch.get("quantity")
    if quantity is None:
        raise ValidationError("quantity is required")
    if quantity < 0:
        raise ValidationError("quantity must be >= 0")
