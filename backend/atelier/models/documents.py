from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .enums import Store, ReturnType, enum_column_type
from .sales import _variant_summary


class Return(db.Model):
    """
    Refund or exchange against a previous sale or order.

    The original side (variant/size/quantity) is always credited back to
    stock. For exchanges the new side is debited in the same transaction.
    """
    __tablename__ = "returns"
    __table_args__ = (
        db.UniqueConstraint("return_id", name="uq_returns_return_id"),
        db.Index("ix_returns_store_created", "store", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    return_id = db.Column(db.String(50), nullable=False)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)
    store = db.Column(enum_column_type(Store, "store"), nullable=False)

    # Document numbers of the originating sale/order, when known
    original_sale_id = db.Column(db.String(50), nullable=True, index=True)
    original_order_id = db.Column(db.String(50), nullable=True, index=True)

    return_type = db.Column(enum_column_type(ReturnType, "return_type"), nullable=False)

    original_product_color_id = db.Column(db.Integer, db.ForeignKey("product_colors.id"), nullable=False)
    original_size = db.Column(db.String(8), nullable=False)
    original_quantity = db.Column(db.Integer, nullable=False)

    new_product_color_id = db.Column(db.Integer, db.ForeignKey("product_colors.id"), nullable=True)
    new_size = db.Column(db.String(8), nullable=True)
    new_quantity = db.Column(db.Integer, nullable=True)

    refund_amount_cents = db.Column(db.Integer, nullable=True)
    price_difference_cents = db.Column(db.Integer, nullable=True)
    reason = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    employee = db.relationship("Employee", backref=db.backref("returns", lazy=True))
    original_product_color = db.relationship("ProductColor", foreign_keys=[original_product_color_id])
    new_product_color = db.relationship("ProductColor", foreign_keys=[new_product_color_id])

    @property
    def is_exchange(self) -> bool:
        return self.new_product_color_id is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "return_id": self.return_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee.name if self.employee else None,
            "store": self.store.value,
            "original_sale_id": self.original_sale_id,
            "original_order_id": self.original_order_id,
            "return_type": self.return_type.value,
            "original_product_color_id": self.original_product_color_id,
            "original_variant": _variant_summary(self.original_product_color),
            "original_size": self.original_size,
            "original_quantity": self.original_quantity,
            "new_product_color_id": self.new_product_color_id,
            "new_variant": _variant_summary(self.new_product_color),
            "new_size": self.new_size,
            "new_quantity": self.new_quantity,
            "refund_amount_cents": self.refund_amount_cents,
            "price_difference_cents": self.price_difference_cents,
            "reason": self.reason,
            "created_at": to_utc_z(self.created_at),
        }


class DocumentSequence(db.Model):
    """
    Atomic per-store document sequences.

    WHY: Prevent race conditions when generating document numbers
    (sales, orders, returns).
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        db.UniqueConstraint("store", "document_type", name="uq_doc_sequences_store_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store = db.Column(enum_column_type(Store, "store"), nullable=False)
    document_type = db.Column(db.String(32), nullable=False, index=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store": self.store.value,
            "document_type": self.document_type,
            "next_number": self.next_number,
            "updated_at": to_utc_z(self.updated_at),
        }
