from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .enums import Store, enum_column_type


class StockEntry(db.Model):
    """
    Ledger row: quantity on hand for one (color variant, store, size).

    INVARIANTS:
    - Exactly one row per (product_color_id, store, size).
    - quantity >= 0 at all times. The CHECK constraint is the last line of
      defence; the stock service never issues a write that would violate it.

    Rows are mutated only through services/stock_service.py.
    """
    __tablename__ = "stock_entries"
    __table_args__ = (
        db.UniqueConstraint("product_color_id", "store", "size", name="uq_stock_entries_color_store_size"),
        db.CheckConstraint("quantity >= 0", name="ck_stock_entries_quantity_non_negative"),
        db.Index("ix_stock_entries_store_quantity", "store", "quantity"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_color_id = db.Column(
        db.Integer,
        db.ForeignKey("product_colors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    store = db.Column(enum_column_type(Store, "store"), nullable=False)
    size = db.Column(db.String(8), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return (
            f"<StockEntry color={self.product_color_id} store={self.store.value} "
            f"size={self.size!r} qty={self.quantity}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_color_id": self.product_color_id,
            "store": self.store.value,
            "size": self.size,
            "quantity": self.quantity,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
