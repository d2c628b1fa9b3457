from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .enums import Store, PaymentMethod, OrderStatus, enum_column_type


def _variant_summary(product_color) -> dict | None:
    if product_color is None:
        return None
    product = product_color.product
    return {
        "product_color_id": product_color.id,
        "color_name": product_color.color_name,
        "product_id": product.id if product else None,
        "brand": product.brand if product else None,
        "model_number": product.model_number if product else None,
    }


class Sale(db.Model):
    """
    Completed sale of one variant/size at a store.

    Immutable once created: its only side effect is the stock debit
    applied in the same transaction.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.UniqueConstraint("sale_id", name="uq_sales_sale_id"),
        db.Index("ix_sales_store_created", "store", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable document number (e.g., "S-B-000123")
    sale_id = db.Column(db.String(50), nullable=False)

    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)
    store = db.Column(enum_column_type(Store, "store"), nullable=False)
    product_color_id = db.Column(db.Integer, db.ForeignKey("product_colors.id"), nullable=False, index=True)
    size = db.Column(db.String(8), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    unit_price_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(enum_column_type(PaymentMethod, "payment_method"), nullable=False)
    tax_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    employee = db.relationship("Employee", backref=db.backref("sales", lazy=True))
    product_color = db.relationship("ProductColor")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee.name if self.employee else None,
            "store": self.store.value,
            "product_color_id": self.product_color_id,
            "variant": _variant_summary(self.product_color),
            "size": self.size,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "payment_method": self.payment_method.value,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
            "created_at": to_utc_z(self.created_at),
        }


class Order(db.Model):
    """
    Online order with delivery metadata.

    Store is always online. Status follows the delivery lifecycle enforced
    by services/order_service.py.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint("order_id", name="uq_orders_order_id"),
        db.Index("ix_orders_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(50), nullable=False)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)

    customer_name = db.Column(db.String(100), nullable=False)
    customer_phone = db.Column(db.String(20), nullable=False)
    customer_emirate = db.Column(db.String(50), nullable=False)
    customer_address = db.Column(db.Text, nullable=False)
    tracking_number = db.Column(db.String(100), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    product_color_id = db.Column(db.Integer, db.ForeignKey("product_colors.id"), nullable=False, index=True)
    size = db.Column(db.String(8), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(enum_column_type(PaymentMethod, "payment_method"), nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)

    status = db.Column(
        enum_column_type(OrderStatus, "order_status"),
        nullable=False,
        default=OrderStatus.PENDING,
    )

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    employee = db.relationship("Employee", backref=db.backref("orders", lazy=True))
    product_color = db.relationship("ProductColor")

    @property
    def store(self) -> Store:
        return Store.ONLINE

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee.name if self.employee else None,
            "store": Store.ONLINE.value,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "customer_emirate": self.customer_emirate,
            "customer_address": self.customer_address,
            "tracking_number": self.tracking_number,
            "notes": self.notes,
            "product_color_id": self.product_color_id,
            "variant": _variant_summary(self.product_color),
            "size": self.size,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "payment_method": self.payment_method.value,
            "total_cents": self.total_cents,
            "status": self.status.value,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
