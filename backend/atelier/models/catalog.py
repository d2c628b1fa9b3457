from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .enums import Store


class Employee(db.Model):
    """
    Staff roster entry.

    Display-only attribution for sales, orders and returns; there is no
    login or permission model behind it.
    """
    __tablename__ = "employees"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Employee id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": to_utc_z(self.created_at),
        }


class Product(db.Model):
    """
    Catalog entry.

    MODEL NUMBER is the business identity and is unique across the catalog.
    A product carries two price points, one per store; everything sold or
    stocked is a ProductColor of it.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("model_number", name="uq_products_model_number"),
        db.Index("ix_products_brand", "brand"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    model_number = db.Column(db.String(50), nullable=False)
    brand = db.Column(db.String(100), nullable=False)
    product_type = db.Column(db.String(50), nullable=False)

    # Authoritative storage in cents (AED)
    store_price_cents = db.Column(db.Integer, nullable=False)
    online_price_cents = db.Column(db.Integer, nullable=False)

    specifications = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    colors = db.relationship(
        "ProductColor",
        backref=db.backref("product", lazy=True),
        cascade="all, delete-orphan",
        order_by="ProductColor.id",
        lazy=True,
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} model_number={self.model_number!r} brand={self.brand!r}>"

    def price_for(self, store: Store) -> int:
        """Channel price: boutique price at the boutique, online price online."""
        if store is Store.BOUTIQUE:
            return self.store_price_cents
        if store is Store.ONLINE:
            return self.online_price_cents
        raise ValueError(f"unknown store: {store!r}")

    def to_dict(self, *, include_colors: bool = False, store: Store | None = None) -> dict:
        data = {
            "id": self.id,
            "model_number": self.model_number,
            "brand": self.brand,
            "product_type": self.product_type,
            "store_price_cents": self.store_price_cents,
            "online_price_cents": self.online_price_cents,
            "specifications": self.specifications,
            "image_url": self.image_url,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_colors:
            data["colors"] = [c.to_dict(include_inventory=True, store=store) for c in self.colors]
        return data


class ProductColor(db.Model):
    """A color variant of a product; the unit stock is tracked against (with size)."""
    __tablename__ = "product_colors"
    __table_args__ = (
        db.UniqueConstraint("product_id", "color_name", name="uq_product_colors_product_color"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    color_name = db.Column(db.String(50), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    stock_entries = db.relationship(
        "StockEntry",
        backref=db.backref("product_color", lazy=True),
        cascade="all, delete-orphan",
        lazy=True,
    )

    def __repr__(self) -> str:
        return f"<ProductColor id={self.id} product_id={self.product_id} color={self.color_name!r}>"

    def to_dict(self, *, include_inventory: bool = False, store: Store | None = None) -> dict:
        data = {
            "id": self.id,
            "product_id": self.product_id,
            "color_name": self.color_name,
            "created_at": to_utc_z(self.created_at),
        }
        if include_inventory:
            entries = self.stock_entries
            if store is not None:
                entries = [e for e in entries if e.store is store]
            data["inventory"] = [e.to_dict() for e in entries]
        return data
