"""Initial schema: catalog, stock ledger, sales, orders, returns

Revision ID: 20261017_initial
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261017_initial"
down_revision = None
branch_labels = None
depends_on = None


def _enum(name, values):
    return sa.Enum(*values, name=name, native_enum=False, length=32)


STORE = ("boutique", "online")
PAYMENT_METHOD = ("cash", "card", "bank_transfer", "cash_on_delivery")
ORDER_STATUS = ("pending", "in_delivery", "delivered", "cancelled")
RETURN_TYPE = ("refund", "exchange_color", "exchange_size", "exchange_model")


def upgrade():
    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("model_number", sa.String(length=50), nullable=False),
        sa.Column("brand", sa.String(length=100), nullable=False),
        sa.Column("product_type", sa.String(length=50), nullable=False),
        sa.Column("store_price_cents", sa.Integer(), nullable=False),
        sa.Column("online_price_cents", sa.Integer(), nullable=False),
        sa.Column("specifications", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("model_number", name="uq_products_model_number"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_products_brand", "products", ["brand"])

    op.create_table(
        "product_colors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("color_name", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("product_id", "color_name", name="uq_product_colors_product_color"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_product_colors_product_id", "product_colors", ["product_id"])

    op.create_table(
        "stock_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "product_color_id",
            sa.Integer(),
            sa.ForeignKey("product_colors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("store", _enum("store", STORE), nullable=False),
        sa.Column("size", sa.String(length=8), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("product_color_id", "store", "size", name="uq_stock_entries_color_store_size"),
        sa.CheckConstraint("quantity >= 0", name="ck_stock_entries_quantity_non_negative"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_stock_entries_product_color_id", "stock_entries", ["product_color_id"])
    op.create_index("ix_stock_entries_store_quantity", "stock_entries", ["store", "quantity"])

    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sale_id", sa.String(length=50), nullable=False),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False),
        sa.Column("store", _enum("store", STORE), nullable=False),
        sa.Column("product_color_id", sa.Integer(), sa.ForeignKey("product_colors.id"), nullable=False),
        sa.Column("size", sa.String(length=8), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False),
        sa.Column("payment_method", _enum("payment_method", PAYMENT_METHOD), nullable=False),
        sa.Column("tax_cents", sa.Integer(), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("sale_id", name="uq_sales_sale_id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_sales_employee_id", "sales", ["employee_id"])
    op.create_index("ix_sales_product_color_id", "sales", ["product_color_id"])
    op.create_index("ix_sales_store_created", "sales", ["store", "created_at"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.String(length=50), nullable=False),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False),
        sa.Column("customer_name", sa.String(length=100), nullable=False),
        sa.Column("customer_phone", sa.String(length=20), nullable=False),
        sa.Column("customer_emirate", sa.String(length=50), nullable=False),
        sa.Column("customer_address", sa.Text(), nullable=False),
        sa.Column("tracking_number", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("product_color_id", sa.Integer(), sa.ForeignKey("product_colors.id"), nullable=False),
        sa.Column("size", sa.String(length=8), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False),
        sa.Column("payment_method", _enum("payment_method", PAYMENT_METHOD), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("status", _enum("order_status", ORDER_STATUS), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("order_id", name="uq_orders_order_id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_orders_employee_id", "orders", ["employee_id"])
    op.create_index("ix_orders_product_color_id", "orders", ["product_color_id"])
    op.create_index("ix_orders_status_created", "orders", ["status", "created_at"])

    op.create_table(
        "returns",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("return_id", sa.String(length=50), nullable=False),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False),
        sa.Column("store", _enum("store", STORE), nullable=False),
        sa.Column("original_sale_id", sa.String(length=50), nullable=True),
        sa.Column("original_order_id", sa.String(length=50), nullable=True),
        sa.Column("return_type", _enum("return_type", RETURN_TYPE), nullable=False),
        sa.Column("original_product_color_id", sa.Integer(), sa.ForeignKey("product_colors.id"), nullable=False),
        sa.Column("original_size", sa.String(length=8), nullable=False),
        sa.Column("original_quantity", sa.Integer(), nullable=False),
        sa.Column("new_product_color_id", sa.Integer(), sa.ForeignKey("product_colors.id"), nullable=True),
        sa.Column("new_size", sa.String(length=8), nullable=True),
        sa.Column("new_quantity", sa.Integer(), nullable=True),
        sa.Column("refund_amount_cents", sa.Integer(), nullable=True),
        sa.Column("price_difference_cents", sa.Integer(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("return_id", name="uq_returns_return_id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_returns_employee_id", "returns", ["employee_id"])
    op.create_index("ix_returns_original_sale_id", "returns", ["original_sale_id"])
    op.create_index("ix_returns_original_order_id", "returns", ["original_order_id"])
    op.create_index("ix_returns_store_created", "returns", ["store", "created_at"])

    op.create_table(
        "document_sequences",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("store", _enum("store", STORE), nullable=False),
        sa.Column("document_type", sa.String(length=32), nullable=False),
        sa.Column("next_number", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("store", "document_type", name="uq_doc_sequences_store_type"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_document_sequences_document_type", "document_sequences", ["document_type"])


def downgrade():
    op.drop_table("document_sequences")
    op.drop_table("returns")
    op.drop_table("orders")
    op.drop_table("sales")
    op.drop_table("stock_entries")
    op.drop_table("product_colors")
    op.drop_table("products")
    op.drop_table("employees")
