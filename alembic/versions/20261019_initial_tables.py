"""Catalog, options, orders and affiliate commission tables.

Revision ID: 3f9c1e7a2b40
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "3f9c1e7a2b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "media",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("url", sa.String(2000), nullable=False),
        sa.Column("alt", sa.String(500), nullable=True),
    )
    op.create_table(
        "brands",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("disabled", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_brands_slug", "brands", ["slug"], unique=True)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("parent_id", sa.Integer, sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=True),
        sa.Column("type", sa.String(20), nullable=False, server_default="simple"),
        sa.Column("status", sa.String(20), nullable=False, server_default="publish"),
        sa.Column("name", sa.String(500), nullable=False),
        sa.Column("slug", sa.String(500), nullable=False, server_default=""),
        sa.Column("sku", sa.String(100), nullable=True),
        sa.Column("regular_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("sale_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=True),
        sa.Column("buy_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("list_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("discount_percent", sa.Numeric(5, 2), nullable=True),
        sa.Column("stock_status", sa.String(20), nullable=False, server_default="instock"),
        sa.Column("stock_quantity", sa.Integer, nullable=True),
        sa.Column("image_id", sa.Integer, sa.ForeignKey("media.id", ondelete="SET NULL"), nullable=True),
        sa.Column("attributes", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=True),
    )
    op.create_index("ix_products_parent_id", "products", ["parent_id"])
    op.create_index("ix_products_name", "products", ["name"])
    op.create_index("ix_products_status_type", "products", ["status", "type"])

    op.create_table(
        "product_brands",
        sa.Column("product_id", sa.Integer, sa.ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("brand_id", sa.Integer, sa.ForeignKey("brands.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "options",
        sa.Column("key", sa.String(191), primary_key=True),
        sa.Column("value", sa.JSON, nullable=True),
        sa.Column("updated_at", sa.DateTime, nullable=True),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="processing"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime, nullable=True),
    )
    op.create_index("ix_orders_created_at", "orders", ["created_at"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.Integer, nullable=False),
        sa.Column("variation_id", sa.Integer, nullable=True),
        sa.Column("name", sa.String(500), nullable=False, server_default=""),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("line_total", sa.Numeric(12, 2), nullable=False, server_default="0"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    op.create_table(
        "order_notes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=True),
    )
    op.create_index("ix_order_notes_order_id", "order_notes", ["order_id"])

    op.create_table(
        "order_commissions",
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("referral_code", sa.String(200), nullable=True),
        sa.Column("net_profit", sa.Numeric(12, 2), nullable=True),
        sa.Column("commission_rate", sa.Numeric(5, 4), nullable=True),
        sa.Column("commission_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("claimed_at", sa.DateTime, nullable=True),
        sa.Column("paid_at", sa.DateTime, nullable=True),
        sa.Column("updated_at", sa.DateTime, nullable=True),
    )
    op.create_index("ix_order_commissions_referral_code", "order_commissions", ["referral_code"])
    op.create_index("ix_order_commissions_status", "order_commissions", ["status"])


def downgrade() -> None:
    op.drop_table("order_commissions")
    op.drop_table("order_notes")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("options")
    op.drop_table("product_brands")
    op.drop_table("products")
    op.drop_table("brands")
    op.drop_table("media")
