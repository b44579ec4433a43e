"""SQLAlchemy ORM models for the catalog side of the store."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, Numeric,
    String, Table,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


product_brands = Table(
    "product_brands",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("brand_id", Integer, ForeignKey("brands.id", ondelete="CASCADE"), primary_key=True),
)


class BrandRow(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True, index=True)
    disabled = Column(Boolean, nullable=False, default=False)  # hides every product carrying it


class ProductRow(Base):
    """A product or a product variation (variations carry parent_id)."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=True, index=True)
    type = Column(String(20), nullable=False, default="simple")  # simple | variable | variation
    status = Column(String(20), nullable=False, default="publish")
    name = Column(String(500), nullable=False, index=True)
    slug = Column(String(500), nullable=False, default="")
    sku = Column(String(100), nullable=True)

    # Storefront prices (price is what the customer pays)
    regular_price = Column(Numeric(12, 2), nullable=True)
    sale_price = Column(Numeric(12, 2), nullable=True)
    price = Column(Numeric(12, 2), nullable=True)

    # Cost fields; list_price is labelled "Sale price" in the admin UI
    buy_price = Column(Numeric(12, 2), nullable=True)
    list_price = Column(Numeric(12, 2), nullable=True)
    discount_percent = Column(Numeric(5, 2), nullable=True)

    stock_status = Column(String(20), nullable=False, default="instock")
    stock_quantity = Column(Integer, nullable=True)

    image_id = Column(Integer, ForeignKey("media.id", ondelete="SET NULL"), nullable=True)

    # Products: [{name, label, is_taxonomy, variation, visible, options}]
    # Variations: {"attribute_pa_size": "large", ...}
    attributes = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    brands = relationship("BrandRow", secondary=product_brands, lazy="selectin")
    image = relationship("MediaRow", lazy="selectin")
    variations = relationship(
        "ProductRow",
        lazy="selectin",
        order_by="ProductRow.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_products_status_type", "status", "type"),
    )


class MediaRow(Base):
    __tablename__ = "media"

    id = Column(Integer, primary_key=True, autoincrement=True)
    url = Column(String(2000), nullable=False)
    alt = Column(String(500), nullable=True)


class OptionRow(Base):
    """Key/value site options (homepage banner rows and friends)."""
    __tablename__ = "options"

    key = Column(String(191), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
