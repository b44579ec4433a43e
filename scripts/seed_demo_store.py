#!/usr/bin/env python3
"""Seed a small demo catalog (brands, products with cost fields, banner rows)."""
import asyncio
import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from decimal import Decimal

from sqlalchemy import delete
from ekusey.db.engine import engine, async_session
from ekusey.db.tables import Base, BrandRow, MediaRow, OptionRow, ProductRow, product_brands
import ekusey.db.order_tables  # noqa: F401

MEDIA = [
    {"id": 1, "url": "https://picsum.photos/seed/ekusey-hero/1600/600", "alt": "Autumn collection"},
    {"id": 2, "url": "https://picsum.photos/seed/ekusey-mug/800/800", "alt": "Stoneware mug"},
    {"id": 3, "url": "https://picsum.photos/seed/ekusey-tee/800/800", "alt": "Organic cotton tee"},
]

BRANDS = [
    {"id": 1, "name": "Kiln & Co", "slug": "kiln-co"},
    {"id": 2, "name": "Loomline", "slug": "loomline"},
    {"id": 3, "name": "Retired Label", "slug": "retired-label", "disabled": True},
]

# (id, name, slug, buy, list, discount, brand ids, image)
SIMPLE_PRODUCTS = [
    (10, "Stoneware Mug", "stoneware-mug", "6.50", "18.00", None, [1], 2),
    (11, "Pour-over Set", "pour-over-set", "21.00", "54.00", "10", [1], None),
    (12, "Canvas Tote", "canvas-tote", "4.00", "15.00", None, [2], None),
    (13, "Old Stock Candle", "old-stock-candle", "3.00", "9.00", None, [3], None),
]

TEE_VARIATIONS = [
    (21, "small", "7.00", "24.00"),
    (22, "medium", "7.00", "24.00"),
    (23, "large", "7.50", "26.00"),
]

BANNER_ROWS = [
    {"banner": 1, "link": "/collections/autumn"},
    {"banner": {"ID": 2, "url": MEDIA[1]["url"], "alt": "New mugs"}, "link": "/product/stoneware-mug/"},
]


def _prices(buy, list_price, discount):
    buy_d = Decimal(buy)
    list_d = Decimal(list_price)
    pct = Decimal(discount) if discount else None
    price = (list_d * (1 - pct / 100)).quantize(Decimal("0.01")) if pct is not None else list_d
    return {
        "buy_price": buy_d,
        "list_price": list_d,
        "discount_percent": pct,
        "regular_price": list_d,
        "sale_price": price if pct is not None else None,
        "price": price,
    }


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        # Clear
        await session.execute(delete(product_brands))
        for model in (ProductRow, BrandRow, MediaRow, OptionRow):
            await session.execute(delete(model))
        await session.commit()

        session.add_all(MediaRow(**m) for m in MEDIA)
        brands = {b["id"]: BrandRow(**b) for b in BRANDS}
        session.add_all(brands.values())

        for pid, name, slug, buy, list_price, discount, brand_ids, image in SIMPLE_PRODUCTS:
            session.add(ProductRow(
                id=pid, name=name, slug=slug, sku=slug.upper(), image_id=image,
                brands=[brands[b] for b in brand_ids],
                **_prices(buy, list_price, discount),
            ))

        tee = ProductRow(
            id=20, type="variable", name="Organic Tee", slug="organic-tee", image_id=3,
            brands=[brands[2]],
            attributes=[{
                "name": "pa_size", "is_taxonomy": True, "variation": True, "visible": True,
                "options": [size for _, size, _, _ in TEE_VARIATIONS],
            }],
        )
        tee.variations = [
            ProductRow(
                id=vid, type="variation", name=f"Organic Tee - {size}", slug=f"organic-tee-{size}",
                sku=f"TEE-{size[0].upper()}", attributes={"attribute_pa_size": size},
                **_prices(buy, list_price, None),
            )
            for vid, size, buy, list_price in TEE_VARIATIONS
        ]
        session.add(tee)

        session.add(OptionRow(key="homepage_banner", value=BANNER_ROWS))
        await session.commit()
        print(f"✅ Seeded {len(SIMPLE_PRODUCTS) + 1} products, {len(BRANDS)} brands, {len(BANNER_ROWS)} banner rows")


if __name__ == "__main__":
    asyncio.run(seed())
