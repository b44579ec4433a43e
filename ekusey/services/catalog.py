"""Storefront product listing: products with brands, attributes, variations and profit fields."""
from __future__ import annotations

import math
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from ekusey.db.repository import ProductRepository
from ekusey.db.tables import MediaRow, ProductRow
from ekusey.services.product_profit import profit_fields

MAX_PER_PAGE = 100
DEFAULT_PER_PAGE = 12


def _price(value: Any) -> Optional[str]:
    return None if value is None else f"{value:.2f}"


def _price_html(product: ProductRow) -> str:
    """Plain-text price line: "$80.00" or "$100.00 → $80.00" when on sale."""
    symbol = settings.CURRENCY_SYMBOL
    if product.price is None:
        return ""
    if product.sale_price is not None and product.regular_price is not None and product.sale_price < product.regular_price:
        return f"{symbol}{product.regular_price:.2f} → {symbol}{product.sale_price:.2f}"
    return f"{symbol}{product.price:.2f}"


def attribute_label(name: str) -> str:
    """"pa_shoe_size" → "Shoe size"."""
    name = name.removeprefix("attribute_").removeprefix("pa_")
    label = name.replace("-", " ").replace("_", " ").strip()
    return label[:1].upper() + label[1:]


def _image(media: Optional[MediaRow]) -> dict:
    return {"id": media.id if media else None, "url": media.url if media else None}


def _attributes(product: ProductRow) -> list[dict]:
    out = []
    for attr in product.attributes or []:
        if not isinstance(attr, dict) or not attr.get("name"):
            continue
        name = attr["name"]
        out.append({
            "name": name,
            "label": attr.get("label") or attribute_label(name),
            "is_taxonomy": bool(attr.get("is_taxonomy", False)),
            "variation": bool(attr.get("variation", False)),
            "visible": bool(attr.get("visible", True)),
            "options": attr.get("options", []),
        })
    return out


def _in_stock(product: ProductRow) -> bool:
    return product.stock_status == "instock"


def serialize_variation(variation: ProductRow, parent: ProductRow) -> dict:
    attrs = variation.attributes if isinstance(variation.attributes, dict) else {}
    return {
        "id": variation.id,
        "sku": variation.sku,
        "price": _price(variation.price),
        "regular_price": _price(variation.regular_price),
        "price_html": _price_html(variation),
        **profit_fields(variation).to_dict(),
        "in_stock": _in_stock(variation),
        "stock_status": variation.stock_status,
        "stock_quantity": variation.stock_quantity,
        # Variations without their own image show the parent's
        "image": _image(variation.image or parent.image),
        "attributes": [
            {"key": key, "label": attribute_label(key), "value": value}
            for key, value in attrs.items()
        ],
    }


def serialize_product(product: ProductRow, include_variations: bool = True) -> dict:
    variations = []
    if include_variations and product.type == "variable":
        variations = [serialize_variation(v, product) for v in product.variations]

    return {
        "id": product.id,
        "type": product.type,
        "name": product.name,
        "slug": product.slug,
        "permalink": f"{settings.STORE_BASE_URL}/product/{product.slug}/",
        "price": _price(product.price),
        "regular_price": _price(product.regular_price),
        "price_html": _price_html(product),
        **profit_fields(product).to_dict(),
        "in_stock": _in_stock(product),
        "stock_status": product.stock_status,
        "image": _image(product.image),
        "brands": [{"id": b.id, "name": b.name, "slug": b.slug} for b in product.brands],
        "attributes": _attributes(product),
        "variations": variations,
    }


async def list_products(
    session: AsyncSession,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
    search: str = "",
    brand: str = "",
    include_variations: bool = True,
) -> dict:
    per_page = max(1, min(MAX_PER_PAGE, per_page or DEFAULT_PER_PAGE))
    page = max(1, page or 1)

    repo = ProductRepository(session)
    rows, total = await repo.list_storefront(page=page, per_page=per_page, search=search, brand_slug=brand)
    items = [serialize_product(row, include_variations) for row in rows]

    return {
        "ok": True,
        "page": page,
        "per_page": per_page,
        "found_posts": total,
        "total_pages": math.ceil(total / per_page) if total else 0,
        "count": len(items),
        "items": items,
    }
