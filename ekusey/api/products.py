"""Product endpoints: storefront listing and operator pricing (buy/sale/discount)."""
from __future__ import annotations

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ekusey.auth import CAP_EDIT_PRODUCTS, Actor, get_actor
from ekusey.db.engine import get_session
from ekusey.db.repository import ProductRepository
from ekusey.errors import NotFound, PermissionDenied
from ekusey.services.catalog import DEFAULT_PER_PAGE, list_products
from ekusey.services.product_profit import (
    apply_pricing,
    discounted_price,
    is_invalid_price_pair,
    net_profit_display,
    profit_fields,
)

router = APIRouter(prefix="/api/v1", tags=["Products"])
logger = logging.getLogger(__name__)

PriceInput = Optional[Union[str, float]]


class PricingRequest(BaseModel):
    buy_price: PriceInput = None
    sale_price: PriceInput = None
    discount_percent: PriceInput = None


@router.get("/products")
async def get_products(
    page: int = Query(1),
    per_page: int = Query(DEFAULT_PER_PAGE),
    search: str = "",
    brand: str = "",
    include_variations: int = Query(1),
    session: AsyncSession = Depends(get_session),
):
    """Published products with brands, attributes, variations and profit fields."""
    return await list_products(
        session,
        page=page,
        per_page=per_page,
        search=search,
        brand=brand,
        include_variations=bool(include_variations),
    )


def _require_pricing_access(actor: Actor) -> None:
    if not actor.can(CAP_EDIT_PRODUCTS):
        raise PermissionDenied("You do not have permission to edit products.")


@router.get("/admin/products/{product_id}/pricing")
async def get_pricing(
    product_id: int,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
):
    _require_pricing_access(actor)
    product = await ProductRepository(session).get(product_id)
    if product is None:
        raise NotFound("Product not found.")
    fields = profit_fields(product)
    return {
        "product_id": product.id,
        **fields.to_dict(),
        "net_profit_display": fields.net_profit or "--",
    }


@router.put("/admin/products/{product_id}/pricing")
async def update_pricing(
    product_id: int,
    req: PricingRequest,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
):
    """Save buy/sale/discount and sync the storefront prices."""
    _require_pricing_access(actor)
    product = await ProductRepository(session).get(product_id)
    if product is None:
        raise NotFound("Product not found.")

    apply_pricing(product, req.buy_price, req.sale_price, req.discount_percent)
    await session.commit()

    return {
        "success": True,
        "product_id": product.id,
        **profit_fields(product).to_dict(),
        "regular_price": None if product.regular_price is None else f"{product.regular_price:.2f}",
        "price": None if product.price is None else f"{product.price:.2f}",
    }


@router.post("/admin/products/pricing/preview")
async def preview_pricing(req: PricingRequest, actor: Actor = Depends(get_actor)):
    """Live profit computation for the pricing form (nothing is saved)."""
    _require_pricing_access(actor)
    return {
        "net_profit": net_profit_display(req.sale_price, req.buy_price, req.discount_percent),
        "discounted_price": discounted_price(req.sale_price, req.discount_percent),
        "valid": not is_invalid_price_pair(req.buy_price, req.sale_price),
    }
