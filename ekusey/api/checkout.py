"""
Checkout, the integration point that creates orders with line items.

Order creation attaches the visitor's referral code; once the line items are
stored the commission is finalized (computed exactly once).
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ekusey.api.deps import get_commission_lifecycle
from ekusey.db.engine import get_session
from ekusey.db.order_tables import OrderItemRow
from ekusey.db.repository import OrderRepository, ProductRepository
from ekusey.errors import InvalidInput, NotFound
from ekusey.middleware.referral import current_referral_code
from ekusey.services.commission import quantize_money
from ekusey.services.commission_lifecycle import CommissionLifecycle

router = APIRouter(prefix="/api/v1", tags=["Checkout"])
logger = logging.getLogger(__name__)


class CheckoutItem(BaseModel):
    product_id: int
    variation_id: Optional[int] = None
    quantity: int = Field(1, ge=1, le=999)


class CheckoutRequest(BaseModel):
    items: list[CheckoutItem]
    currency: str = "USD"


async def _build_line(products: ProductRepository, item: CheckoutItem) -> OrderItemRow:
    product = await products.get(item.product_id)
    if product is None or product.status != "publish" or product.parent_id is not None:
        raise NotFound(f"Product {item.product_id} not found.")

    priced = product
    if item.variation_id:
        priced = next((v for v in product.variations if v.id == item.variation_id), None)
        if priced is None:
            raise NotFound(f"Variation {item.variation_id} not found for product {item.product_id}.")
    elif product.type == "variable":
        raise InvalidInput(f"Product {item.product_id} needs a variation.")

    if priced.price is None:
        raise InvalidInput(f"Product {priced.id} is not purchasable.")

    return OrderItemRow(
        product_id=product.id,
        variation_id=item.variation_id,
        name=priced.name,
        quantity=item.quantity,
        line_total=quantize_money(Decimal(priced.price) * item.quantity),
    )


@router.post("/checkout")
async def checkout(
    req: CheckoutRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
    lifecycle: CommissionLifecycle = Depends(get_commission_lifecycle),
):
    """Place an order. Referred visitors get a pending commission recorded."""
    if not req.items:
        raise InvalidInput("Cart is empty.")

    products = ProductRepository(session)
    lines = [await _build_line(products, item) for item in req.items]

    orders = OrderRepository(session)
    order = await orders.create(currency=req.currency)

    referral_code = current_referral_code(request)
    await lifecycle.on_order_created(order, referral_code)

    await orders.add_items(order, lines)
    await orders.save()

    record = await lifecycle.on_order_finalized(order.id, fallback_referral_code=referral_code)
    logger.info("Order %s placed (%d lines, referred=%s)", order.id, len(lines), bool(record))

    return {
        "order_id": order.id,
        "subtotal": f"{order.subtotal:.2f}",
        "currency": order.currency,
        "referred": record is not None,
    }
