"""
Affiliate commission admin endpoints.

- GET  /api/v1/admin/commissions/nonce           : nonce for the claim action
- POST /api/v1/admin/commissions/claim           : claim one order's commission
- POST /api/v1/admin/commissions/mark-paid       : bulk "Mark Commission as Paid"
- GET  /api/v1/admin/orders/{order_id}/commission: commission panel for an order
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ekusey.api.deps import get_commission_lifecycle
from ekusey.auth import (
    CAP_EDIT_SHOP_ORDERS,
    CLAIM_COMMISSION_ACTION,
    Actor,
    create_nonce,
    get_actor,
    verify_nonce,
)
from ekusey.errors import PermissionDenied
from ekusey.models.commission import ClaimResult, MarkPaidResult
from ekusey.services.commission_lifecycle import CommissionLifecycle

router = APIRouter(prefix="/api/v1/admin", tags=["Affiliate Commissions"])
logger = logging.getLogger(__name__)


class ClaimRequest(BaseModel):
    order_id: int = 0
    nonce: str = ""


class MarkPaidRequest(BaseModel):
    order_ids: list[int] = []


@router.get("/commissions/nonce")
async def claim_nonce(actor: Actor = Depends(get_actor)):
    """Nonce the order screen embeds in its claim button."""
    if not actor.can(CAP_EDIT_SHOP_ORDERS):
        raise PermissionDenied("You do not have permission to perform this action.")
    return {"nonce": create_nonce(CLAIM_COMMISSION_ACTION, actor)}


@router.post("/commissions/claim", response_model=ClaimResult)
async def claim_commission(
    req: ClaimRequest,
    actor: Actor = Depends(get_actor),
    lifecycle: CommissionLifecycle = Depends(get_commission_lifecycle),
):
    """Report the conversion and mark the commission as claimed."""
    if not verify_nonce(req.nonce, CLAIM_COMMISSION_ACTION, actor):
        raise PermissionDenied("Security check failed. Please refresh the page and try again.")
    return await lifecycle.on_claim_requested(req.order_id, actor)


@router.post("/commissions/mark-paid", response_model=MarkPaidResult)
async def mark_commissions_paid(
    req: MarkPaidRequest,
    actor: Actor = Depends(get_actor),
    lifecycle: CommissionLifecycle = Depends(get_commission_lifecycle),
):
    changed = await lifecycle.on_mark_paid_requested(req.order_ids, actor)
    noun = "commission" if changed == 1 else "commissions"
    return MarkPaidResult(changed=changed, message=f"{changed} {noun} marked as paid.")


@router.get("/orders/{order_id}/commission")
async def order_commission(
    order_id: int,
    actor: Actor = Depends(get_actor),
    lifecycle: CommissionLifecycle = Depends(get_commission_lifecycle),
):
    if not actor.can(CAP_EDIT_SHOP_ORDERS):
        raise PermissionDenied("You do not have permission to perform this action.")
    view = await lifecycle.view_commission(order_id)
    if view is None:
        return {"order_id": order_id, "referred": False}
    return {"referred": True, **view.model_dump(mode="json")}
