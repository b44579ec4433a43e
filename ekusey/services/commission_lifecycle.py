"""
Affiliate commission lifecycle.

States: pending → claimed → paid (paid is terminal, no reverse transitions).

Entry points:
- on_order_created:       attach the referral code (no line items yet, so no profit)
- on_order_finalized:     compute net profit + commission exactly once
- on_claim_requested:     report to the conversion API, then pending → claimed
- on_mark_paid_requested: bulk, local-only → paid
- view_commission:        read path; fills in missing numbers before returning
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ekusey.auth import CAP_EDIT_SHOP_ORDERS, Actor
from ekusey.db.order_tables import OrderCommissionRow, OrderRow
from ekusey.db.repository import OrderRepository, ProductRepository
from ekusey.errors import AlreadyProcessed, InvalidInput, NotFound, PermissionDenied
from ekusey.models.commission import ClaimResult, CommissionStatus, CommissionView
from ekusey.services.commission import CommissionCalculator, OrderLine, quantize_money
from ekusey.services.conversion_gateway import ConversionGateway, ConversionReport

logger = logging.getLogger(__name__)

_DONE_STATUSES = (CommissionStatus.CLAIMED.value, CommissionStatus.PAID.value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_price(amount: Decimal, symbol: str = "$") -> str:
    return f"{symbol}{quantize_money(amount):,.2f}"


def format_rate(rate: Decimal) -> str:
    """0.30 → "30%"."""
    pct = (rate * 100).normalize()
    return f"{pct:f}%"


class CommissionLifecycle:
    def __init__(
        self,
        session: AsyncSession,
        calculator: CommissionCalculator,
        gateway: ConversionGateway,
        clock: Callable[[], datetime] = _utcnow,
        currency_symbol: str = "$",
    ):
        self.session = session
        self.orders = OrderRepository(session)
        self.products = ProductRepository(session)
        self.calculator = calculator
        self.gateway = gateway
        self._clock = clock
        self.currency_symbol = currency_symbol

    # ── Calculation ──────────────────────────────────────────────────────────

    async def compute_net_profit(self, order: OrderRow) -> Decimal:
        lines = [
            OrderLine(
                product_id=item.product_id,
                variation_id=item.variation_id,
                quantity=item.quantity,
                line_total=item.line_total,
            )
            for item in order.items
        ]
        buy_prices = await self.products.buy_prices(line.cost_product_id for line in lines)
        return self.calculator.compute_net_profit(lines, buy_prices)

    async def _record_commission(self, order: OrderRow, record: OrderCommissionRow) -> None:
        net_profit = await self.compute_net_profit(order)
        record.net_profit = quantize_money(net_profit)
        record.commission_rate = self.calculator.rate
        record.commission_amount = quantize_money(self.calculator.compute_commission(net_profit))
        logger.info(
            "Commission computed: order=%s code=%s net_profit=%s commission=%s",
            order.id, record.referral_code, record.net_profit, record.commission_amount,
        )

    # ── Checkout hooks ───────────────────────────────────────────────────────

    async def on_order_created(self, order: OrderRow, referral_code: str) -> Optional[OrderCommissionRow]:
        """Attach the visitor's referral to a new order. Line items don't exist yet."""
        if not referral_code:
            return None
        record = order.commission
        if record is None:
            record = OrderCommissionRow(order_id=order.id)
            order.commission = record
        if not record.referral_code:
            record.referral_code = referral_code
        record.status = record.status or CommissionStatus.PENDING.value
        await self.orders.save()
        return record

    async def on_order_finalized(
        self,
        order_id: int,
        fallback_referral_code: str = "",
    ) -> Optional[OrderCommissionRow]:
        """Compute the commission once line items exist. Later calls are no-ops."""
        order = await self.orders.get(order_id)
        if order is None:
            return None

        record = order.commission
        referral_code = (record.referral_code if record else "") or fallback_referral_code
        if not referral_code:
            return None

        if record is None:
            record = OrderCommissionRow(order_id=order.id)
            order.commission = record
        if record.commission_amount is not None and record.net_profit is not None:
            return record

        record.referral_code = record.referral_code or referral_code
        await self._record_commission(order, record)
        record.status = record.status or CommissionStatus.PENDING.value
        await self.orders.save()
        return record

    # ── Read path ────────────────────────────────────────────────────────────

    async def view_commission(self, order_id: int) -> Optional[CommissionView]:
        """Commission panel for an order, or None if the order wasn't referred.

        Missing numbers are computed and stored first; populated values are
        returned untouched even if the order's items changed since.
        """
        order = await self.orders.get(order_id)
        if order is None:
            raise NotFound("Order not found.")

        record = order.commission
        if record is None or not record.referral_code:
            return None

        dirty = False
        if not record.status:
            record.status = CommissionStatus.PENDING.value
            dirty = True
        if record.commission_amount is None or record.net_profit is None:
            await self._record_commission(order, record)
            dirty = True
        if dirty:
            await self.orders.save()

        rate = Decimal(record.commission_rate) if record.commission_rate is not None else self.calculator.rate
        return CommissionView(
            order_id=order.id,
            referral_code=record.referral_code,
            net_profit=record.net_profit,
            commission_rate=rate,
            rate_percentage=format_rate(rate),
            commission_amount=record.commission_amount,
            status=CommissionStatus(record.status),
            claimable=record.status == CommissionStatus.PENDING.value,
            claimed_at=record.claimed_at,
            paid_at=record.paid_at,
        )

    # ── Operator transitions ─────────────────────────────────────────────────

    async def on_claim_requested(self, order_id: int, actor: Actor) -> ClaimResult:
        """pending → claimed, only after the conversion API confirms with 200/201.

        No lock is taken: two concurrent claims for the same order can both
        pass the status check.
        """
        if not actor.can(CAP_EDIT_SHOP_ORDERS):
            raise PermissionDenied("You do not have permission to perform this action.")
        if not order_id or order_id <= 0:
            raise InvalidInput("Invalid order ID.")

        order = await self.orders.get(order_id)
        if order is None:
            raise NotFound("Order not found.")

        record = order.commission
        if record is None or not record.referral_code:
            raise InvalidInput("No affiliate code found for this order.")
        if record.status in _DONE_STATUSES:
            raise AlreadyProcessed(f"Commission has already been {record.status}.")

        if record.commission_amount is None or record.net_profit is None:
            await self._record_commission(order, record)
            await self.orders.save()

        amount = Decimal(record.commission_amount)
        # Raises ExternalCallFailed / ExternalCallRejected; status stays as it is
        receipt = await self.gateway.report_conversion(ConversionReport(
            affiliate_code=record.referral_code,
            commission_amount=amount,
            order_id=order.id,
        ))

        record.status = CommissionStatus.CLAIMED.value
        record.claimed_at = self._clock()
        price = format_price(amount, self.currency_symbol)
        await self.orders.add_note(
            order,
            f"Affiliate commission of {price} claimed for affiliate code: {record.referral_code}",
        )
        await self.orders.save()
        logger.info("Commission claimed: order=%s code=%s amount=%s", order.id, record.referral_code, amount)

        return ClaimResult(
            message=f"Commission claimed successfully! Amount: {price}",
            order_id=order.id,
            status=CommissionStatus.CLAIMED,
            api_response=receipt.payload,
        )

    async def on_mark_paid_requested(self, order_ids: Iterable[int], actor: Actor) -> int:
        """Mark every selected referred order as paid, whatever its current status.

        Orders that don't exist or carry no referral code are skipped.
        """
        if not actor.can(CAP_EDIT_SHOP_ORDERS):
            raise PermissionDenied("You do not have permission to perform this action.")

        changed = 0
        now = self._clock()
        for order_id in dict.fromkeys(order_ids):
            order = await self.orders.get(order_id)
            if order is None or order.commission is None or not order.commission.referral_code:
                continue
            order.commission.status = CommissionStatus.PAID.value
            order.commission.paid_at = now
            changed += 1

        await self.orders.save()
        logger.info("Commissions marked as paid: %d", changed)
        return changed
