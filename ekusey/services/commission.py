"""
Affiliate commission math.

Net profit = Σ (line_total − buy_price × quantity), floored at zero.
Commission = net profit × rate (30% by default).

Shipping and tax never enter the calculation: line_total is what the
customer paid for the line after line discounts, before tax.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

DEFAULT_COMMISSION_RATE = Decimal("0.30")
CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a stored price. Empty, non-numeric and non-finite values give None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    if not result.is_finite():
        return None
    return result


@dataclass(frozen=True)
class OrderLine:
    """The parts of an order line the calculator needs."""
    product_id: int
    quantity: int
    line_total: Decimal
    variation_id: Optional[int] = None

    @property
    def cost_product_id(self) -> int:
        """The variation when the line has one, otherwise the product."""
        return self.variation_id or self.product_id


class CommissionCalculator:
    """Pure net-profit and commission computation. Rate is fixed per instance."""

    def __init__(self, rate: Decimal | str | float = DEFAULT_COMMISSION_RATE):
        parsed = to_decimal(rate)
        if parsed is None or parsed < 0:
            raise ValueError(f"Invalid commission rate: {rate!r}")
        self.rate = parsed

    def compute_net_profit(
        self,
        lines: Iterable[OrderLine],
        buy_prices: Mapping[int, Any],
    ) -> Decimal:
        total = ZERO
        for line in lines:
            buy_price = to_decimal(buy_prices.get(line.cost_product_id)) or ZERO
            line_total = to_decimal(line.line_total) or ZERO
            total += line_total - buy_price * line.quantity
        return max(ZERO, total)

    def compute_commission(self, net_profit: Decimal) -> Decimal:
        return net_profit * self.rate


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
