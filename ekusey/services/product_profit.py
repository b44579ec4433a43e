"""
Product cost fields: buy price, list ("sale") price and discount percent.

The list price becomes the product's regular price; when a discount is set
the discounted amount becomes the sale/active price. Net profit shown to the
operator is the effective selling price minus the buy price.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from ekusey.db.tables import ProductRow
from ekusey.errors import InvalidInput
from ekusey.services.commission import quantize_money, to_decimal

logger = logging.getLogger(__name__)

EMPTY_PROFIT = "--"
_HUNDRED = Decimal("100")


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _fmt(amount: Decimal) -> str:
    return f"{quantize_money(amount):.2f}"


def effective_price(list_price: Any, discount: Any) -> Optional[Decimal]:
    """List price after the discount (when the discount is numeric)."""
    price = to_decimal(list_price)
    if price is None:
        return None
    pct = to_decimal(discount)
    if pct is None:
        return price
    return price * (1 - pct / _HUNDRED)


def net_profit_display(list_price: Any, buy_price: Any, discount: Any = None) -> str:
    """Two-decimal profit string, or "--" when list or buy price is missing."""
    buy = to_decimal(buy_price)
    effective = effective_price(list_price, discount)
    if buy is None or effective is None:
        return EMPTY_PROFIT
    return _fmt(effective - buy)


def is_invalid_price_pair(buy_price: Any, list_price: Any) -> bool:
    """True only when both prices are numeric and the list price is below cost."""
    buy = to_decimal(buy_price)
    sale = to_decimal(list_price)
    if buy is None or sale is None:
        return False
    return sale < buy


def discounted_price(list_price: Any, discount: Any) -> Optional[str]:
    price = to_decimal(list_price)
    pct = to_decimal(discount)
    if price is None or pct is None:
        return None
    pct = max(Decimal("0"), min(_HUNDRED, pct))
    return _fmt(price * (1 - pct / _HUNDRED))


def _normalize(value: Any) -> Optional[Decimal]:
    """Form input → Decimal, '' → None. Non-numeric input is rejected."""
    if _is_empty(value):
        return None
    parsed = to_decimal(value)
    if parsed is None:
        raise InvalidInput(f"Invalid number: {value!r}")
    return parsed


def apply_pricing(product: ProductRow, buy_price: Any, list_price: Any, discount: Any) -> ProductRow:
    """Store the cost fields and derive the storefront prices.

    An invalid pair (list price below buy price) changes nothing.
    """
    buy = _normalize(buy_price)
    sale = _normalize(list_price)
    pct = _normalize(discount)

    if is_invalid_price_pair(buy, sale):
        raise InvalidInput("Sale price must be greater than or equal to buy price.")

    product.buy_price = buy
    product.list_price = sale
    product.discount_percent = pct

    product.regular_price = sale
    discounted = discounted_price(sale, pct)
    if discounted is not None:
        product.sale_price = Decimal(discounted)
        product.price = Decimal(discounted)
    else:
        product.sale_price = None
        product.price = sale

    logger.info(
        "Pricing updated for product %s: buy=%s list=%s discount=%s",
        product.id, buy, sale, pct,
    )
    return product


@dataclass(frozen=True)
class ProfitFields:
    buy_price: Optional[str]
    sale_price: Optional[str]
    discount_percent: Optional[str]
    net_profit: Optional[str]

    def to_dict(self) -> dict:
        return {
            "buy_price": self.buy_price,
            "sale_price": self.sale_price,
            "discount_percent": self.discount_percent,
            "net_profit": self.net_profit,
        }


def _as_str(value: Any) -> Optional[str]:
    return None if _is_empty(value) else str(value)


def profit_fields(product: ProductRow) -> ProfitFields:
    """Cost/profit fields as exposed by the listing and pricing endpoints."""
    net_profit = None
    if to_decimal(product.buy_price) is not None and to_decimal(product.list_price) is not None:
        net_profit = net_profit_display(product.list_price, product.buy_price, product.discount_percent)
    return ProfitFields(
        buy_price=_as_str(product.buy_price),
        sale_price=_as_str(product.list_price),
        discount_percent=_as_str(product.discount_percent),
        net_profit=net_profit,
    )
