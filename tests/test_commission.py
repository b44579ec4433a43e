"""Tests for the net-profit and commission math."""
from __future__ import annotations

from decimal import Decimal

import pytest

from ekusey.services.commission import (
    CommissionCalculator,
    OrderLine,
    quantize_money,
    to_decimal,
)


@pytest.fixture
def calc():
    return CommissionCalculator()


class TestNetProfit:
    def test_two_line_order(self, calc):
        lines = [
            OrderLine(product_id=1, quantity=2, line_total=Decimal("100")),
            OrderLine(product_id=2, quantity=1, line_total=Decimal("30")),
        ]
        net = calc.compute_net_profit(lines, {1: Decimal("20"), 2: Decimal("10")})
        assert net == Decimal("80")
        assert quantize_money(calc.compute_commission(net)) == Decimal("24.00")

    def test_loss_floors_at_zero(self, calc):
        lines = [OrderLine(product_id=1, quantity=3, line_total=Decimal("10"))]
        assert calc.compute_net_profit(lines, {1: Decimal("50")}) == Decimal("0")

    def test_loss_on_one_line_offsets_another(self, calc):
        lines = [
            OrderLine(product_id=1, quantity=1, line_total=Decimal("10")),
            OrderLine(product_id=2, quantity=1, line_total=Decimal("100")),
        ]
        net = calc.compute_net_profit(lines, {1: Decimal("30"), 2: Decimal("40")})
        assert net == Decimal("40")

    def test_missing_buy_price_counts_as_zero(self, calc):
        lines = [OrderLine(product_id=5, quantity=2, line_total=Decimal("18.50"))]
        assert calc.compute_net_profit(lines, {}) == Decimal("18.50")

    def test_non_numeric_buy_price_counts_as_zero(self, calc):
        lines = [OrderLine(product_id=5, quantity=1, line_total=Decimal("12"))]
        assert calc.compute_net_profit(lines, {5: "abc"}) == Decimal("12")

    def test_variation_cost_is_used(self, calc):
        line = OrderLine(product_id=20, variation_id=21, quantity=1, line_total=Decimal("40"))
        net = calc.compute_net_profit([line], {20: Decimal("0"), 21: Decimal("15")})
        assert net == Decimal("25")

    def test_empty_order(self, calc):
        assert calc.compute_net_profit([], {}) == Decimal("0")


class TestCommission:
    @pytest.mark.parametrize("profit", ["0", "1", "80", "99.99", "1234.56"])
    def test_thirty_percent(self, calc, profit):
        p = Decimal(profit)
        assert calc.compute_commission(p) == p * Decimal("0.30")

    def test_custom_rate(self):
        assert CommissionCalculator(rate="0.15").compute_commission(Decimal("100")) == Decimal("15.00")

    def test_invalid_rate_rejected(self):
        with pytest.raises(ValueError):
            CommissionCalculator(rate="lots")
        with pytest.raises(ValueError):
            CommissionCalculator(rate="-0.1")

    def test_half_cent_rounds_up(self):
        assert quantize_money(Decimal("0.005")) == Decimal("0.01")


class TestToDecimal:
    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "NaN", "Infinity", True])
    def test_unusable_values(self, value):
        assert to_decimal(value) is None

    def test_numbers(self):
        assert to_decimal("12.50") == Decimal("12.50")
        assert to_decimal(3) == Decimal("3")
        assert to_decimal(2.5) == Decimal("2.5")
