"""Pricing — fee and FX-margin formula shared by quotes and recommendations."""

import pytest

from remit.core.pricing import (
    FeeModel, effective_cost_pct, eta_mid_minutes, price, round_money, round_rate,
)


def test_published_example():
    """100 USD, 1.00 fixed + 2.9%, 1.5% margin at 12.35."""
    result = price(100, 12.35, FeeModel(fee_fixed=1.0, fee_pct=2.9, fx_margin_pct=1.5))
    assert round_money(result.total_fee) == 3.90
    assert round_rate(result.applied_rate) == 12.16475
    assert round_money(result.net) == 96.10
    assert round_money(result.recipient_gets) == 1169.03


def test_fee_percent_amount_is_share_of_send_amount():
    result = price(250, 1.0, FeeModel(fee_fixed=0, fee_pct=2, fx_margin_pct=0))
    assert result.fee_percent_amount == pytest.approx(5.0)
    assert result.total_fee == pytest.approx(5.0)


def test_zero_margin_keeps_market_rate():
    result = price(10, 12.35, FeeModel(fee_fixed=0, fee_pct=0, fx_margin_pct=0))
    assert result.applied_rate == 12.35
    assert result.recipient_gets == pytest.approx(123.5)


def test_fees_above_send_amount_clamp_net_to_zero():
    result = price(2, 12.35, FeeModel(fee_fixed=5, fee_pct=1, fx_margin_pct=1))
    assert result.net == 0.0
    assert result.recipient_gets == 0.0


def test_effective_cost_pct():
    assert effective_cost_pct(3.9, 100, 1.5) == pytest.approx(5.4)
    assert effective_cost_pct(3.9, 0, 1.5) == 0.0


def test_eta_mid_rounds_half_up():
    assert eta_mid_minutes(10, 20) == 15
    assert eta_mid_minutes(1, 2) == 2
    assert eta_mid_minutes(60, 180) == 120


def test_rounding_precision():
    assert round_money(1169.032475) == 1169.03
    assert round_rate(12.1647549) == 12.164755
