"""Pricing — the single fee/FX formula used by quotes and route recommendations.

Invariants:
    - fee_percent_amount = send_amount * fee_pct / 100
    - total_fee = fee_fixed + fee_percent_amount
    - applied_rate = market_rate * (1 - fx_margin_pct / 100)
    - net = max(0, send_amount - total_fee)
    - recipient_gets = net * applied_rate
    - Operation order is fixed: results are reproducible to the last float bit

Design Decisions:
    - Binary floats, not Decimal: the published examples are defined on IEEE-754
      doubles; rounding happens only at persistence/response time (round_money, round_rate)
    - Pure functions: QuoteEngine and RecommendationEngine share this module, never reimplement it
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class FeeModel:
    """Margin/fee parameters of a route or caller-supplied quote request."""
    fee_fixed: float
    fee_pct: float
    fx_margin_pct: float


@dataclass(frozen=True)
class PriceBreakdown:
    send_amount: float
    market_rate: float
    fee_percent_amount: float
    total_fee: float
    applied_rate: float
    net: float
    recipient_gets: float


def price(send_amount: float, market_rate: float, model: FeeModel) -> PriceBreakdown:
    """Apply the fee and FX-margin model to a send amount. Pure."""
    fee_percent_amount = send_amount * model.fee_pct / 100
    total_fee = model.fee_fixed + fee_percent_amount
    applied_rate = market_rate * (1 - model.fx_margin_pct / 100)
    net = max(0.0, send_amount - total_fee)
    recipient_gets = net * applied_rate
    return PriceBreakdown(
        send_amount=send_amount,
        market_rate=market_rate,
        fee_percent_amount=fee_percent_amount,
        total_fee=total_fee,
        applied_rate=applied_rate,
        net=net,
        recipient_gets=recipient_gets,
    )


def effective_cost_pct(total_fee: float, send_amount: float, fx_margin_pct: float) -> float:
    """Fees as a share of the send amount plus the FX margin, in percent."""
    if send_amount <= 0:
        return 0.0
    return total_fee / send_amount * 100 + fx_margin_pct


def eta_mid_minutes(eta_min: int, eta_max: int) -> int:
    """Midpoint of the ETA window; halves round up."""
    return math.floor((eta_min + eta_max) / 2 + 0.5)


def round_money(value: float) -> float:
    return round(value, 2)


def round_rate(value: float) -> float:
    return round(value, 6)
