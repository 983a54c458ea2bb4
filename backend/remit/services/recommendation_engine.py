"""Recommendation Engine — price every active route of a corridor and rank them.

Invariants:
    - Unknown/inactive asset, unknown/inactive corridor, no active routes or
      non-positive amount -> RemitValidationError (400)
    - Every route priced with the same market rate through core/pricing.price()
    - Ranking, dedupe and suggestions are core/route_ranking.rank_routes(); this
      module only loads data and assembles the result
    - Ranking sees unrounded values; rounding happens in the response schema

Design Decisions:
    - list_routes() shares corridor resolution with recommend() so both endpoints
      reject the same inputs with the same messages
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime

from remit.core.clock import Clock, utcnow
from remit.core.collaborator_protocols import AssetCatalog, AssetLike, RouteCatalog, RouteLike
from remit.core.errors import RemitValidationError
from remit.core.pricing import FeeModel, effective_cost_pct, eta_mid_minutes, price
from remit.core.route_ranking import PricedRoute, RankedRoutes, rank_routes
from remit.services.quote_engine import MANUAL_RATE_SOURCE
from remit.services.rate_oracle import RateOracle

logger = logging.getLogger(__name__)


@dataclass
class CorridorRoutes:
    corridor_id: str
    from_asset: AssetLike
    to_asset: AssetLike
    routes: list[RouteLike]


@dataclass
class Recommendation:
    from_asset: AssetLike
    to_asset: AssetLike
    send_amount: float
    market_rate: float
    rate_source: str
    rate_timestamp: datetime
    ranked: RankedRoutes


def price_route(route: RouteLike, send_amount: float, market_rate: float) -> PricedRoute:
    model = FeeModel(
        fee_fixed=route.fee_fixed, fee_pct=route.fee_pct,
        fx_margin_pct=route.fx_margin_pct,
    )
    breakdown = price(send_amount, market_rate, model)
    return PricedRoute(
        id=str(route.id),
        rail=route.rail,
        provider=route.provider,
        fee_fixed=route.fee_fixed,
        fee_pct=route.fee_pct,
        fx_margin_pct=route.fx_margin_pct,
        eta_min_minutes=route.eta_min_minutes,
        eta_max_minutes=route.eta_max_minutes,
        total_fee=breakdown.total_fee,
        applied_rate=breakdown.applied_rate,
        recipient_gets=breakdown.recipient_gets,
        effective_cost_pct=effective_cost_pct(
            breakdown.total_fee, send_amount, route.fx_margin_pct,
        ),
        eta_mid_minutes=eta_mid_minutes(route.eta_min_minutes, route.eta_max_minutes),
    )


class RecommendationEngine:
    def __init__(
        self,
        assets: AssetCatalog,
        routes: RouteCatalog,
        oracle: RateOracle,
        clock: Clock = utcnow,
    ):
        self.assets = assets
        self.routes = routes
        self.oracle = oracle
        self.clock = clock

    async def recommend(
        self, from_code: str, to_code: str, send_amount: float,
        market_rate: float | None = None,
    ) -> Recommendation:
        corridor = await self.list_routes(from_code, to_code)
        if send_amount is None or not math.isfinite(send_amount) or send_amount <= 0:
            raise RemitValidationError(
                "sendAmount must be a positive number", "sendAmount",
            )

        if market_rate is not None:
            if not math.isfinite(market_rate) or market_rate <= 0:
                raise RemitValidationError(
                    "marketRate must be a positive number", "marketRate",
                )
            rate, source, timestamp = market_rate, MANUAL_RATE_SOURCE, self.clock()
        else:
            market = await self.oracle.get_rate(
                corridor.from_asset.code, corridor.to_asset.code,
            )
            rate, source, timestamp = market.rate, market.source, market.timestamp

        priced = [price_route(r, send_amount, rate) for r in corridor.routes]
        ranked = rank_routes(priced)
        logger.info(
            f"Recommendation {corridor.from_asset.code}->{corridor.to_asset.code}: "
            f"{len(priced)} routes, {len(ranked.routes)} after dedupe",
        )
        return Recommendation(
            from_asset=corridor.from_asset,
            to_asset=corridor.to_asset,
            send_amount=send_amount,
            market_rate=rate,
            rate_source=source,
            rate_timestamp=timestamp,
            ranked=ranked,
        )

    async def list_routes(self, from_code: str, to_code: str) -> CorridorRoutes:
        """Active routes of the corridor, ordered by eta_min_minutes."""
        from_norm = (from_code or "").strip().upper()
        to_norm = (to_code or "").strip().upper()
        if not from_norm or not to_norm:
            raise RemitValidationError("from and to are required", "from")

        from_asset = await self.assets.find(from_norm)
        if from_asset is None or not from_asset.is_active:
            raise RemitValidationError(f"Unknown asset code: {from_norm}", "from")
        to_asset = await self.assets.find(to_norm)
        if to_asset is None or not to_asset.is_active:
            raise RemitValidationError(f"Unknown asset code: {to_norm}", "to")

        corridor = await self.routes.find_corridor(from_norm, to_norm)
        if corridor is None or not corridor.is_active:
            raise RemitValidationError(f"Unknown corridor: {from_norm}->{to_norm}")

        routes = await self.routes.active_routes(corridor.id)
        if not routes:
            raise RemitValidationError(
                f"No active routes for corridor: {from_norm}->{to_norm}",
            )
        return CorridorRoutes(
            corridor_id=str(corridor.id),
            from_asset=from_asset,
            to_asset=to_asset,
            routes=sorted(routes, key=lambda r: (r.eta_min_minutes, r.provider)),
        )
