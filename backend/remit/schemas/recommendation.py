"""Recommendation Schemas — ranked routes and the plain corridor route listing.

Invariants:
    - Response values are rounded here (fees/payout/effective cost 2 dp, rate 6 dp);
      the engine ranks on unrounded values
    - Routes keep the engine's post-dedupe order
"""

from remit.core.pricing import round_money, round_rate
from remit.core.route_ranking import explain
from remit.schemas.common import AssetSummary, CamelModel, UtcDatetime
from remit.services.recommendation_engine import CorridorRoutes, Recommendation


class PricedRouteResponse(CamelModel):
    id: str
    rail: str
    provider: str
    fee_fixed: float
    fee_pct: float
    fx_margin_pct: float
    eta_min_minutes: int
    eta_max_minutes: int
    eta_mid_minutes: int
    total_fee: float
    applied_rate: float
    recipient_gets: float
    effective_cost_pct: float
    highlights: list[str]
    explanation: str


class SuggestionResponse(CamelModel):
    slot: str
    route_id: str


class RecommendationResponse(CamelModel):
    from_asset: AssetSummary
    to_asset: AssetSummary
    send_amount: float
    market_rate: float
    rate_source: str
    rate_timestamp: UtcDatetime
    cheapest_route_id: str
    fastest_route_id: str
    best_value_route_id: str
    routes: list[PricedRouteResponse]
    suggestions: list[SuggestionResponse]

    @classmethod
    def from_recommendation(cls, rec: Recommendation) -> "RecommendationResponse":
        ranked = rec.ranked
        routes = []
        for route in ranked.routes:
            labels = ranked.highlights.get(route.id, [])
            routes.append(PricedRouteResponse(
                id=route.id,
                rail=route.rail,
                provider=route.provider,
                fee_fixed=route.fee_fixed,
                fee_pct=route.fee_pct,
                fx_margin_pct=route.fx_margin_pct,
                eta_min_minutes=route.eta_min_minutes,
                eta_max_minutes=route.eta_max_minutes,
                eta_mid_minutes=route.eta_mid_minutes,
                total_fee=round_money(route.total_fee),
                applied_rate=round_rate(route.applied_rate),
                recipient_gets=round_money(route.recipient_gets),
                effective_cost_pct=round_money(route.effective_cost_pct),
                highlights=[h.value for h in labels],
                explanation=explain(labels),
            ))
        return cls(
            from_asset=AssetSummary.model_validate(rec.from_asset),
            to_asset=AssetSummary.model_validate(rec.to_asset),
            send_amount=rec.send_amount,
            market_rate=rec.market_rate,
            rate_source=rec.rate_source,
            rate_timestamp=rec.rate_timestamp,
            cheapest_route_id=ranked.cheapest_route_id,
            fastest_route_id=ranked.fastest_route_id,
            best_value_route_id=ranked.best_value_route_id,
            routes=routes,
            suggestions=[
                SuggestionResponse(slot=s.slot.value, route_id=s.route_id)
                for s in ranked.suggestions
            ],
        )


class RouteSummary(CamelModel):
    id: str
    rail: str
    provider: str
    fee_fixed: float
    fee_pct: float
    fx_margin_pct: float
    eta_min_minutes: int
    eta_max_minutes: int


class RoutesResponse(CamelModel):
    corridor_id: str
    from_asset: AssetSummary
    to_asset: AssetSummary
    routes: list[RouteSummary]

    @classmethod
    def from_corridor(cls, corridor: CorridorRoutes) -> "RoutesResponse":
        return cls(
            corridor_id=corridor.corridor_id,
            from_asset=AssetSummary.model_validate(corridor.from_asset),
            to_asset=AssetSummary.model_validate(corridor.to_asset),
            routes=[
                RouteSummary(
                    id=str(r.id), rail=r.rail, provider=r.provider,
                    fee_fixed=r.fee_fixed, fee_pct=r.fee_pct,
                    fx_margin_pct=r.fx_margin_pct,
                    eta_min_minutes=r.eta_min_minutes,
                    eta_max_minutes=r.eta_max_minutes,
                )
                for r in corridor.routes
            ],
        )
