"""Route Ranking — dedupe, rank and pick suggestions from priced routes.

Invariants:
    - Dedupe by (rail, provider) runs once, before every ranking; the survivor of a
      duplicate pair is the best-value winner and the loser is dropped entirely
    - cheapest:   total_fee asc, eta_max asc, eta_min asc, id asc
    - fastest:    eta_max asc, eta_min asc, recipient_gets desc, total_fee asc, id asc
    - best value: recipient_gets desc, total_fee asc, eta_max asc, eta_min asc, id asc
    - Suggestions claim distinct routes in slot order BEST_VALUE -> CHEAPEST -> FASTEST;
      a slot with nothing left to claim is omitted
    - Highlights mark the top of each ranking and do not depend on suggestion claims
    - Same input, same output (total orders, id is the final tie-break)

Design Decisions:
    - Dedupe keeps the best-value winner even though the cheapest ranking may then
      miss a cheaper variant of the same provider; current behaviour, pinned by tests
    - Sort keys as tuples (negated for desc) instead of comparator functions
"""

from dataclasses import dataclass, field

from remit.core.domain_types import RouteHighlight, SuggestionSlot


@dataclass(frozen=True)
class PricedRoute:
    id: str
    rail: str
    provider: str
    fee_fixed: float
    fee_pct: float
    fx_margin_pct: float
    eta_min_minutes: int
    eta_max_minutes: int
    total_fee: float
    applied_rate: float
    recipient_gets: float
    effective_cost_pct: float
    eta_mid_minutes: int


@dataclass(frozen=True)
class Suggestion:
    slot: SuggestionSlot
    route_id: str


@dataclass
class RankedRoutes:
    routes: list[PricedRoute]
    cheapest: list[PricedRoute]
    fastest: list[PricedRoute]
    best_value: list[PricedRoute]
    suggestions: list[Suggestion]
    highlights: dict[str, list[RouteHighlight]] = field(default_factory=dict)

    @property
    def cheapest_route_id(self) -> str:
        return self.cheapest[0].id

    @property
    def fastest_route_id(self) -> str:
        return self.fastest[0].id

    @property
    def best_value_route_id(self) -> str:
        return self.best_value[0].id


HIGHLIGHT_LABELS: dict[RouteHighlight, str] = {
    RouteHighlight.LOWEST_TOTAL_FEE: "Lowest total fee",
    RouteHighlight.FASTEST_ETA: "Fastest ETA",
    RouteHighlight.HIGHEST_PAYOUT: "Highest recipient payout",
}


# ─── Sort keys ──────────────────────────────────────────────────

def best_value_key(route: PricedRoute) -> tuple:
    return (
        -route.recipient_gets, route.total_fee,
        route.eta_max_minutes, route.eta_min_minutes, route.id,
    )


def cheapest_key(route: PricedRoute) -> tuple:
    return (
        route.total_fee, route.eta_max_minutes, route.eta_min_minutes, route.id,
    )


def fastest_key(route: PricedRoute) -> tuple:
    return (
        route.eta_max_minutes, route.eta_min_minutes,
        -route.recipient_gets, route.total_fee, route.id,
    )


# ─── Steps ──────────────────────────────────────────────────────

def dedupe_routes(routes: list[PricedRoute]) -> list[PricedRoute]:
    """Keep one route per (rail, provider): the best-value winner. Input order preserved."""
    winners: dict[tuple[str, str], PricedRoute] = {}
    for route in routes:
        key = (route.rail, route.provider)
        current = winners.get(key)
        if current is None or best_value_key(route) < best_value_key(current):
            winners[key] = route
    kept = {id(r) for r in winners.values()}
    return [r for r in routes if id(r) in kept]


def pick_suggestions(
    best_value: list[PricedRoute],
    cheapest: list[PricedRoute],
    fastest: list[PricedRoute],
) -> list[Suggestion]:
    claimed: set[str] = set()
    suggestions: list[Suggestion] = []
    for slot, ranking in (
        (SuggestionSlot.BEST_VALUE, best_value),
        (SuggestionSlot.CHEAPEST, cheapest),
        (SuggestionSlot.FASTEST, fastest),
    ):
        choice = next((r for r in ranking if r.id not in claimed), None)
        if choice is None:
            continue
        claimed.add(choice.id)
        suggestions.append(Suggestion(slot=slot, route_id=choice.id))
    return suggestions


def explain(highlights: list[RouteHighlight]) -> str:
    if not highlights:
        return "Active route"
    return " · ".join(HIGHLIGHT_LABELS[h] for h in highlights)


def rank_routes(routes: list[PricedRoute]) -> RankedRoutes:
    """Dedupe, rank three ways, pick distinct suggestions and label winners.

    Raises ValueError on an empty list: callers reject empty corridors first.
    """
    if not routes:
        raise ValueError("rank_routes requires at least one route")

    deduped = dedupe_routes(routes)
    cheapest = sorted(deduped, key=cheapest_key)
    fastest = sorted(deduped, key=fastest_key)
    best_value = sorted(deduped, key=best_value_key)

    highlights: dict[str, list[RouteHighlight]] = {r.id: [] for r in deduped}
    highlights[cheapest[0].id].append(RouteHighlight.LOWEST_TOTAL_FEE)
    highlights[fastest[0].id].append(RouteHighlight.FASTEST_ETA)
    highlights[best_value[0].id].append(RouteHighlight.HIGHEST_PAYOUT)

    return RankedRoutes(
        routes=deduped,
        cheapest=cheapest,
        fastest=fastest,
        best_value=best_value,
        suggestions=pick_suggestions(best_value, cheapest, fastest),
        highlights=highlights,
    )
