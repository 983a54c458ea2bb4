"""Route Ranking — dedupe, three orderings, distinct suggestions, highlights.

Tests:
    - A/B/C example: cheapest=C, fastest=C, best value=B; suggestions B, C, A
    - Ties resolve through the documented key chain down to id
    - Dedupe keeps the best-value variant of a (rail, provider) pair even when a
      cheaper variant exists: current behaviour, pinned on purpose
    - Fewer distinct routes than slots drops the missing slots
"""

import pytest

from remit.core.domain_types import RouteHighlight, SuggestionSlot
from remit.core.route_ranking import (
    PricedRoute, dedupe_routes, explain, rank_routes,
)


def _route(
    id: str, total_fee: float, eta: tuple[int, int], gets: float,
    rail: str = "BANK", provider: str | None = None,
) -> PricedRoute:
    return PricedRoute(
        id=id, rail=rail, provider=provider or f"Provider-{id}",
        fee_fixed=total_fee, fee_pct=0.0, fx_margin_pct=0.0,
        eta_min_minutes=eta[0], eta_max_minutes=eta[1],
        total_fee=total_fee, applied_rate=1.0, recipient_gets=gets,
        effective_cost_pct=total_fee, eta_mid_minutes=(eta[0] + eta[1]) // 2,
    )


@pytest.fixture
def abc():
    return [
        _route("A", 5, (10, 20), 94),
        _route("B", 3, (60, 180), 96),
        _route("C", 2, (1, 5), 90),
    ]


def test_abc_rankings(abc):
    ranked = rank_routes(abc)
    assert ranked.cheapest_route_id == "C"
    assert ranked.fastest_route_id == "C"
    assert ranked.best_value_route_id == "B"
    assert [r.id for r in ranked.cheapest] == ["C", "B", "A"]
    assert [r.id for r in ranked.fastest] == ["C", "A", "B"]
    assert [r.id for r in ranked.best_value] == ["B", "A", "C"]


def test_abc_suggestions_claim_distinct_routes(abc):
    ranked = rank_routes(abc)
    assert [(s.slot, s.route_id) for s in ranked.suggestions] == [
        (SuggestionSlot.BEST_VALUE, "B"),
        (SuggestionSlot.CHEAPEST, "C"),
        (SuggestionSlot.FASTEST, "A"),
    ]


def test_abc_highlights(abc):
    ranked = rank_routes(abc)
    assert ranked.highlights["C"] == [
        RouteHighlight.LOWEST_TOTAL_FEE, RouteHighlight.FASTEST_ETA,
    ]
    assert ranked.highlights["B"] == [RouteHighlight.HIGHEST_PAYOUT]
    assert ranked.highlights["A"] == []


def test_ranking_is_input_order_independent(abc):
    forward = rank_routes(abc)
    backward = rank_routes(list(reversed(abc)))
    assert forward.suggestions == backward.suggestions
    assert [r.id for r in forward.best_value] == [r.id for r in backward.best_value]


def test_equal_routes_tie_break_on_id():
    ranked = rank_routes([
        _route("r-2", 3, (10, 20), 95),
        _route("r-1", 3, (10, 20), 95),
    ])
    assert ranked.cheapest_route_id == "r-1"
    assert ranked.fastest_route_id == "r-1"
    assert ranked.best_value_route_id == "r-1"


def test_fastest_tie_on_eta_prefers_higher_payout():
    ranked = rank_routes([
        _route("low", 1, (5, 10), 80),
        _route("high", 4, (5, 10), 90),
    ])
    assert ranked.fastest_route_id == "high"


def test_cheapest_tie_on_fee_prefers_shorter_eta():
    ranked = rank_routes([
        _route("slow", 2, (60, 120), 90),
        _route("quick", 2, (10, 30), 90),
    ])
    assert ranked.cheapest_route_id == "quick"


def test_dedupe_keeps_best_value_variant_even_if_cheaper_exists():
    """Pinned behaviour: the cheaper variant of a provider is dropped before
    the cheapest ranking ever sees it."""
    cheap_variant = _route("x-cheap", 1, (10, 20), 90, provider="X")
    rich_variant = _route("x-rich", 4, (10, 20), 95, provider="X")
    other = _route("y", 2, (30, 60), 91, provider="Y")

    ranked = rank_routes([cheap_variant, rich_variant, other])

    assert [r.id for r in ranked.routes] == ["x-rich", "y"]
    assert ranked.cheapest_route_id == "y"
    assert "x-cheap" not in ranked.highlights


def test_dedupe_is_per_rail_and_provider():
    bank = _route("b", 1, (10, 20), 90, rail="BANK", provider="Same")
    mobile = _route("m", 1, (10, 20), 90, rail="MOBILE_MONEY", provider="Same")
    assert dedupe_routes([bank, mobile]) == [bank, mobile]


def test_single_route_fills_one_slot():
    ranked = rank_routes([_route("only", 1, (1, 2), 10)])
    assert [s.slot for s in ranked.suggestions] == [SuggestionSlot.BEST_VALUE]
    assert ranked.highlights["only"] == [
        RouteHighlight.LOWEST_TOTAL_FEE, RouteHighlight.FASTEST_ETA,
        RouteHighlight.HIGHEST_PAYOUT,
    ]


def test_two_routes_fill_two_slots():
    ranked = rank_routes([
        _route("a", 1, (1, 2), 10),
        _route("b", 2, (5, 9), 20),
    ])
    assert [(s.slot, s.route_id) for s in ranked.suggestions] == [
        (SuggestionSlot.BEST_VALUE, "b"),
        (SuggestionSlot.CHEAPEST, "a"),
    ]


def test_empty_input_rejected():
    with pytest.raises(ValueError):
        rank_routes([])


def test_explain():
    assert explain([]) == "Active route"
    assert explain([RouteHighlight.LOWEST_TOTAL_FEE, RouteHighlight.FASTEST_ETA]) == (
        "Lowest total fee · Fastest ETA"
    )
