"""Quote Engine — pricing, fee model resolution, persistence and expiry.

Invariants:
    - Manual market rate + explicit fee model reproduce the published example
    - Without overrides the first active route (by provider) for the rail prices the quote
    - Without a route the configured defaults apply
    - Quotes expire quote_ttl_seconds after creation: 404 unknown, 410 expired
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from remit.core.errors import GoneError, RemitValidationError, ResourceNotFoundError
from remit.services.quote_engine import QuoteOverrides, parse_rail

from tests.services.fakes import START, audit_actions


async def test_published_example(quote_engine, catalog):
    quote = await quote_engine.create_quote(
        "USD", "GHS", "BANK", 100,
        QuoteOverrides(market_rate=12.35, fx_margin_pct=1.5, fee_fixed=1.0, fee_pct=2.9),
    )
    assert quote.total_fee == 3.90
    assert quote.applied_rate == 12.16475
    assert quote.recipient_gets == 1169.03
    assert quote.rate_source == "manual"
    assert quote.rate_timestamp == START


async def test_quote_expires_after_ttl(quote_engine, catalog, settings):
    quote = await quote_engine.create_quote(
        "USD", "GHS", "BANK", 100, QuoteOverrides(market_rate=12.35),
    )
    assert quote.expires_at == START + timedelta(seconds=settings.quote_ttl_seconds)
    assert quote.created_at == START


async def test_route_fee_model_used_without_overrides(quote_engine, catalog):
    """BANK on USD->GHS: AccessBank sorts before Ecobank."""
    quote = await quote_engine.create_quote("usd", "ghs", "bank", 100)

    assert quote.from_asset == "USD"
    assert quote.rail == "BANK"
    assert quote.fee_fixed == 1.5
    assert quote.fee_pct == 1.0
    assert quote.fx_margin_pct == 1.2
    assert quote.market_rate == 12.35
    assert quote.rate_source == "MockRateProvider"
    assert quote.total_fee == 2.5


async def test_overrides_win_over_route(quote_engine, catalog):
    quote = await quote_engine.create_quote(
        "USD", "GHS", "BANK", 100, QuoteOverrides(fee_fixed=0.0),
    )
    assert quote.fee_fixed == 0.0
    assert quote.fee_pct == 1.0


async def test_defaults_without_matching_route(quote_engine, catalog, settings):
    quote = await quote_engine.create_quote("USD", "GHS", "LIGHTNING", 100)

    assert quote.fee_fixed == settings.default_fee_fixed
    assert quote.fee_pct == settings.default_fee_pct
    assert quote.fx_margin_pct == settings.default_fx_margin_pct


async def test_quote_audited(quote_engine, catalog, test_db):
    quote = await quote_engine.create_quote(
        "USD", "GHS", "BANK", 100, QuoteOverrides(market_rate=12.35),
    )
    assert await audit_actions(test_db, quote.id) == ["QUOTE_CREATED"]


@pytest.mark.parametrize("from_asset,to_asset,message", [
    ("XYZ", "GHS", "Unsupported asset: XYZ"),
    ("USD", "NGN", "Unsupported asset: NGN"),
    ("", "GHS", "from asset is required"),
])
async def test_unknown_or_inactive_asset(quote_engine, catalog, from_asset, to_asset, message):
    with pytest.raises(RemitValidationError) as exc:
        await quote_engine.create_quote(from_asset, to_asset, "BANK", 100)
    assert exc.value.message == message


async def test_unknown_rail(quote_engine, catalog):
    with pytest.raises(RemitValidationError) as exc:
        await quote_engine.create_quote("USD", "GHS", "CARRIER_PIGEON", 100)
    assert exc.value.field == "rail"


@pytest.mark.parametrize("amount", [0, 0.5, -10, float("nan"), float("inf")])
async def test_send_amount_below_minimum_or_not_finite(quote_engine, catalog, amount):
    with pytest.raises(RemitValidationError) as exc:
        await quote_engine.create_quote("USD", "GHS", "BANK", amount)
    assert exc.value.field == "sendAmount"


@pytest.mark.parametrize("overrides,field", [
    (QuoteOverrides(fee_fixed=-1), "feeFixed"),
    (QuoteOverrides(fee_pct=float("nan")), "feePct"),
    (QuoteOverrides(fx_margin_pct=-0.1), "fxMarginPct"),
    (QuoteOverrides(market_rate=0), "marketRate"),
])
async def test_invalid_overrides(quote_engine, catalog, overrides, field):
    with pytest.raises(RemitValidationError) as exc:
        await quote_engine.create_quote("USD", "GHS", "BANK", 100, overrides)
    assert exc.value.field == field


async def test_get_quote_within_ttl(quote_engine, make_quote, clock):
    quote = await make_quote()
    clock.advance(29)
    assert (await quote_engine.get_quote(quote.id)).id == quote.id


async def test_get_quote_expired_is_gone_with_body(quote_engine, make_quote, clock):
    quote = await make_quote()
    clock.advance(30)

    with pytest.raises(GoneError) as exc:
        await quote_engine.get_quote(quote.id)

    body = exc.value.to_response()
    assert body["expired"] is True
    assert body["id"] == str(quote.id)
    assert body["recipientGets"] == quote.recipient_gets


async def test_get_unknown_quote(quote_engine, catalog):
    with pytest.raises(ResourceNotFoundError):
        await quote_engine.get_quote(uuid4())


def test_parse_rail():
    assert parse_rail(" mobile_money ").value == "MOBILE_MONEY"
    with pytest.raises(RemitValidationError):
        parse_rail("")
