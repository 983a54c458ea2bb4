"""Quote Routes — price and lock a quote, read it back until it expires.

Invariants:
    - GET /quote is rate-limited per caller ("quote:<identity>") before any work
    - GET /quote/{id} answers 410 with `expired: true` and the quote body once expired
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from remit.api.dependencies import (
    get_caller, get_quote_engine, get_rate_limiter,
)
from remit.config import Settings, get_settings
from remit.schemas.quote import QuoteResponse
from remit.services.quote_engine import QuoteEngine, QuoteOverrides
from remit.services.rate_limiter import RateLimiter
from remit.services.transfer_orchestrator import Caller

router = APIRouter(prefix="/api/v1/quote", tags=["quotes"])


@router.get("", response_model=QuoteResponse)
async def create_quote(
    from_asset: str = Query(..., alias="from"),
    to_asset: str = Query(..., alias="to"),
    rail: str = Query(...),
    send_amount: float = Query(..., alias="sendAmount"),
    market_rate: float | None = Query(None, alias="marketRate"),
    fx_margin_pct: float | None = Query(None, alias="fxMarginPct"),
    fee_fixed: float | None = Query(None, alias="feeFixed"),
    fee_pct: float | None = Query(None, alias="feePct"),
    caller: Caller = Depends(get_caller),
    limiter: RateLimiter = Depends(get_rate_limiter),
    engine: QuoteEngine = Depends(get_quote_engine),
    settings: Settings = Depends(get_settings),
):
    """Price a send amount over a rail and persist a 30-second quote."""
    await limiter.enforce(
        "quote", caller.identity, settings.quote_rate_limit,
        settings.rate_limit_window_ms,
    )
    quote = await engine.create_quote(
        from_asset, to_asset, rail, send_amount,
        QuoteOverrides(
            market_rate=market_rate, fx_margin_pct=fx_margin_pct,
            fee_fixed=fee_fixed, fee_pct=fee_pct,
        ),
        actor=caller.actor,
    )
    return QuoteResponse.model_validate(quote)


@router.get("/{quote_id}", response_model=QuoteResponse)
async def get_quote(
    quote_id: UUID,
    engine: QuoteEngine = Depends(get_quote_engine),
):
    quote = await engine.get_quote(quote_id)
    return QuoteResponse.model_validate(quote)
