"""Recommendation Routes — ranked routes for a corridor and the raw route listing."""

from fastapi import APIRouter, Depends, Query

from remit.api.dependencies import (
    get_caller, get_rate_limiter, get_recommendation_engine,
)
from remit.config import Settings, get_settings
from remit.schemas.recommendation import RecommendationResponse, RoutesResponse
from remit.services.rate_limiter import RateLimiter
from remit.services.recommendation_engine import RecommendationEngine
from remit.services.transfer_orchestrator import Caller

router = APIRouter(prefix="/api/v1", tags=["recommendations"])


@router.get("/recommendation", response_model=RecommendationResponse)
async def recommend(
    from_asset: str = Query(..., alias="from"),
    to_asset: str = Query(..., alias="to"),
    send_amount: float = Query(..., alias="sendAmount"),
    market_rate: float | None = Query(None, alias="marketRate"),
    caller: Caller = Depends(get_caller),
    limiter: RateLimiter = Depends(get_rate_limiter),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
    settings: Settings = Depends(get_settings),
):
    """Price every active route, dedupe, rank and suggest."""
    await limiter.enforce(
        "recommendation", caller.identity, settings.recommendation_rate_limit,
        settings.rate_limit_window_ms,
    )
    recommendation = await engine.recommend(
        from_asset, to_asset, send_amount, market_rate,
    )
    return RecommendationResponse.from_recommendation(recommendation)


@router.get("/routes", response_model=RoutesResponse)
async def list_routes(
    from_asset: str = Query(..., alias="from"),
    to_asset: str = Query(..., alias="to"),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
):
    corridor = await engine.list_routes(from_asset, to_asset)
    return RoutesResponse.from_corridor(corridor)
