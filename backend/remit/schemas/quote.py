"""Quote Schemas — the persisted quote as returned to clients."""

from uuid import UUID

from remit.schemas.common import CamelModel, UtcDatetime


class QuoteResponse(CamelModel):
    id: UUID
    from_asset: str
    to_asset: str
    rail: str
    send_amount: float
    market_rate: float
    rate_source: str
    rate_timestamp: UtcDatetime
    fx_margin_pct: float
    fee_fixed: float
    fee_pct: float
    total_fee: float
    applied_rate: float
    recipient_gets: float
    expires_at: UtcDatetime
    created_at: UtcDatetime
