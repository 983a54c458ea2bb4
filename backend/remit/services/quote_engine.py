"""Quote Engine — validate, price and persist time-boxed quotes.

Invariants:
    - Assets must exist and be active; rail must be a known PayoutRail
    - send_amount is finite and >= min_send_amount; fee/margin overrides are finite and >= 0
    - Unsupplied fee/margin parameters come from the first active route for the
      corridor + rail, else from configured defaults
    - Unsupplied market rate comes from the RateOracle; a supplied one is recorded as "manual"
    - Pricing is core/pricing.price(); persisted values are rounded, never re-priced
    - expires_at = now + quote_ttl_seconds; one QUOTE_CREATED audit entry per quote

Design Decisions:
    - Quotes are written in their own commit: a quote is useful even if the
      client never creates a transfer from it
    - get_quote() distinguishes "never existed" (404) from "expired" (410)
"""

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from remit.config import Settings
from remit.core.clock import Clock, is_expired, utcnow
from remit.core.collaborator_protocols import (
    AssetCatalog, AuditEntry, AuditLog, RouteCatalog,
)
from remit.core.domain_types import AuditAction, PayoutRail
from remit.core.errors import (
    ErrorContext, GoneError, RemitValidationError, ResourceNotFoundError,
)
from remit.core.pricing import FeeModel, price, round_money, round_rate
from remit.models.quote import Quote
from remit.schemas.quote import QuoteResponse
from remit.services.rate_oracle import RateOracle
from remit.services.side_effects import SideEffects

logger = logging.getLogger(__name__)

MANUAL_RATE_SOURCE = "manual"
QUOTE_EXPIRED_MESSAGE = (
    "This quote has expired. Please request a new quote to see current rates."
)


@dataclass(frozen=True)
class QuoteOverrides:
    """Caller-supplied pricing inputs. None means "use the route/default"."""
    market_rate: float | None = None
    fx_margin_pct: float | None = None
    fee_fixed: float | None = None
    fee_pct: float | None = None


def parse_rail(raw: str) -> PayoutRail:
    try:
        return PayoutRail((raw or "").strip().upper())
    except ValueError:
        raise RemitValidationError(
            f"rail must be one of {', '.join(r.value for r in PayoutRail)}", "rail",
        )


def _check_non_negative(value: float | None, field: str) -> None:
    if value is None:
        return
    if not math.isfinite(value) or value < 0:
        raise RemitValidationError(f"{field} must be a non-negative number", field)


class QuoteEngine:
    def __init__(
        self,
        db: AsyncSession,
        assets: AssetCatalog,
        routes: RouteCatalog,
        oracle: RateOracle,
        audit: AuditLog,
        side_effects: SideEffects,
        settings: Settings,
        clock: Clock = utcnow,
    ):
        self.db = db
        self.assets = assets
        self.routes = routes
        self.oracle = oracle
        self.audit = audit
        self.side_effects = side_effects
        self.settings = settings
        self.clock = clock

    async def create_quote(
        self,
        from_asset: str,
        to_asset: str,
        rail: str,
        send_amount: float,
        overrides: QuoteOverrides | None = None,
        actor: str = "anonymous",
    ) -> Quote:
        overrides = overrides or QuoteOverrides()
        from_code = await self._require_asset(from_asset, "from")
        to_code = await self._require_asset(to_asset, "to")
        payout_rail = parse_rail(rail)

        if send_amount is None or not math.isfinite(send_amount):
            raise RemitValidationError("sendAmount must be a number", "sendAmount")
        if send_amount < self.settings.min_send_amount:
            raise RemitValidationError(
                f"sendAmount must be at least {self.settings.min_send_amount}",
                "sendAmount",
            )
        _check_non_negative(overrides.fx_margin_pct, "fxMarginPct")
        _check_non_negative(overrides.fee_fixed, "feeFixed")
        _check_non_negative(overrides.fee_pct, "feePct")
        if overrides.market_rate is not None and (
            not math.isfinite(overrides.market_rate) or overrides.market_rate <= 0
        ):
            raise RemitValidationError("marketRate must be a positive number", "marketRate")

        model = await self._fee_model(from_code, to_code, payout_rail, overrides)

        now = self.clock()
        if overrides.market_rate is not None:
            market_rate, rate_source, rate_timestamp = (
                overrides.market_rate, MANUAL_RATE_SOURCE, now,
            )
        else:
            market = await self.oracle.get_rate(from_code, to_code)
            market_rate, rate_source, rate_timestamp = (
                market.rate, market.source, market.timestamp,
            )

        breakdown = price(send_amount, market_rate, model)
        quote = Quote(
            from_asset=from_code,
            to_asset=to_code,
            rail=payout_rail.value,
            send_amount=round_money(send_amount),
            market_rate=round_rate(market_rate),
            rate_source=rate_source,
            rate_timestamp=rate_timestamp,
            fx_margin_pct=round_money(model.fx_margin_pct),
            fee_fixed=round_money(model.fee_fixed),
            fee_pct=round_money(model.fee_pct),
            total_fee=round_money(breakdown.total_fee),
            applied_rate=round_rate(breakdown.applied_rate),
            recipient_gets=round_money(breakdown.recipient_gets),
            expires_at=now + timedelta(seconds=self.settings.quote_ttl_seconds),
            created_at=now,
        )
        self.db.add(quote)
        await self.db.commit()

        logger.info(
            f"Quote created {from_code}->{to_code} {payout_rail.value}",
            extra={"quote_id": str(quote.id), "rail": payout_rail.value},
        )
        await self.side_effects.dispatch(
            "audit", self.audit.append,
            AuditEntry(
                actor=actor,
                action=AuditAction.QUOTE_CREATED,
                entity_type="Quote",
                entity_id=str(quote.id),
                metadata={
                    "from": from_code,
                    "to": to_code,
                    "rail": payout_rail.value,
                    "sendAmount": quote.send_amount,
                    "rateSource": rate_source,
                },
            ),
        )
        return quote

    async def get_quote(self, quote_id: UUID) -> Quote:
        """Load a quote; 404 when unknown, 410 (with the quote body) when expired."""
        result = await self.db.execute(select(Quote).where(Quote.id == quote_id))
        quote = result.scalar_one_or_none()
        if quote is None:
            raise ResourceNotFoundError("Quote", str(quote_id))
        if is_expired(quote.expires_at, self.clock()):
            raise GoneError(
                QUOTE_EXPIRED_MESSAGE,
                QuoteResponse.model_validate(quote).model_dump(by_alias=True, mode="json"),
                ErrorContext(quote_id=str(quote.id)),
            )
        return quote

    async def _require_asset(self, code: str, field: str) -> str:
        if not code or not code.strip():
            raise RemitValidationError(f"{field} asset is required", field)
        asset = await self.assets.find(code)
        if asset is None or not asset.is_active:
            raise RemitValidationError(
                f"Unsupported asset: {code.strip().upper()}", field,
            )
        return asset.code

    async def _fee_model(
        self, from_code: str, to_code: str, rail: PayoutRail,
        overrides: QuoteOverrides,
    ) -> FeeModel:
        base = FeeModel(
            fee_fixed=self.settings.default_fee_fixed,
            fee_pct=self.settings.default_fee_pct,
            fx_margin_pct=self.settings.default_fx_margin_pct,
        )
        corridor = await self.routes.find_corridor(from_code, to_code)
        if corridor is not None and corridor.is_active:
            routes = await self.routes.active_routes(corridor.id, rail)
            if routes:
                route = routes[0]
                base = FeeModel(
                    fee_fixed=route.fee_fixed,
                    fee_pct=route.fee_pct,
                    fx_margin_pct=route.fx_margin_pct,
                )
        return FeeModel(
            fee_fixed=base.fee_fixed if overrides.fee_fixed is None else overrides.fee_fixed,
            fee_pct=base.fee_pct if overrides.fee_pct is None else overrides.fee_pct,
            fx_margin_pct=(
                base.fx_margin_pct if overrides.fx_margin_pct is None
                else overrides.fx_margin_pct
            ),
        )
