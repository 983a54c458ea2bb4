"""API Dependencies — per-request wiring of services and caller identity.

Invariants:
    - Every service gets the request's database session and BackgroundTasks
    - Caller identity is X-User-Id when present, else the client IP
      (first hop of X-Forwarded-For, then the socket peer)
    - Collaborators (clock, oracle, adapters, notifier, audit log) are separate
      dependencies so tests override them through app.dependency_overrides
"""

from fastapi import BackgroundTasks, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from remit.config import Settings, get_settings
from remit.core.clock import Clock, utcnow
from remit.core.collaborator_protocols import (
    Alerter, AuditLog, Notifier, PayoutAdapter,
)
from remit.core.domain_types import PayoutRail
from remit.infrastructure.database import get_db
from remit.services.alerts import LogAlerter
from remit.services.audit_log import SqlAuditLog
from remit.services.catalog import SqlAssetCatalog, SqlRouteCatalog
from remit.services.notifier import build_notifier
from remit.services.payout_adapters import build_payout_adapters
from remit.services.quote_engine import QuoteEngine
from remit.services.rate_limiter import RateLimiter
from remit.services.rate_oracle import RateOracle, get_rate_oracle
from remit.services.recommendation_engine import RecommendationEngine
from remit.services.side_effects import SideEffects
from remit.services.transfer_orchestrator import Caller, TransferOrchestrator

UNKNOWN_CLIENT = "unknown"


def get_clock() -> Clock:
    return utcnow


def get_oracle() -> RateOracle:
    return get_rate_oracle()


def get_audit_log() -> AuditLog:
    return SqlAuditLog()


def get_alerter() -> Alerter:
    return LogAlerter()


def get_notifier(settings: Settings = Depends(get_settings)) -> Notifier:
    return build_notifier(settings)


def get_payout_adapters(
    settings: Settings = Depends(get_settings),
) -> dict[PayoutRail, PayoutAdapter]:
    return build_payout_adapters(settings)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def get_caller(
    request: Request,
    x_user_id: str | None = Header(None),
    x_user_email: str | None = Header(None),
) -> Caller:
    user_id = (x_user_id or "").strip() or None
    user_email = (x_user_email or "").strip() or None
    return Caller(
        identity=user_id or client_ip(request),
        user_id=user_id,
        user_email=user_email,
    )


def get_rate_limiter(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> RateLimiter:
    return RateLimiter(db, clock)


def get_quote_engine(
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    oracle: RateOracle = Depends(get_oracle),
    audit: AuditLog = Depends(get_audit_log),
    clock: Clock = Depends(get_clock),
) -> QuoteEngine:
    return QuoteEngine(
        db, SqlAssetCatalog(db), SqlRouteCatalog(db), oracle, audit,
        SideEffects(background_tasks), settings, clock,
    )


def get_recommendation_engine(
    db: AsyncSession = Depends(get_db),
    oracle: RateOracle = Depends(get_oracle),
    clock: Clock = Depends(get_clock),
) -> RecommendationEngine:
    return RecommendationEngine(SqlAssetCatalog(db), SqlRouteCatalog(db), oracle, clock)


def get_orchestrator(
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
    adapters: dict[PayoutRail, PayoutAdapter] = Depends(get_payout_adapters),
    notifier: Notifier = Depends(get_notifier),
    audit: AuditLog = Depends(get_audit_log),
    alerter: Alerter = Depends(get_alerter),
    clock: Clock = Depends(get_clock),
) -> TransferOrchestrator:
    return TransferOrchestrator(
        db=db,
        limiter=limiter,
        routes=SqlRouteCatalog(db),
        adapters=adapters,
        notifier=notifier,
        audit=audit,
        alerter=alerter,
        side_effects=SideEffects(background_tasks),
        settings=settings,
        clock=clock,
    )
