"""Boundary Protocols — contracts between the transfer core and its collaborators.

Invariants:
    - Core NEVER imports from services/, api/, infrastructure/; arrows point inward only
    - All IO reached through Protocol types; implementations injected by the shell
    - Value objects crossing the boundary are frozen dataclasses

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Notifier/AuditLog are async (they do IO); Alerter is sync (log lines only)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from remit.core.domain_types import AuditAction, PayoutMode, PayoutRail


# ─── Rates ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class RateQuote:
    """Raw provider answer."""
    rate: float
    timestamp: datetime


@dataclass(frozen=True)
class MarketRate:
    """Rate as served by the oracle, with the source that produced it."""
    rate: float
    source: str
    timestamp: datetime


class RateProvider(Protocol):
    name: str

    async def get_rate(self, from_code: str, to_code: str) -> RateQuote: ...


# ─── Catalog ────────────────────────────────────────────────────

class AssetLike(Protocol):
    id: UUID
    code: str
    name: str
    decimals: int
    is_active: bool


class RouteLike(Protocol):
    id: UUID
    rail: str
    provider: str
    fee_fixed: float
    fee_pct: float
    fx_margin_pct: float
    eta_min_minutes: int
    eta_max_minutes: int


class CorridorLike(Protocol):
    id: UUID
    is_active: bool


class AssetCatalog(Protocol):
    async def find(self, code: str) -> AssetLike | None: ...


class RouteCatalog(Protocol):
    async def find_corridor(
        self, from_code: str, to_code: str,
    ) -> CorridorLike | None: ...

    async def active_routes(
        self, corridor_id: UUID, rail: PayoutRail | None = None,
    ) -> list[RouteLike]: ...


# ─── Side channels ──────────────────────────────────────────────

@dataclass(frozen=True)
class TransferStatusNotice:
    """Receipt data sent to the transfer's owner on creation and on closing statuses."""
    to: str
    status: str
    transfer_id: str
    reference_code: str
    send_amount: float
    total_fee: float
    recipient_gets: float
    from_asset: str
    to_asset: str
    recipient_name: str
    receipt_url: str
    timestamp: datetime


class Notifier(Protocol):
    async def send_transfer_status(self, notice: TransferStatusNotice) -> None: ...


@dataclass(frozen=True)
class AuditEntry:
    actor: str
    action: AuditAction
    entity_type: str
    entity_id: str
    metadata: dict[str, Any] = field(default_factory=dict)


class AuditLog(Protocol):
    async def append(self, entry: AuditEntry) -> None: ...


class Alerter(Protocol):
    def transfer_failure(self, transfer_id: str, context: dict[str, Any]) -> None: ...
    def payout_failure(self, transfer_id: str, context: dict[str, Any]) -> None: ...
    def notification_failure(self, transfer_id: str, context: dict[str, Any]) -> None: ...


# ─── Payout execution ───────────────────────────────────────────

@dataclass(frozen=True)
class PayoutTarget:
    transfer_id: str
    payout_rail: PayoutRail


@dataclass(frozen=True)
class PayoutResult:
    ok: bool
    provider: str
    mode: PayoutMode
    reason: str | None = None


class PayoutAdapter(Protocol):
    rail: PayoutRail
    provider: str

    async def execute(self, target: PayoutTarget) -> PayoutResult: ...
