"""Transfer Orchestrator — idempotent creation and state-machine driven lifecycle.

Invariants:
    - An idempotency key maps to exactly one transfer; replays return it unchanged
      with no new events, audit entries or notifications
    - A key replayed with a different request body is a Conflict, never a replay
    - Creation validates before it rate-limits, and rate-limits before any write
    - Reference codes are unique by constraint; collisions regenerate, bounded by
      reference_max_attempts, then ReferenceExhaustedError
    - On any unique violation an existing row for the idempotency key wins
    - A quote locks at most one transfer (quote_id unique -> Conflict)
    - Status writes are compare-and-set on (id, current status): concurrent
      transitions cannot both succeed
    - Every transition writes one TransferEvent and one audit entry; the Lightning
      payout sub-state follows FAILED/EXPIRED/CANCELED
    - READY -> PROCESSING re-checks quote expiry and parks the transfer in EXPIRED (410)
    - LIGHTNING -> COMPLETED requires the crypto payout to be PAID
    - A payout is claimed (payout_started_at, READY -> PROCESSING) and committed
      before its adapter runs; a second request for the same transfer is a Conflict
    - Receipt resends claim their cooldown window by compare-and-set
    - Audit, notifier and alerts never fail or roll back the primary change

Design Decisions:
    - One commit per creation attempt: a rollback discards only that attempt
    - Quote fields captured as plain values before the insert loop, since a
      rollback expires every ORM object in the session
    - Transfers are re-read with populate_existing after each commit so the
      selectin relationships (quote, events, crypto_payout) are loaded eagerly
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from remit.config import Settings
from remit.core.clock import Clock, ensure_utc, is_expired, utcnow
from remit.core.collaborator_protocols import (
    Alerter, AuditEntry, AuditLog, Notifier, PayoutAdapter, PayoutResult,
    PayoutTarget, RouteCatalog, TransferStatusNotice,
)
from remit.core.domain_types import (
    INVOICE_ISSUED_MESSAGE, INVOICE_PAID_MESSAGE, PAYOUT_PAID_MESSAGE,
    STATUS_EVENT_MESSAGES, TRANSFER_CREATED_MESSAGE, AuditAction, CryptoPayoutStatus, PayoutRail,
    TransferEventType, TransferStatus, quote_locked_message,
)
from remit.core.errors import (
    ConflictError, ErrorContext, GoneError, InvalidTransitionError,
    RateLimitedError, ReferenceExhaustedError, RemitValidationError,
    ResourceNotFoundError,
)
from remit.core.lightning_invoice import create_lightning_invoice, default_amount_sats
from remit.core.reference_codes import generate_reference_code, normalize_lookup_reference
from remit.core.state_machine import (
    PAYOUT_STATUS_FOR_TRANSFER, assert_transfer_transition, can_transition_payout,
)
from remit.core.transfer_rules import (
    TransferRequest, normalize_transfer_request, request_fingerprint,
)
from remit.infrastructure.database import get_db_manager
from remit.models.crypto_payout import CryptoPayout
from remit.models.quote import Quote
from remit.models.transfer import Transfer
from remit.models.transfer_event import TransferEvent
from remit.schemas.transfer import transfer_detail_payload
from remit.services.rate_limiter import RateLimiter
from remit.services.side_effects import SideEffects

logger = logging.getLogger(__name__)

RECEIPT_RESEND_COOLDOWN = timedelta(seconds=60)
PAYABLE_STATUSES = frozenset({TransferStatus.READY, TransferStatus.PROCESSING})
NOTIFY_STATUSES = frozenset({TransferStatus.COMPLETED, TransferStatus.FAILED})


@dataclass(frozen=True)
class Caller:
    """Who is acting: rate-limit identity plus optional upstream attribution."""
    identity: str
    user_id: str | None = None
    user_email: str | None = None

    @property
    def actor(self) -> str:
        return self.user_id or self.identity


@dataclass
class PayoutOutcome:
    ok: bool
    result: PayoutResult
    transfer: Transfer


def parse_transfer_status(raw: str | None) -> TransferStatus:
    value = (raw or "").strip().upper()
    if not value:
        raise RemitValidationError("status is required", "status")
    try:
        return TransferStatus(value)
    except ValueError:
        raise RemitValidationError("Unknown status", "status")


def _violated_column(error: IntegrityError) -> str | None:
    message = str(error.orig)
    for column in ("idempotency_key", "reference_code", "quote_id"):
        if column in message:
            return column
    return None


def _expiry_label(expires_at: datetime) -> str:
    return ensure_utc(expires_at).strftime("%Y-%m-%d %H:%M:%S UTC")


class TransferOrchestrator:
    def __init__(
        self,
        db: AsyncSession,
        limiter: RateLimiter,
        routes: RouteCatalog,
        adapters: dict[PayoutRail, PayoutAdapter],
        notifier: Notifier,
        audit: AuditLog,
        alerter: Alerter,
        side_effects: SideEffects,
        settings: Settings,
        clock: Clock = utcnow,
        reference_generator: Callable[[str, int], str] = generate_reference_code,
    ):
        self.db = db
        self.limiter = limiter
        self.routes = routes
        self.adapters = adapters
        self.notifier = notifier
        self.audit = audit
        self.alerter = alerter
        self.side_effects = side_effects
        self.settings = settings
        self.clock = clock
        self.reference_generator = reference_generator

    # ─── Creation ───────────────────────────────────────────────

    async def create_transfer(
        self,
        request: TransferRequest,
        idempotency_key: str | None,
        caller: Caller,
    ) -> tuple[Transfer, bool]:
        """Create a READY transfer from a live quote. Returns (transfer, replayed)."""
        key = (idempotency_key or "").strip() or None
        fingerprint = request_fingerprint(request) if key else None
        if key:
            existing = await self._find_by_idempotency_key(key)
            if existing is not None:
                self._check_replay(existing, fingerprint)
                logger.info(
                    "Idempotent replay",
                    extra={"transfer_id": str(existing.id),
                           "reference_code": existing.reference_code},
                )
                return existing, True

        normalized = normalize_transfer_request(request)
        rail = normalized.payout_rail
        quote = await self._load_quote(normalized.quote_id)

        if quote.rail != rail.value:
            raise ConflictError(
                "payoutRail must match the quote rail", "RAIL_MISMATCH",
                ErrorContext(quote_id=str(quote.id), field="payoutRail"),
            )
        corridor = await self.routes.find_corridor(quote.from_asset, quote.to_asset)
        if corridor is None or not corridor.is_active:
            raise ConflictError(
                "No active corridor for this asset pair. Choose another pair.",
                "NO_ACTIVE_CORRIDOR", ErrorContext(quote_id=str(quote.id)),
            )
        if not await self.routes.active_routes(corridor.id, rail):
            raise ConflictError(
                "No active route for the selected rail. Pick a different rail.",
                "NO_ACTIVE_ROUTE", ErrorContext(quote_id=str(quote.id)),
            )
        if is_expired(quote.expires_at, self.clock()):
            raise GoneError(
                "Quote expired", {"quoteId": str(quote.id)},
                ErrorContext(quote_id=str(quote.id)),
            )

        await self.limiter.enforce(
            "transfer_create", caller.identity,
            self.settings.transfer_create_rate_limit,
            self.settings.rate_limit_window_ms,
        )

        quote_id = quote.id
        expires_label = _expiry_label(quote.expires_at)
        amount_sats = None
        if rail == PayoutRail.LIGHTNING:
            amount_sats = normalized.amount_sats or default_amount_sats(quote.send_amount)

        attempts = self.settings.reference_max_attempts
        for attempt in range(1, attempts + 1):
            reference = self.reference_generator(
                self.settings.reference_prefix, self.settings.reference_length,
            )
            transfer_id = uuid.uuid4()
            try:
                await self._insert_transfer(
                    transfer_id, reference, quote_id, normalized, key, fingerprint,
                    caller, expires_label, amount_sats,
                )
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                if key:
                    existing = await self._find_by_idempotency_key(key)
                    if existing is not None:
                        self._check_replay(existing, fingerprint)
                        logger.info(
                            "Idempotency race resolved to existing transfer",
                            extra={"transfer_id": str(existing.id)},
                        )
                        return existing, True
                column = _violated_column(e)
                if column == "reference_code":
                    logger.warning(
                        f"Reference collision on attempt {attempt}",
                        extra={"reference_code": reference},
                    )
                    continue
                if column == "quote_id":
                    raise ConflictError(
                        "Quote already used by another transfer", "QUOTE_ALREADY_USED",
                        ErrorContext(quote_id=str(quote_id)),
                    )
                raise
            break
        else:
            logger.error(f"Reference allocation exhausted after {attempts} attempts")
            raise ReferenceExhaustedError(attempts, ErrorContext(quote_id=str(quote_id)))

        transfer = await self._load(transfer_id)
        logger.info(
            "Transfer created",
            extra={"transfer_id": str(transfer.id),
                   "reference_code": transfer.reference_code, "rail": rail.value},
        )
        await self._audit(
            caller, AuditAction.TRANSFER_CREATED, transfer,
            {"quoteId": str(quote_id), "rail": rail.value,
             "reference": transfer.reference_code},
        )
        await self._notify(transfer, TransferEventType.CREATED.value)
        return transfer, False

    async def _insert_transfer(
        self,
        transfer_id: UUID,
        reference: str,
        quote_id: UUID,
        request: TransferRequest,
        idempotency_key: str | None,
        request_hash: str | None,
        caller: Caller,
        expires_label: str,
        amount_sats: int | None,
    ) -> None:
        now = self.clock()
        self.db.add(Transfer(
            id=transfer_id,
            quote_id=quote_id,
            reference_code=reference,
            idempotency_key=idempotency_key,
            request_hash=request_hash,
            status=TransferStatus.READY.value,
            payout_rail=request.payout_rail.value,
            user_id=caller.user_id,
            user_email=caller.user_email,
            recipient_name=request.recipient_name,
            recipient_country=request.recipient_country,
            recipient_phone=request.recipient_phone,
            recipient_bank_name=request.bank_name,
            recipient_bank_account=request.bank_account,
            recipient_mobile_money_provider=request.mobile_money_provider,
            recipient_mobile_money_number=request.mobile_money_number,
            memo=request.memo,
            created_at=now,
            updated_at=now,
        ))
        await self.db.flush()

        events = [
            (TransferEventType.CREATED, TRANSFER_CREATED_MESSAGE),
            (TransferEventType.QUOTE_LOCKED, quote_locked_message(expires_label)),
        ]
        if amount_sats is not None:
            invoice = create_lightning_invoice(reference, amount_sats)
            self.db.add(CryptoPayout(
                transfer_id=transfer_id,
                network=request.crypto_network,
                invoice=invoice.invoice,
                payment_hash=invoice.payment_hash,
                amount_sats=amount_sats,
                status=CryptoPayoutStatus.REQUESTED.value,
                created_at=now,
                updated_at=now,
            ))
            events.append((TransferEventType.INVOICE_ISSUED, INVOICE_ISSUED_MESSAGE))

        for event_type, message in events:
            self.db.add(TransferEvent(
                transfer_id=transfer_id, type=event_type.value,
                message=message, created_at=now,
            ))
        await self.db.flush()

    # ─── Transitions ────────────────────────────────────────────

    async def transition(
        self, transfer_id: UUID, next_status: TransferStatus, caller: Caller,
    ) -> Transfer:
        await self.limiter.enforce(
            "transfer_update", caller.identity,
            self.settings.transfer_update_rate_limit,
            self.settings.rate_limit_window_ms,
        )
        transfer = await self._require(transfer_id)
        current = TransferStatus(transfer.status)
        ctx = self._context(transfer)
        assert_transfer_transition(current, next_status, ctx)

        if current == TransferStatus.READY and next_status == TransferStatus.PROCESSING:
            await self._guard_quote_expiry(transfer, caller)

        if (
            transfer.payout_rail == PayoutRail.LIGHTNING.value
            and next_status == TransferStatus.COMPLETED
        ):
            payout = transfer.crypto_payout
            if payout is None or payout.status != CryptoPayoutStatus.PAID.value:
                raise ConflictError(
                    "Lightning payout must be PAID before the transfer can complete",
                    "PAYOUT_NOT_PAID", ctx,
                )

        await self._apply_status(transfer, current, next_status)
        await self.db.commit()

        updated = await self._load(transfer.id)
        await self._after_transition(updated, current, next_status, caller)
        return updated

    async def execute_payout(self, transfer_id: UUID, caller: Caller) -> PayoutOutcome:
        """Claim the transfer, run the rail's payout adapter, settle on its result.

        The claim (payout_started_at plus READY -> PROCESSING) is committed before
        the adapter runs, so a concurrent request fails with PAYOUT_IN_PROGRESS
        instead of paying out a second time.
        """
        await self.limiter.enforce(
            "transfer_update", caller.identity,
            self.settings.transfer_update_rate_limit,
            self.settings.rate_limit_window_ms,
        )
        transfer = await self._require(transfer_id)
        current = TransferStatus(transfer.status)
        ctx = self._context(transfer)
        if current not in PAYABLE_STATUSES:
            raise ConflictError("Transfer not ready for payout.", "NOT_PAYABLE", ctx)

        rail = PayoutRail(transfer.payout_rail)
        adapter = self.adapters.get(rail)
        if adapter is None:
            raise ConflictError("No payout adapter available.", "NO_PAYOUT_ADAPTER", ctx)

        if current == TransferStatus.READY:
            await self._guard_quote_expiry(transfer, caller)

        await self._claim_payout(transfer, current)
        transitions = []
        if current == TransferStatus.READY:
            await self._apply_status(transfer, current, TransferStatus.PROCESSING)
            transitions.append((current, TransferStatus.PROCESSING))
        await self.db.commit()

        claimed = await self._load(transfer_id)
        result = await adapter.execute(PayoutTarget(str(claimed.id), rail))
        final = TransferStatus.COMPLETED if result.ok else TransferStatus.FAILED
        now = self.clock()

        payout = claimed.crypto_payout
        if rail == PayoutRail.LIGHTNING and payout is not None:
            payout_next = CryptoPayoutStatus.PAID if result.ok else CryptoPayoutStatus.FAILED
            await self._move_payout(payout, payout_next, now)
        if result.ok:
            self.db.add(TransferEvent(
                transfer_id=claimed.id, type=TransferEventType.PAID.value,
                message=(INVOICE_PAID_MESSAGE if rail == PayoutRail.LIGHTNING
                         else PAYOUT_PAID_MESSAGE),
                created_at=now,
            ))

        await self._apply_status(
            claimed, TransferStatus.PROCESSING, final, follow_payout=False,
        )
        transitions.append((TransferStatus.PROCESSING, final))
        await self.db.commit()

        updated = await self._load(transfer_id)
        meta = {
            "rail": rail.value, "provider": result.provider,
            "mode": result.mode.value, "ok": result.ok,
        }
        if result.reason:
            meta["reason"] = result.reason
        await self._audit(caller, AuditAction.PAYOUT_EXECUTED, updated, meta)
        for previous, new in transitions:
            await self._after_transition(updated, previous, new, caller, alert=False)

        if not result.ok:
            self.alerter.payout_failure(str(updated.id), meta)
        logger.info(
            f"Payout executed: {final.value}",
            extra={"transfer_id": str(updated.id), "rail": rail.value,
                   "provider": result.provider, "status": final.value},
        )
        return PayoutOutcome(ok=result.ok, result=result, transfer=updated)

    async def _claim_payout(self, transfer: Transfer, current: TransferStatus) -> None:
        """Mark the payout as started, once per transfer. Does not commit."""
        ctx = self._context(transfer)
        result = await self.db.execute(
            update(Transfer)
            .where(Transfer.id == transfer.id)
            .where(Transfer.status == current.value)
            .where(Transfer.payout_started_at.is_(None))
            .values(payout_started_at=self.clock())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            logger.warning(
                "Payout already claimed",
                extra={"transfer_id": ctx.transfer_id, "status": current.value},
            )
            raise ConflictError("Payout already in progress", "PAYOUT_IN_PROGRESS", ctx)

    async def _guard_quote_expiry(self, transfer: Transfer, caller: Caller) -> None:
        """Park a READY transfer whose quote has lapsed in EXPIRED and raise 410."""
        if not is_expired(transfer.quote.expires_at, self.clock()):
            return
        await self._apply_status(transfer, TransferStatus.READY, TransferStatus.EXPIRED)
        await self.db.commit()
        expired = await self._load(transfer.id)
        await self._after_transition(
            expired, TransferStatus.READY, TransferStatus.EXPIRED, caller, inline=True,
        )
        logger.info(
            "Quote expired before processing",
            extra={"transfer_id": str(expired.id), "quote_id": str(expired.quote_id)},
        )
        raise GoneError(
            "Quote expired",
            {"transfer": transfer_detail_payload(expired)},
            self._context(expired),
        )

    async def _apply_status(
        self,
        transfer: Transfer,
        current: TransferStatus,
        next_status: TransferStatus,
        follow_payout: bool = True,
    ) -> None:
        """Compare-and-set the status and append its event. Does not commit."""
        now = self.clock()
        ctx = self._context(transfer)
        result = await self.db.execute(
            update(Transfer)
            .where(Transfer.id == transfer.id)
            .where(Transfer.status == current.value)
            .values(status=next_status.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            raise InvalidTransitionError(current.value, next_status.value, ctx)
        self.db.add(TransferEvent(
            transfer_id=transfer.id, type=next_status.value,
            message=STATUS_EVENT_MESSAGES[next_status], created_at=now,
        ))

        payout_next = PAYOUT_STATUS_FOR_TRANSFER.get(next_status)
        if follow_payout and payout_next and transfer.crypto_payout is not None:
            await self._move_payout(transfer.crypto_payout, payout_next, now)

    async def _move_payout(
        self, payout: CryptoPayout, next_status: CryptoPayoutStatus, now: datetime,
    ) -> None:
        current = CryptoPayoutStatus(payout.status)
        if not can_transition_payout(current, next_status):
            return
        await self.db.execute(
            update(CryptoPayout)
            .where(CryptoPayout.id == payout.id)
            .where(CryptoPayout.status == current.value)
            .values(status=next_status.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )

    async def _after_transition(
        self,
        transfer: Transfer,
        previous: TransferStatus,
        new: TransferStatus,
        caller: Caller,
        alert: bool = True,
        inline: bool = False,
    ) -> None:
        await self._audit(
            caller, AuditAction.TRANSFER_STATUS_CHANGED, transfer,
            {"from": previous.value, "to": new.value}, inline=inline,
        )
        if new in NOTIFY_STATUSES:
            await self._notify(transfer, new.value)
        if alert and new == TransferStatus.FAILED:
            self.alerter.transfer_failure(
                str(transfer.id),
                {"reference": transfer.reference_code, "rail": transfer.payout_rail},
            )

    # ─── Reads ──────────────────────────────────────────────────

    async def get_transfer(self, transfer_id: UUID) -> Transfer:
        transfer = await self._require(transfer_id)
        if transfer.status == TransferStatus.EXPIRED.value:
            raise GoneError(
                "Transfer expired", {"transferId": str(transfer.id)},
                self._context(transfer),
            )
        return transfer

    async def lookup(self, raw_reference: str | None) -> Transfer:
        if not raw_reference or not raw_reference.strip():
            raise RemitValidationError("reference is required", "reference")
        reference = normalize_lookup_reference(raw_reference)
        if reference is None:
            raise RemitValidationError("Invalid reference format", "reference")

        result = await self.db.execute(
            select(Transfer)
            .where(Transfer.reference_code == reference)
            .execution_options(populate_existing=True)
        )
        transfer = result.scalar_one_or_none()
        if transfer is None:
            raise ResourceNotFoundError("Transfer", reference)
        if transfer.status == TransferStatus.EXPIRED.value:
            raise GoneError(
                "Transfer expired", {"reference": reference}, self._context(transfer),
            )
        return transfer

    # ─── Receipts ───────────────────────────────────────────────

    async def resend_receipt(self, transfer_id: UUID, caller: Caller) -> Transfer:
        """Re-send the completion receipt, at most once per cooldown window.

        The window is claimed by compare-and-set on receipt_last_sent_at before
        the notice is queued, so two concurrent resends cannot both pass.
        """
        transfer = await self._require(transfer_id)
        if transfer.user_id and caller.user_id != transfer.user_id:
            raise ResourceNotFoundError("Transfer", str(transfer_id))
        if transfer.status != TransferStatus.COMPLETED.value:
            raise RemitValidationError("Receipt available after completion.", "status")
        if not transfer.user_email:
            raise ConflictError(
                "No receipt address on file for this transfer", "NO_RECEIPT_ADDRESS",
                self._context(transfer),
            )

        now = self.clock()
        last_sent = transfer.receipt_last_sent_at
        if last_sent is not None:
            remaining = ensure_utc(last_sent) + RECEIPT_RESEND_COOLDOWN - now
            if remaining.total_seconds() > 0:
                raise RateLimitedError("receipt", int(remaining.total_seconds() * 1000))

        stmt = update(Transfer).where(Transfer.id == transfer.id)
        if last_sent is None:
            stmt = stmt.where(Transfer.receipt_last_sent_at.is_(None))
        else:
            stmt = stmt.where(Transfer.receipt_last_sent_at == last_sent)
        result = await self.db.execute(
            stmt.values(receipt_last_sent_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            raise RateLimitedError(
                "receipt", int(RECEIPT_RESEND_COOLDOWN.total_seconds() * 1000),
            )
        await self.db.commit()

        transfer = await self._load(transfer_id)
        await self._notify(transfer, transfer.status)
        return transfer

    # ─── Side channels ──────────────────────────────────────────

    async def _audit(
        self, caller: Caller, action: AuditAction, transfer: Transfer,
        metadata: dict, inline: bool = False,
    ) -> None:
        await self.side_effects.dispatch(
            "audit", self.audit.append,
            AuditEntry(
                actor=caller.actor, action=action, entity_type="Transfer",
                entity_id=str(transfer.id), metadata=metadata,
            ),
            inline=inline,
        )

    async def _notify(self, transfer: Transfer, status: str) -> None:
        if not transfer.user_email:
            return
        quote = transfer.quote
        notice = TransferStatusNotice(
            to=transfer.user_email,
            status=status,
            transfer_id=str(transfer.id),
            reference_code=transfer.reference_code,
            send_amount=quote.send_amount,
            total_fee=quote.total_fee,
            recipient_gets=quote.recipient_gets,
            from_asset=quote.from_asset,
            to_asset=quote.to_asset,
            recipient_name=transfer.recipient_name,
            receipt_url=f"{self.settings.receipt_base_url.rstrip('/')}/transfer/{transfer.id}",
            timestamp=self.clock(),
        )
        transfer_key = str(transfer.id)

        def on_error(error: Exception) -> None:
            self.alerter.notification_failure(
                transfer_key, {"status": status, "error": str(error)},
            )

        await self.side_effects.dispatch(
            "notify", self._send_receipt, notice, on_error=on_error,
        )

    async def _send_receipt(self, notice: TransferStatusNotice) -> None:
        await self.notifier.send_transfer_status(notice)
        async with get_db_manager().transaction() as db:
            await db.execute(
                update(Transfer)
                .where(Transfer.id == UUID(notice.transfer_id))
                .values(
                    receipt_send_count=Transfer.receipt_send_count + 1,
                    receipt_last_sent_at=notice.timestamp,
                )
            )

    # ─── Loading ────────────────────────────────────────────────

    async def _load(self, transfer_id: UUID) -> Transfer | None:
        # Core UPDATEs bypass the identity map; populate_existing also refreshes
        # the selectin relationships.
        result = await self.db.execute(
            select(Transfer)
            .where(Transfer.id == transfer_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _require(self, transfer_id: UUID) -> Transfer:
        transfer = await self._load(transfer_id)
        if transfer is None:
            raise ResourceNotFoundError("Transfer", str(transfer_id))
        return transfer

    async def _find_by_idempotency_key(self, key: str) -> Transfer | None:
        result = await self.db.execute(
            select(Transfer)
            .where(Transfer.idempotency_key == key)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @classmethod
    def _check_replay(cls, existing: Transfer, fingerprint: str | None) -> None:
        if existing.request_hash and existing.request_hash != fingerprint:
            logger.warning(
                "Idempotency key reused with a different request",
                extra={"transfer_id": str(existing.id)},
            )
            raise ConflictError(
                "Idempotency key conflict", "IDEMPOTENCY_KEY_CONFLICT",
                cls._context(existing),
            )

    async def _load_quote(self, quote_id: UUID) -> Quote:
        result = await self.db.execute(select(Quote).where(Quote.id == quote_id))
        quote = result.scalar_one_or_none()
        if quote is None:
            raise ResourceNotFoundError("Quote", str(quote_id))
        return quote

    @staticmethod
    def _context(transfer: Transfer) -> ErrorContext:
        return ErrorContext(
            transfer_id=str(transfer.id),
            quote_id=str(transfer.quote_id),
            reference_code=transfer.reference_code,
        )
