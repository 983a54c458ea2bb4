"""Transfer ORM — the unit of work driven through the payout state machine.

Invariants:
    - quote_id is unique: one quote locks exactly one transfer
    - reference_code is globally unique; idempotency_key unique when present
    - request_hash is the fingerprint of the body first sent with idempotency_key
    - payout_started_at is set once, by the request that claims the payout
    - status only changes through sanctioned transitions (compare-and-set on status)
    - Rows are never deleted; events and crypto payout hang off the transfer

Design Decisions:
    - Recipient details denormalized onto the transfer: rail-specific columns are nullable
    - user_id/user_email are attribution passed by the upstream identity layer
    - Relationships load with selectin: async sessions cannot lazy-load on attribute access
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from remit.db.base import Base


class Transfer(Base):
    __tablename__ = "transfers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    quote_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("quotes.id"), nullable=False, unique=True,
    )
    reference_code: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True,
    )
    idempotency_key: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True,
    )
    request_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="READY")
    payout_rail: Mapped[str] = mapped_column(String(20), nullable=False)

    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user_email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    recipient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    recipient_country: Mapped[str] = mapped_column(String(2), nullable=False)
    recipient_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    recipient_bank_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    recipient_bank_account: Mapped[str | None] = mapped_column(String(100), nullable=True)
    recipient_mobile_money_provider: Mapped[str | None] = mapped_column(
        String(100), nullable=True,
    )
    recipient_mobile_money_number: Mapped[str | None] = mapped_column(
        String(50), nullable=True,
    )
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)

    payout_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    receipt_send_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    receipt_last_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    quote: Mapped["Quote"] = relationship("Quote", lazy="selectin")
    events: Mapped[list["TransferEvent"]] = relationship(
        "TransferEvent", back_populates="transfer",
        order_by="TransferEvent.id", lazy="selectin",
    )
    crypto_payout: Mapped["CryptoPayout | None"] = relationship(
        "CryptoPayout", back_populates="transfer", uselist=False, lazy="selectin",
    )
