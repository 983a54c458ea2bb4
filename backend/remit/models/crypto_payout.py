"""CryptoPayout ORM — Lightning payout sub-resource of a transfer.

Invariants:
    - Exists only for LIGHTNING transfers; one per transfer
    - status follows the payout sub-machine, independent of but caused by the transfer
    - PAID is a precondition for the parent transfer reaching COMPLETED
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from remit.db.base import Base


class CryptoPayout(Base):
    __tablename__ = "crypto_payouts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    transfer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("transfers.id"), nullable=False, unique=True,
    )
    network: Mapped[str] = mapped_column(String(20), nullable=False)
    invoice: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    address: Mapped[str | None] = mapped_column(String(200), nullable=True)
    amount_sats: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="CREATED")
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

    transfer: Mapped["Transfer"] = relationship(
        "Transfer", back_populates="crypto_payout",
    )
