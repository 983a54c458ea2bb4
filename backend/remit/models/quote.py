"""Quote ORM — immutable, time-boxed price snapshot.

Invariants:
    - Written once by QuoteEngine, never updated
    - Amounts/fees stored at 2 dp, rates at 6 dp
    - expires_at = created_at + quote TTL; expiry is evaluated at use time, never stored as a flag
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from remit.db.base import Base


class Quote(Base):
    __tablename__ = "quotes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    from_asset: Mapped[str] = mapped_column(String(10), nullable=False)
    to_asset: Mapped[str] = mapped_column(String(10), nullable=False)
    rail: Mapped[str] = mapped_column(String(20), nullable=False)
    send_amount: Mapped[float] = mapped_column(Float, nullable=False)
    market_rate: Mapped[float] = mapped_column(Float, nullable=False)
    rate_source: Mapped[str] = mapped_column(String(100), nullable=False)
    rate_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    fx_margin_pct: Mapped[float] = mapped_column(Float, nullable=False)
    fee_fixed: Mapped[float] = mapped_column(Float, nullable=False)
    fee_pct: Mapped[float] = mapped_column(Float, nullable=False)
    total_fee: Mapped[float] = mapped_column(Float, nullable=False)
    applied_rate: Mapped[float] = mapped_column(Float, nullable=False)
    recipient_gets: Mapped[float] = mapped_column(Float, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
