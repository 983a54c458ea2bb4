"""Route ORM — a priced, timed offer for a corridor + rail + provider.

Invariants:
    - Read-only to the core (owned by the external route catalog)
    - fee_pct and fx_margin_pct are percentages (2.9 means 2.9 %)
    - eta_min_minutes <= eta_max_minutes
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from remit.db.base import Base


class Route(Base):
    __tablename__ = "routes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    corridor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("corridors.id"), nullable=False,
    )
    rail: Mapped[str] = mapped_column(String(20), nullable=False)
    provider: Mapped[str] = mapped_column(String(100), nullable=False)
    fee_fixed: Mapped[float] = mapped_column(Float, nullable=False)
    fee_pct: Mapped[float] = mapped_column(Float, nullable=False)
    fx_margin_pct: Mapped[float] = mapped_column(Float, nullable=False)
    eta_min_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    eta_max_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    corridor: Mapped["Corridor"] = relationship("Corridor", back_populates="routes")
