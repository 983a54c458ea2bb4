"""Asset ORM — currencies and crypto assets the core can price.

Invariants:
    - code is unique and upper-case (ISO-4217 or ticker)
    - Rows are curated outside the core; the core only reads them
"""

import uuid

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from remit.db.base import Base


class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    symbol: Mapped[str | None] = mapped_column(String(10), nullable=True)
    decimals: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    kind: Mapped[str] = mapped_column(String(10), nullable=False, default="FIAT")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
