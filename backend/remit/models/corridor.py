"""Corridor ORM — a directed (from asset, to asset) pair eligible for transfer.

Invariants:
    - (from_asset_id, to_asset_id) is unique
    - Routes belong to exactly one corridor
"""

import uuid

from sqlalchemy import Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from remit.db.base import Base


class Corridor(Base):
    __tablename__ = "corridors"
    __table_args__ = (UniqueConstraint("from_asset_id", "to_asset_id"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    from_asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("assets.id"), nullable=False,
    )
    to_asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("assets.id"), nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    routes: Mapped[list["Route"]] = relationship(
        "Route", back_populates="corridor", lazy="selectin",
    )
