"""Catalog — SQL-backed, read-only views over assets, corridors and routes.

Invariants:
    - Never writes: catalog rows are curated outside the transfer core
    - Asset codes are matched upper-cased
    - active_routes only returns routes with is_active, ordered by provider then id
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from remit.core.domain_types import PayoutRail
from remit.models.asset import Asset
from remit.models.corridor import Corridor
from remit.models.route import Route


class SqlAssetCatalog:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(self, code: str) -> Asset | None:
        result = await self.db.execute(
            select(Asset).where(Asset.code == code.strip().upper()),
        )
        return result.scalar_one_or_none()


class SqlRouteCatalog:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_corridor(self, from_code: str, to_code: str) -> Corridor | None:
        from_asset = aliased(Asset)
        to_asset = aliased(Asset)
        result = await self.db.execute(
            select(Corridor)
            .join(from_asset, Corridor.from_asset_id == from_asset.id)
            .join(to_asset, Corridor.to_asset_id == to_asset.id)
            .where(from_asset.code == from_code.strip().upper())
            .where(to_asset.code == to_code.strip().upper())
        )
        return result.scalar_one_or_none()

    async def active_routes(
        self, corridor_id: UUID, rail: PayoutRail | None = None,
    ) -> list[Route]:
        query = (
            select(Route)
            .where(Route.corridor_id == corridor_id)
            .where(Route.is_active.is_(True))
        )
        if rail is not None:
            query = query.where(Route.rail == rail.value)
        result = await self.db.execute(query.order_by(Route.provider, Route.id))
        return list(result.scalars().all())
