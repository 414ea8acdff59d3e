from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from core.transaction import claim_row
from models.enums import LeaseStatus, UnitStatus
from models.models import Lease, Maintenance, Payment, Unit


class UnitRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(
        self, unit_id: int, *, for_update: bool = False, with_property: bool = False
    ) -> Optional[Unit]:
        stmt = select(Unit).where(Unit.id == unit_id)
        if with_property:
            stmt = stmt.options(selectinload(Unit.property))
        if for_update:
            await claim_row(self.db, Unit, unit_id)
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_unit_with_relations(self, unit_id: int) -> Optional[Unit]:
        result = await self.db.execute(
            select(Unit)
            .options(selectinload(Unit.property))
            .where(Unit.id == unit_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_units(
        self,
        *,
        property_ids: List[int] | None = None,
        property_id: int | None = None,
        status: UnitStatus | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[List[Unit], int]:
        stmt = select(Unit)
        if property_ids is not None:
            stmt = stmt.where(Unit.property_id.in_(property_ids))
        if property_id is not None:
            stmt = stmt.where(Unit.property_id == property_id)
        if status is not None:
            stmt = stmt.where(Unit.status == status)
        total = await self.db.scalar(
            select(func.count()).select_from(stmt.subquery())
        )
        result = await self.db.execute(
            stmt.options(selectinload(Unit.property))
            .order_by(Unit.created_at.desc(), Unit.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def count_for_property(self, property_id: int) -> int:
        total = await self.db.scalar(
            select(func.count(Unit.id)).where(Unit.property_id == property_id)
        )
        return total or 0

    async def count_non_vacant(self, property_id: int) -> int:
        total = await self.db.scalar(
            select(func.count(Unit.id)).where(
                Unit.property_id == property_id, Unit.status != UnitStatus.VACANT
            )
        )
        return total or 0

    async def active_lease(
        self, unit_id: int, *, exclude_lease_id: int | None = None
    ) -> Optional[Lease]:
        stmt = select(Lease).where(
            Lease.unit_id == unit_id, Lease.status == LeaseStatus.ACTIVE
        )
        if exclude_lease_id is not None:
            stmt = stmt.where(Lease.id != exclude_lease_id)
        result = await self.db.execute(stmt.limit(1))
        return result.scalars().first()

    async def create(self, **values) -> Unit:
        unit = Unit(**values)
        self.db.add(unit)
        await self.db.flush()
        return unit

    async def delete_unit(self, unit_id: int) -> None:
        lease_ids = select(Lease.id).where(Lease.unit_id == unit_id)

        await self.db.execute(delete(Payment).where(Payment.lease_id.in_(lease_ids)))
        await self.db.execute(delete(Lease).where(Lease.unit_id == unit_id))
        await self.db.execute(delete(Maintenance).where(Maintenance.unit_id == unit_id))
        await self.db.execute(delete(Unit).where(Unit.id == unit_id))

    async def save(self) -> None:
        await self.db.flush()
