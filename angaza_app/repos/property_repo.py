from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from core.transaction import claim_row
from models.enums import LeaseStatus
from models.models import Lease, Maintenance, Payment, Property, Unit


class PropertyRepo:
    def __init__(self, db):
        self.db = db

    @staticmethod
    def _with_relations():
        return (selectinload(Property.units), selectinload(Property.landlord))

    async def get_by_id(
        self, property_id: int, *, for_update: bool = False
    ) -> Optional[Property]:
        stmt = select(Property).where(Property.id == property_id)
        if for_update:
            await claim_row(self.db, Property, property_id)
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_property_with_relations(self, property_id: int) -> Optional[Property]:
        result = await self.db.execute(
            select(Property)
            .options(*self._with_relations())
            .where(Property.id == property_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def ids_for_landlord(self, landlord_id: int) -> List[int]:
        result = await self.db.execute(
            select(Property.id).where(Property.landlord_id == landlord_id)
        )
        return list(result.scalars().all())

    async def list_properties(
        self, *, landlord_id: int | None = None, offset: int = 0, limit: int = 20
    ) -> tuple[List[Property], int]:
        stmt = select(Property)
        if landlord_id is not None:
            stmt = stmt.where(Property.landlord_id == landlord_id)
        total = await self.db.scalar(
            select(func.count()).select_from(stmt.subquery())
        )
        result = await self.db.execute(
            stmt.options(*self._with_relations())
            .order_by(Property.created_at.desc(), Property.id.desc())
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all()), total or 0

    async def create(self, **values) -> Property:
        prop = Property(**values)
        self.db.add(prop)
        await self.db.flush()
        return prop

    async def has_active_lease(self, property_id: int) -> bool:
        result = await self.db.execute(
            select(Lease.id)
            .join(Unit, Lease.unit_id == Unit.id)
            .where(Unit.property_id == property_id, Lease.status == LeaseStatus.ACTIVE)
            .limit(1)
        )
        return result.first() is not None

    async def delete_property(self, property_id: int) -> None:
        unit_ids = select(Unit.id).where(Unit.property_id == property_id)
        lease_ids = select(Lease.id).where(Lease.unit_id.in_(unit_ids))

        await self.db.execute(delete(Payment).where(Payment.lease_id.in_(lease_ids)))
        await self.db.execute(delete(Lease).where(Lease.unit_id.in_(unit_ids)))
        await self.db.execute(
            delete(Maintenance).where(Maintenance.unit_id.in_(unit_ids))
        )
        await self.db.execute(delete(Unit).where(Unit.property_id == property_id))
        await self.db.execute(delete(Property).where(Property.id == property_id))

    async def save(self) -> None:
        await self.db.flush()
