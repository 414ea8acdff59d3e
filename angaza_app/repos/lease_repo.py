from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from core.transaction import claim_row
from models.enums import LeaseStatus
from models.models import Lease, Payment, Unit


class LeaseRepo:
    def __init__(self, db):
        self.db = db

    @staticmethod
    def _with_relations():
        return (
            selectinload(Lease.tenant),
            selectinload(Lease.unit).selectinload(Unit.property),
        )

    async def get_by_id(
        self, lease_id: int, *, for_update: bool = False
    ) -> Optional[Lease]:
        stmt = select(Lease).where(Lease.id == lease_id)
        if for_update:
            await claim_row(self.db, Lease, lease_id)
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_lease_with_relations(self, lease_id: int) -> Optional[Lease]:
        result = await self.db.execute(
            select(Lease)
            .options(*self._with_relations())
            .where(Lease.id == lease_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_leases(
        self,
        *,
        property_ids: List[int] | None = None,
        tenant_id: int | None = None,
        status: LeaseStatus | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[List[Lease], int]:
        stmt = select(Lease)
        if property_ids is not None:
            stmt = stmt.join(Unit, Lease.unit_id == Unit.id).where(
                Unit.property_id.in_(property_ids)
            )
        if tenant_id is not None:
            stmt = stmt.where(Lease.tenant_id == tenant_id)
        if status is not None:
            stmt = stmt.where(Lease.status == status)
        total = await self.db.scalar(
            select(func.count()).select_from(stmt.subquery())
        )
        result = await self.db.execute(
            stmt.options(*self._with_relations())
            .order_by(Lease.created_at.desc(), Lease.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def active_for_tenant(self, tenant_id: int) -> List[Lease]:
        result = await self.db.execute(
            select(Lease)
            .where(Lease.tenant_id == tenant_id, Lease.status == LeaseStatus.ACTIVE)
            .with_for_update()
        )
        return list(result.scalars().all())

    async def tenant_has_active_lease_on_unit(self, tenant_id: int, unit_id: int) -> bool:
        result = await self.db.execute(
            select(Lease.id)
            .where(
                Lease.tenant_id == tenant_id,
                Lease.unit_id == unit_id,
                Lease.status == LeaseStatus.ACTIVE,
            )
            .limit(1)
        )
        return result.first() is not None

    async def has_payments(self, lease_id: int) -> bool:
        result = await self.db.execute(
            select(Payment.id).where(Payment.lease_id == lease_id).limit(1)
        )
        return result.first() is not None

    async def create(self, **values) -> Lease:
        lease = Lease(**values)
        self.db.add(lease)
        await self.db.flush()
        return lease

    async def delete_lease(self, lease_id: int) -> None:
        await self.db.execute(delete(Lease).where(Lease.id == lease_id))

    async def save(self) -> None:
        await self.db.flush()
