from typing import List, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import selectinload

from models.enums import LeaseStatus, UserRole
from models.models import Lease, Maintenance, Payment, Unit, User


class TenantRepo:
    """Tenant users and the records hanging off them."""

    def __init__(self, db):
        self.db = db

    async def get_tenant(self, tenant_id: int) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.id == tenant_id, User.role == UserRole.TENANT)
        )
        return result.scalar_one_or_none()

    async def get_tenant_with_relations(self, tenant_id: int) -> Optional[User]:
        result = await self.db.execute(
            select(User)
            .options(
                selectinload(User.leases)
                .selectinload(Lease.unit)
                .selectinload(Unit.property),
                selectinload(User.payments),
            )
            .where(User.id == tenant_id, User.role == UserRole.TENANT)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    def _leased_in(self, property_ids: List[int]):
        return (
            select(Lease.tenant_id)
            .join(Unit, Lease.unit_id == Unit.id)
            .where(
                Unit.property_id.in_(property_ids),
                Lease.status == LeaseStatus.ACTIVE,
            )
        )

    async def list_tenants(
        self,
        *,
        property_ids: List[int] | None = None,
        created_by: int | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[List[User], int]:
        """Without filters every tenant is returned. Given both filters, a
        tenant qualifies through either one."""
        stmt = select(User).where(User.role == UserRole.TENANT)
        conditions = []
        if property_ids:
            conditions.append(User.id.in_(self._leased_in(property_ids)))
        if created_by is not None:
            conditions.append(User.created_by == created_by)
        if conditions:
            stmt = stmt.where(or_(*conditions))
        elif property_ids is not None:
            return [], 0
        total = await self.db.scalar(
            select(func.count()).select_from(stmt.subquery())
        )
        result = await self.db.execute(
            stmt.order_by(User.created_at.desc(), User.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def has_active_lease_in(self, tenant_id: int, property_ids: List[int]) -> bool:
        if not property_ids:
            return False
        result = await self.db.execute(
            self._leased_in(property_ids).where(Lease.tenant_id == tenant_id).limit(1)
        )
        return result.first() is not None

    async def delete_tenant_records(self, tenant_id: int) -> None:
        lease_ids = select(Lease.id).where(Lease.tenant_id == tenant_id)

        await self.db.execute(
            delete(Payment).where(
                or_(Payment.tenant_id == tenant_id, Payment.lease_id.in_(lease_ids))
            )
        )
        await self.db.execute(
            delete(Maintenance).where(Maintenance.created_by == tenant_id)
        )
        await self.db.execute(
            update(Maintenance)
            .where(Maintenance.assigned_to == tenant_id)
            .values(assigned_to=None)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(delete(Lease).where(Lease.tenant_id == tenant_id))
        await self.db.execute(delete(User).where(User.id == tenant_id))
