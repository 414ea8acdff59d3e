from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from models.enums import MaintenanceStatus
from models.models import Maintenance, Unit


class MaintenanceRepo:
    def __init__(self, db):
        self.db = db

    @staticmethod
    def _with_relations():
        return (
            selectinload(Maintenance.requester),
            selectinload(Maintenance.assignee),
            selectinload(Maintenance.unit).selectinload(Unit.property),
        )

    async def get_by_id(self, request_id: int) -> Optional[Maintenance]:
        result = await self.db.execute(
            select(Maintenance)
            .options(selectinload(Maintenance.unit).selectinload(Unit.property))
            .where(Maintenance.id == request_id)
        )
        return result.scalar_one_or_none()

    async def get_request_with_relations(self, request_id: int) -> Optional[Maintenance]:
        result = await self.db.execute(
            select(Maintenance)
            .options(*self._with_relations())
            .where(Maintenance.id == request_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_requests(
        self,
        *,
        property_ids: List[int] | None = None,
        created_by: int | None = None,
        status: MaintenanceStatus | None = None,
        unit_id: int | None = None,
        property_id: int | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[List[Maintenance], int]:
        stmt = select(Maintenance)
        if property_ids is not None or property_id is not None:
            stmt = stmt.join(Unit, Maintenance.unit_id == Unit.id)
        if property_ids is not None:
            stmt = stmt.where(Unit.property_id.in_(property_ids))
        if property_id is not None:
            stmt = stmt.where(Unit.property_id == property_id)
        if created_by is not None:
            stmt = stmt.where(Maintenance.created_by == created_by)
        if status is not None:
            stmt = stmt.where(Maintenance.status == status)
        if unit_id is not None:
            stmt = stmt.where(Maintenance.unit_id == unit_id)
        total = await self.db.scalar(
            select(func.count()).select_from(stmt.subquery())
        )
        result = await self.db.execute(
            stmt.options(*self._with_relations())
            .order_by(Maintenance.created_at.desc(), Maintenance.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def create(self, **values) -> Maintenance:
        request = Maintenance(**values)
        self.db.add(request)
        await self.db.flush()
        return request

    async def delete_request(self, request_id: int) -> None:
        await self.db.execute(delete(Maintenance).where(Maintenance.id == request_id))

    async def save(self) -> None:
        await self.db.flush()
