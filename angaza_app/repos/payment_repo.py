from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from models.models import Lease, Payment, Unit


class PaymentRepo:
    def __init__(self, db):
        self.db = db

    @staticmethod
    def _with_relations():
        return (selectinload(Payment.tenant), selectinload(Payment.lease))

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        result = await self.db.execute(
            select(Payment)
            .options(
                selectinload(Payment.lease)
                .selectinload(Lease.unit)
                .selectinload(Unit.property)
            )
            .where(Payment.id == payment_id)
        )
        return result.scalar_one_or_none()

    async def get_payment_with_relations(self, payment_id: int) -> Optional[Payment]:
        result = await self.db.execute(
            select(Payment)
            .options(*self._with_relations())
            .where(Payment.id == payment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_payments(
        self,
        *,
        tenant_id: int | None = None,
        lease_id: int | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[List[Payment], int]:
        stmt = select(Payment)
        if tenant_id is not None:
            stmt = stmt.where(Payment.tenant_id == tenant_id)
        if lease_id is not None:
            stmt = stmt.where(Payment.lease_id == lease_id)
        total = await self.db.scalar(
            select(func.count()).select_from(stmt.subquery())
        )
        result = await self.db.execute(
            stmt.options(*self._with_relations())
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def create(self, **values) -> Payment:
        payment = Payment(**values)
        self.db.add(payment)
        await self.db.flush()
        return payment

    async def delete_payment(self, payment_id: int) -> None:
        await self.db.execute(delete(Payment).where(Payment.id == payment_id))

    async def save(self) -> None:
        await self.db.flush()
