import logging
from datetime import datetime, timezone

from core.check_permission import CheckRolePermission
from core.exceptions import Forbidden, NotFound
from core.mapper import ORMMapper
from core.paginate import PaginatePage
from core.transaction import atomic
from models.enums import PaymentStatus
from policy.access_policy import AccessPolicy, Visibility
from repos.lease_repo import LeaseRepo
from repos.payment_repo import PaymentRepo
from repos.unit_repo import UnitRepo
from schemas.schema import PaymentOut

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, db):
        self.db = db
        self.repo: PaymentRepo = PaymentRepo(db)
        self.lease_repo: LeaseRepo = LeaseRepo(db)
        self.unit_repo: UnitRepo = UnitRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def list_payments(self, current_user, lease_id=None, page=None, per_page=None):
        page, per_page = self.paginate.resolve(page, per_page)
        visibility = AccessPolicy.payment_visibility(current_user)

        filters = {}
        if visibility == Visibility.NONE:
            return self.paginate.envelope([], 0, page, per_page)
        if visibility == Visibility.OWN_RECORDS:
            filters["tenant_id"] = current_user.id

        payments, total = await self.repo.list_payments(
            **filters,
            lease_id=lease_id,
            offset=self.paginate.offset(page, per_page),
            limit=per_page,
        )
        items = self.paginate.get_list_json_dumps(self.mapper.many(payments, PaymentOut))
        return self.paginate.envelope(items, total, page, per_page)

    async def get_payment(self, current_user, payment_id: int):
        payment = await self.repo.get_by_id(payment_id)
        if not payment:
            raise NotFound("Payment not found.")
        if not AccessPolicy.can_view_payment(
            current_user, payment, payment.lease.unit.property
        ):
            raise Forbidden("You are not allowed to view this payment.")
        payment = await self.repo.get_payment_with_relations(payment_id)
        return self.mapper.dump(payment, PaymentOut)

    async def create_payment(self, current_user, data):
        async with atomic(self.db):
            lease = await self.lease_repo.get_by_id(data.lease_id)
            if not lease:
                raise NotFound("Lease not found.")
            unit = await self.unit_repo.get_by_id(lease.unit_id, with_property=True)
            if not AccessPolicy.can_record_payment(current_user, lease, unit.property):
                raise Forbidden("You are not allowed to record payments on this lease.")

            values = data.model_dump()
            if values.get("payment_date") is None:
                values["payment_date"] = datetime.now(timezone.utc).replace(tzinfo=None)
            # always the lease's tenant, whoever records it
            payment = await self.repo.create(
                **values, status=PaymentStatus.COMPLETED, tenant_id=lease.tenant_id
            )
            payment_id = payment.id

        logger.info(
            "Payment %s of %s recorded on lease %s by user %s",
            payment_id,
            data.amount,
            data.lease_id,
            current_user.id,
        )
        payment = await self.repo.get_payment_with_relations(payment_id)
        return {
            "message": "Payment recorded successfully",
            "payment": self.mapper.dump(payment, PaymentOut),
        }

    async def update_payment_status(self, current_user, payment_id: int, data):
        await self.permission.check_staff(current_user)

        async with atomic(self.db):
            payment = await self.repo.get_by_id(payment_id)
            if not payment:
                raise NotFound("Payment not found.")
            if payment.status != data.status:
                logger.info(
                    "Payment %s status %s -> %s", payment.id, payment.status, data.status
                )
                payment.status = data.status
                await self.repo.save()

        payment = await self.repo.get_payment_with_relations(payment_id)
        return {
            "message": "Payment updated successfully",
            "payment": self.mapper.dump(payment, PaymentOut),
        }

    async def delete_payment(self, current_user, payment_id: int):
        await self.permission.check_admin(current_user)

        async with atomic(self.db):
            payment = await self.repo.get_by_id(payment_id)
            if not payment:
                raise NotFound("Payment not found.")
            await self.repo.delete_payment(payment.id)

        return {"message": "Payment deleted successfully"}
