import logging

from core.check_permission import CheckRolePermission
from core.exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from core.mapper import ORMMapper
from core.paginate import PaginatePage
from core.transaction import atomic
from core.validate_enum import optional_enum
from models.enums import LeaseStatus, UnitStatus, UserRole
from policy.access_policy import AccessPolicy, Visibility, enters_active, leaves_active
from repos.lease_repo import LeaseRepo
from repos.property_repo import PropertyRepo
from repos.tenant_repo import TenantRepo
from repos.unit_repo import UnitRepo
from schemas.schema import LeaseOut

from .occupancy_service import OccupancyService

logger = logging.getLogger(__name__)

LEASE_WRITERS = (UserRole.ADMIN, UserRole.PROPERTY_MANAGER, UserRole.LANDLORD)


class LeaseService:
    def __init__(self, db):
        self.db = db
        self.repo: LeaseRepo = LeaseRepo(db)
        self.unit_repo: UnitRepo = UnitRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.tenant_repo: TenantRepo = TenantRepo(db)
        self.occupancy: OccupancyService = OccupancyService(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def _lock_unit(self, unit_id: int):
        """Lock the unit and its property so vacancy checks serialize."""
        unit = await self.unit_repo.get_by_id(unit_id, for_update=True)
        if not unit:
            raise NotFound("Unit not found.")
        prop = await self.property_repo.get_by_id(unit.property_id, for_update=True)
        return unit, prop

    async def _assert_unit_free(self, unit, exclude_lease_id: int | None = None):
        if unit.status != UnitStatus.VACANT:
            raise Conflict(f"Unit {unit.unit_number} is not vacant.")
        if await self.unit_repo.active_lease(unit.id, exclude_lease_id=exclude_lease_id):
            raise Conflict(f"Unit {unit.unit_number} already has an active lease.")

    async def list_leases(self, current_user, status=None, page=None, per_page=None):
        page, per_page = self.paginate.resolve(page, per_page)
        status = optional_enum(status, LeaseStatus, field="status")
        visibility = AccessPolicy.lease_visibility(current_user)

        filters = {}
        if visibility == Visibility.NONE:
            return self.paginate.envelope([], 0, page, per_page)
        if visibility == Visibility.OWNED_PROPERTIES:
            filters["property_ids"] = await self.property_repo.ids_for_landlord(
                current_user.id
            )
            if not filters["property_ids"]:
                return self.paginate.envelope([], 0, page, per_page)
        elif visibility == Visibility.OWN_RECORDS:
            filters["tenant_id"] = current_user.id

        leases, total = await self.repo.list_leases(
            **filters,
            status=status,
            offset=self.paginate.offset(page, per_page),
            limit=per_page,
        )
        items = self.paginate.get_list_json_dumps(self.mapper.many(leases, LeaseOut))
        return self.paginate.envelope(items, total, page, per_page)

    async def get_lease(self, current_user, lease_id: int):
        lease = await self.repo.get_lease_with_relations(lease_id)
        if not lease:
            raise NotFound("Lease not found.")
        if not AccessPolicy.can_view_lease(current_user, lease, lease.unit.property):
            raise Forbidden("You are not allowed to view this lease.")
        return self.mapper.dump(lease, LeaseOut)

    async def create_lease(self, current_user, data):
        await self.permission.require(current_user, *LEASE_WRITERS)

        async with atomic(self.db):
            unit, prop = await self._lock_unit(data.unit_id)
            if not AccessPolicy.can_manage_units(current_user, prop):
                raise Forbidden("You are not allowed to lease units of this property.")

            tenant = await self.tenant_repo.get_tenant(data.tenant_id)
            if not tenant:
                raise NotFound("Tenant not found.")

            await self._assert_unit_free(unit)

            lease = await self.repo.create(
                **data.model_dump(), status=LeaseStatus.ACTIVE
            )
            await self.occupancy.occupy(unit)
            lease_id = lease.id

        logger.info(
            "Lease %s created: tenant %s on unit %s", lease_id, data.tenant_id, data.unit_id
        )
        lease = await self.repo.get_lease_with_relations(lease_id)
        return {
            "message": "Lease created successfully",
            "lease": self.mapper.dump(lease, LeaseOut),
        }

    async def update_lease(self, current_user, lease_id: int, data):
        await self.permission.require(current_user, *LEASE_WRITERS)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationFailed("No fields provided for update.")

        async with atomic(self.db):
            lease = await self.repo.get_by_id(lease_id, for_update=True)
            if not lease:
                raise NotFound("Lease not found.")
            unit, prop = await self._lock_unit(lease.unit_id)
            if not AccessPolicy.can_manage_units(current_user, prop):
                raise Forbidden("You are not allowed to update this lease.")

            start = update_data.get("start_date") or lease.start_date
            end = update_data.get("end_date") or lease.end_date
            if end <= start:
                raise ValidationFailed("end_date must be after start_date.")

            old_status = lease.status
            new_status = update_data.get("status") or old_status
            if enters_active(old_status, new_status):
                await self._assert_unit_free(unit, exclude_lease_id=lease.id)

            self.mapper.apply(lease, update_data, nullable=("document",))
            await self.repo.save()

            if leaves_active(old_status, new_status):
                logger.info("Lease %s left active (%s); vacating unit %s",
                            lease.id, new_status, unit.id)
                await self.occupancy.vacate(unit)
            elif enters_active(old_status, new_status):
                await self.occupancy.occupy(unit)

        lease = await self.repo.get_lease_with_relations(lease_id)
        return {
            "message": "Lease updated successfully",
            "lease": self.mapper.dump(lease, LeaseOut),
        }

    async def delete_lease(self, current_user, lease_id: int):
        await self.permission.require(current_user, *LEASE_WRITERS)

        async with atomic(self.db):
            lease = await self.repo.get_by_id(lease_id, for_update=True)
            if not lease:
                raise NotFound("Lease not found.")
            unit, prop = await self._lock_unit(lease.unit_id)
            if not AccessPolicy.can_manage_units(current_user, prop):
                raise Forbidden("You are not allowed to delete this lease.")
            if await self.repo.has_payments(lease.id):
                raise Conflict("Cannot delete a lease that has payments recorded.")

            was_active = lease.status == LeaseStatus.ACTIVE
            await self.repo.delete_lease(lease.id)
            if was_active:
                await self.occupancy.vacate(unit)

        logger.info("Lease %s deleted by user %s", lease_id, current_user.id)
        return {"message": "Lease deleted successfully"}
