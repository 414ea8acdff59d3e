import logging

from core.check_permission import CheckRolePermission
from core.exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from core.mapper import ORMMapper
from core.paginate import PaginatePage
from core.transaction import atomic
from models.enums import LeaseStatus, UserRole
from policy.access_policy import AccessPolicy, Visibility
from repos.auth_repo import AuthRepo
from repos.lease_repo import LeaseRepo
from repos.property_repo import PropertyRepo
from repos.tenant_repo import TenantRepo
from repos.unit_repo import UnitRepo
from schemas.schema import TenantDetailOut, UserOut

from .occupancy_service import OccupancyService

logger = logging.getLogger(__name__)

TENANT_MANAGERS = (UserRole.ADMIN, UserRole.PROPERTY_MANAGER, UserRole.LANDLORD)


class TenantService:
    def __init__(self, db):
        self.db = db
        self.repo: TenantRepo = TenantRepo(db)
        self.auth_repo: AuthRepo = AuthRepo(db)
        self.lease_repo: LeaseRepo = LeaseRepo(db)
        self.unit_repo: UnitRepo = UnitRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.occupancy: OccupancyService = OccupancyService(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def _leases_in_actor_property(self, current_user, tenant_id: int) -> bool:
        if current_user.role != UserRole.LANDLORD:
            return False
        property_ids = await self.property_repo.ids_for_landlord(current_user.id)
        return await self.repo.has_active_lease_in(tenant_id, property_ids)

    async def _visible_tenant(self, current_user, tenant_id: int):
        tenant = await self.repo.get_tenant(tenant_id)
        if not tenant:
            raise NotFound("Tenant not found.")
        leased = await self._leases_in_actor_property(current_user, tenant.id)
        if not AccessPolicy.can_view_tenant(
            current_user, tenant, leases_in_actor_property=leased
        ):
            raise Forbidden("You are not allowed to access this tenant.")
        return tenant, leased

    async def list_tenants(self, current_user, created_by=None, page=None, per_page=None):
        await self.permission.require(current_user, *TENANT_MANAGERS)
        page, per_page = self.paginate.resolve(page, per_page)
        offset = self.paginate.offset(page, per_page)

        if created_by is not None and created_by != "own":
            raise ValidationFailed("createdBy only accepts 'own'.")

        if created_by == "own":
            tenants, total = await self.repo.list_tenants(
                created_by=current_user.id, offset=offset, limit=per_page
            )
        else:
            visibility = AccessPolicy.tenant_visibility(current_user)
            if visibility == Visibility.NONE:
                return self.paginate.envelope([], 0, page, per_page)
            filters = {}
            if visibility == Visibility.LANDLORD_TENANTS:
                filters["property_ids"] = await self.property_repo.ids_for_landlord(
                    current_user.id
                )
                filters["created_by"] = current_user.id
            tenants, total = await self.repo.list_tenants(
                **filters, offset=offset, limit=per_page
            )

        items = self.paginate.get_list_json_dumps(self.mapper.many(tenants, UserOut))
        return self.paginate.envelope(items, total, page, per_page)

    async def get_tenant(self, current_user, tenant_id: int):
        await self.permission.require(current_user, *TENANT_MANAGERS)
        await self._visible_tenant(current_user, tenant_id)

        tenant = await self.repo.get_tenant_with_relations(tenant_id)
        detail = self.mapper.one(tenant, TenantDetailOut)
        if current_user.role == UserRole.LANDLORD:
            own = {
                lease.id
                for lease in tenant.leases
                if lease.unit.property.landlord_id == current_user.id
            }
            detail.leases = [lease for lease in detail.leases if lease.id in own]
            detail.payments = [p for p in detail.payments if p.lease_id in own]
        return self.paginate.get_single_json_dumps(detail)

    async def create_tenant(self, current_user, data):
        await self.permission.require(current_user, *TENANT_MANAGERS)

        async with atomic(self.db):
            if await self.auth_repo.email_taken(data.email):
                raise Conflict("Email already registered.")
            tenant = await self.auth_repo.create(
                name=data.name,
                email=data.email,
                phone=data.phone,
                password=data.password,
                role=UserRole.TENANT,
                created_by=current_user.id,
            )
            tenant_id = tenant.id

        logger.info("Tenant %s created by user %s", tenant_id, current_user.id)
        tenant = await self.repo.get_tenant(tenant_id)
        return {
            "message": "Tenant created successfully",
            "tenant": self.mapper.dump(tenant, UserOut),
        }

    async def update_tenant(self, current_user, tenant_id: int, data):
        await self.permission.require(current_user, *TENANT_MANAGERS)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationFailed("No fields provided for update.")

        async with atomic(self.db):
            tenant, _ = await self._visible_tenant(current_user, tenant_id)
            email = update_data.get("email")
            if email and await self.auth_repo.email_taken(email, exclude_id=tenant.id):
                raise Conflict("Email already registered.")
            self.mapper.apply(tenant, update_data, nullable=("phone",))
            await self.auth_repo.save()

        tenant = await self.repo.get_tenant(tenant_id)
        return {
            "message": "Tenant updated successfully",
            "tenant": self.mapper.dump(tenant, UserOut),
        }

    async def delete_tenant(self, current_user, tenant_id: int):
        await self.permission.require(current_user, UserRole.ADMIN, UserRole.LANDLORD)

        async with atomic(self.db):
            tenant, leased = await self._visible_tenant(current_user, tenant_id)
            if not AccessPolicy.can_delete_tenant(
                current_user, tenant, leases_in_actor_property=leased
            ):
                raise Forbidden("You are not allowed to delete this tenant.")

            for lease in await self.lease_repo.active_for_tenant(tenant.id):
                logger.info(
                    "Terminating lease %s of deleted tenant %s", lease.id, tenant.id
                )
                lease.status = LeaseStatus.TERMINATED
                await self.lease_repo.save()
                unit = await self.unit_repo.get_by_id(lease.unit_id, for_update=True)
                await self.occupancy.vacate(unit)

            await self.auth_repo.clear_creator(tenant.id)
            await self.repo.delete_tenant_records(tenant.id)

        logger.info("Tenant %s deleted by user %s", tenant_id, current_user.id)
        return {"message": "Tenant deleted successfully"}
