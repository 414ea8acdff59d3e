import logging

from core.check_permission import CheckRolePermission
from core.exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from core.mapper import ORMMapper
from core.paginate import PaginatePage
from core.transaction import atomic
from core.validate_enum import optional_enum
from models.enums import UnitStatus, UserRole
from policy.access_policy import AccessPolicy, Visibility
from repos.lease_repo import LeaseRepo
from repos.property_repo import PropertyRepo
from repos.unit_repo import UnitRepo
from schemas.schema import UnitDetailOut

from .occupancy_service import OccupancyService

logger = logging.getLogger(__name__)

UNIT_WRITERS = (UserRole.ADMIN, UserRole.PROPERTY_MANAGER, UserRole.LANDLORD)


class UnitService:
    def __init__(self, db):
        self.db = db
        self.repo: UnitRepo = UnitRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.lease_repo: LeaseRepo = LeaseRepo(db)
        self.occupancy: OccupancyService = OccupancyService(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def list_units(
        self, current_user, property_id=None, status=None, page=None, per_page=None
    ):
        page, per_page = self.paginate.resolve(page, per_page)
        status = optional_enum(status, UnitStatus, field="status")
        visibility = AccessPolicy.unit_visibility(current_user)

        if visibility == Visibility.NONE:
            return self.paginate.envelope([], 0, page, per_page)

        property_ids = None
        if visibility == Visibility.OWNED_PROPERTIES:
            if property_id is not None:
                prop = await self.property_repo.get_by_id(property_id)
                if prop and prop.landlord_id != current_user.id:
                    raise Forbidden("You are not allowed to view units of this property.")
            property_ids = await self.property_repo.ids_for_landlord(current_user.id)
            if not property_ids:
                return self.paginate.envelope([], 0, page, per_page)

        units, total = await self.repo.list_units(
            property_ids=property_ids,
            property_id=property_id,
            status=status,
            offset=self.paginate.offset(page, per_page),
            limit=per_page,
        )
        items = self.paginate.get_list_json_dumps(self.mapper.many(units, UnitDetailOut))
        return self.paginate.envelope(items, total, page, per_page)

    async def get_unit(self, current_user, unit_id: int):
        unit = await self.repo.get_unit_with_relations(unit_id)
        if not unit:
            raise NotFound("Unit not found.")

        has_lease = False
        if current_user.role == UserRole.TENANT:
            has_lease = await self.lease_repo.tenant_has_active_lease_on_unit(
                current_user.id, unit.id
            )
        if not AccessPolicy.can_view_unit(
            current_user, unit.property, tenant_has_active_lease=has_lease
        ):
            raise Forbidden("You are not allowed to view this unit.")
        return self.mapper.dump(unit, UnitDetailOut)

    async def create_unit(self, current_user, data):
        await self.permission.require(current_user, *UNIT_WRITERS)

        async with atomic(self.db):
            prop = await self.property_repo.get_by_id(data.property_id, for_update=True)
            if not prop:
                raise NotFound("Property not found.")
            if not AccessPolicy.can_manage_units(current_user, prop):
                raise Forbidden("You are not allowed to add units to this property.")

            unit_count = await self.repo.count_for_property(prop.id)
            if unit_count >= prop.total_units:
                raise Conflict(
                    f"Property already has {unit_count} of {prop.total_units} units."
                )

            unit = await self.repo.create(**data.model_dump())
            await self.occupancy.recompute(prop.id)
            unit_id = unit.id

        logger.info("Unit %s created on property %s", unit_id, data.property_id)
        unit = await self.repo.get_unit_with_relations(unit_id)
        return {
            "message": "Unit created successfully",
            "unit": self.mapper.dump(unit, UnitDetailOut),
        }

    async def update_unit(self, current_user, unit_id: int, data):
        await self.permission.require(current_user, *UNIT_WRITERS)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationFailed("No fields provided for update.")

        async with atomic(self.db):
            unit = await self.repo.get_by_id(unit_id, for_update=True, with_property=True)
            if not unit:
                raise NotFound("Unit not found.")
            if not AccessPolicy.can_manage_units(current_user, unit.property):
                raise Forbidden("You are not allowed to update this unit.")

            new_status = update_data.pop("status", None)
            self.mapper.apply(unit, update_data, nullable=("size", "description"))
            await self.repo.save()
            if new_status is not None:
                await self.occupancy.set_unit_status(unit, new_status)

        unit = await self.repo.get_unit_with_relations(unit_id)
        return {
            "message": "Unit updated successfully",
            "unit": self.mapper.dump(unit, UnitDetailOut),
        }

    async def delete_unit(self, current_user, unit_id: int):
        await self.permission.require(current_user, *UNIT_WRITERS)

        async with atomic(self.db):
            unit = await self.repo.get_by_id(unit_id, for_update=True, with_property=True)
            if not unit:
                raise NotFound("Unit not found.")
            if not AccessPolicy.can_manage_units(current_user, unit.property):
                raise Forbidden("You are not allowed to delete this unit.")
            if await self.repo.active_lease(unit.id):
                raise Conflict("Cannot delete a unit with an active lease.")

            property_id = unit.property_id
            await self.repo.delete_unit(unit.id)
            await self.occupancy.recompute(property_id)

        logger.info("Unit %s deleted from property %s", unit_id, property_id)
        return {"message": "Unit deleted successfully"}
