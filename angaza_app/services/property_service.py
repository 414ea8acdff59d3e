import logging

from core.check_permission import CheckRolePermission
from core.exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from core.mapper import ORMMapper
from core.paginate import PaginatePage
from core.transaction import atomic
from models.enums import UserRole
from policy.access_policy import AccessPolicy, Visibility
from repos.auth_repo import AuthRepo
from repos.property_repo import PropertyRepo
from repos.unit_repo import UnitRepo
from schemas.schema import PropertyOut, UserBrief

from .occupancy_service import OccupancyService

logger = logging.getLogger(__name__)


class PropertyService:
    def __init__(self, db):
        self.db = db
        self.repo: PropertyRepo = PropertyRepo(db)
        self.unit_repo: UnitRepo = UnitRepo(db)
        self.auth_repo: AuthRepo = AuthRepo(db)
        self.occupancy: OccupancyService = OccupancyService(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def _resolve_landlord(self, landlord_id: int | None) -> int:
        if landlord_id is None:
            raise ValidationFailed("landlord_id is required when an admin creates a property.")
        landlord = await self.auth_repo.by_id(landlord_id)
        if not landlord or landlord.role != UserRole.LANDLORD:
            raise NotFound("Landlord not found.")
        return landlord.id

    async def list_properties(self, current_user, page=None, per_page=None):
        page, per_page = self.paginate.resolve(page, per_page)
        offset = self.paginate.offset(page, per_page)
        visibility = AccessPolicy.property_visibility(current_user)

        if visibility == Visibility.NONE:
            return self.paginate.envelope([], 0, page, per_page)

        landlord_id = (
            current_user.id if visibility == Visibility.OWNED_PROPERTIES else None
        )
        props, total = await self.repo.list_properties(
            landlord_id=landlord_id, offset=offset, limit=per_page
        )
        items = self.paginate.get_list_json_dumps(self.mapper.many(props, PropertyOut))
        return self.paginate.envelope(items, total, page, per_page)

    async def get_property(self, current_user, property_id: int):
        prop = await self.repo.get_property_with_relations(property_id)
        if not prop:
            raise NotFound("Property not found.")
        if not AccessPolicy.can_view_property(current_user, prop):
            raise Forbidden("You are not allowed to view this property.")
        return self.mapper.dump(prop, PropertyOut)

    async def create_property(self, current_user, data):
        await self.permission.require(current_user, UserRole.ADMIN, UserRole.LANDLORD)

        async with atomic(self.db):
            if current_user.role == UserRole.ADMIN:
                landlord_id = await self._resolve_landlord(data.landlord_id)
            else:
                landlord_id = current_user.id

            values = data.model_dump(exclude={"landlord_id"})
            prop = await self.repo.create(
                **values,
                landlord_id=landlord_id,
                available_units=data.total_units,
            )
            property_id = prop.id

        logger.info("Property %s created for landlord %s", property_id, landlord_id)
        prop = await self.repo.get_property_with_relations(property_id)
        return {
            "message": "Property created successfully",
            "property": self.mapper.dump(prop, PropertyOut),
        }

    async def update_property(self, current_user, property_id: int, data):
        await self.permission.require(current_user, UserRole.ADMIN, UserRole.LANDLORD)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationFailed("No fields provided for update.")

        async with atomic(self.db):
            prop = await self.repo.get_by_id(property_id, for_update=True)
            if not prop:
                raise NotFound("Property not found.")
            if not AccessPolicy.can_manage_property(current_user, prop):
                raise Forbidden("You are not allowed to update this property.")

            if "landlord_id" in update_data:
                new_landlord = update_data.pop("landlord_id")
                if new_landlord != prop.landlord_id:
                    if current_user.role != UserRole.ADMIN:
                        raise Forbidden("Only an admin can reassign a property.")
                    prop.landlord_id = await self._resolve_landlord(new_landlord)

            new_total = update_data.get("total_units")
            if new_total is not None:
                unit_count = await self.unit_repo.count_for_property(prop.id)
                if new_total < unit_count:
                    raise Conflict(
                        f"Property already has {unit_count} units; "
                        f"total_units cannot be set to {new_total}."
                    )

            self.mapper.apply(prop, update_data, nullable=("description", "image"))
            await self.repo.save()
            await self.occupancy.recompute(prop.id)

        prop = await self.repo.get_property_with_relations(property_id)
        return {
            "message": "Property updated successfully",
            "property": self.mapper.dump(prop, PropertyOut),
        }

    async def delete_property(self, current_user, property_id: int):
        await self.permission.require(current_user, UserRole.ADMIN, UserRole.LANDLORD)

        async with atomic(self.db):
            prop = await self.repo.get_by_id(property_id, for_update=True)
            if not prop:
                raise NotFound("Property not found.")
            if not AccessPolicy.can_manage_property(current_user, prop):
                raise Forbidden("You are not allowed to delete this property.")
            if await self.repo.has_active_lease(prop.id):
                raise Conflict("Cannot delete a property with active leases.")

            await self.repo.delete_property(prop.id)

        logger.info("Property %s deleted by user %s", property_id, current_user.id)
        return {"message": "Property deleted successfully"}

    async def list_landlords(self, current_user):
        await self.permission.check_admin(current_user)
        landlords = await self.auth_repo.list_landlords()
        return self.paginate.get_list_json_dumps(self.mapper.many(landlords, UserBrief))
