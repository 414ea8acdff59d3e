import logging
from datetime import datetime, timezone

from core.exceptions import Forbidden, NotFound, ValidationFailed
from core.mapper import ORMMapper
from core.paginate import PaginatePage
from core.transaction import atomic
from core.validate_enum import optional_enum
from models.enums import MaintenanceStatus, UserRole
from policy.access_policy import AccessPolicy, Visibility
from repos.auth_repo import AuthRepo
from repos.lease_repo import LeaseRepo
from repos.maintenance_repo import MaintenanceRepo
from repos.property_repo import PropertyRepo
from repos.unit_repo import UnitRepo
from schemas.schema import MaintenanceOut, MaintenanceStaffUpdate, MaintenanceTenantUpdate

logger = logging.getLogger(__name__)

TENANT_FIELDS = set(MaintenanceTenantUpdate.model_fields)


class MaintenanceService:
    def __init__(self, db):
        self.db = db
        self.repo: MaintenanceRepo = MaintenanceRepo(db)
        self.unit_repo: UnitRepo = UnitRepo(db)
        self.lease_repo: LeaseRepo = LeaseRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.auth_repo: AuthRepo = AuthRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.mapper: ORMMapper = ORMMapper()

    async def list_requests(
        self,
        current_user,
        status=None,
        unit_id=None,
        property_id=None,
        page=None,
        per_page=None,
    ):
        page, per_page = self.paginate.resolve(page, per_page)
        status = optional_enum(status, MaintenanceStatus, field="status")
        visibility = AccessPolicy.maintenance_visibility(current_user)

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
            filters["created_by"] = current_user.id

        requests, total = await self.repo.list_requests(
            **filters,
            status=status,
            unit_id=unit_id,
            property_id=property_id,
            offset=self.paginate.offset(page, per_page),
            limit=per_page,
        )
        items = self.paginate.get_list_json_dumps(
            self.mapper.many(requests, MaintenanceOut)
        )
        return self.paginate.envelope(items, total, page, per_page)

    async def get_request(self, current_user, request_id: int):
        request = await self.repo.get_request_with_relations(request_id)
        if not request:
            raise NotFound("Maintenance request not found.")
        if not AccessPolicy.can_view_maintenance(
            current_user, request, request.unit.property
        ):
            raise Forbidden("You are not allowed to view this maintenance request.")
        return self.mapper.dump(request, MaintenanceOut)

    async def create_request(self, current_user, data):
        async with atomic(self.db):
            unit = await self.unit_repo.get_by_id(data.unit_id, with_property=True)
            if not unit:
                raise NotFound("Unit not found.")

            has_lease = False
            if current_user.role == UserRole.TENANT:
                has_lease = await self.lease_repo.tenant_has_active_lease_on_unit(
                    current_user.id, unit.id
                )
            if not AccessPolicy.can_request_maintenance(
                current_user, unit.property, tenant_has_active_lease=has_lease
            ):
                raise Forbidden(
                    "You can only request maintenance for units you lease or own."
                )

            request = await self.repo.create(
                **data.model_dump(),
                status=MaintenanceStatus.PENDING,
                created_by=current_user.id,
                assigned_to=unit.property.landlord_id,
            )
            request_id = request.id

        logger.info("Maintenance request %s opened on unit %s", request_id, data.unit_id)
        request = await self.repo.get_request_with_relations(request_id)
        return {
            "message": "Maintenance request created successfully",
            "maintenance": self.mapper.dump(request, MaintenanceOut),
        }

    def _narrow(self, current_user, request, prop, data) -> dict:
        """Validate the body against the update schema the actor is entitled to."""
        payload = data.model_dump(exclude_unset=True)
        role = current_user.role

        if role == UserRole.TENANT:
            if request.created_by != current_user.id:
                raise Forbidden("You can only update your own maintenance requests.")
            if "status" in payload:
                raise Forbidden("Tenants cannot change the status of a request.")
            extra = set(payload) - TENANT_FIELDS
            if extra:
                raise Forbidden(
                    f"Tenants cannot change: {', '.join(sorted(extra))}."
                )
            return MaintenanceTenantUpdate(**payload).model_dump(exclude_unset=True)

        if not AccessPolicy.can_view_maintenance(current_user, request, prop):
            raise Forbidden("You are not allowed to update this maintenance request.")
        return MaintenanceStaffUpdate(**payload).model_dump(exclude_unset=True)

    async def update_request(self, current_user, request_id: int, data):
        async with atomic(self.db):
            request = await self.repo.get_by_id(request_id)
            if not request:
                raise NotFound("Maintenance request not found.")

            payload = self._narrow(current_user, request, request.unit.property, data)
            if not payload:
                raise ValidationFailed("No fields provided for update.")

            if payload.get("assigned_to") is not None:
                if not await self.auth_repo.by_id(payload["assigned_to"]):
                    raise NotFound("Assignee not found.")

            old_status = request.status
            self.mapper.apply(
                request, payload, nullable=("notes", "assigned_to")
            )
            if request.status != old_status:
                if request.status == MaintenanceStatus.COMPLETED:
                    request.completed_at = datetime.now(timezone.utc).replace(tzinfo=None)
                elif old_status == MaintenanceStatus.COMPLETED:
                    request.completed_at = None
                logger.info(
                    "Maintenance request %s status %s -> %s",
                    request.id,
                    old_status,
                    request.status,
                )
            await self.repo.save()

        request = await self.repo.get_request_with_relations(request_id)
        return {
            "message": "Maintenance request updated successfully",
            "maintenance": self.mapper.dump(request, MaintenanceOut),
        }

    async def delete_request(self, current_user, request_id: int):
        async with atomic(self.db):
            request = await self.repo.get_by_id(request_id)
            if not request:
                raise NotFound("Maintenance request not found.")
            if not AccessPolicy.can_delete_maintenance(
                current_user, request, request.unit.property
            ):
                raise Forbidden("You are not allowed to delete this maintenance request.")
            await self.repo.delete_request(request.id)

        return {"message": "Maintenance request deleted successfully"}
