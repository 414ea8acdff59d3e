from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import MaintenanceCreate, MaintenanceUpdate
from services.maintenance_service import MaintenanceService

router = APIRouter(tags=["Maintenance"])


@cbv(router=router)
class MaintenanceRoutes:
    @router.get("/")
    @safe_handler
    async def list_requests(
        self,
        status: Optional[str] = Query(None),
        unit_id: Optional[int] = Query(None, alias="unitId"),
        property_id: Optional[int] = Query(None, alias="propertyId"),
        page: int = Query(1),
        per_page: Optional[int] = Query(None),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await MaintenanceService(db).list_requests(
            current_user,
            status=status,
            unit_id=unit_id,
            property_id=property_id,
            page=page,
            per_page=per_page,
        )

    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: MaintenanceCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await MaintenanceService(db).create_request(current_user, data)

    @router.get("/{request_id}")
    @safe_handler
    async def get_request(
        self,
        request_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await MaintenanceService(db).get_request(current_user, request_id)

    @router.put("/{request_id}")
    @safe_handler
    async def update(
        self,
        request_id: int,
        data: MaintenanceUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await MaintenanceService(db).update_request(current_user, request_id, data)

    @router.delete("/{request_id}")
    @safe_handler
    async def delete_request(
        self,
        request_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await MaintenanceService(db).delete_request(current_user, request_id)
