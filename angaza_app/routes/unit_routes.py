from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import UnitCreate, UnitUpdate
from services.unit_service import UnitService

router = APIRouter(tags=["Units"])


@cbv(router=router)
class UnitRoutes:
    @router.get("/")
    @safe_handler
    async def list_units(
        self,
        property_id: Optional[int] = Query(None, alias="propertyId"),
        status: Optional[str] = Query(None),
        page: int = Query(1),
        per_page: Optional[int] = Query(None),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UnitService(db).list_units(
            current_user,
            property_id=property_id,
            status=status,
            page=page,
            per_page=per_page,
        )

    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: UnitCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UnitService(db).create_unit(current_user, data)

    @router.get("/{unit_id}")
    @safe_handler
    async def get_unit(
        self,
        unit_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UnitService(db).get_unit(current_user, unit_id)

    @router.put("/{unit_id}")
    @safe_handler
    async def update(
        self,
        unit_id: int,
        data: UnitUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UnitService(db).update_unit(current_user, unit_id, data)

    @router.delete("/{unit_id}")
    @safe_handler
    async def delete_unit(
        self,
        unit_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UnitService(db).delete_unit(current_user, unit_id)
