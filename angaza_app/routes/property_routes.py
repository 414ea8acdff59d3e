from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import PropertyCreate, PropertyUpdate
from services.property_service import PropertyService

router = APIRouter(tags=["Property Management"])


@cbv(router=router)
class PropertyRoutes:
    @router.get("/landlords/list")
    @safe_handler
    async def list_landlords(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).list_landlords(current_user)

    @router.get("/")
    @safe_handler
    async def list_properties(
        self,
        page: int = Query(1),
        per_page: Optional[int] = Query(None),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).list_properties(
            current_user, page=page, per_page=per_page
        )

    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: PropertyCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).create_property(current_user, data)

    @router.get("/{property_id}")
    @safe_handler
    async def get_property(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).get_property(current_user, property_id)

    @router.put("/{property_id}")
    @safe_handler
    async def update(
        self,
        property_id: int,
        data: PropertyUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).update_property(current_user, property_id, data)

    @router.delete("/{property_id}")
    @safe_handler
    async def delete_property(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).delete_property(current_user, property_id)
