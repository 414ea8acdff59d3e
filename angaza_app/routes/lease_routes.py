from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import LeaseCreate, LeaseUpdate
from services.lease_service import LeaseService

router = APIRouter(tags=["Leases"])


@cbv(router=router)
class LeaseRoutes:
    @router.get("/")
    @safe_handler
    async def list_leases(
        self,
        status: Optional[str] = Query(None),
        page: int = Query(1),
        per_page: Optional[int] = Query(None),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await LeaseService(db).list_leases(
            current_user, status=status, page=page, per_page=per_page
        )

    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: LeaseCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await LeaseService(db).create_lease(current_user, data)

    @router.get("/{lease_id}")
    @safe_handler
    async def get_lease(
        self,
        lease_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await LeaseService(db).get_lease(current_user, lease_id)

    @router.put("/{lease_id}")
    @safe_handler
    async def update(
        self,
        lease_id: int,
        data: LeaseUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await LeaseService(db).update_lease(current_user, lease_id, data)

    @router.delete("/{lease_id}")
    @safe_handler
    async def delete_lease(
        self,
        lease_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await LeaseService(db).delete_lease(current_user, lease_id)
