from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import TenantCreate, TenantUpdate
from services.tenant_service import TenantService

router = APIRouter(tags=["Tenant Management"])


@cbv(router=router)
class TenantRoutes:
    @router.get("/")
    @safe_handler
    async def list_tenants(
        self,
        created_by: Optional[str] = Query(None, alias="createdBy"),
        page: int = Query(1),
        per_page: Optional[int] = Query(None),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await TenantService(db).list_tenants(
            current_user, created_by=created_by, page=page, per_page=per_page
        )

    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: TenantCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await TenantService(db).create_tenant(current_user, data)

    @router.get("/{tenant_id}")
    @safe_handler
    async def get_tenant(
        self,
        tenant_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await TenantService(db).get_tenant(current_user, tenant_id)

    @router.put("/{tenant_id}")
    @safe_handler
    async def update(
        self,
        tenant_id: int,
        data: TenantUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await TenantService(db).update_tenant(current_user, tenant_id, data)

    @router.delete("/{tenant_id}")
    @safe_handler
    async def delete_tenant(
        self,
        tenant_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await TenantService(db).delete_tenant(current_user, tenant_id)
