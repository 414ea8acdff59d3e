from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import UserAdminCreate, UserAdminUpdate
from services.user_service import UserService

router = APIRouter(tags=["User Administration"])


@cbv(router=router)
class UserRoutes:
    @router.get("/")
    @safe_handler
    async def list_users(
        self,
        role: Optional[str] = Query(None),
        page: int = Query(1),
        per_page: Optional[int] = Query(None),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UserService(db).list_users(
            current_user, role=role, page=page, per_page=per_page
        )

    @router.post("/", status_code=201)
    @safe_handler
    async def create_user(
        self,
        data: UserAdminCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UserService(db).create_user(current_user, data)

    @router.get("/{user_id}")
    @safe_handler
    async def get_user(
        self,
        user_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UserService(db).get_user(current_user, user_id)

    @router.put("/{user_id}")
    @safe_handler
    async def update_user(
        self,
        user_id: int,
        data: UserAdminUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UserService(db).update_user(current_user, user_id, data)
