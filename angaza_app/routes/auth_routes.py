from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import LoginInput, RegisterInput, SelfUpdate
from services.auth_service import AuthService

router = APIRouter(tags=["User Authentication"])


@cbv(router)
class AuthRoutes:
    @router.post("/register", status_code=201)
    @safe_handler
    async def register(
        self,
        data: RegisterInput,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await AuthService(db).register(data)

    @router.post("/login")
    @safe_handler
    async def login(
        self,
        data: LoginInput,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await AuthService(db).login(data)

    @router.get("/me")
    @safe_handler
    async def me(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AuthService(db).me(current_user)

    @router.put("/me")
    @safe_handler
    async def update_me(
        self,
        data: SelfUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AuthService(db).update_me(current_user, data)
