from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import PaymentCreate, PaymentStatusUpdate
from services.payment_service import PaymentService

router = APIRouter(tags=["Payments"])


@cbv(router=router)
class PaymentRoutes:
    @router.get("/")
    @safe_handler
    async def list_payments(
        self,
        lease_id: Optional[int] = Query(None, alias="leaseId"),
        page: int = Query(1),
        per_page: Optional[int] = Query(None),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).list_payments(
            current_user, lease_id=lease_id, page=page, per_page=per_page
        )

    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: PaymentCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).create_payment(current_user, data)

    @router.get("/{payment_id}")
    @safe_handler
    async def get_payment(
        self,
        payment_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).get_payment(current_user, payment_id)

    @router.put("/{payment_id}")
    @safe_handler
    async def update_status(
        self,
        payment_id: int,
        data: PaymentStatusUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).update_payment_status(
            current_user, payment_id, data
        )

    @router.delete("/{payment_id}")
    @safe_handler
    async def delete_payment(
        self,
        payment_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).delete_payment(current_user, payment_id)
