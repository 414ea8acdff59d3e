from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.models import User

from .exceptions import Forbidden, Unauthenticated
from .get_db import get_db_async
from .validators import jwt_protect


async def get_current_user(
    user_id: int = Depends(jwt_protect), db: AsyncSession = Depends(get_db_async)
) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()

    if not user:
        raise Unauthenticated("Not authenticated")
    if not user.is_active:
        raise Forbidden("This account has been deactivated.")

    return user
