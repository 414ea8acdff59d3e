from typing import List, Optional

from sqlalchemy import func, select, update

from models.enums import UserRole
from models.models import User


class AuthRepo:
    def __init__(self, db):
        self.db = db

    async def by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        email_payload = email.strip().lower()
        result = await self.db.execute(select(User).where(User.email == email_payload))
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        stmt = select(User.id).where(User.email == email.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def create(self, *, password: str, **values) -> User:
        user = User(**values)
        user.normalize()
        user.set_password(password)
        self.db.add(user)
        await self.db.flush()
        return user

    async def list_users(
        self, *, role: UserRole | None = None, offset: int = 0, limit: int = 20
    ) -> tuple[List[User], int]:
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        total = await self.db.scalar(
            select(func.count()).select_from(stmt.subquery())
        )
        result = await self.db.execute(
            stmt.order_by(User.created_at.desc(), User.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def list_landlords(self) -> List[User]:
        result = await self.db.execute(
            select(User).where(User.role == UserRole.LANDLORD).order_by(User.name)
        )
        return list(result.scalars().all())

    async def clear_creator(self, user_id: int) -> None:
        await self.db.execute(
            update(User)
            .where(User.created_by == user_id)
            .values(created_by=None)
            .execution_options(synchronize_session=False)
        )

    async def save(self) -> None:
        await self.db.flush()
