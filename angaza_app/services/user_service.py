import logging

from core.check_permission import CheckRolePermission
from core.exceptions import Conflict, NotFound, ValidationFailed
from core.mapper import ORMMapper
from core.paginate import PaginatePage
from core.transaction import atomic
from core.validate_enum import optional_enum
from models.enums import UserRole
from repos.auth_repo import AuthRepo
from schemas.schema import UserOut

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db):
        self.db = db
        self.repo: AuthRepo = AuthRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def list_users(self, current_user, role=None, page=None, per_page=None):
        await self.permission.check_admin(current_user)
        page, per_page = self.paginate.resolve(page, per_page)
        role = optional_enum(role, UserRole, field="role")

        users, total = await self.repo.list_users(
            role=role, offset=self.paginate.offset(page, per_page), limit=per_page
        )
        items = self.paginate.get_list_json_dumps(self.mapper.many(users, UserOut))
        return self.paginate.envelope(items, total, page, per_page)

    async def get_user(self, current_user, user_id: int):
        await self.permission.check_admin(current_user)
        user = await self.repo.by_id(user_id)
        if not user:
            raise NotFound("User not found.")
        return self.mapper.dump(user, UserOut)

    async def create_user(self, current_user, data):
        await self.permission.check_admin(current_user)

        async with atomic(self.db):
            if await self.repo.email_taken(data.email):
                raise Conflict("Email already registered.")
            user = await self.repo.create(
                name=data.name,
                email=data.email,
                phone=data.phone,
                password=data.password,
                role=data.role,
                is_active=data.is_active,
                created_by=current_user.id,
            )

        logger.info("User %s (%s) created by admin %s", user.id, user.role, current_user.id)
        return {
            "message": "User created successfully",
            "user": self.mapper.dump(user, UserOut),
        }

    async def update_user(self, current_user, user_id: int, data):
        await self.permission.check_admin(current_user)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationFailed("No fields provided for update.")

        async with atomic(self.db):
            user = await self.repo.by_id(user_id)
            if not user:
                raise NotFound("User not found.")
            email = update_data.get("email")
            if email and await self.repo.email_taken(email, exclude_id=user.id):
                raise Conflict("Email already registered.")
            self.mapper.apply(user, update_data, nullable=("phone",))
            await self.repo.save()

        await self.db.refresh(user)
        return {
            "message": "User updated successfully",
            "user": self.mapper.dump(user, UserOut),
        }
