from models.enums import STAFF_ROLES, UserRole

from .exceptions import Forbidden


class CheckRolePermission:
    async def require(self, current_user, *roles: UserRole):
        if current_user.role not in roles:
            raise Forbidden("Access Denied.")

    async def check_admin(self, current_user):
        await self.require(current_user, UserRole.ADMIN)

    async def check_staff(self, current_user):
        await self.require(current_user, *STAFF_ROLES)
