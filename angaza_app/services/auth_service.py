import logging

from core.exceptions import Conflict, Forbidden, Unauthenticated, ValidationFailed
from core.mapper import ORMMapper
from core.transaction import atomic
from models.enums import SELF_REGISTER_ROLES
from repos.auth_repo import AuthRepo
from schemas.schema import UserOut
from security.security_generate import user_generate

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db):
        self.db = db
        self.repo: AuthRepo = AuthRepo(db)
        self.mapper: ORMMapper = ORMMapper()

    def _token_response(self, message: str, user) -> dict:
        return {
            "message": message,
            "user": self.mapper.dump(user, UserOut),
            "access_token": user_generate.generate_access_token(user),
            "token_type": "bearer",
        }

    async def register(self, data):
        if data.role not in SELF_REGISTER_ROLES:
            raise ValidationFailed("You can only register as a landlord or a tenant.")

        async with atomic(self.db):
            if await self.repo.email_taken(data.email):
                raise Conflict("Email already registered.")
            user = await self.repo.create(
                name=data.name,
                email=data.email,
                phone=data.phone,
                password=data.password,
                role=data.role,
            )

        logger.info("User %s registered as %s", user.id, user.role)
        return self._token_response("Registration successful", user)

    async def login(self, data):
        user = await self.repo.get_by_email(data.email)
        if not user or not user.check_password(data.password):
            raise Unauthenticated("Invalid email or password.")
        if not user.is_active:
            raise Forbidden("This account has been deactivated.")
        return self._token_response("Login successful", user)

    async def me(self, current_user):
        return self.mapper.dump(current_user, UserOut)

    async def update_me(self, current_user, data):
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationFailed("No fields provided for update.")

        async with atomic(self.db):
            password = update_data.pop("password", None)
            self.mapper.apply(current_user, update_data, nullable=("phone",))
            if password:
                current_user.set_password(password)
            await self.repo.save()

        await self.db.refresh(current_user)
        return {
            "message": "Profile updated successfully",
            "user": self.mapper.dump(current_user, UserOut),
        }
