from datetime import datetime, timedelta, timezone

import jwt

from core.settings import settings


class UserGenerate:
    def generate_access_token(self, user, expires_minutes: int | None = None) -> str:
        minutes = expires_minutes or settings.ACCESS_EXPIRE_MINUTES
        role = getattr(user.role, "value", user.role)
        payload = {
            "sub": str(user.id),
            "role": role,
            "type": "access",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
        }
        return jwt.encode(
            payload, settings.JWT_SECRET_KEY, algorithm=settings.ALGORITHM
        )


user_generate = UserGenerate()
