import jwt
from fastapi import Request

from .exceptions import Unauthenticated
from .settings import settings


def decode_http_access_token(token: str) -> int:
    payload = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.ALGORITHM],
    )

    if payload.get("type") != "access":
        raise jwt.InvalidTokenError("Not an access token")

    user_id = payload.get("sub")
    if not user_id:
        raise jwt.InvalidTokenError("Token missing user ID")

    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise jwt.InvalidTokenError("Malformed user ID in token")


def read_access_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get("access_token")


async def jwt_protect(request: Request) -> int:
    token = read_access_token(request)
    if not token:
        raise Unauthenticated("Not authenticated")

    try:
        return decode_http_access_token(token)

    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid token")
