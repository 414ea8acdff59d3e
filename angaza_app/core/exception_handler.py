from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import AppError, InternalError
from .settings import settings


class ValidationErrorHandler:
    async def __call__(self, request: Request, exc: RequestValidationError):

        errors = []

        for err in exc.errors():
            errors.append({
                "loc": err.get("loc"),
                "msg": str(err.get("msg")),
                "type": err.get("type"),
            })

        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": "Validation failed",
                "details": errors,
            },
        )


class AppErrorHandler:
    async def __call__(self, request: Request, exc: AppError):
        content = {
            "success": False,
            "error": exc.error,
            "message": exc.message,
        }
        if isinstance(exc, InternalError) and exc.trace and settings.is_development:
            content["trace"] = exc.trace
        return JSONResponse(status_code=exc.status_code, content=content)


class HTTPErrorHandler:
    async def __call__(self, request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": "HTTP Error",
                "message": str(exc.detail),
            },
            headers=getattr(exc, "headers", None),
        )
