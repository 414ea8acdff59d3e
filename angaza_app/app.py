import logging

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.catch_error_middleware import ErrorHandlerMiddleware
from core.exception_handler import (
    AppErrorHandler,
    HTTPErrorHandler,
    ValidationErrorHandler,
)
from core.exceptions import AppError
from core.lifespan import lifespan
from core.settings import settings
from routes.auth_routes import router as auth_router
from routes.lease_routes import router as lease_router
from routes.maintenance_routes import router as maintenance_router
from routes.payment_routes import router as payment_router
from routes.property_routes import router as property_router
from routes.tenant_routes import router as tenant_router
from routes.unit_routes import router as unit_router
from routes.user_routes import router as user_router

logging.basicConfig(level=logging.INFO)


def create_app() -> FastAPI:
    app = FastAPI(
        lifespan=lifespan,
        title=settings.PROJECT_NAME,
        version="1.0.0",
    )

    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(property_router, prefix="/api/properties")
    app.include_router(unit_router, prefix="/api/units")
    app.include_router(lease_router, prefix="/api/leases")
    app.include_router(maintenance_router, prefix="/api/maintenance")
    app.include_router(payment_router, prefix="/api/payments")
    app.include_router(tenant_router, prefix="/api/tenants")
    app.include_router(user_router, prefix="/api/users")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["System"])
    async def health_check():
        return {"status": "ok"}

    app.add_exception_handler(
        RequestValidationError,
        ValidationErrorHandler(),
    )
    app.add_exception_handler(AppError, AppErrorHandler())
    app.add_exception_handler(StarletteHTTPException, HTTPErrorHandler())

    app.add_middleware(ErrorHandlerMiddleware)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("app:app", host="127.0.0.1", port=8000, reload=settings.is_development)
