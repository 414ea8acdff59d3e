import logging
import traceback
from functools import wraps

from fastapi import HTTPException, Request

from .exceptions import AppError, InternalError
from .friendly_msg import get_friendly_message
from .settings import settings

logger = logging.getLogger(__name__)


def _request_context(request: Request | None):
    if not request:
        return "none", "unknown", "unknown"
    client_ip = request.client.host if request.client else "unknown"
    trace_id = request.headers.get("X-Request-ID", "none")
    return trace_id, request.url.path, client_ip


def safe_handler(func):
    @wraps(func)
    async def wrapper(*args, **kwargs):
        request: Request | None = None
        for arg in list(args) + list(kwargs.values()):
            if isinstance(arg, Request):
                request = arg
                break

        try:
            return await func(*args, **kwargs)
        except (AppError, HTTPException) as e:
            trace_id, path, client_ip = _request_context(request)
            status_code = getattr(e, "status_code", 500)
            detail = getattr(e, "message", None) or getattr(e, "detail", "")
            logger.warning(
                f"[{type(e).__name__}] TraceID={trace_id} | {status_code} - {path} "
                f"from {client_ip}: {detail}"
            )
            raise
        except Exception as e:
            trace_id, path, client_ip = _request_context(request)
            logger.error(
                f"[Unhandled Error] TraceID={trace_id} | in {func.__name__} | Path: {path} | "
                f"Client: {client_ip} | Error: {e}",
                exc_info=True,
            )
            trace = traceback.format_exc() if settings.is_development else None
            raise InternalError(get_friendly_message(e), trace=trace) from e

    return wrapper
