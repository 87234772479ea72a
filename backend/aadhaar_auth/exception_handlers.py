"""
Exception handlers.

Register these on a FastAPI app instance via `register_exception_handlers(app)`.
Every error body has the shape {"success": false, "message": ...}.
"""
import logging
import traceback

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.env import is_local_env
from .core.errors import AuthServiceError, RateLimitedError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


async def auth_service_error_handler(request: Request, exc: AuthServiceError):
    """Map the verification error taxonomy onto HTTP statuses"""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")

    headers = None
    if isinstance(exc, RateLimitedError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}
    return _error_response(exc.status_code, exc.message, headers)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(exc.status_code, detail)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are caller errors like any other validation failure"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid request: {location} {first.get('msg', '')}".strip() if location else "Invalid request data"
    return _error_response(400, message)


async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors"""
    if isinstance(exc, (HTTPException, StarletteHTTPException)):
        return await http_error_handler(request, exc)

    error_traceback = traceback.format_exc()
    logger.error(f"Unhandled exception: {exc}\n{error_traceback}")

    # Don't leak internal error details outside local environments
    if is_local_env():
        return _error_response(500, f"Internal server error: {exc}")
    return _error_response(500, "Internal server error")


def register_exception_handlers(app):
    """Register all exception handlers on the given FastAPI app."""
    app.add_exception_handler(AuthServiceError, auth_service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
