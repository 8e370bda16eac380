"""Global exception handlers.

Every failure leaves the service as a JSON body with an ``error`` string:
- ServiceError → its own status and body
- RequestValidationError → 400 "Invalid request body"
- unmatched route or method → 404 "url not found"
- anything else → 500 with the failure message
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.errors import InternalError, NotFoundError, ServiceError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_service_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _requested_path(request: Request) -> str:
    """Path as the client sent it, query string included."""
    if request.url.query:
        return f"{request.url.path}?{request.url.query}"
    return request.url.path


def _error_response(exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _register_service_error_handler(app: FastAPI) -> None:

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        extra = {
            "path": request.url.path,
            "status_code": exc.http_status,
            "error_code": type(exc).__name__,
        }
        if exc.http_status >= 500:
            logger.error(f"{type(exc).__name__}: {exc.message}", extra=extra)
        else:
            logger.warning(f"{type(exc).__name__}: {exc.message}", extra=extra)
        return _error_response(exc)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        )
        logger.warning(
            f"Validation error on {request.url.path}: {details}",
            extra={"path": request.url.path, "status_code": 400},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "Invalid request body",
                "message": details or "Invalid request body",
            },
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and known paths with the wrong method both fall through
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            path = _requested_path(request)
            logger.warning(
                f"No route for {request.method} {path}",
                extra={"path": path, "method": request.method, "status_code": 404},
            )
            return _error_response(NotFoundError(path))

        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path, "status_code": 500},
        )
        return _error_response(InternalError(str(exc) or type(exc).__name__))
